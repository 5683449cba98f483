# Copyright Red Hat
#
# pathdiff/__init__.py - Path diff package initialisation
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Pathdiff top-level package.
"""
from ._pathdiff import *  # noqa: F401, F403
from ._pathdiff import __all__ as _pathdiff_all

__version__ = "0.1.0"

# Imported last: the compare package depends on the definitions above.
from .compare import (  # noqa: E402
    CompareOptions,
    CompareResults,
    TreeComparator,
    diff,
)

__all__ = [
    *_pathdiff_all,
    "CompareOptions",
    "CompareResults",
    "TreeComparator",
    "diff",
]
