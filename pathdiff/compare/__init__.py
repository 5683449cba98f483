# Copyright Red Hat
#
# pathdiff/compare/__init__.py - Path diff compare package
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Path comparison package.

Provides recursive file and directory comparison, content diffing and
reporting. The main entry points are ``diff()``, ``TreeComparator`` and
``CompareOptions``.
"""
from .comparator import TreeComparator, diff
from .contentdiff import render_diff
from .difftypes import EntryType, Outcome
from .options import CompareOptions
from .reporter import PlainReporter, Reporter, SilentReporter, TerminalReporter
from .results import CompareResults

__all__ = [
    "CompareOptions",
    "CompareResults",
    "EntryType",
    "Outcome",
    "PlainReporter",
    "Reporter",
    "SilentReporter",
    "TerminalReporter",
    "TreeComparator",
    "diff",
    "render_diff",
]
