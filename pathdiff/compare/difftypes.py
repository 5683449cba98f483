# Copyright Red Hat
#
# pathdiff/compare/difftypes.py - Path diff types
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Path comparison types
"""
from enum import Enum


class EntryType(Enum):
    """
    Enum for the classification of a path by ``stat()``.
    """

    MISSING = "missing"
    FILE = "file"
    DIRECTORY = "directory"


class Outcome(Enum):
    """
    Enum for the outcome of comparing one pair of paths.
    """

    IDENTICAL = "identical"
    DIFFERS = "differs"
    SOURCE_MISSING = "source_missing"
    DEST_MISSING = "dest_missing"
    TYPE_MISMATCH = "type_mismatch"
    SOURCE_ONLY = "source_only"
    DEST_ONLY = "dest_only"
