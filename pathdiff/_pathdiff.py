# Copyright Red Hat
#
# pathdiff/_pathdiff.py - Path diff global definitions
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level pathdiff package.
"""
from typing import List, Optional, TYPE_CHECKING
import logging
import pwd
import os

if TYPE_CHECKING:
    from .compare.results import CompareResults

_log = logging.getLogger("pathdiff")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Pathdiff debugging subsystem mask
PATHDIFF_DEBUG_COMPARE = 1
PATHDIFF_DEBUG_COMMAND = 2
PATHDIFF_DEBUG_ALL = PATHDIFF_DEBUG_COMPARE | PATHDIFF_DEBUG_COMMAND

# Pathdiff debugging subsystem names
PATHDIFF_SUBSYSTEM_COMPARE = "pathdiff.compare"
PATHDIFF_SUBSYSTEM_COMMAND = "pathdiff.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    PATHDIFF_DEBUG_COMPARE: PATHDIFF_SUBSYSTEM_COMPARE,
    PATHDIFF_DEBUG_COMMAND: PATHDIFF_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

#: The character that marks a path relative to the user's home directory.
HOME_SYMBOL = "~"


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        # Always pass non-DEBUG messages.
        if record.levelno != logging.DEBUG:
            return True

        # Always pass DEBUG messages that aren't for a specific subsystem.
        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``pathdiff`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    pathdiff_log = logging.getLogger("pathdiff")

    for handler in pathdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``pathdiff`` package.

    :param mask: the logical OR of the ``PATHDIFF_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > PATHDIFF_DEBUG_ALL:
        raise ValueError(f"Invalid pathdiff debug mask: {mask}")

    enabled_subsystems = [
        subsystem_name
        for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items()
        if mask & flag
    ]

    pathdiff_log = logging.getLogger("pathdiff")
    for handler in pathdiff_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Pathdiff exception types
#


class PathdiffError(Exception):
    """
    Base class for path diff errors.
    """


class PathdiffUserError(PathdiffError):
    """
    The current user's home directory could not be determined.
    """


class PathdiffSystemError(PathdiffError):
    """
    An error when calling the operating system.
    """

    def __init__(self, path: str, msg: str):
        super().__init__(msg)
        #: The path that the failing operation was applied to.
        self.path = path


class PathdiffStatError(PathdiffSystemError):
    """
    A path exists (or may exist) but could not be stat'ed.
    """


class PathdiffListError(PathdiffSystemError):
    """
    A directory could not be listed.
    """


class PathdiffReadError(PathdiffSystemError):
    """
    A file could not be read.
    """


class PathdiffRenderError(PathdiffError):
    """
    A content diff could not be written to the output sink.
    """


class PathdiffConfigError(PathdiffError):
    """
    Invalid configuration file or option values.
    """


class PathdiffCompareError(PathdiffError):
    """
    A fatal error while comparing a pair of paths, wrapping the error
    raised at a deeper level of the comparison.
    """

    def __init__(self, src: str, dst: str, msg: str):
        super().__init__(msg)
        #: The source path active when the error was wrapped.
        self.src = src
        #: The destination path active when the error was wrapped.
        self.dst = dst


class PathdiffCompareErrors(PathdiffError):
    """
    One or more fatal errors were collected while comparing two trees
    with the ``collect`` error policy.
    """

    def __init__(
        self,
        errors: List[PathdiffError],
        results: Optional["CompareResults"] = None,
    ):
        count = len(errors)
        super().__init__(
            f"{count} error{'s' if count != 1 else ''} during comparison: "
            + "; ".join(str(err) for err in errors)
        )
        #: The list of collected (wrapped) errors.
        self.errors = errors
        #: The partial comparison results.
        self.results = results


def _home_dir() -> str:
    """
    Return the current user's home directory.

    The password database entry for the current uid is preferred, with the
    ``HOME`` environment variable as a fallback.

    :returns: The absolute home directory path.
    :rtype: ``str``
    :raises: ``PathdiffUserError`` if no home directory can be found.
    """
    try:
        home = pwd.getpwuid(os.getuid()).pw_dir
        if home:
            return home
    except KeyError as err:
        _log_debug("No passwd entry for uid %d: %s", os.getuid(), err)

    home = os.environ.get("HOME")
    if not home:
        raise PathdiffUserError(
            f"Cannot determine home directory for uid {os.getuid()}"
        )
    return home


def normalize_path(path: str) -> str:
    """
    Expand a leading home directory symbol in ``path``.

    Paths that are empty, or that do not begin with ``~``, are returned
    unchanged.

    :param path: A user supplied path string.
    :type path: ``str``
    :returns: ``path`` with any leading ``~`` replaced by the current user's
              home directory.
    :rtype: ``str``
    :raises: ``PathdiffUserError`` if the home directory cannot be
             determined.
    """
    if not path or path[0] != HOME_SYMBOL:
        return path

    home = _home_dir()
    rest = path[1:].lstrip(os.sep)
    return os.path.normpath(os.path.join(home, rest))


__all__ = [
    "HOME_SYMBOL",
    "PATHDIFF_DEBUG_ALL",
    "PATHDIFF_DEBUG_COMMAND",
    "PATHDIFF_DEBUG_COMPARE",
    "PATHDIFF_SUBSYSTEM_COMMAND",
    "PATHDIFF_SUBSYSTEM_COMPARE",
    "PathdiffCompareError",
    "PathdiffCompareErrors",
    "PathdiffConfigError",
    "PathdiffError",
    "PathdiffListError",
    "PathdiffReadError",
    "PathdiffRenderError",
    "PathdiffStatError",
    "PathdiffSystemError",
    "PathdiffUserError",
    "SubsystemFilter",
    "get_debug_mask",
    "normalize_path",
    "set_debug_mask",
]
