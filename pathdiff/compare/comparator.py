# Copyright Red Hat
#
# pathdiff/compare/comparator.py - Path diff tree comparator
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Recursive comparison of two files or directory trees.
"""
from typing import Optional
from stat import S_ISDIR
import logging
import os

from pathdiff import (
    PATHDIFF_SUBSYSTEM_COMPARE,
    PathdiffError,
    PathdiffUserError,
    PathdiffStatError,
    PathdiffListError,
    PathdiffReadError,
    PathdiffCompareError,
    PathdiffCompareErrors,
    normalize_path,
)

from .difftypes import EntryType, Outcome
from .options import CompareOptions
from .reporter import Reporter, TerminalReporter
from .results import CompareResults

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PATHDIFF_SUBSYSTEM_COMPARE}, **kwargs)


def _classify(path: str, label: str) -> EntryType:
    """
    Stat ``path`` and classify it.

    :param path: The path to stat (symlinks are followed).
    :type path: ``str``
    :param label: "src" or "dst", used in error messages.
    :type label: ``str``
    :returns: The ``EntryType`` of ``path``.
    :rtype: ``EntryType``
    :raises: ``PathdiffStatError`` if ``stat()`` fails for any reason other
             than the path not existing.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return EntryType.MISSING
    except OSError as err:
        raise PathdiffStatError(
            path, f"Failed to stat {label} [{path}]: {err}"
        ) from err
    return EntryType.DIRECTORY if S_ISDIR(st.st_mode) else EntryType.FILE


def _list_dir(path: str) -> list:
    """
    Return the sorted entry names of directory ``path``.

    :raises: ``PathdiffListError`` if the directory cannot be read.
    """
    try:
        return sorted(os.listdir(path))
    except OSError as err:
        raise PathdiffListError(path, f"Failed to read dir [{path}]: {err}") from err


def _read_file(path: str, label: str) -> bytes:
    """
    Return the complete content of file ``path``.

    :raises: ``PathdiffReadError`` if the file cannot be read.
    """
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as err:
        raise PathdiffReadError(
            path, f"Failed to read file {label} [{path}]: {err}"
        ) from err


class TreeComparator:
    """
    Compare two paths, recursing into directories present on both sides.

    Traversal is driven from the source side: every source entry is either
    matched by name in the destination and compared, or reported as missing
    from the destination. Entries present only in the destination are
    reported only when ``CompareOptions.symmetric`` is set.
    """

    def __init__(
        self,
        reporter: Optional[Reporter] = None,
        options: Optional[CompareOptions] = None,
    ):
        """
        Initialise a new ``TreeComparator``.

        :param reporter: The reporter receiving warnings and diffs. Defaults
                         to a ``TerminalReporter`` on ``sys.stdout``.
        :type reporter: ``Optional[Reporter]``
        :param options: Options to control this comparator.
        :type options: ``Optional[CompareOptions]``
        """
        self.options: CompareOptions = options or CompareOptions()
        self.reporter: Reporter = reporter or TerminalReporter(options=self.options)

    def compare(self, src: str, dst: str) -> CompareResults:
        """
        Compare ``src`` with ``dst``.

        Both paths must already be normalized.

        :param src: The source path.
        :type src: ``str``
        :param dst: The destination path.
        :type dst: ``str``
        :returns: A tally of comparison outcomes.
        :rtype: ``CompareResults``
        :raises: ``PathdiffError`` on the first fatal error, or
                 ``PathdiffCompareErrors`` after traversal if errors were
                 collected under the ``collect`` error policy.
        """
        _log_debug_compare("Comparing src [%s] dst [%s] (%s)", src, dst, repr(self.options))
        results = CompareResults()
        self._compare(src, dst, results)
        if results.errors:
            raise PathdiffCompareErrors(results.errors, results)
        _log_debug_compare("Comparison complete: %s", repr(results))
        return results

    def _compare(self, src: str, dst: str, results: CompareResults):
        src_type = _classify(src, "src")
        if src_type == EntryType.MISSING:
            self.reporter.warning(f"src [{src}] not exist")
            results.record(Outcome.SOURCE_MISSING)
            return

        dst_type = _classify(dst, "dst")
        if dst_type == EntryType.MISSING:
            self.reporter.warning(f"dst [{dst}] not exist")
            results.record(Outcome.DEST_MISSING)
            return

        if src_type == EntryType.DIRECTORY and dst_type == EntryType.DIRECTORY:
            try:
                self._compare_dirs(src, dst, results)
            except PathdiffError as err:
                raise PathdiffCompareError(
                    src, dst, f"Failed to diff dir src [{src}] dst [{dst}]: {err}"
                ) from err
            return

        if src_type == EntryType.FILE and dst_type == EntryType.FILE:
            try:
                self._compare_files(src, dst, results)
            except PathdiffError as err:
                raise PathdiffCompareError(
                    src, dst, f"Failed to diff file src [{src}] dst [{dst}]: {err}"
                ) from err
            return

        self.reporter.warning(
            f"src [{src}] dst [{dst}] is not same type file or same type dir"
        )
        results.record(Outcome.TYPE_MISMATCH)

    def _compare_dirs(self, src: str, dst: str, results: CompareResults):
        src_names = _list_dir(src)
        dst_names = set(_list_dir(dst))
        _log_debug_compare(
            "Listed %d entries in src [%s], %d in dst [%s]",
            len(src_names),
            src,
            len(dst_names),
            dst,
        )

        for name in src_names:
            child_src = os.path.join(src, name)
            if name not in dst_names:
                self.reporter.warning(f"src [{child_src}] not exist in dst")
                results.record(Outcome.SOURCE_ONLY)
                continue

            child_dst = os.path.join(dst, name)
            try:
                self._compare(child_src, child_dst, results)
            except PathdiffError as err:
                if not self.options.keep_going:
                    raise
                _log_error("Error comparing %s with %s: %s", child_src, child_dst, err)
                wrapped = PathdiffCompareError(
                    src, dst, f"Failed to diff dir src [{src}] dst [{dst}]: {err}"
                )
                wrapped.__cause__ = err
                results.errors.append(wrapped)

        if self.options.symmetric:
            src_set = set(src_names)
            for name in sorted(dst_names - src_set):
                self.reporter.warning(f"dst [{os.path.join(dst, name)}] not exist in src")
                results.record(Outcome.DEST_ONLY)

    def _compare_files(self, src: str, dst: str, results: CompareResults):
        src_bytes = _read_file(src, "src")
        dst_bytes = _read_file(dst, "dst")

        if src_bytes == dst_bytes:
            results.record(Outcome.IDENTICAL)
            return

        _log_debug_compare(
            "Content differs: src [%s] (%d bytes) dst [%s] (%d bytes)",
            src,
            len(src_bytes),
            dst,
            len(dst_bytes),
        )
        results.record(Outcome.DIFFERS)
        self.reporter.info(f"Diff file src [{src}] dst [{dst}]")
        self.reporter.render_diff(src, dst, src_bytes, dst_bytes)


def diff(
    src: str,
    dst: str,
    reporter: Optional[Reporter] = None,
    options: Optional[CompareOptions] = None,
) -> CompareResults:
    """
    Compare ``src`` with ``dst``, either of which may begin with ``~``.

    Both paths are normalized before any filesystem access.

    :param src: The source path.
    :type src: ``str``
    :param dst: The destination path.
    :type dst: ``str``
    :param reporter: The reporter receiving warnings and diffs.
    :type reporter: ``Optional[Reporter]``
    :param options: Comparison options.
    :type options: ``Optional[CompareOptions]``
    :returns: A tally of comparison outcomes.
    :rtype: ``CompareResults``
    :raises: ``PathdiffUserError`` if a home directory cannot be resolved,
             or another ``PathdiffError`` from the comparison.
    """
    try:
        src_path = normalize_path(src)
    except PathdiffUserError as err:
        raise PathdiffUserError(f"Failed to expand home symbol src [{src}]: {err}") from err

    try:
        dst_path = normalize_path(dst)
    except PathdiffUserError as err:
        raise PathdiffUserError(f"Failed to expand home symbol dst [{dst}]: {err}") from err

    return TreeComparator(reporter=reporter, options=options).compare(src_path, dst_path)
