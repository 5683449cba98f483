# Copyright Red Hat
#
# pathdiff/compare/reporter.py - Path diff reporters
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Reporters present informational messages, warnings and file diffs produced
by a comparison.
"""
from typing import List, Optional, TextIO, Tuple
from abc import ABC, abstractmethod
import logging
import sys

from pathdiff import PathdiffRenderError
from pathdiff.terminal import TermControl, write_printable

from .contentdiff import ContentDifferManager, render_diff
from .options import CompareOptions

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


class Reporter(ABC):
    """
    Base class for comparison reporters.
    """

    @abstractmethod
    def info(self, msg: str):
        """
        Report an informational message.

        :param msg: The message to report.
        :type msg: ``str``
        """

    @abstractmethod
    def warning(self, msg: str):
        """
        Report a reportable (non-fatal) condition.

        :param msg: The message to report.
        :type msg: ``str``
        """

    @abstractmethod
    def render_diff(self, label_a: str, label_b: str, content_a: bytes, content_b: bytes):
        """
        Render a diff of two file contents.

        :param label_a: Label (path) of the source content.
        :type label_a: ``str``
        :param label_b: Label (path) of the destination content.
        :type label_b: ``str``
        :param content_a: The source content.
        :type content_a: ``bytes``
        :param content_b: The destination content.
        :type content_b: ``bytes``
        :raises: ``PathdiffRenderError`` if output fails.
        """


class PlainReporter(Reporter):
    """
    Reporter writing uncolored text to a stream.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        options: Optional[CompareOptions] = None,
    ):
        """
        Initialise a new ``PlainReporter``.

        :param stream: The output stream (default ``sys.stdout``).
        :type stream: ``Optional[TextIO]``
        :param options: Comparison options.
        :type options: ``Optional[CompareOptions]``
        """
        self.stream = stream if stream is not None else sys.stdout
        self.options = options or CompareOptions()
        self._manager = ContentDifferManager()
        self._tc: Optional[TermControl] = None

    def _write(self, text: str):
        try:
            write_printable(self.stream, text)
        except (OSError, ValueError) as err:
            raise PathdiffRenderError(f"Failed to write report output: {err}") from err

    def _styled(self, color: str, msg: str) -> str:
        if self._tc is None:
            return msg
        return getattr(self._tc, color) + msg + self._tc.NORMAL

    def info(self, msg: str):
        self._write(self._styled("BLUE", msg) + "\n")

    def warning(self, msg: str):
        self._write(self._styled("YELLOW", msg) + "\n")

    def render_diff(self, label_a: str, label_b: str, content_a: bytes, content_b: bytes):
        render_diff(
            label_a,
            label_b,
            content_a,
            content_b,
            self.stream,
            tc=self._tc,
            manager=self._manager,
            use_magic=self.options.use_magic_file_type,
        )
        # Separate consecutive diffs with a blank line.
        self._write("\n")


class TerminalReporter(PlainReporter):
    """
    Reporter writing to a terminal: informational messages are blue,
    warnings yellow and diffs colored, when the terminal supports it.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        color: Optional[str] = None,
        options: Optional[CompareOptions] = None,
        term_control: Optional[TermControl] = None,
    ):
        """
        Initialise a new ``TerminalReporter``.

        :param stream: The output stream (default ``sys.stdout``).
        :type stream: ``Optional[TextIO]``
        :param color: A string to control color rendering: "auto", "always",
                      or "never". Defaults to ``options.color``.
        :type color: ``Optional[str]``
        :param options: Comparison options.
        :type options: ``Optional[CompareOptions]``
        :param term_control: An optional ``TermControl`` instance to use for
                             formatting. The supplied instance overrides any
                             ``color`` argument if set.
        :type term_control: ``Optional[TermControl]``
        """
        super().__init__(stream=stream, options=options)
        color = color or self.options.color
        self._tc = term_control or TermControl(term_stream=self.stream, color=color)


class SilentReporter(Reporter):
    """
    Reporter that writes nothing and records every report for later
    inspection.
    """

    def __init__(self):
        #: Informational messages in the order reported
        self.infos: List[str] = []
        #: Warning messages in the order reported
        self.warnings: List[str] = []
        #: ``(label_a, label_b)`` pairs of rendered diffs
        self.diffs: List[Tuple[str, str]] = []

    def info(self, msg: str):
        self.infos.append(msg)

    def warning(self, msg: str):
        self.warnings.append(msg)

    def render_diff(self, label_a: str, label_b: str, content_a: bytes, content_b: bytes):
        self.diffs.append((label_a, label_b))
