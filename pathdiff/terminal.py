# Copyright Red Hat
#
# pathdiff/terminal.py - Path diff terminal control
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Terminal color support for diff output.
"""
from typing import Optional, TextIO, Tuple
import curses
import sys
import os

#: Accepted values for color control arguments.
COLOR_MODES = ("auto", "always", "never")

# Color names in ANSI (setaf) order and in legacy (setf) order.
_ANSI_ORDER: Tuple[str, ...] = (
    "BLACK", "RED", "GREEN", "YELLOW", "BLUE", "MAGENTA", "CYAN", "WHITE"
)
_LEGACY_ORDER: Tuple[str, ...] = (
    "BLACK", "BLUE", "GREEN", "CYAN", "RED", "MAGENTA", "YELLOW", "WHITE"
)

# Colors used when rendering reports and diffs.
_DIFF_COLORS = ("RED", "GREEN", "YELLOW", "BLUE", "CYAN")


class TermControl:
    """
    Control sequences for colored diff output.

    Every attribute is either the sequence that selects the named attribute
    on the output terminal or the empty string, so callers always write
    ``tc.RED + text + tc.NORMAL`` whether or not color is in effect.

    Sequences are looked up in terminfo via ``curses``. When color is
    forced with ``color="always"`` and terminfo is unusable (``TERM`` unset,
    output piped to a pager) plain ANSI escapes are used instead.
    """

    BOLD: str = ""  #: Bold (diff file headers)
    NORMAL: str = ""  #: Reset all attributes

    RED: str = ""  #: Removed lines
    GREEN: str = ""  #: Added lines
    YELLOW: str = ""  #: Warnings
    BLUE: str = ""  #: Informational messages
    CYAN: str = ""  #: Hunk ranges

    def __init__(self, term_stream: Optional[TextIO] = None, color: str = "auto"):
        """
        Initialise color sequences for ``term_stream``.

        :param term_stream: The stream output is written to (default
                            ``sys.stdout``). With ``color="auto"`` colors
                            are only used if it is a tty.
        :type term_stream: ``Optional[TextIO]``
        :param color: "auto", "always" or "never".
        :type color: ``str``
        """
        if color not in COLOR_MODES:
            raise ValueError(f"Invalid color mode: {color}")

        self.term_stream = term_stream if term_stream is not None else sys.stdout
        self.color = color

        if color == "never":
            return

        if color == "auto":
            isatty = getattr(self.term_stream, "isatty", None)
            if isatty is None or not isatty():
                return

        try:
            curses.setupterm()
        # curses.error is not reliably catchable by name on all builds, so
        # catch broadly and re-raise interruption.
        except BaseException as err:  # pylint: disable=broad-exception-caught
            if isinstance(err, (KeyboardInterrupt, SystemExit)):  # pragma: no cover
                raise
            if color == "always":
                self._use_ansi()
            return

        self.BOLD = self._capability("bold")
        self.NORMAL = self._capability("sgr0")
        self._lookup_colors()

        if color == "always" and not self.RED:
            self._use_ansi()

    @staticmethod
    def _capability(name: str) -> str:
        value = curses.tigetstr(name)
        if not value:
            return ""
        # Drop padding delays of the form "$<5>".
        return value.decode("utf8").split("$", maxsplit=1)[0]

    def _lookup_colors(self):
        for cap_name, order in (("setaf", _ANSI_ORDER), ("setf", _LEGACY_ORDER)):
            set_fg = self._capability(cap_name)
            if not set_fg:
                continue
            for name in _DIFF_COLORS:
                seq = curses.tparm(set_fg.encode("utf8"), order.index(name))
                setattr(self, name, seq.decode("utf8") if seq else "")
            return

    def _use_ansi(self):
        for name in _DIFF_COLORS:
            setattr(self, name, f"\033[0;3{_ANSI_ORDER.index(name)}m")
        self.BOLD = "\033[1m"
        self.NORMAL = "\033[0m"

    @property
    def has_color(self) -> bool:
        """
        ``True`` if this instance emits color sequences.
        """
        return bool(self.RED)


def printable(text: str, stream: Optional[TextIO] = None) -> str:
    """
    Return ``text`` in a form that ``stream`` can encode.

    File names that are not valid in the file system encoding reach Python
    as lone surrogates (PEP 383). These are turned back into their original
    bytes and shown as ``\\xNN`` escapes; any other character the stream
    cannot encode is shown as a backslash escape.

    :param text: The text to write.
    :type text: ``str``
    :param stream: The destination stream, used for its ``encoding``.
    :type stream: ``Optional[TextIO]``
    :returns: A string safe to write to ``stream``.
    :rtype: ``str``
    """
    encoding = getattr(stream, "encoding", None) or "utf-8"
    try:
        raw = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        raw = text.encode("utf-8", "backslashreplace")
    text = raw.decode("utf-8", "backslashreplace")
    return text.encode(encoding, "backslashreplace").decode(encoding)


def write_printable(stream: TextIO, text: str):
    """
    Write ``text`` to ``stream``, escaping anything the stream cannot
    encode instead of failing.

    :param stream: The stream to write to.
    :type stream: ``TextIO``
    :param text: The text to write.
    :type text: ``str``
    """
    try:
        stream.write(text)
    except UnicodeEncodeError:
        stream.write(printable(text, stream))


def flush_with_broken_pipe_guard(stream: Optional[TextIO]):
    """
    Flush ``stream`` and exit with status 1 if the reader has gone away,
    for example when output is piped to ``head``.

    Standard output is pointed at ``/dev/null`` first so that the
    interpreter's own flush at exit does not raise again.

    :param stream: The stream to flush.
    :type stream: ``Optional[TextIO]``
    """
    if stream is None:
        return
    try:
        stream.flush()
    except BrokenPipeError as err:
        null_fd = os.open(os.devnull, os.O_WRONLY)
        try:
            os.dup2(null_fd, stream.fileno())
        finally:
            os.close(null_fd)
        raise SystemExit(1) from err
