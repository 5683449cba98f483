# Copyright Red Hat
#
# pathdiff/compare/contentdiff.py - Path diff content diffs
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Content diff generation and rendering.
"""
from typing import List, Optional, TextIO
from abc import ABC, abstractmethod
from pathlib import Path
import logging
import difflib
import codecs

from pathdiff import PATHDIFF_SUBSYSTEM_COMPARE, PathdiffRenderError
from pathdiff.terminal import TermControl, write_printable

from .filetypes import FileTypeDetector, FileTypeInfo

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PATHDIFF_SUBSYSTEM_COMPARE}, **kwargs)


#: Lines of context around each change in unified diffs.
CONTEXT_LINES = 3

#: Marker emitted after a diff line whose source line lacks a newline.
NO_NEWLINE_MARKER = "\\ No newline at end of file"

_DEFAULT_ENCODING = "utf-8"


def _split_lines(text: str) -> List[str]:
    """
    Split ``text`` on newline characters only, keeping line endings.

    ``str.splitlines()`` also splits on form feeds and other separators
    that are ordinary characters in a line-oriented diff.

    :param text: The text to split.
    :type text: ``str``
    :returns: The list of lines, each ending in "\\n" except possibly the
              last.
    :rtype: ``List[str]``
    """
    lines = text.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result


def _codec_for(file_type_info: Optional[FileTypeInfo]) -> str:
    """
    Return a usable codec name for ``file_type_info``, falling back to
    UTF-8 for unknown or unsupported encodings.
    """
    encoding = file_type_info.encoding if file_type_info else None
    if not encoding or encoding == "binary":
        return _DEFAULT_ENCODING
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        _log_debug_compare("Unknown encoding %s, using %s", encoding, _DEFAULT_ENCODING)
        return _DEFAULT_ENCODING


class ContentDiff:
    """
    Represents a content diff between two files.
    """

    def __init__(self, diff_type: str, label_a: str, label_b: str, summary: str = ""):
        """
        Initialise a new ``ContentDiff`` object.

        :param diff_type: The type of diff: "unified", "binary" or "notice".
        :type diff_type: ``str``
        :param label_a: Label for the original content.
        :type label_a: ``str``
        :param label_b: Label for the updated content.
        :type label_b: ``str``
        :param summary: A summary of the difference.
        :type summary: ``str``
        """
        self.diff_type = diff_type
        self.label_a = label_a
        self.label_b = label_b
        #: Unified diff lines (including headers) for text diffs
        self.diff_data: List[str] = []
        self.summary = summary
        self.has_changes = False

    def __str__(self):
        return (
            f"diff_type: {self.diff_type}, "
            f"labels: {self.label_a} {self.label_b}, "
            f"lines: {len(self.diff_data)}, "
            f"summary: {self.summary}, "
            f"has_changes: {self.has_changes}"
        )


class ContentDifferBase(ABC):
    """
    Base class for content diff implementations.
    """

    @abstractmethod
    def can_handle(self, file_type_info: FileTypeInfo) -> bool:
        """
        Return True if this differ can handle the given file type.

        :param file_type_info: File type information for the content.
        :type file_type_info: ``FileTypeInfo``
        :returns: ``True`` if this content differ can handle this content.
        :rtype: ``bool``
        """

    @abstractmethod
    def generate_diff(
        self,
        label_a: str,
        label_b: str,
        content_a: bytes,
        content_b: bytes,
        file_type_info: Optional[FileTypeInfo] = None,
    ) -> ContentDiff:
        """
        Generate a content diff between two byte strings.

        :param label_a: Label for the original content.
        :type label_a: ``str``
        :param label_b: Label for the updated content.
        :type label_b: ``str``
        :param content_a: The original content.
        :type content_a: ``bytes``
        :param content_b: The updated content.
        :type content_b: ``bytes``
        :param file_type_info: Detected type of the content.
        :type file_type_info: ``Optional[FileTypeInfo]``
        :returns: A diff of the two contents.
        :rtype: ``ContentDiff``
        """

    @property
    @abstractmethod
    def priority(self) -> int:
        """
        Priority for selection when multiple differs match (higher = preferred)

        :returns: Integer priority level.
        :rtype: ``int``
        """


class TextContentDiffer(ContentDifferBase):
    """
    Line-oriented unified diff for text content.
    """

    def can_handle(self, file_type_info: FileTypeInfo) -> bool:
        return file_type_info.is_text_like

    def generate_diff(
        self,
        label_a: str,
        label_b: str,
        content_a: bytes,
        content_b: bytes,
        file_type_info: Optional[FileTypeInfo] = None,
    ) -> ContentDiff:
        """
        Generate a unified diff for text content.

        Content is decoded with the detected encoding (UTF-8 by default),
        replacing undecodable bytes, and split on newline boundaries.
        """
        encoding = _codec_for(file_type_info)
        lines_a = _split_lines(content_a.decode(encoding, errors="replace"))
        lines_b = _split_lines(content_b.decode(encoding, errors="replace"))

        content_diff = ContentDiff("unified", label_a, label_b)
        content_diff.diff_data = list(
            difflib.unified_diff(
                lines_a,
                lines_b,
                fromfile=label_a,
                tofile=label_b,
                n=CONTEXT_LINES,
            )
        )
        content_diff.has_changes = len(content_diff.diff_data) > 0

        if not content_diff.has_changes and content_a != content_b:
            # Bytes differ but decode to the same text.
            content_diff.diff_type = "notice"
            content_diff.has_changes = True
            content_diff.summary = f"Files {label_a} and {label_b} differ"
            return content_diff

        def diff_summary(lines, prefix, desc):
            count = len(
                [ln for ln in lines if ln.startswith(prefix) and not ln.startswith(3 * prefix)]
            )
            return f"{count} {desc}"

        content_diff.summary = ", ".join(
            (
                diff_summary(content_diff.diff_data, "-", "deletions"),
                diff_summary(content_diff.diff_data, "+", "additions"),
            )
        )
        return content_diff

    @property
    def priority(self) -> int:
        return 10


class BinaryContentDiffer(ContentDifferBase):
    """
    Binary content differ: reports that the contents differ without
    attempting a line diff.
    """

    def can_handle(self, file_type_info: FileTypeInfo) -> bool:
        return not file_type_info.is_text_like

    def generate_diff(
        self,
        label_a: str,
        label_b: str,
        content_a: bytes,
        content_b: bytes,
        file_type_info: Optional[FileTypeInfo] = None,
    ) -> ContentDiff:
        """
        Generate a binary diff summary.
        """
        content_diff = ContentDiff(
            "binary", label_a, label_b, f"Binary files {label_a} and {label_b} differ"
        )
        content_diff.has_changes = content_a != content_b
        if not content_diff.has_changes:
            content_diff.summary = "Binary files unchanged"
        return content_diff

    @property
    def priority(self) -> int:
        return 5


class ContentDifferManager:
    """
    Manager for content diff implementations.
    """

    def __init__(self, detector: Optional[FileTypeDetector] = None):
        """
        Initialise a new ``ContentDifferManager`` instance.

        :param detector: The file type detector to use.
        :type detector: ``Optional[FileTypeDetector]``
        """
        self.detector = detector or FileTypeDetector()
        self.differs: List[ContentDifferBase] = []
        self.register_differ(TextContentDiffer())
        self.register_differ(BinaryContentDiffer())

    def register_differ(self, differ: ContentDifferBase):
        """
        Register a new content differ.
        """
        self.differs.append(differ)
        self.differs.sort(key=lambda d: d.priority, reverse=True)

    def get_differ(self, file_type_info: FileTypeInfo) -> ContentDifferBase:
        """
        Get the best content differ for a file type.

        :param file_type_info: The file type to find a differ for.
        :type file_type_info: ``FileTypeInfo``
        :returns: An appropriate differ for ``file_type_info``.
        :rtype: A ``ContentDifferBase`` subclass.
        """
        for differ in self.differs:
            if differ.can_handle(file_type_info):
                return differ
        return BinaryContentDiffer()

    def generate_content_diff(
        self,
        label_a: str,
        label_b: str,
        content_a: bytes,
        content_b: bytes,
        use_magic: bool = False,
    ) -> ContentDiff:
        """
        Detect the type of both contents and generate a diff with the
        appropriate differ. If either side is binary the binary differ is
        used.

        :param label_a: Label (usually the path) of the original content.
        :type label_a: ``str``
        :param label_b: Label (usually the path) of the updated content.
        :type label_b: ``str``
        :param content_a: The original content.
        :type content_a: ``bytes``
        :param content_b: The updated content.
        :type content_b: ``bytes``
        :param use_magic: Use libmagic for type detection.
        :type use_magic: ``bool``
        :returns: A diff of the two contents.
        :rtype: ``ContentDiff``
        """
        info_a = self.detector.detect_content_type(content_a, Path(label_a), use_magic)
        info_b = self.detector.detect_content_type(content_b, Path(label_b), use_magic)
        _log_debug_compare("Content types: %s (%s), %s (%s)", label_a, info_a, label_b, info_b)

        # Prefer the non-text side so that binary data is never line-diffed.
        file_type_info = info_a if not info_a.is_text_like else info_b
        differ = self.get_differ(file_type_info)
        return differ.generate_diff(label_a, label_b, content_a, content_b, file_type_info)


def render_content_diff(content_diff: ContentDiff, tc: Optional[TermControl] = None) -> str:
    """
    Render a ``ContentDiff`` as text.

    :param content_diff: The diff to render.
    :type content_diff: ``ContentDiff``
    :param tc: An optional ``TermControl`` instance to use for rendering color
               output.
    :type tc: ``Optional[TermControl]``
    :returns: The rendered diff, ending in a newline, or the empty string if
              there are no changes.
    :rtype: ``str``
    """
    if not content_diff.has_changes:
        return ""

    if content_diff.diff_type != "unified":
        return content_diff.summary + "\n"

    def _hunk_header(header: str) -> str:
        before, sep, after = header.partition(" @@")
        if not sep:
            return header
        return tc.CYAN + before + " @@" + tc.NORMAL + after

    def _color(line: str) -> str:
        if line.startswith(("---", "+++")):
            return tc.BOLD + line + tc.NORMAL
        if line.startswith("-"):
            return tc.RED + line + tc.NORMAL
        if line.startswith("+"):
            return tc.GREEN + line + tc.NORMAL
        if line.startswith("@@"):
            return _hunk_header(line)
        return line

    out = []
    for line in content_diff.diff_data:
        text = line[:-1] if line.endswith("\n") else line
        out.append(_color(text) if tc else text)
        if not line.endswith("\n"):
            out.append(NO_NEWLINE_MARKER)
    return "\n".join(out) + "\n"


def render_diff(
    label_a: str,
    label_b: str,
    content_a: bytes,
    content_b: bytes,
    sink: TextIO,
    tc: Optional[TermControl] = None,
    manager: Optional[ContentDifferManager] = None,
    use_magic: bool = False,
):
    """
    Write a unified diff of ``content_a`` and ``content_b`` to ``sink``.

    Binary content produces a one-line notice instead of a line diff.

    :param label_a: Label for the original content.
    :type label_a: ``str``
    :param label_b: Label for the updated content.
    :type label_b: ``str``
    :param content_a: The original content.
    :type content_a: ``bytes``
    :param content_b: The updated content.
    :type content_b: ``bytes``
    :param sink: The text stream to write to.
    :type sink: ``TextIO``
    :param tc: An optional ``TermControl`` for color output. ``None``, or an
               instance without color capabilities, renders plain text.
    :type tc: ``Optional[TermControl]``
    :param manager: The ``ContentDifferManager`` to use.
    :type manager: ``Optional[ContentDifferManager]``
    :param use_magic: Use libmagic for type detection.
    :type use_magic: ``bool``
    :raises: ``PathdiffRenderError`` if writing to ``sink`` fails.
    """
    manager = manager or ContentDifferManager()
    content_diff = manager.generate_content_diff(
        label_a, label_b, content_a, content_b, use_magic=use_magic
    )
    _log_debug_compare("Generated content diff: %s", content_diff)
    rendered = render_content_diff(content_diff, tc)
    if not rendered:
        return
    try:
        write_printable(sink, rendered)
    except (OSError, ValueError) as err:
        raise PathdiffRenderError(
            f"Failed to write diff of {label_a} and {label_b}: {err}"
        ) from err
