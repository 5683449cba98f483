# Copyright Red Hat
#
# pathdiff/compare/filetypes.py - Path diff file types
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File type information support.

Decides whether file content can be rendered as a line-oriented text diff
or must be treated as binary data.
"""
from typing import ClassVar, Dict, Optional, Tuple
from pathlib import Path
from enum import Enum
import logging

from pathdiff import PATHDIFF_SUBSYSTEM_COMPARE

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PATHDIFF_SUBSYSTEM_COMPARE}, **kwargs)


#: Number of leading bytes examined when sniffing for binary content.
SNIFF_SIZE = 8000

# Extensions of formats that are always binary even if the leading bytes
# happen to be free of NUL characters.
# Format: ".ext": ("mime/type", "description starting with lowercase")
BINARY_EXTENSION_MAP: Dict[str, Tuple[str, str]] = {
    ".gz": ("application/gzip", "gzip compressed data"),
    ".tgz": ("application/gzip", "gzip compressed tar archive"),
    ".bz2": ("application/x-bzip2", "bzip2 compressed data"),
    ".xz": ("application/x-xz", "xz compressed data"),
    ".zst": ("application/zstd", "zstandard compressed data"),
    ".zip": ("application/zip", "zip archive"),
    ".jar": ("application/java-archive", "java archive"),
    ".7z": ("application/x-7z-compressed", "7-zip archive"),
    ".tar": ("application/x-tar", "tar archive"),
    ".iso": ("application/x-iso9660-image", "iso 9660 image"),
    ".png": ("image/png", "png image"),
    ".jpg": ("image/jpeg", "jpeg image"),
    ".jpeg": ("image/jpeg", "jpeg image"),
    ".gif": ("image/gif", "gif image"),
    ".ico": ("image/vnd.microsoft.icon", "windows icon"),
    ".webp": ("image/webp", "webp image"),
    ".mp3": ("audio/mpeg", "mp3 audio"),
    ".ogg": ("audio/ogg", "ogg audio"),
    ".wav": ("audio/wav", "wave audio"),
    ".mp4": ("video/mp4", "mp4 video"),
    ".mkv": ("video/x-matroska", "matroska video"),
    ".pdf": ("application/pdf", "pdf document"),
    ".so": ("application/x-sharedlib", "shared library"),
    ".o": ("application/x-object", "object file"),
    ".a": ("application/x-archive", "static library"),
    ".exe": ("application/x-dosexec", "windows executable"),
    ".dll": ("application/x-dosexec", "windows library"),
    ".pyc": ("application/x-python-code", "python bytecode"),
    ".class": ("application/java-vm", "java class file"),
    ".db": ("application/vnd.sqlite3", "database file"),
    ".sqlite": ("application/vnd.sqlite3", "sqlite database"),
    ".woff": ("font/woff", "web font"),
    ".woff2": ("font/woff2", "web font"),
    ".ttf": ("font/ttf", "truetype font"),
}


class FileTypeCategory(Enum):
    """
    Enum for file type categories.
    """

    TEXT = "text"
    BINARY = "binary"
    EMPTY = "empty"
    UNKNOWN = "unknown"


class FileTypeInfo:
    """
    Class representing file type information and encoding.
    """

    def __init__(
        self,
        mime_type: str,
        description: str,
        category: FileTypeCategory,
        encoding: Optional[str] = None,
    ):
        """
        Initialise a new ``FileTypeInfo`` object.

        :param mime_type: The detected MIME type.
        :type mime_type: ``str``
        :param description: Human readable type description.
        :type description: ``str``
        :param category: File type category.
        :type category: ``FileTypeCategory``
        :param encoding: Optional text encoding.
        :type encoding: ``Optional[str]``
        """
        self.mime_type = mime_type
        self.description = description
        self.category = category
        self.encoding = encoding
        self.is_text_like = category in (
            FileTypeCategory.TEXT,
            FileTypeCategory.EMPTY,
        )

    def __str__(self):
        """
        Return a string representation of this ``FileTypeInfo`` object.

        :returns: A human readable string describing this instance.
        :rtype: ``str``
        """
        return (
            f"MIME type: {self.mime_type}, "
            f"Category: {self.category.value}, "
            f"Encoding: {self.encoding if self.encoding else 'unknown'}, "
            f"Description: {self.description}"
        )


class FileTypeDetector:
    """
    Detect content types by sniffing, or using ``magic`` from
    python3-file-magic.
    """

    # MIME types outside "text/" that libmagic reports for textual data.
    text_mime_types: ClassVar[Tuple[str, ...]] = (
        "application/json",
        "application/javascript",
        "application/x-sh",
        "application/x-shellscript",
        "application/xml",
        "application/x-ndjson",
        "application/toml",
        "application/yaml",
        "application/x-yaml",
        "image/svg+xml",
        "inode/x-empty",
    )

    def detect_content_type(
        self,
        content: bytes,
        file_path: Optional[Path] = None,
        use_magic: bool = False,
    ) -> FileTypeInfo:
        """
        Detect file type information for ``content``.

        :param content: The file content to inspect.
        :type content: ``bytes``
        :param file_path: Optional path the content was read from, used for
                          extension based guessing.
        :type file_path: ``Optional[Path]``
        :param use_magic: Use libmagic rather than sniffing.
        :type use_magic: ``bool``
        :returns: File type information for ``content``.
        :rtype: ``FileTypeInfo``
        """
        if use_magic:
            # libmagic is only loaded when requested.
            import magic  # pylint: disable=import-outside-toplevel

            # c9s magic does not have magic.error
            if hasattr(magic, "error"):
                magic_errors = (magic.error, OSError, ValueError)
            else:
                magic_errors = (OSError, ValueError)

            try:
                fm = magic.detect_from_content(content)
                category = self._categorize(fm.mime_type, fm.encoding)
                return FileTypeInfo(fm.mime_type, fm.name, category, fm.encoding)
            except magic_errors as err:
                _log_warn(
                    "Error detecting file type for %s: %s",
                    str(file_path) if file_path else "<content>",
                    err,
                )
                # Fall through to sniffing below.

        return self._guess_content_type(content, file_path)

    def _categorize(self, mime_type: str, encoding: Optional[str]) -> FileTypeCategory:
        """
        Categorize content based on a libmagic MIME type and encoding.

        :param mime_type: Detected MIME type.
        :type mime_type: ``str``
        :param encoding: Detected encoding (``"binary"`` for non-text data).
        :type encoding: ``Optional[str]``
        :returns: File type categorization.
        :rtype: ``FileTypeCategory``
        """
        mime_type = mime_type.lower()
        if mime_type == "inode/x-empty":
            return FileTypeCategory.EMPTY
        if mime_type.startswith("text/") or mime_type in self.text_mime_types:
            return FileTypeCategory.TEXT
        if encoding and encoding != "binary":
            return FileTypeCategory.TEXT
        return FileTypeCategory.BINARY

    def _guess_content_type(
        self, content: bytes, file_path: Optional[Path]
    ) -> FileTypeInfo:
        """
        Guess file type information from leading bytes and file extension
        without using libmagic.

        :param content: The file content to inspect.
        :type content: ``bytes``
        :param file_path: Optional path used for extension matching.
        :type file_path: ``Optional[Path]``
        :returns: A best-effort ``FileTypeInfo``.
        :rtype: ``FileTypeInfo``
        """
        if not content:
            return FileTypeInfo(
                "inode/x-empty", "empty", FileTypeCategory.EMPTY, "utf-8"
            )

        if file_path is not None:
            extension = file_path.suffix.lower()
            if extension in BINARY_EXTENSION_MAP:
                mime_type, description = BINARY_EXTENSION_MAP[extension]
                _log_debug_compare(
                    "Guessed binary type %s for %s by extension", mime_type, file_path
                )
                return FileTypeInfo(
                    mime_type, description, FileTypeCategory.BINARY, "binary"
                )

        if b"\0" in content[:SNIFF_SIZE]:
            return FileTypeInfo(
                "application/octet-stream", "data", FileTypeCategory.BINARY, "binary"
            )

        return FileTypeInfo("text/plain", "text", FileTypeCategory.TEXT, "utf-8")
