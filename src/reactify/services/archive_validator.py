"""Structural checks on an incoming archive.

Nothing here opens or extracts the archive: existence, read permission,
declared extension and size are checked before any registry or
filesystem state is touched.
"""

import os
from pathlib import PurePath

from src.reactify.core.config import Settings
from src.reactify.core.exceptions import (
    ArchiveNotFoundError,
    ArchiveNotReadableError,
    ArchiveTooLargeError,
    UnsupportedArchiveTypeError,
)
from src.reactify.schemas.archive import ArchiveSource


def archive_extension(filename: str) -> str:
    """Lower-cased final suffix of a declared filename ("" when absent)."""
    return PurePath(filename).suffix.lower()


class ArchiveValidator:
    """Validates archive sources against the configured limits."""

    def __init__(self, settings: Settings):
        self.allowed_extensions = tuple(settings.allowed_archive_extensions)
        self.max_upload_bytes = settings.max_upload_bytes

    def validate(self, source: ArchiveSource) -> None:
        """Check an archive source.

        Raises:
            ArchiveNotFoundError: Path does not exist
            ArchiveNotReadableError: Path is not a readable file, or stream is not readable
            UnsupportedArchiveTypeError: Declared filename has no accepted extension
            ArchiveTooLargeError: Archive exceeds the upload size limit
        """
        if source.path is not None:
            size = self._check_path(source)
        else:
            size = self._check_stream(source)

        extension = archive_extension(source.filename)
        if extension not in self.allowed_extensions:
            allowed = ", ".join(self.allowed_extensions)
            raise UnsupportedArchiveTypeError(
                f"Only {allowed} files are supported (got '{source.filename}').",
                path=source.display_name,
            )

        if size is not None and size > self.max_upload_bytes:
            raise ArchiveTooLargeError(
                f"Archive is {size} bytes; the limit is {self.max_upload_bytes} bytes.",
                path=source.display_name,
            )

    def _check_path(self, source: ArchiveSource) -> int:
        path = source.path
        if not path.exists():
            raise ArchiveNotFoundError(f"File not found: {path}", path=path)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise ArchiveNotReadableError(f"File is not readable: {path}", path=path)
        try:
            return path.stat().st_size
        except OSError as e:
            raise ArchiveNotReadableError(
                f"File is not readable: {path}", path=path, cause=e
            ) from e

    def _check_stream(self, source: ArchiveSource) -> int | None:
        stream = source.stream
        readable = getattr(stream, "readable", None)
        if getattr(stream, "closed", False) or readable is None or not readable():
            raise ArchiveNotReadableError(
                f"Archive stream '{source.filename}' is not readable.", path=source.filename
            )
        seekable = getattr(stream, "seekable", None)
        if seekable is None or not seekable():
            return None
        # Size from the remaining bytes, without consuming them
        position = stream.tell()
        end = stream.seek(0, os.SEEK_END)
        stream.seek(position)
        return end - position
