"""Safe extraction of project archives into a staging directory."""

import hashlib
import shutil
import tempfile
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from src.reactify.core.config import Settings
from src.reactify.core.exceptions import (
    ArchiveNotReadableError,
    EmptyOrCorruptArchiveError,
    StorageError,
    UnsafeArchiveError,
)
from src.reactify.schemas.archive import ArchiveSource
from src.reactify.services.asset_classifier import iter_files

# Chunk size for streaming members to disk and spooling streams
CHUNK_SIZE = 64 * 1024
SPOOL_MAX_MEMORY = 8 * 1024 * 1024


def safe_member_path(name: str, max_depth: int) -> PurePosixPath:
    """Validate an archive member name and return it as a relative path.

    Raises:
        UnsafeArchiveError: On null bytes, absolute paths, drive letters,
            parent-directory segments, or paths nested deeper than max_depth
    """
    if "\x00" in name:
        raise UnsafeArchiveError("Archive contains a filename with null bytes.")

    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or (len(normalized) > 1 and normalized[1] == ":"):
        raise UnsafeArchiveError(f"Archive contains an absolute path: {name}")

    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if ".." in parts:
        raise UnsafeArchiveError(f"Archive contains an invalid path: {name}")
    if not parts:
        raise UnsafeArchiveError(f"Archive contains an empty path: {name!r}")
    if len(parts) > max_depth:
        raise UnsafeArchiveError(f"Archive path is nested too deep: {name}")
    return PurePosixPath(*parts)


class ArchiveExtractor:
    """Extracts zip archives under the configured safety limits."""

    def __init__(self, settings: Settings):
        self.max_files = settings.max_archive_files
        self.max_uncompressed_bytes = settings.max_uncompressed_bytes
        self.max_depth = settings.max_extraction_depth
        self.blocked_extensions = frozenset(settings.blocked_extensions)

    def extract(self, source: ArchiveSource, destination: Path) -> int:
        """Extract every file member of the archive into destination.

        Validation of the whole member list happens before the first byte is
        written. Returns the number of files written.

        Raises:
            EmptyOrCorruptArchiveError: Archive cannot be opened or a member is damaged
            UnsafeArchiveError: A member breaks one of the safety limits
        """
        with self._open(source) as fileobj:
            try:
                with zipfile.ZipFile(fileobj) as archive:
                    members = self._check_members(archive)
                    return self._write_members(archive, members, destination)
            except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                raise EmptyOrCorruptArchiveError(
                    f"Archive '{source.filename}' is corrupt.",
                    path=source.display_name,
                    cause=e,
                ) from e
            except (NotImplementedError, RuntimeError) as e:
                # Unsupported compression method or encrypted member
                raise EmptyOrCorruptArchiveError(
                    f"Archive '{source.filename}' cannot be read: {e}",
                    path=source.display_name,
                    cause=e,
                ) from e
            except OSError as e:
                raise StorageError(
                    "Failed to write extracted files.", path=destination, cause=e
                ) from e

    @contextmanager
    def _open(self, source: ArchiveSource):
        if source.path is not None:
            try:
                fileobj = open(source.path, "rb")
            except OSError as e:
                raise ArchiveNotReadableError(
                    f"File is not readable: {source.path}", path=source.path, cause=e
                ) from e
            with fileobj:
                yield fileobj
            return

        stream: BinaryIO = source.stream
        if stream.seekable():
            yield stream
            return

        # zipfile needs random access; spool forward-only streams first
        with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_MEMORY) as spool:
            shutil.copyfileobj(stream, spool, CHUNK_SIZE)
            spool.seek(0)
            yield spool

    def _check_members(
        self, archive: zipfile.ZipFile
    ) -> list[tuple[zipfile.ZipInfo, PurePosixPath]]:
        members = []
        declared_total = 0
        for info in archive.infolist():
            if info.is_dir():
                continue
            relative = safe_member_path(info.filename, self.max_depth)
            if relative.suffix.lower() in self.blocked_extensions:
                raise UnsafeArchiveError(f"Archive contains a blocked file: {relative.name}")

            members.append((info, relative))
            if len(members) > self.max_files:
                raise UnsafeArchiveError(f"Archive contains more than {self.max_files} files.")

            declared_total += info.file_size
            if declared_total > self.max_uncompressed_bytes:
                raise UnsafeArchiveError("Archive is too large when uncompressed.")

        # A file member cannot also be the parent directory of another member
        file_paths = {relative for _info, relative in members}
        for _info, relative in members:
            for parent in relative.parents:
                if parent in file_paths:
                    raise UnsafeArchiveError(
                        f"Archive path conflicts with a file member: {relative}"
                    )
        return members

    def _write_members(
        self,
        archive: zipfile.ZipFile,
        members: list[tuple[zipfile.ZipInfo, PurePosixPath]],
        destination: Path,
    ) -> int:
        root = destination.resolve()
        written_total = 0
        for info, relative in members:
            target = (root / relative).resolve()
            if root not in target.parents:
                raise UnsafeArchiveError(f"Archive path escapes the target: {info.filename}")
            target.parent.mkdir(parents=True, exist_ok=True)

            # Declared sizes can lie; count what is actually inflated
            with archive.open(info) as src, open(target, "wb") as dst:
                while chunk := src.read(CHUNK_SIZE):
                    written_total += len(chunk)
                    if written_total > self.max_uncompressed_bytes:
                        raise UnsafeArchiveError("Archive is too large when uncompressed.")
                    dst.write(chunk)
        return len(members)


def content_version(directory: Path, length: int = 12) -> str:
    """Hash a tree's relative paths and file contents into a short version string."""
    digest = hashlib.sha256()
    for relative, _size in iter_files(directory):
        digest.update(relative.encode("utf-8"))
        digest.update(b"\x00")
        with open(directory / relative, "rb") as fh:
            for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
                digest.update(chunk)
        digest.update(b"\x00")
    return digest.hexdigest()[:length]
