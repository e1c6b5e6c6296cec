"""Test helper functions for building archives and asset trees."""

import io
import zipfile
from pathlib import Path

# A small React-style build: 2 JS, 1 CSS, 2 other
SAMPLE_BUILD: dict[str, str] = {
    "index.html": "<!doctype html><div id='root'></div>",
    "static/js/main.abc123.js": "console.log('main');",
    "static/js/chunk.def456.js": "console.log('chunk');",
    "static/css/main.789.css": "body { margin: 0; }",
    "favicon.ico": "ico",
}


def zip_bytes(
    files: dict[str, str | bytes],
    compression: int = zipfile.ZIP_DEFLATED,
    directories: list[str] | None = None,
) -> bytes:
    """Build a zip archive in memory.

    Args:
        files: Member name to content
        compression: zipfile compression constant
        directories: Extra explicit directory entries ("static/")

    Returns:
        Raw archive bytes
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
        for name in directories or []:
            archive.writestr(zipfile.ZipInfo(name), b"")
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def write_zip(path: Path, files: dict[str, str | bytes], **kwargs) -> Path:
    """Write a zip archive to disk and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(zip_bytes(files, **kwargs))
    return path


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Materialize a directory tree from a name-to-content mapping."""
    for name, content in files.items():
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            target.write_text(content)
        else:
            target.write_bytes(content)
    return root


class NonSeekableStream(io.RawIOBase):
    """Forward-only byte stream, like a socket or pipe."""

    def __init__(self, data: bytes):
        self._inner = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def readinto(self, buffer) -> int:
        chunk = self._inner.read(len(buffer))
        buffer[: len(chunk)] = chunk
        return len(chunk)
