"""Archive source handed over by the transport layer."""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO


@dataclass(frozen=True)
class ArchiveSource:
    """A readable archive plus the filename the caller declared for it.

    Exactly one of `path` or `stream` is set. The declared filename decides
    the archive type; the transport is responsible for content sniffing.
    """

    filename: str
    path: Path | None = None
    stream: BinaryIO | None = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.stream is None):
            raise ValueError("ArchiveSource needs exactly one of path or stream")

    @classmethod
    def from_path(cls, path: str | Path, filename: str | None = None) -> "ArchiveSource":
        path = Path(path)
        return cls(filename=filename or path.name, path=path)

    @classmethod
    def from_stream(cls, stream: BinaryIO, filename: str) -> "ArchiveSource":
        return cls(filename=filename, stream=stream)

    @property
    def display_name(self) -> str:
        return str(self.path) if self.path is not None else self.filename
