"""Unit tests for ArchiveValidator."""

import io
import os

import pytest

from src.reactify.core.config import Settings
from src.reactify.core.exceptions import (
    ArchiveNotFoundError,
    ArchiveNotReadableError,
    ArchiveTooLargeError,
    UnsupportedArchiveTypeError,
)
from src.reactify.schemas.archive import ArchiveSource
from src.reactify.services.archive_validator import ArchiveValidator, archive_extension
from tests.helpers import NonSeekableStream, zip_bytes

pytestmark = pytest.mark.unit


@pytest.fixture
def validator(settings: Settings) -> ArchiveValidator:
    return ArchiveValidator(settings)


@pytest.fixture
def small_limit_validator(tmp_path) -> ArchiveValidator:
    """Validator that rejects anything over 1 KB."""
    return ArchiveValidator(Settings(projects_root=tmp_path, max_upload_size="1KB"))


class TestPathSources:
    """Tests for archives given as filesystem paths."""

    def test_valid_zip_passes(self, validator, tmp_path):
        """A readable .zip within limits raises nothing."""
        path = tmp_path / "build.zip"
        path.write_bytes(zip_bytes({"index.html": "<html></html>"}))

        validator.validate(ArchiveSource.from_path(path))

    def test_missing_file(self, validator, tmp_path):
        """A path that does not exist is reported as not found."""
        with pytest.raises(ArchiveNotFoundError) as exc_info:
            validator.validate(ArchiveSource.from_path(tmp_path / "missing.zip"))
        assert "missing.zip" in exc_info.value.message

    def test_directory_is_not_readable(self, validator, tmp_path):
        """A directory named like an archive is not a readable file."""
        path = tmp_path / "looks-like.zip"
        path.mkdir()

        with pytest.raises(ArchiveNotReadableError):
            validator.validate(ArchiveSource.from_path(path))

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read any file")
    def test_unreadable_file(self, validator, tmp_path):
        """A file without read permission is rejected."""
        path = tmp_path / "locked.zip"
        path.write_bytes(zip_bytes({"a.js": "x"}))
        path.chmod(0o000)
        try:
            with pytest.raises(ArchiveNotReadableError):
                validator.validate(ArchiveSource.from_path(path))
        finally:
            path.chmod(0o644)

    @pytest.mark.parametrize("name", ["build.tar.gz", "build.rar", "build", "build.zip.txt"])
    def test_unsupported_extension(self, validator, tmp_path, name):
        """Only the configured extensions are accepted."""
        path = tmp_path / name
        path.write_bytes(zip_bytes({"a.js": "x"}))

        with pytest.raises(UnsupportedArchiveTypeError):
            validator.validate(ArchiveSource.from_path(path))

    def test_extension_is_case_insensitive(self, validator, tmp_path):
        """BUILD.ZIP is a zip."""
        path = tmp_path / "BUILD.ZIP"
        path.write_bytes(zip_bytes({"a.js": "x"}))

        validator.validate(ArchiveSource.from_path(path))

    def test_declared_filename_wins_over_path(self, validator, tmp_path):
        """The declared filename decides the type, not the temp file name."""
        path = tmp_path / "upload.tmp"
        path.write_bytes(zip_bytes({"a.js": "x"}))

        validator.validate(ArchiveSource.from_path(path, filename="build.zip"))

    def test_too_large(self, small_limit_validator, tmp_path):
        """Archives above the upload limit are rejected."""
        path = tmp_path / "big.zip"
        path.write_bytes(b"\0" * 2048)

        with pytest.raises(ArchiveTooLargeError):
            small_limit_validator.validate(ArchiveSource.from_path(path))

    def test_type_checked_before_size(self, small_limit_validator, tmp_path):
        """A large file with the wrong extension reports the type problem."""
        path = tmp_path / "big.txt"
        path.write_bytes(b"\0" * 2048)

        with pytest.raises(UnsupportedArchiveTypeError):
            small_limit_validator.validate(ArchiveSource.from_path(path))


class TestStreamSources:
    """Tests for archives given as open streams."""

    def test_seekable_stream_passes(self, validator):
        """A BytesIO with a .zip filename is accepted."""
        stream = io.BytesIO(zip_bytes({"a.js": "x"}))
        validator.validate(ArchiveSource.from_stream(stream, "build.zip"))

    def test_size_check_preserves_position(self, small_limit_validator):
        """Measuring a stream does not consume it."""
        stream = io.BytesIO(b"\0" * 100)
        stream.seek(10)

        small_limit_validator.validate(ArchiveSource.from_stream(stream, "build.zip"))

        assert stream.tell() == 10

    def test_seekable_stream_too_large(self, small_limit_validator):
        """Seekable streams are measured against the upload limit."""
        stream = io.BytesIO(b"\0" * 2048)
        with pytest.raises(ArchiveTooLargeError):
            small_limit_validator.validate(ArchiveSource.from_stream(stream, "build.zip"))

    def test_non_seekable_stream_skips_size(self, small_limit_validator):
        """Forward-only streams cannot be measured up front."""
        stream = NonSeekableStream(b"\0" * 2048)
        small_limit_validator.validate(ArchiveSource.from_stream(stream, "build.zip"))

    def test_closed_stream(self, validator):
        """A closed stream is not readable."""
        stream = io.BytesIO(b"data")
        stream.close()

        with pytest.raises(ArchiveNotReadableError):
            validator.validate(ArchiveSource.from_stream(stream, "build.zip"))

    def test_stream_with_wrong_filename(self, validator):
        """Streams are typed by their declared filename."""
        stream = io.BytesIO(zip_bytes({"a.js": "x"}))
        with pytest.raises(UnsupportedArchiveTypeError):
            validator.validate(ArchiveSource.from_stream(stream, "build.7z"))


class TestArchiveSource:
    """Tests for ArchiveSource construction."""

    def test_requires_exactly_one_source(self, tmp_path):
        with pytest.raises(ValueError):
            ArchiveSource(filename="a.zip")
        with pytest.raises(ValueError):
            ArchiveSource(filename="a.zip", path=tmp_path, stream=io.BytesIO())

    def test_filename_defaults_to_path_name(self, tmp_path):
        source = ArchiveSource.from_path(tmp_path / "calc.zip")
        assert source.filename == "calc.zip"
        assert source.display_name == str(tmp_path / "calc.zip")


@pytest.mark.parametrize(
    ("filename", "expected"),
    [("a.zip", ".zip"), ("A.ZIP", ".zip"), ("a.tar.gz", ".gz"), ("noext", "")],
)
def test_archive_extension(filename, expected):
    assert archive_extension(filename) == expected
