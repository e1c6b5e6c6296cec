"""Error taxonomy for project lifecycle operations.

Every error carries the context the dispatcher needs to render an actionable
message (slug, path, underlying cause) plus a stable code and exit status.
"""

from pathlib import Path


class ReactifyError(Exception):
    """Base class for all registry errors."""

    code = "error"
    exit_code = 1

    def __init__(
        self,
        message: str,
        *,
        slug: str | None = None,
        path: str | Path | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.slug = slug
        self.path = str(path) if path is not None else None
        self.cause = cause

    def context(self) -> dict[str, str]:
        """Return non-empty context fields for logging."""
        ctx = {"code": self.code}
        if self.slug:
            ctx["slug"] = self.slug
        if self.path:
            ctx["path"] = self.path
        if self.cause is not None:
            ctx["cause"] = repr(self.cause)
        return ctx


class InvalidSlugError(ReactifyError, ValueError):
    code = "invalid_slug"
    exit_code = 2


class InvalidTenantError(ReactifyError, ValueError):
    code = "invalid_tenant"
    exit_code = 2


class ProjectNotFoundError(ReactifyError):
    code = "not_found"
    exit_code = 3


class ProjectAlreadyExistsError(ReactifyError):
    code = "already_exists"
    exit_code = 4


class DuplicateSlugError(ProjectAlreadyExistsError):
    """Raised by the store when the (tenant, slug) unique constraint fires."""

    code = "duplicate_slug"


class ArchiveNotFoundError(ReactifyError):
    code = "archive_not_found"
    exit_code = 5


class ArchiveNotReadableError(ReactifyError):
    code = "archive_not_readable"
    exit_code = 5


class UnsupportedArchiveTypeError(ReactifyError):
    code = "unsupported_type"
    exit_code = 5


class ArchiveTooLargeError(ReactifyError):
    code = "archive_too_large"
    exit_code = 5


class InvalidArchiveError(ReactifyError):
    """Archive opened but its contents cannot be accepted."""

    code = "invalid_archive"
    exit_code = 6


class EmptyOrCorruptArchiveError(InvalidArchiveError):
    code = "empty_or_corrupt_archive"


class UnsafeArchiveError(InvalidArchiveError):
    code = "unsafe_archive"


class MissingEntrypointError(InvalidArchiveError):
    code = "missing_entrypoint"


class DirectoryNotFoundError(ReactifyError):
    code = "directory_not_found"
    exit_code = 7


class StorageError(ReactifyError):
    """Wraps failures of the metadata store or the asset filesystem."""

    code = "storage_failure"
    exit_code = 8
