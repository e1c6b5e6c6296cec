"""Project lifecycle service - upload, replace, delete and inspection.

Keeps the metadata row and the on-disk asset tree consistent:

- uploads extract into a fresh staging directory, never over a live tree
- a staged tree is promoted to a new release directory before the row
  is written, and removed again if the row write fails
- a replaced release is deleted only after the row points at the new one,
  and only the release this call observed before committing
- deletes remove the row first; leftover files become cleanup warnings
"""

import asyncio
from pathlib import Path

from src.reactify.core.config import Settings
from src.reactify.core.exceptions import (
    DirectoryNotFoundError,
    EmptyOrCorruptArchiveError,
    MissingEntrypointError,
    ProjectAlreadyExistsError,
    ProjectNotFoundError,
    ReactifyError,
    StorageError,
)
from src.reactify.core.logging import bind_project_context, get_logger
from src.reactify.core.storage import ProjectStorage
from src.reactify.core.validators import validate_project_slug
from src.reactify.models import Project, UploadState
from src.reactify.repositories import ProjectRepository
from src.reactify.schemas.archive import ArchiveSource
from src.reactify.schemas.project import (
    AssetSummary,
    CleanupWarning,
    DeleteResult,
    ProjectAssets,
    ProjectInfo,
    ProjectRead,
    UploadResult,
)
from src.reactify.services.archive_validator import ArchiveValidator
from src.reactify.services.asset_classifier import classify_directory, list_project_assets
from src.reactify.services.extractor import ArchiveExtractor, content_version

logger = get_logger(__name__)

INDEX_FILE = "index.html"


class ProjectService:
    """Project lifecycle manager for a single tenant."""

    def __init__(
        self,
        project_repo: ProjectRepository,
        storage: ProjectStorage,
        settings: Settings,
        validator: ArchiveValidator | None = None,
        extractor: ArchiveExtractor | None = None,
    ):
        self.project_repo = project_repo
        self.storage = storage
        self.settings = settings
        self.validator = validator or ArchiveValidator(settings)
        self.extractor = extractor or ArchiveExtractor(settings)

    @property
    def tenant_id(self) -> str:
        return self.project_repo.tenant_id

    async def upload(
        self,
        slug: str,
        archive: ArchiveSource,
        *,
        shortcode: str | None = None,
        name: str | None = None,
        version: str | None = None,
        force: bool = False,
    ) -> UploadResult:
        """Create a project from an archive, or replace it when force is set.

        shortcode and name default to the slug for new projects and keep
        their stored values on replace. version defaults to a content hash
        of the extracted tree.

        Raises:
            InvalidSlugError: Slug is empty or malformed
            ArchiveNotFoundError, ArchiveNotReadableError,
            UnsupportedArchiveTypeError, ArchiveTooLargeError: Archive checks failed
            ProjectAlreadyExistsError: Slug exists and force is not set
            DuplicateSlugError: A concurrent upload created the slug first
            InvalidArchiveError: Archive is empty, corrupt, unsafe, or lacks index.html
            ProjectNotFoundError: Project was deleted while being replaced
            StorageError: Store or filesystem failure
        """
        bind_project_context(self.tenant_id, slug)
        state = self._enter(UploadState.VALIDATING)
        staging: Path | None = None
        release: Path | None = None

        try:
            validate_project_slug(slug)
            await asyncio.to_thread(self.validator.validate, archive)

            existing = await self.project_repo.get_by_slug(slug)
            if existing is not None and not force:
                raise ProjectAlreadyExistsError(
                    f"Project '{slug}' already exists. Use --force to overwrite.", slug=slug
                )
            # Captured once; never re-resolved after the row changes
            old_path = existing.file_path if existing is not None else None

            state = self._enter(UploadState.EXTRACTING)
            staging = await asyncio.to_thread(self.storage.new_staging_dir)
            await self._run_to_completion(self.extractor.extract, archive, staging)

            state = self._enter(UploadState.CLASSIFYING)
            summary = await asyncio.to_thread(classify_directory, staging)
            if summary.file_count == 0:
                raise EmptyOrCorruptArchiveError(
                    f"Archive '{archive.filename}' contains no files.",
                    slug=slug,
                    path=archive.display_name,
                )
            if self.settings.require_index_html and not (staging / INDEX_FILE).is_file():
                raise MissingEntrypointError(
                    f"Archive must contain an {INDEX_FILE} file.",
                    slug=slug,
                    path=archive.display_name,
                )
            if not version:
                version = await asyncio.to_thread(content_version, staging)

            state = self._enter(UploadState.COMMITTING)
            target = self.storage.new_release_path(self.tenant_id, slug)
            release = await asyncio.to_thread(self.storage.promote, staging, target)
            staging = None

            if existing is not None:
                fields = {"file_path": str(release), "version": version}
                if name is not None:
                    fields["project_name"] = name
                if shortcode is not None:
                    fields["shortcode"] = shortcode
                project = await self.project_repo.replace(slug, **fields)
            else:
                project = await self.project_repo.insert(
                    Project(
                        tenant_id=self.tenant_id,
                        slug=slug,
                        project_name=name or slug,
                        shortcode=shortcode or slug,
                        version=version,
                        file_path=str(release),
                    )
                )
            # The row now owns the release
            release = None

        except ReactifyError as e:
            self._log_abort(state, e)
            raise
        except OSError as e:
            error = StorageError(f"Upload of '{slug}' failed.", slug=slug, cause=e)
            self._log_abort(state, error)
            raise error from e
        finally:
            if staging is not None or release is not None:
                await asyncio.to_thread(self._rollback, staging, release)

        warnings = []
        if old_path is not None:
            warning = await self._remove_release(old_path)
            if warning is not None:
                warnings.append(warning)

        self._enter(UploadState.DONE)
        logger.info(
            "Project uploaded",
            version=project.version,
            replaced=existing is not None,
            file_count=summary.file_count,
            total_size=summary.total_size,
            file_path=project.file_path,
        )
        return UploadResult(
            project=ProjectRead.model_validate(project),
            replaced=existing is not None,
            assets=summary,
            warnings=warnings,
        )

    async def delete(self, slug: str) -> DeleteResult:
        """Delete a project row, then its asset tree (best effort).

        Raises:
            ProjectNotFoundError: No such project
            StorageError: Store failure (the directory is left untouched)
        """
        bind_project_context(self.tenant_id, slug)
        project = await self._require(slug)
        file_path = project.file_path

        await self.project_repo.delete(slug)
        logger.info("Project row deleted", file_path=file_path)

        warnings = []
        warning = await self._remove_release(file_path)
        if warning is not None:
            warnings.append(warning)
        else:
            await asyncio.to_thread(self.storage.prune_empty_parents, file_path)
        return DeleteResult(slug=slug, file_path=file_path, warnings=warnings)

    async def get(self, slug: str) -> ProjectRead:
        """Get a project by slug.

        Raises:
            ProjectNotFoundError: No such project
        """
        return ProjectRead.model_validate(await self._require(slug))

    async def list_projects(self) -> list[ProjectRead]:
        """List the tenant's projects, newest first."""
        projects = await self.project_repo.list_all()
        return [ProjectRead.model_validate(p) for p in projects]

    async def info(self, slug: str) -> ProjectInfo:
        """Combine a project row with a fresh asset summary of its tree.

        A missing directory reports zero assets instead of failing; the row
        may outlive a failed cleanup.

        Raises:
            ProjectNotFoundError: No such project
        """
        project = await self._require(slug)
        try:
            summary = await asyncio.to_thread(classify_directory, project.file_path)
            directory_exists = True
        except DirectoryNotFoundError:
            logger.warning("Project directory missing", slug=slug, file_path=project.file_path)
            summary = AssetSummary()
            directory_exists = False

        return ProjectInfo(
            **ProjectRead.model_validate(project).model_dump(),
            directory_exists=directory_exists,
            asset_count=summary.file_count,
            js_count=summary.js_count,
            js_bytes=summary.js_bytes,
            css_count=summary.css_count,
            css_bytes=summary.css_bytes,
            other_count=summary.other_count,
            other_bytes=summary.other_bytes,
            total_size=summary.total_size,
        )

    async def assets(self, slug: str) -> ProjectAssets:
        """List a project's JS and CSS files.

        Raises:
            ProjectNotFoundError: No such project
        """
        project = await self._require(slug)
        try:
            return await asyncio.to_thread(list_project_assets, slug, project.file_path)
        except DirectoryNotFoundError:
            return ProjectAssets(slug=slug, source="scan")

    async def _require(self, slug: str) -> Project:
        project = await self.project_repo.get_by_slug(slug)
        if project is None:
            raise ProjectNotFoundError(f"Project '{slug}' not found.", slug=slug)
        return project

    async def _remove_release(self, path: str) -> CleanupWarning | None:
        """Delete a no-longer-referenced release, downgrading failure to a warning."""
        if not self.storage.owns(path):
            warning = CleanupWarning(
                path=path, message="Directory is outside the asset root and was left in place."
            )
        else:
            try:
                await asyncio.to_thread(self.storage.remove_tree, path)
                return None
            except StorageError as e:
                warning = CleanupWarning(
                    path=path,
                    message="Failed to remove directory.",
                    cause=repr(e.cause) if e.cause else None,
                )
        logger.warning("Cleanup incomplete", path=path, reason=warning.message, cause=warning.cause)
        return warning

    @staticmethod
    async def _run_to_completion(func, *args):
        """Run a blocking call in a worker thread, even across cancellation.

        A worker thread cannot be interrupted, so a cancelled caller waits
        for it to finish before unwinding. Otherwise rollback could delete a
        tree the thread is still writing to.
        """
        task = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            await asyncio.wait([task])
            if not task.cancelled() and task.exception() is not None:
                logger.debug("Worker failed after cancellation", error=repr(task.exception()))
            raise

    def _rollback(self, staging: Path | None, release: Path | None) -> None:
        """Remove uncommitted trees. Blocking; run in a worker thread."""
        if staging is not None:
            self._discard(staging)
        if release is not None:
            self._discard(release)
            self.storage.prune_empty_parents(release)

    def _discard(self, path: Path) -> None:
        """Remove an uncommitted tree during rollback."""
        try:
            self.storage.remove_tree(path)
            logger.info("Rolled back uncommitted tree", path=str(path))
        except StorageError as e:
            logger.error("Failed to roll back uncommitted tree", path=str(path), cause=repr(e.cause))

    def _enter(self, state: UploadState) -> UploadState:
        logger.debug("Upload state changed", upload_state=state.value)
        return state

    def _log_abort(self, state: UploadState, error: ReactifyError) -> None:
        logger.warning(
            "Upload aborted",
            upload_state=UploadState.ABORTED.value,
            failed_in=state.value,
            error=error.message,
            **error.context(),
        )
