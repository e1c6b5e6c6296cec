"""On-disk layout of project asset trees.

    <projects_root>/
        .staging/<token>/                 extraction targets, never referenced by a row
        <tenant_id>/<slug>/<release>/     committed trees, one per accepted upload

Every upload gets a fresh release directory, so a replace never writes into
the tree the current row points at.
"""

import os
import shutil
from pathlib import Path
from uuid import uuid4

from src.reactify.core.exceptions import StorageError
from src.reactify.core.logging import get_logger
from src.reactify.models.base import utc_now

logger = get_logger(__name__)

STAGING_DIR_NAME = ".staging"


class ProjectStorage:
    """Filesystem operations on the asset root. All methods are blocking."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    @property
    def staging_root(self) -> Path:
        return self.root / STAGING_DIR_NAME

    def project_dir(self, tenant_id: str, slug: str) -> Path:
        return self.root / tenant_id / slug

    def owns(self, path: str | Path) -> bool:
        """True when path lies strictly inside the asset root."""
        return self.root in Path(path).resolve().parents

    def new_staging_dir(self) -> Path:
        """Create an empty, uniquely named staging directory."""
        path = self.staging_root / uuid4().hex
        try:
            path.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            raise StorageError("Failed to create staging directory.", path=path, cause=e) from e
        return path

    def new_release_path(self, tenant_id: str, slug: str) -> Path:
        """Pick a release path that does not exist yet (not created)."""
        stamp = utc_now().strftime("%Y%m%d%H%M%S")
        return self.project_dir(tenant_id, slug) / f"{stamp}-{uuid4().hex[:8]}"

    def promote(self, staging: Path, release: Path) -> Path:
        """Move a staged tree to its release path.

        Staging and releases share the asset root, so this is a rename on
        one filesystem rather than a copy. A concurrent prune may remove the
        empty parent between mkdir and rename; that is retried once.
        """
        try:
            for attempt in range(2):
                release.parent.mkdir(parents=True, exist_ok=True)
                if release.exists():
                    raise FileExistsError(release)
                try:
                    os.replace(staging, release)
                    break
                except FileNotFoundError:
                    if attempt or not staging.exists():
                        raise
                    logger.debug("Release parent vanished, retrying", path=str(release))
        except OSError as e:
            raise StorageError(
                "Failed to move staged assets into place.", path=release, cause=e
            ) from e
        return release

    def remove_tree(self, path: str | Path) -> None:
        """Delete a directory tree. A missing tree counts as removed.

        Raises:
            StorageError: If the tree exists and could not be fully removed
        """
        path = Path(path)
        if not path.exists() and not path.is_symlink():
            return
        try:
            if path.is_symlink() or not path.is_dir():
                path.unlink()
            else:
                shutil.rmtree(path)
        except OSError as e:
            raise StorageError("Failed to remove directory.", path=path, cause=e) from e

    def prune_empty_parents(self, path: str | Path) -> None:
        """Remove empty parent directories of a release up to the asset root."""
        current = Path(path).resolve().parent
        while current != self.root and self.root in current.parents:
            try:
                current.rmdir()
            except OSError:
                # Not empty (another release lives here) or already gone
                break
            current = current.parent
