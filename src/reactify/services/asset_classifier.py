"""Classification of extracted asset trees."""

import json
import os
from pathlib import Path

from src.reactify.core.exceptions import DirectoryNotFoundError
from src.reactify.models import AssetKind
from src.reactify.schemas.project import AssetSummary, ProjectAssets

ASSET_MANIFEST = "asset-manifest.json"

_KIND_BY_EXTENSION = {
    ".js": AssetKind.JS,
    ".mjs": AssetKind.JS,
    ".css": AssetKind.CSS,
}


def classify_file(name: str) -> AssetKind:
    """Classify a file by its extension."""
    return _KIND_BY_EXTENSION.get(os.path.splitext(name)[1].lower(), AssetKind.OTHER)


def iter_files(directory: Path):
    """Yield (relative posix path, size) for every regular file under a directory.

    Depth-first and side-effect free. Symlinks to directories are not
    descended into and symlinked files are skipped, so the walk cannot
    cycle or leave the tree.
    """
    for dirpath, dirnames, filenames in os.walk(directory, followlinks=False):
        dirnames.sort()
        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            if os.path.islink(full):
                continue
            try:
                size = os.stat(full, follow_symlinks=False).st_size
            except FileNotFoundError:
                # Removed while walking
                continue
            yield Path(full).relative_to(directory).as_posix(), size


def classify_directory(path: str | Path) -> AssetSummary:
    """Partition a tree into JS, CSS and other files and sum their sizes.

    An empty directory yields an all-zero summary.

    Raises:
        DirectoryNotFoundError: If path does not exist or is not a directory
    """
    directory = Path(path)
    if not directory.is_dir():
        raise DirectoryNotFoundError(f"Directory not found: {directory}", path=directory)

    summary = AssetSummary()
    for relative, size in iter_files(directory):
        kind = classify_file(relative)
        if kind is AssetKind.JS:
            summary.js_count += 1
            summary.js_bytes += size
            summary.js_files.append(relative)
        elif kind is AssetKind.CSS:
            summary.css_count += 1
            summary.css_bytes += size
            summary.css_files.append(relative)
        else:
            summary.other_count += 1
            summary.other_bytes += size
    return summary


def read_asset_manifest(path: str | Path) -> dict[str, str] | None:
    """Return the `files` mapping of a build's asset-manifest.json, if usable."""
    manifest_path = Path(path) / ASSET_MANIFEST
    if not manifest_path.is_file():
        return None
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    files = manifest.get("files") if isinstance(manifest, dict) else None
    if not isinstance(files, dict):
        return None
    return {str(k): str(v) for k, v in files.items() if isinstance(v, str)}


def list_project_assets(slug: str, path: str | Path) -> ProjectAssets:
    """List loadable JS and CSS files, preferring the build manifest.

    Manifest entries are made relative to the project root; `.map` files
    and other non-asset entries are ignored.

    Raises:
        DirectoryNotFoundError: If path does not exist or is not a directory
    """
    files = read_asset_manifest(path)
    if files is not None:
        assets = ProjectAssets(slug=slug, source="manifest")
        for entry in files.values():
            relative = entry.lstrip("/")
            kind = classify_file(relative)
            if kind is AssetKind.JS and relative not in assets.js:
                assets.js.append(relative)
            elif kind is AssetKind.CSS and relative not in assets.css:
                assets.css.append(relative)
        return assets

    summary = classify_directory(path)
    return ProjectAssets(slug=slug, source="scan", js=summary.js_files, css=summary.css_files)
