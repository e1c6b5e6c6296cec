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

__all__ = [
    "ArchiveSource",
    "AssetSummary",
    "CleanupWarning",
    "DeleteResult",
    "ProjectAssets",
    "ProjectInfo",
    "ProjectRead",
    "UploadResult",
]
