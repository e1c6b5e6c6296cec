"""Model exports.

Import from here: `from src.reactify.models import Project`
"""

from src.reactify.models.enums import AssetKind, UploadState
from src.reactify.models.project import MUTABLE_FIELDS, Project

__all__ = [
    # Enums
    "AssetKind",
    "UploadState",
    # Tables
    "MUTABLE_FIELDS",
    "Project",
]
