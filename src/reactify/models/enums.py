"""Shared enums for models."""

from enum import Enum


class UploadState(str, Enum):
    """Lifecycle states of a single upload request."""

    VALIDATING = "validating"
    EXTRACTING = "extracting"
    CLASSIFYING = "classifying"
    COMMITTING = "committing"
    DONE = "done"
    ABORTED = "aborted"


class AssetKind(str, Enum):
    """Asset groups a project file is classified into."""

    JS = "js"
    CSS = "css"
    OTHER = "other"
