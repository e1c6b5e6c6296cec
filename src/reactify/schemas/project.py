"""Project schemas returned to the presentation layer."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class ProjectRead(BaseModel):
    """Schema for reading a project row."""

    slug: str
    project_name: str
    shortcode: str
    version: str
    file_path: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AssetSummary(BaseModel):
    """Counts and byte totals of a project's asset tree.

    Derived from the filesystem on demand, never persisted.
    """

    js_count: int = 0
    js_bytes: int = 0
    css_count: int = 0
    css_bytes: int = 0
    other_count: int = 0
    other_bytes: int = 0
    js_files: list[str] = Field(default_factory=list)
    css_files: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def file_count(self) -> int:
        return self.js_count + self.css_count + self.other_count

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_size(self) -> int:
        return self.js_bytes + self.css_bytes + self.other_bytes


class ProjectInfo(ProjectRead):
    """Project row combined with a freshly computed asset summary."""

    directory_exists: bool
    asset_count: int
    js_count: int
    js_bytes: int
    css_count: int
    css_bytes: int
    other_count: int
    other_bytes: int
    total_size: int


class ProjectAssets(BaseModel):
    """Loadable JS and CSS files of a project, relative to its file_path."""

    slug: str
    source: str  # "manifest" or "scan"
    js: list[str] = Field(default_factory=list)
    css: list[str] = Field(default_factory=list)


class CleanupWarning(BaseModel):
    """Non-fatal cleanup failure attached to an otherwise successful result."""

    path: str
    message: str
    cause: str | None = None


class UploadResult(BaseModel):
    """Outcome of a committed upload."""

    project: ProjectRead
    replaced: bool = False
    assets: AssetSummary
    warnings: list[CleanupWarning] = Field(default_factory=list)


class DeleteResult(BaseModel):
    """Outcome of a delete; the row is gone even when warnings are present."""

    slug: str
    file_path: str
    warnings: list[CleanupWarning] = Field(default_factory=list)
