"""Project model - tenant-scoped registry row."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from src.reactify.core.validators import MAX_PROJECT_SLUG_LENGTH, MAX_TENANT_ID_LENGTH
from src.reactify.models.base import utc_now

# Fields a replace may change; slug and created_at are immutable.
MUTABLE_FIELDS = frozenset({"project_name", "shortcode", "version", "file_path"})


class Project(SQLModel, table=True):
    """Project entity.

    One row per (tenant_id, slug). The row is the source of truth for
    file_path: whatever directory it names holds the live assets.
    """

    __tablename__ = "projects"
    __table_args__ = (UniqueConstraint("tenant_id", "slug", name="uq_projects_tenant_slug"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: str = Field(max_length=MAX_TENANT_ID_LENGTH, index=True)
    slug: str = Field(max_length=MAX_PROJECT_SLUG_LENGTH)
    project_name: str = Field(max_length=255)
    shortcode: str = Field(max_length=100)
    version: str = Field(max_length=50)
    file_path: str
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)
