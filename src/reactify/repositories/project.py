"""Repository for Project entity (tenant-scoped).

This is the metadata store of the registry. Every query is filtered by the
repository's tenant_id, and every mutating call runs as its own transaction
so no reader observes a half-written row.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from src.reactify.core.exceptions import (
    DuplicateSlugError,
    ProjectNotFoundError,
    StorageError,
)
from src.reactify.core.logging import get_logger
from src.reactify.core.validators import validate_tenant_id
from src.reactify.models import MUTABLE_FIELDS, Project
from src.reactify.models.base import utc_now
from src.reactify.repositories.base import BaseRepository

logger = get_logger(__name__)


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project rows of a single tenant."""

    model = Project

    def __init__(self, session: AsyncSession, tenant_id: str):
        super().__init__(session)
        self.tenant_id = validate_tenant_id(tenant_id)

    def _scoped(self, query: Any) -> Any:
        return query.where(Project.tenant_id == self.tenant_id)

    async def get_by_id(self, id: UUID) -> Project | None:
        """Get project by primary key; rows of other tenants are invisible."""
        project = await super().get_by_id(id)
        if project is None or project.tenant_id != self.tenant_id:
            return None
        return project

    async def get_by_slug(self, slug: str) -> Project | None:
        """Get project by slug. Returns None on miss."""
        try:
            result = await self.session.execute(
                self._scoped(select(Project)).where(Project.slug == slug)
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to look up project '{slug}'.", slug=slug, cause=e) from e
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Project]:
        """List all projects of the tenant, newest first."""
        query = self._scoped(select(Project)).order_by(Project.created_at.desc())
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise StorageError("Failed to list projects.", cause=e) from e
        return list(result.scalars().all())

    async def insert(self, project: Project) -> Project:
        """Insert a new project row.

        The (tenant_id, slug) unique constraint decides races between
        concurrent inserts; the loser gets DuplicateSlugError.

        Raises:
            DuplicateSlugError: If the slug already exists for this tenant
            StorageError: On any other database failure
        """
        project.tenant_id = self.tenant_id
        self.add(project)
        try:
            await self.session.commit()
            await self.session.refresh(project)
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateSlugError(
                f"Project '{project.slug}' already exists.", slug=project.slug, cause=e
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(
                f"Failed to save project '{project.slug}'.", slug=project.slug, cause=e
            ) from e
        return project

    async def replace(self, slug: str, **fields: Any) -> Project:
        """Update the mutable fields of a project in a single statement.

        updated_at is always refreshed; slug and created_at never change.

        Raises:
            ProjectNotFoundError: If no such row exists
            StorageError: On database failure
        """
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot replace immutable fields: {sorted(unknown)}")

        values = {**fields, "updated_at": utc_now()}
        stmt = self._scoped(update(Project)).where(Project.slug == slug).values(**values)
        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                raise ProjectNotFoundError(f"Project '{slug}' not found.", slug=slug)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(f"Failed to update project '{slug}'.", slug=slug, cause=e) from e

        # Objects loaded earlier in this session still hold the old values
        result = await self.session.execute(
            self._scoped(select(Project))
            .where(Project.slug == slug)
            .execution_options(populate_existing=True)
        )
        project = result.scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(f"Project '{slug}' not found.", slug=slug)
        return project

    async def delete(self, slug: str) -> None:
        """Delete exactly one project row.

        Raises:
            ProjectNotFoundError: If no such row exists
            StorageError: On database failure
        """
        stmt = self._scoped(delete(Project)).where(Project.slug == slug)
        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                raise ProjectNotFoundError(f"Project '{slug}' not found.", slug=slug)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError(f"Failed to delete project '{slug}'.", slug=slug, cause=e) from e
        logger.debug("Project row deleted", slug=slug)
