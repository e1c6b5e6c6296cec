"""Service factory functions."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.reactify.core.config import Settings, get_settings
from src.reactify.core.storage import ProjectStorage
from src.reactify.repositories import ProjectRepository
from src.reactify.services import ProjectService


def get_project_repository(session: AsyncSession, tenant_id: str) -> ProjectRepository:
    """Get project repository scoped to a tenant."""
    return ProjectRepository(session, tenant_id)


def get_project_storage(settings: Settings | None = None) -> ProjectStorage:
    """Get the asset tree layout rooted at settings.projects_root."""
    settings = settings or get_settings()
    return ProjectStorage(settings.projects_root)


def get_project_service(
    session: AsyncSession,
    tenant_id: str,
    settings: Settings | None = None,
) -> ProjectService:
    """Get project lifecycle service for a tenant."""
    settings = settings or get_settings()
    return ProjectService(
        get_project_repository(session, tenant_id),
        get_project_storage(settings),
        settings,
    )
