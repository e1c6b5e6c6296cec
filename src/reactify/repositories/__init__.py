"""Repository layer - data access abstraction."""

from src.reactify.repositories.base import BaseRepository
from src.reactify.repositories.project import ProjectRepository

__all__ = [
    "BaseRepository",
    "ProjectRepository",
]
