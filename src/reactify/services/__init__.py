from src.reactify.services.archive_validator import ArchiveValidator
from src.reactify.services.extractor import ArchiveExtractor
from src.reactify.services.project_service import ProjectService

__all__ = ["ArchiveExtractor", "ArchiveValidator", "ProjectService"]
