"""Identifier validators."""

import re
from typing import Final

from src.reactify.core.exceptions import InvalidSlugError, InvalidTenantError

MAX_PROJECT_SLUG_LENGTH: Final[int] = 100
MAX_TENANT_ID_LENGTH: Final[int] = 64
PROJECT_SLUG_REGEX: Final[str] = r"^[a-z0-9-]+$"
TENANT_ID_REGEX: Final[str] = r"^[a-z0-9][a-z0-9_-]*$"

_PROJECT_SLUG_PATTERN: Final[re.Pattern[str]] = re.compile(PROJECT_SLUG_REGEX)
_TENANT_ID_PATTERN: Final[re.Pattern[str]] = re.compile(TENANT_ID_REGEX)


def validate_project_slug(slug: str | None) -> str:
    """Validate a project slug.

    Slugs are lowercase letters, digits and hyphens. They double as a
    directory name under the tenant's asset root, so the pattern also
    rules out path separators and dot segments.

    Raises:
        InvalidSlugError: If the slug is empty, too long, or malformed
    """
    if not slug:
        raise InvalidSlugError("Project slug is required.")
    if len(slug) > MAX_PROJECT_SLUG_LENGTH:
        raise InvalidSlugError(
            f"Project slug exceeds {MAX_PROJECT_SLUG_LENGTH} characters.", slug=slug
        )
    if not _PROJECT_SLUG_PATTERN.fullmatch(slug):
        raise InvalidSlugError(
            "Project slug can only contain lowercase letters, numbers, and hyphens.",
            slug=slug,
        )
    return slug


def validate_tenant_id(tenant_id: str | None) -> str:
    """Validate a tenant key before it is used in queries or paths.

    Raises:
        InvalidTenantError: If the tenant key is empty or malformed
    """
    if not tenant_id:
        raise InvalidTenantError("Tenant is required.")
    if len(tenant_id) > MAX_TENANT_ID_LENGTH or not _TENANT_ID_PATTERN.fullmatch(tenant_id):
        raise InvalidTenantError(
            "Tenant must start with a lowercase letter or digit and contain only "
            "lowercase letters, numbers, hyphens and underscores."
        )
    return tenant_id
