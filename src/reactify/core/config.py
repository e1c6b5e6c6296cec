from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SIZE_UNITS = {
    "GB": 1024 * 1024 * 1024,
    "MB": 1024 * 1024,
    "KB": 1024,
    "B": 1,
}


def parse_size(value: str | int) -> int:
    """Convert a human size string ("50MB", "512KB", "1024") to bytes.

    Raises:
        ValueError: If the value is not a positive size
    """
    if isinstance(value, int):
        size = value
    else:
        text = value.strip().upper().replace(" ", "")
        size = None
        for unit, multiplier in SIZE_UNITS.items():
            if text.endswith(unit):
                number = text[: -len(unit)]
                try:
                    size = int(float(number) * multiplier)
                except ValueError as e:
                    raise ValueError(f"Invalid size: {value!r}") from e
                break
        if size is None:
            try:
                size = int(text)
            except ValueError as e:
                raise ValueError(f"Invalid size: {value!r}") from e

    if size <= 0:
        raise ValueError(f"Size must be positive: {value!r}")
    return size


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "ReactifyWP Project Registry"
    app_env: str = "development"  # development, testing, production
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./reactify.db"
    database_pool_size: int = 5  # ignored for SQLite
    database_max_overflow: int = 10  # ignored for SQLite
    auto_migrate: bool = True  # CLI applies pending migrations before each command

    # Storage
    projects_root: Path = Path("./reactify-projects")
    default_tenant: str = "default"

    # Archive limits
    allowed_archive_extensions: list[str] = [".zip"]
    max_upload_size: str = "50MB"
    max_archive_files: int = 1000
    max_uncompressed_size: str = "500MB"  # zip-bomb guard
    max_extraction_depth: int = 10
    blocked_extensions: list[str] = [".php", ".exe", ".bat", ".sh", ".py", ".rb"]
    require_index_html: bool = False

    @field_validator("allowed_archive_extensions", "blocked_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    @field_validator("max_upload_size", "max_uncompressed_size")
    @classmethod
    def validate_size(cls, v: str) -> str:
        parse_size(v)
        return v

    @property
    def max_upload_bytes(self) -> int:
        return parse_size(self.max_upload_size)

    @property
    def max_uncompressed_bytes(self) -> int:
        return parse_size(self.max_uncompressed_size)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()
