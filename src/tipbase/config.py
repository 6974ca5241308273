"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tipbase.core.constants import (
    DEFAULT_AUDIT_LIMIT,
    MAX_AUDIT_LIMIT,
    MAX_UPLOAD_FILES,
    MAX_UPLOAD_SIZE,
    RECENT_ACTIVITY_SIZE,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "tipbase"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Database
    database_url: str = "sqlite+aiosqlite:///./tipbase.db"
    database_echo: bool = False
    database_create_tables: bool = True

    # CORS
    cors_origins: list[str] = []

    # API Documentation
    api_docs_base_url: str = "https://tipbase.example.com"

    # Observability
    log_level: str = "INFO"

    # Audit
    audit_enabled: bool = True
    audit_default_limit: int = Field(default=DEFAULT_AUDIT_LIMIT, ge=1)
    audit_max_limit: int = Field(default=MAX_AUDIT_LIMIT, ge=1)
    audit_recent_activity: int = Field(default=RECENT_ACTIVITY_SIZE, ge=1)

    # Uploads
    upload_dir: Path = Path("uploads")
    max_upload_size: int = MAX_UPLOAD_SIZE
    max_upload_files: int = MAX_UPLOAD_FILES

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
