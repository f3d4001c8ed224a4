"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MEDUSA_URL = "http://localhost:9000"


def _first_non_empty(*values: str) -> str:
    for value in values:
        if value and value.strip():
            return value
    return ""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Storage
    storage_backend: str = "memory"
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog_cms"

    # Medusa sync secret (legacy names, first non-empty wins)
    medusa_strapi_sync_secret: str = ""
    strapi_sync_secret: str = ""
    medusa_sync_secret: str = ""

    # Medusa base URL (legacy names, first non-empty wins)
    medusa_backend_url: str = ""
    medusa_base_url: str = ""
    medusa_api_url: str = ""

    # Sync behaviour
    medusa_sync_disabled: bool = False
    sync_timeout_seconds: float = Field(default=10.0, gt=0)

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def sync_secret(self) -> str:
        """Shared secret for the Medusa sync endpoints.

        The raw value may hold a comma separated list; the first
        non-empty entry is used.
        """
        raw = _first_non_empty(
            self.medusa_strapi_sync_secret,
            self.strapi_sync_secret,
            self.medusa_sync_secret,
        )
        entries = [entry.strip() for entry in raw.split(",")]
        return next((entry for entry in entries if entry), "")

    @property
    def sync_base_url(self) -> str:
        """Medusa backend URL without a trailing slash."""
        configured = _first_non_empty(
            self.medusa_backend_url,
            self.medusa_base_url,
            self.medusa_api_url,
        ).strip()
        url = configured or DEFAULT_MEDUSA_URL
        return url[:-1] if url.endswith("/") else url

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
