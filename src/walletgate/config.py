"""Application configuration using pydantic-settings.

Settings cover the backend host the gateway starts from, the outbound
request rate limit and where the gateway persists its route table.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OPENAPI_HOST = "https://alpha-openapi.debank.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Backend
    # ======================
    openapi_host: str = Field(
        default=DEFAULT_OPENAPI_HOST,
        description="Risk/analysis backend used when no host has been persisted yet",
    )
    max_requests_per_second: int = Field(
        default=25, ge=1, description="Outbound request rate shared by all operations"
    )
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # ======================
    # Persistence
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/walletgate.db",
        description="Database holding persisted gateway records",
    )
    persist_namespace: str = Field(
        default="openapi", description="Namespace of the gateway config record"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO

    def get_safe_dict(self) -> dict:
        """Return settings dict with the database credentials redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "openapi_host": self.openapi_host,
            "max_requests_per_second": self.max_requests_per_second,
            "request_timeout": self.request_timeout,
            "database_url": self._redact_url(self.database_url),
            "persist_namespace": self.persist_namespace,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact sensitive parts of database URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
