"""
Provider settings using Pydantic.

Provides environment-based configuration loading with OCTOFORM_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Provider settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="OCTOFORM_",
    )

    # GitHub API
    github_base_url: str = "https://api.github.com"
    github_token: str | None = None

    # Owner of managed entities (organization or user login)
    owner: str | None = None
    owner_is_organization: bool = True

    # HTTP client settings
    http_timeout: float = 30.0
    user_agent: str = "octoform/0.1.0"

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
