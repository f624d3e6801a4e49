"""Environment-based provider configuration."""

from octoform.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
