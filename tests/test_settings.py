import pytest

from octoform.config.settings import Settings
from octoform.core.errors import ConfigurationError
from octoform.providers import github as github_module
from octoform.providers.github import GitHubProvider


@pytest.fixture(autouse=True)
def logging_levels(monkeypatch):
    levels = []
    monkeypatch.setattr(github_module, "configure_logging", levels.append)
    return levels


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("OCTOFORM_OWNER", "my-org")
    monkeypatch.setenv("OCTOFORM_GITHUB_TOKEN", "ghp_test")
    monkeypatch.setenv("OCTOFORM_OWNER_IS_ORGANIZATION", "false")
    monkeypatch.setenv("OCTOFORM_HTTP_TIMEOUT", "5")
    monkeypatch.setenv("OCTOFORM_LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.owner == "my-org"
    assert settings.github_token == "ghp_test"
    assert settings.owner_is_organization is False
    assert settings.http_timeout == 5.0
    assert settings.github_base_url == "https://api.github.com"
    assert settings.log_level == "debug"


def test_provider_requires_owner(monkeypatch):
    monkeypatch.delenv("OCTOFORM_OWNER", raising=False)

    with pytest.raises(ConfigurationError):
        GitHubProvider.from_settings(Settings(_env_file=None))


def test_provider_from_settings():
    provider = GitHubProvider.from_settings(Settings(_env_file=None, owner="my-org"))

    assert provider.owner == "my-org"
    assert provider.organization() == "my-org"


def test_provider_configures_logging_level(logging_levels):
    GitHubProvider.from_settings(Settings(_env_file=None, owner="my-org", log_level="WARNING"))

    assert logging_levels == ["WARNING"]
