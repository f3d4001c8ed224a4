"""Tests for application settings."""

import pytest

from catalog_cms.infrastructure.config import DEFAULT_MEDUSA_URL, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove sync variables that could leak in from the environment."""
    for name in (
        "MEDUSA_STRAPI_SYNC_SECRET",
        "STRAPI_SYNC_SECRET",
        "MEDUSA_SYNC_SECRET",
        "MEDUSA_BACKEND_URL",
        "MEDUSA_BASE_URL",
        "MEDUSA_API_URL",
        "ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSyncSecret:
    """Tests for secret resolution."""

    def test_unset(self):
        """Test no secret resolves to an empty string."""
        assert Settings(_env_file=None).sync_secret == ""

    def test_first_non_empty_name_wins(self, monkeypatch):
        """Test legacy names are consulted in order."""
        monkeypatch.setenv("MEDUSA_STRAPI_SYNC_SECRET", "  ")
        monkeypatch.setenv("STRAPI_SYNC_SECRET", "legacy")
        monkeypatch.setenv("MEDUSA_SYNC_SECRET", "older")

        assert Settings(_env_file=None).sync_secret == "legacy"

    def test_comma_separated_list(self, monkeypatch):
        """Test the first non-empty entry of a list is used."""
        monkeypatch.setenv("MEDUSA_STRAPI_SYNC_SECRET", " , primary , rotated")

        assert Settings(_env_file=None).sync_secret == "primary"


class TestSyncBaseUrl:
    """Tests for base URL resolution."""

    def test_default(self):
        """Test the local Medusa default."""
        assert Settings(_env_file=None).sync_base_url == DEFAULT_MEDUSA_URL

    def test_fallback_and_trailing_slash(self, monkeypatch):
        """Test a later name is used and its trailing slash dropped."""
        monkeypatch.setenv("MEDUSA_API_URL", "https://medusa.example.com/")

        assert Settings(_env_file=None).sync_base_url == "https://medusa.example.com"


def test_is_production(monkeypatch):
    """Test environment detection is case-insensitive."""
    monkeypatch.setenv("ENVIRONMENT", "Production")

    assert Settings(_env_file=None).is_production is True
