"""Tests for configuration management."""

import logging

import pytest

from hotel_menu.utils import config as config_module
from hotel_menu.utils.config import DEFAULT_DB_TIMEOUT, Config, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without HOTEL_MENU_* variables or a cached config."""
    for name in ("HOTEL_MENU_ENV", "HOTEL_MENU_DATABASE_URL", "HOTEL_MENU_DB_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestConfig:
    """Tests for the Config class."""

    def test_production_uses_home_directory(self):
        """Test production keeps the database under the home directory."""
        config = Config("production")
        assert config.is_production
        assert config.database_path.parent.name == ".hotel_menu"
        assert config.database_url.startswith("sqlite:///")
        assert config.uses_default_sqlite

    def test_development_uses_project_data_dir(self):
        """Test development keeps the database in the project data directory."""
        config = Config("development")
        assert config.is_development
        assert config.database_path.parent.name == "data"

    def test_database_url_override(self, monkeypatch):
        """Test HOTEL_MENU_DATABASE_URL replaces the SQLite default."""
        monkeypatch.setenv("HOTEL_MENU_DATABASE_URL", "postgresql://u@db/menu")
        config = Config()
        assert config.database_url == "postgresql://u@db/menu"
        assert not config.uses_default_sqlite

    def test_db_timeout(self, monkeypatch):
        """Test HOTEL_MENU_DB_TIMEOUT is read."""
        monkeypatch.setenv("HOTEL_MENU_DB_TIMEOUT", "5")
        assert Config().db_timeout == 5

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_invalid_db_timeout_falls_back(self, monkeypatch, caplog, raw):
        """Test bad timeouts fall back to the default with a warning."""
        monkeypatch.setenv("HOTEL_MENU_DB_TIMEOUT", raw)
        with caplog.at_level(logging.WARNING, logger=config_module.__name__):
            assert Config().db_timeout == DEFAULT_DB_TIMEOUT
        assert "Invalid HOTEL_MENU_DB_TIMEOUT" in caplog.text


class TestGetConfig:
    """Tests for the get_config() singleton."""

    def test_singleton(self):
        """Test repeated calls share one instance."""
        assert get_config() is get_config()

    def test_environment_from_env(self, monkeypatch):
        """Test HOTEL_MENU_ENV picks the environment."""
        monkeypatch.setenv("HOTEL_MENU_ENV", "development")
        assert get_config().is_development

    def test_environment_is_fixed_after_creation(self, caplog):
        """Test a later environment argument is ignored with a warning."""
        first = get_config("production")
        with caplog.at_level(logging.WARNING, logger=config_module.__name__):
            assert get_config("development") is first
        assert "singleton already exists" in caplog.text
