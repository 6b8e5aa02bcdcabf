from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from shop_auth.core.settings import AppSettings
from shop_auth.db.config import Settings

_DB_VARS = ("POSTGRES_URL", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB", "POSTGRES_HOST", "POSTGRES_PORT")


@pytest.fixture
def clean_env(monkeypatch):
    for name in _DB_VARS + ("LOG_LEVEL", "DEFAULT_PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAppSettings:
    def test_defaults(self, clean_env):
        settings = AppSettings(_env_file=None)

        assert settings.LOG_LEVEL == "INFO"
        assert settings.log_level == logging.INFO
        assert settings.DEFAULT_PAGE_SIZE == 100

    def test_log_level_is_case_insensitive(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")

        settings = AppSettings(_env_file=None)

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.log_level == logging.DEBUG

    def test_unknown_log_level_is_rejected(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)

    def test_page_size_must_be_positive(self, clean_env):
        clean_env.setenv("DEFAULT_PAGE_SIZE", "0")

        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)


class TestDatabaseSettings:
    def test_url_built_from_parts(self, clean_env):
        clean_env.setenv("POSTGRES_USER", "auth")
        clean_env.setenv("POSTGRES_PASSWORD", "secret")
        clean_env.setenv("POSTGRES_DB", "shop")
        clean_env.setenv("POSTGRES_HOST", "db")

        settings = Settings(_env_file=None)

        assert settings.database_url == "postgresql://auth:secret@db:5432/shop"
        assert settings.async_database_url == "postgresql+asyncpg://auth:secret@db:5432/shop"

    @pytest.mark.parametrize(
        "url",
        [
            "postgres://u:p@h/db",
            "postgresql://u:p@h/db",
            "postgresql+psycopg2://u:p@h/db",
            "postgresql+asyncpg://u:p@h/db",
        ],
    )
    def test_async_url_uses_asyncpg(self, clean_env, url):
        clean_env.setenv("POSTGRES_URL", url)

        settings = Settings(_env_file=None)

        assert settings.async_database_url == "postgresql+asyncpg://u:p@h/db"

    def test_sync_url_drops_driver(self, clean_env):
        clean_env.setenv("POSTGRES_URL", "postgresql+asyncpg://u:p@h/db")

        assert Settings(_env_file=None).sync_database_url == "postgresql://u:p@h/db"

    def test_missing_configuration_raises(self, clean_env):
        settings = Settings(_env_file=None)

        with pytest.raises(ValueError, match="Database configuration missing"):
            settings.database_url
