import logging

import pytest

from taskquest import config
from taskquest.config import AppConfig, get_config, reset_config

_VARS = [
    "TASKQUEST_DATABASE_URL",
    "PLATFORM_DATABASE_URL",
    "DATABASE_URL",
    "TASKQUEST_DOCUMENT_ID",
    "TASKQUEST_QUOTES_URL",
    "X_API_KEY",
    "TASKQUEST_QUOTES_TIMEOUT",
    "TASKQUEST_PAGE_SIZE",
    "TASKQUEST_SYNC_SECONDS",
    "TASKQUEST_TIMEZONE",
    "TASKQUEST_LOG_DIR",
    "TASKQUEST_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TASKQUEST_DATABASE_URL", "sqlite:///:memory:")
    reset_config()
    yield
    reset_config()


def test_defaults():
    cfg = AppConfig.from_env()
    assert cfg.document_id == "shared-user"
    assert cfg.quotes_url == config.DEFAULT_QUOTES_URL
    assert cfg.quotes_api_key is None
    assert cfg.quotes_timeout_seconds == 10.0
    assert cfg.page_size == 20
    assert cfg.sync_interval_seconds == 5
    assert cfg.timezone == "America/Chicago"
    assert cfg.log_level == logging.INFO


def test_database_url_precedence(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://shared/db")
    assert AppConfig.from_env().database_url == "sqlite:///:memory:"
    monkeypatch.delenv("TASKQUEST_DATABASE_URL")
    assert AppConfig.from_env().database_url == "postgresql://shared/db"
    monkeypatch.setenv("PLATFORM_DATABASE_URL", "postgresql://platform/db")
    assert AppConfig.from_env().database_url == "postgresql://platform/db"


def test_sqlite_fallback(monkeypatch):
    monkeypatch.delenv("TASKQUEST_DATABASE_URL")
    url = AppConfig.from_env().database_url
    assert url.startswith("sqlite:///")
    assert url.endswith("data/taskquest.db")


def test_overrides_and_bounds(monkeypatch):
    monkeypatch.setenv("TASKQUEST_DOCUMENT_ID", "household")
    monkeypatch.setenv("X_API_KEY", " secret ")
    monkeypatch.setenv("TASKQUEST_PAGE_SIZE", "0")
    monkeypatch.setenv("TASKQUEST_SYNC_SECONDS", "abc")
    monkeypatch.setenv("TASKQUEST_LOG_LEVEL", "debug")
    cfg = AppConfig.from_env()
    assert cfg.document_id == "household"
    assert cfg.quotes_api_key == "secret"
    assert cfg.page_size == 1
    assert cfg.sync_interval_seconds == 5
    assert cfg.log_level == logging.DEBUG


def test_unknown_log_level_falls_back(monkeypatch):
    monkeypatch.setenv("TASKQUEST_LOG_LEVEL", "chatty")
    assert AppConfig.from_env().log_level == logging.INFO


def test_get_config_is_cached(monkeypatch):
    first = get_config()
    monkeypatch.setenv("TASKQUEST_DOCUMENT_ID", "other")
    assert get_config() is first
    reset_config()
    assert get_config().document_id == "other"
