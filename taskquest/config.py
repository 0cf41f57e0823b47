"""TaskQuest runtime configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from taskquest.config_utils import env_first, env_float, env_int, env_optional_str, env_str


DEFAULT_QUOTES_URL = "https://api.api-ninjas.com/v1/quotes"
DEFAULT_DOCUMENT_ID = "shared-user"


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class AppConfig:
    """Env-first configuration with local-dev defaults.

    Database selection:
    - TASKQUEST_DATABASE_URL: app-specific DB URL (preferred)
    - PLATFORM_DATABASE_URL / DATABASE_URL: shared DB URL
    - If none is set, defaults to local SQLite at data/taskquest.db

    Shared document:
    - TASKQUEST_DOCUMENT_ID: key of the single user document (default: shared-user)

    Quotes:
    - TASKQUEST_QUOTES_URL (default: API Ninjas quotes endpoint)
    - X_API_KEY: API key sent as the X-Api-Key header
    - TASKQUEST_QUOTES_TIMEOUT: request timeout in seconds (default: 10)

    UI:
    - TASKQUEST_PAGE_SIZE: items revealed per "load more" step (default: 20)
    - TASKQUEST_SYNC_SECONDS: live sync poll interval (default: 5)
    - TASKQUEST_TIMEZONE: timezone for form defaults (default: America/Chicago)

    Logging:
    - TASKQUEST_LOG_DIR (default: data/logs)
    - TASKQUEST_LOG_LEVEL (default: INFO)
    """

    database_url: str
    document_id: str

    quotes_url: str
    quotes_api_key: Optional[str]
    quotes_timeout_seconds: float

    page_size: int
    sync_interval_seconds: int
    timezone: str

    log_dir: str
    log_level: int

    @classmethod
    def from_env(cls) -> "AppConfig":
        db_url = env_first("TASKQUEST_DATABASE_URL", "PLATFORM_DATABASE_URL", "DATABASE_URL")
        if not db_url:
            data_dir = _repo_root() / "data"
            data_dir.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{(data_dir / 'taskquest.db').as_posix()}"

        log_dir = env_optional_str("TASKQUEST_LOG_DIR") or str(_repo_root() / "data" / "logs")
        level_name = env_str("TASKQUEST_LOG_LEVEL", "INFO").upper()
        log_level = logging.getLevelName(level_name)
        if not isinstance(log_level, int):
            log_level = logging.INFO

        return cls(
            database_url=db_url,
            document_id=env_str("TASKQUEST_DOCUMENT_ID", DEFAULT_DOCUMENT_ID) or DEFAULT_DOCUMENT_ID,
            quotes_url=env_str("TASKQUEST_QUOTES_URL", DEFAULT_QUOTES_URL),
            quotes_api_key=env_optional_str("X_API_KEY"),
            quotes_timeout_seconds=max(1.0, env_float("TASKQUEST_QUOTES_TIMEOUT", 10.0)),
            page_size=env_int("TASKQUEST_PAGE_SIZE", 20, minimum=1),
            sync_interval_seconds=env_int("TASKQUEST_SYNC_SECONDS", 5, minimum=1),
            timezone=env_str("TASKQUEST_TIMEZONE", "America/Chicago"),
            log_dir=log_dir,
            log_level=log_level,
        )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the app configuration (cached)."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    global _config
    _config = None
