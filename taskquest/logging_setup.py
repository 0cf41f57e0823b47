from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from taskquest.config import AppConfig, get_config

_CONFIGURED = False


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while Streamlit reruns the script:
    - allow taskquest logs at the configured level
    - the live-sync watcher only at WARNING+ (it polls constantly)
    - third-party libraries only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("taskquest"):
            if name.startswith("taskquest.store.watcher"):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: Union[str, Path, None] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with a filtered console handler and, when ``log_dir``
    is given, a file handler with everything.

    Streamlit executes page scripts on every interaction, so this is
    idempotent: only the first call installs handlers.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path / "taskquest.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _CONFIGURED = True


def configure_from(config: Optional[AppConfig] = None) -> None:
    cfg = config or get_config()
    setup_logging(log_dir=cfg.log_dir, console_level=cfg.log_level)
