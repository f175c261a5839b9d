#!filepath: src/pathx_ai/utils/logger.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.logging import RichHandler

_FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class LoggingSettings(BaseSettings):
    """Logging options read from .env and the environment.

    Attributes:
        log_dir: Directory for the rotating log file.
        level: Console level. The file always records DEBUG.
        file_name: Log file name.
        max_bytes: Size at which the file rotates, three backups are kept.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    log_dir: Path = Field(default=Path("data/logs"), validation_alias="PATHX_LOG_DIR")
    level: str = Field(default="INFO", validation_alias="PATHX_LOG_LEVEL")
    file_name: str = Field(default="pathx_ai.log", validation_alias="PATHX_LOG_FILE")
    max_bytes: int = Field(default=5_000_000, validation_alias="PATHX_LOG_MAX_BYTES")


@dataclass(slots=True)
class _Runtime:
    configured: bool = False


_runtime: _Runtime = _Runtime()


def configure_logging(*, settings: Optional[LoggingSettings] = None) -> None:
    """Install the console and file handlers on the root logger, once.

    Args:
        settings: Optional override, mostly for tests.
    """
    if _runtime.configured:
        return

    s = settings or LoggingSettings()
    s.log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    # provider errors can embed user text, keep markup off
    console = RichHandler(markup=False, show_path=False, log_time_format="[%X]")
    console.setLevel(getattr(logging, s.level.upper(), logging.INFO))
    console.setFormatter(logging.Formatter("%(message)s"))

    file_handler = RotatingFileHandler(
        filename=str(s.log_dir / s.file_name),
        maxBytes=int(s.max_bytes),
        backupCount=3,
        encoding="utf_8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))

    root.addHandler(console)
    root.addHandler(file_handler)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    _runtime.configured = True


def get_logger(name: str = "pathx_ai") -> logging.Logger:
    """Return a named logger, configuring logging on first use."""
    configure_logging()
    return logging.getLogger(name)
