"""Runtime configuration: defaults, .env file, environment, CLI overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .constants import (
    ATTACHMENTS_DIR_NAME,
    CREDENTIALS_PATH,
    DEFAULT_OUTPUT_ROOT,
    ENV_FILE_PATH,
    PAGE_SIZE,
    STATE_FILE_NAME,
    TOKEN_PATH,
    WORKBOOK_NAME,
)

ENV_PREFIX = "MAIL_TRACKER_"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when required settings are missing or invalid."""


@dataclass
class TrackerConfig:
    output_root: Path = DEFAULT_OUTPUT_ROOT
    credentials_path: Path = CREDENTIALS_PATH
    token_path: Path = TOKEN_PATH
    query: str = ""
    page_size: int = PAGE_SIZE
    max_messages: int | None = None
    log_level: str = "WARNING"

    @property
    def workbook_path(self) -> Path:
        return self.output_root / WORKBOOK_NAME

    @property
    def attachments_dir(self) -> Path:
        return self.output_root / ATTACHMENTS_DIR_NAME

    @property
    def state_path(self) -> Path:
        return self.output_root / STATE_FILE_NAME

    def validate(self) -> None:
        """Fail fast, before any network or file activity."""
        if not self.credentials_path.exists() and not self.token_path.exists():
            raise ConfigError(
                f"Credentials file not found at {self.credentials_path}.\n"
                "Download your OAuth client credentials from the Google Cloud Console "
                "and save them there, or set "
                f"{ENV_PREFIX}CREDENTIALS to their location."
            )
        if self.page_size <= 0:
            raise ConfigError(f"Page size must be a positive integer, got {self.page_size}")
        if self.max_messages is not None and self.max_messages <= 0:
            raise ConfigError(f"Max messages must be a positive integer, got {self.max_messages}")


def _env(name: str) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    return value.strip() if value and value.strip() else None


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from exc


def load_config(env_file: Path | None = None, **overrides) -> TrackerConfig:
    """Build the configuration.

    Precedence, lowest first: built-in defaults, the .env file
    (``~/.mail-topic-tracker/.env`` unless another one is given),
    ``MAIL_TRACKER_*`` environment variables, then keyword overrides
    whose value is not None (typically CLI options).
    """
    load_dotenv(env_file or ENV_FILE_PATH, override=False)

    output_root = _env("OUTPUT_ROOT")
    credentials = _env("CREDENTIALS")
    token = _env("TOKEN")

    config = TrackerConfig(
        output_root=Path(output_root).expanduser() if output_root else DEFAULT_OUTPUT_ROOT,
        credentials_path=Path(credentials).expanduser() if credentials else CREDENTIALS_PATH,
        token_path=Path(token).expanduser() if token else TOKEN_PATH,
        query=_env("QUERY") or "",
        page_size=_env_int("PAGE_SIZE", PAGE_SIZE),
        log_level=_env("LOG_LEVEL") or "WARNING",
    )

    for key, value in overrides.items():
        if value is None:
            continue
        if not hasattr(config, key):
            raise ConfigError(f"Unknown setting {key!r}")
        if key in ("output_root", "credentials_path", "token_path"):
            value = Path(value).expanduser()
        setattr(config, key, value)

    if config.log_level.upper() not in _LOG_LEVELS:
        raise ConfigError(f"Unknown log level {config.log_level!r}")

    logging.getLogger(__name__).debug("Configuration: %s", config)
    return config
