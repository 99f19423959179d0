"""Logging setup - stdlib logging rendered through Rich."""

import logging

from rich.logging import RichHandler

from .display import console

# Third-party loggers that are noisy below WARNING.
_QUIET_LOGGERS = ("googleapiclient.discovery_cache", "google_auth_oauthlib", "urllib3")


def configure_logging(level: str = "WARNING") -> None:
    """Route all log records to the shared Rich console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLogger().level))
