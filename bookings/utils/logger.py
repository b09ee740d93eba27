"""Process logging for the booking engine."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from bookings.utils.config import Settings, get_settings


_LOGGER_INITIALIZED = False

# python-multipart logs every parsed form part at DEBUG.
_NOISY_LOGGERS = ("multipart", "python_multipart")


def build_log_format(settings: Settings) -> str:
    return f"%(asctime)s | %(levelname)s | {settings.app_name} | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    Search, room choice and commit all log through one stdout handler tagged
    with the app name. Form-parser chatter stays at WARNING even when the
    booking engine itself runs at DEBUG.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format=build_log_format(settings),
        stream=sys.stdout,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)
