"""Logging configuration module."""

from __future__ import annotations

import logging

from closet.config.settings import ClosetSettings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Client libraries that log every request at INFO/DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def resolve_level(name: str | None) -> int:
    """Map a level name such as ``"debug"`` to its numeric value, defaulting to INFO."""

    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: ClosetSettings | None = None, *, level: str | None = None) -> int:
    """Configure the root logger for the closet pipeline and return the level in effect.

    ``level`` overrides ``settings.log_level``. Request logging of the HTTP
    clients is kept at WARNING unless the pipeline itself runs at DEBUG.
    """

    settings = settings or get_settings()
    effective = resolve_level(level or settings.log_level)
    logging.basicConfig(level=effective, format=LOG_FORMAT)
    client_level = logging.DEBUG if effective <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(client_level)
    return effective
