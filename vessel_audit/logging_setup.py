"""Logging configuration helpers for the vessel audit dashboard."""

from __future__ import annotations

import logging

from .core_config import Settings

_NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def _resolve_level(level_name: str) -> int:
    return getattr(logging, level_name.upper(), logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure root logging using LOG_LEVEL and a concise format."""
    level = _resolve_level(settings.LOG_LEVEL)
    formatter = _build_formatter()
    root_logger = logging.getLogger()

    if root_logger.handlers:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
    else:
        logging.basicConfig(level=level)
        for handler in logging.getLogger().handlers:
            handler.setFormatter(formatter)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _build_formatter() -> logging.Formatter:
    pattern = "%(asctime)s | %(levelname)-8s | %(name)s | fetch=%(fetch_id)s | %(message)s"
    return logging.Formatter(pattern, datefmt="%Y-%m-%d %H:%M:%S", defaults={"fetch_id": "-"})
