"""Logging setup for applications embedding safemarkup.

The library itself only creates module loggers; nothing is configured on
import. Values flowing through the engine are never logged.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "safemarkup"

_INSTALLED_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: Optional[str] = None, *, stream: Optional[TextIO] = None) -> logging.Logger:
    """Attach one stream handler to the ``safemarkup`` logger.

    Idempotent per-process: calling again replaces the handler installed by
    the previous call. ``level`` defaults to ``logging.level`` from config.
    """
    global _INSTALLED_HANDLER

    if level is None:
        from safemarkup.core.config import MarkupConfig

        level = MarkupConfig().log_level

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level_from_name(level))

    if _INSTALLED_HANDLER is not None:
        logger.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    _INSTALLED_HANDLER = handler
    return logger


__all__ = ["LOGGER_NAME", "configure_logging"]
