"""Markup configuration domain.

MarkupConfig is the accessor for the ``markup`` and ``logging`` sections.
"""
from __future__ import annotations

from functools import cached_property
from typing import Any, Dict, Optional, Tuple

from .manager import ConfigManager


class MarkupConfig:
    """Typed view over the merged configuration.

    Usage:
        cfg = MarkupConfig()
        cfg.charset            # "utf-8"
        cfg.allowed_protocols  # ("http", "https", ...)
    """

    def __init__(self, manager: Optional[ConfigManager] = None) -> None:
        self._manager = manager or ConfigManager()

    @cached_property
    def _config(self) -> Dict[str, Any]:
        return self._manager.load_config()

    @cached_property
    def section(self) -> Dict[str, Any]:
        return self._config.get("markup", {}) or {}

    @cached_property
    def charset(self) -> str:
        return str(self.section["charset"])

    @cached_property
    def default_strategy(self) -> str:
        return str(self.section["defaultStrategy"])

    @cached_property
    def allowed_protocols(self) -> Tuple[str, ...]:
        return tuple(str(p).lower() for p in self.section["allowedProtocols"])

    @cached_property
    def placeholder_wrapper(self) -> Tuple[str, str]:
        """Open/close markup wrapped around ``%name`` values."""
        wrapper = self.section["placeholder"]
        return str(wrapper["open"]), str(wrapper["close"])

    @cached_property
    def log_level(self) -> str:
        return str((self._config.get("logging") or {}).get("level", "WARNING"))


__all__ = ["MarkupConfig"]
