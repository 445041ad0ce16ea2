"""safemarkup configuration system.

Usage:
    from safemarkup.core.config import ConfigManager, MarkupConfig

    manager = ConfigManager(config_dir=Path("/path/to/project/config"))
    config = manager.load_config()

    markup = MarkupConfig(manager)
    markup.allowed_protocols
"""
from __future__ import annotations

from .manager import ConfigManager, ENV_PREFIX
from .markup import MarkupConfig

__all__ = ["ConfigManager", "ENV_PREFIX", "MarkupConfig"]
