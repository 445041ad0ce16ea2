"""Unit-of-work scope for the safe-markup engine.

Each request or batch step owns one MarkupContext. Contexts never share a
registry; trust state moves between them only via export/import.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, TYPE_CHECKING

from .formatter import FormattedString, PlaceholderFormatter
from .registry import SafeStringRegistry, SnapshotLike
from .snapshot import SafeStringRecord, dumps, loads

if TYPE_CHECKING:
    from safemarkup.core.config import MarkupConfig

logger = logging.getLogger(__name__)


@dataclass
class MarkupContext:
    """A registry plus a formatter bound to it."""

    registry: SafeStringRegistry
    formatter: PlaceholderFormatter
    config: Optional["MarkupConfig"] = None

    @classmethod
    def create(
        cls,
        config: Optional["MarkupConfig"] = None,
        snapshot: Optional[SnapshotLike] = None,
    ) -> "MarkupContext":
        """Start a unit of work, optionally resuming a previous step's snapshot.

        Args:
            config: Settings to build the formatter from. Built-in defaults
                are used when omitted.
            snapshot: Output of a previous :meth:`export` (records, pairs or
                the ``get_all`` mapping), or its JSON form from :meth:`dumps`.
        """
        registry = SafeStringRegistry(config.default_strategy if config is not None else "html")
        if snapshot is not None:
            if isinstance(snapshot, str):
                snapshot = loads(snapshot)
            registry.import_all(snapshot)
            logger.debug("Resumed markup context with %d safe strings", len(registry))
        return cls(registry=registry, formatter=PlaceholderFormatter(registry, config=config), config=config)

    def format(self, template: str, args: Mapping[str, Any]) -> FormattedString:
        return self.formatter.format(template, args)

    def is_safe(self, value: Any, strategy: Optional[str] = None) -> bool:
        return self.registry.is_safe(value, strategy)

    def export(self) -> List[SafeStringRecord]:
        return self.registry.export_all()

    def dumps(self) -> str:
        """Serialize the registry for the next step of a batch operation."""
        return dumps(self.registry.export_all())

    def fork(self) -> "MarkupContext":
        """Return an independent context seeded with this one's trust state."""
        registry = self.registry.copy()
        return MarkupContext(
            registry=registry,
            formatter=PlaceholderFormatter(
                registry,
                charset=self.formatter.charset,
                allowed_protocols=self.formatter.allowed_protocols,
                placeholder_wrapper=self.formatter.placeholder_wrapper,
            ),
            config=self.config,
        )


__all__ = ["MarkupContext"]
