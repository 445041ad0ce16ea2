"""Safe-string registry.

Records which exact string values are known to be valid markup, and under
which escaping strategy. Consulted before escaping so that known markup is
not escaped twice while unknown values always are.

A registry is scoped to one unit of work (a request, or one step of a batch
operation). Marks are global for the rest of that unit of work, so only
complete, valid markup may be marked safe: never partial markup such as
``"<"`` or ``"<script>"``.

Lifecycle::

    registry = SafeStringRegistry()        # create
    registry.is_safe(value)                # use
    records = registry.export_all()        # export (optional)
    next_registry.import_all(records)      # hand off to the next step
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple, Union

from .snapshot import SafeStringRecord, ordered, validate_markings
from .strategies import Strategy, StrategyLike
from .values import is_trusted_markup, to_text

logger = logging.getLogger(__name__)

SnapshotLike = Union[
    Mapping[str, Mapping[str, bool]],
    Iterable[Union[SafeStringRecord, Tuple[str, Mapping[str, bool]]]],
]


class SafeStringRegistry:
    """Content-addressed store of safe strings for one unit of work.

    Entries are additive only: a string marked safe is never unmarked, and
    only the literal True is accepted as a marking.
    """

    def __init__(self, default_strategy: StrategyLike = Strategy.HTML) -> None:
        self._safe_strings: Dict[str, Set[Strategy]] = {}
        self.default_strategy = Strategy.coerce(default_strategy)

    def is_safe(self, value: Any, strategy: StrategyLike | None = None) -> bool:
        """Return True if ``value`` is known safe under ``strategy``.

        Trusted markup is recognized by capability before any cast to text.
        Otherwise the string content must be registered under ``strategy``
        or under ``all``.
        """
        if is_trusted_markup(value):
            return True
        if value is None:
            return False
        wanted = Strategy.coerce(strategy) if strategy is not None else self.default_strategy
        try:
            key = to_text(value)
        except UnicodeDecodeError:
            return False
        marks = self._safe_strings.get(key)
        if not marks:
            return False
        return wanted in marks or Strategy.ALL in marks

    def mark_safe(
        self,
        value: Any,
        strategy: StrategyLike | None = None,
        marking: Any = True,
    ) -> None:
        """Register ``value``'s string content as safe under ``strategy``.

        For internal use by escaping and formatting code. Raises
        UnsafeMarkingError for any ``marking`` other than the literal True.
        """
        wanted = Strategy.coerce(strategy) if strategy is not None else self.default_strategy
        validate_markings({wanted.value: marking})
        self._safe_strings.setdefault(to_text(value), set()).add(wanted)

    def set_multiple(self, safe_strings: Mapping[Any, Mapping[str, bool]]) -> None:
        """Add ``{string: {strategy: True}}`` entries, as returned by :meth:`get_all`.

        Every entry is validated before any is written.
        """
        self._merge(
            [SafeStringRecord.from_markings(value, markings) for value, markings in safe_strings.items()]
        )

    def import_all(self, snapshot: SnapshotLike) -> None:
        """Merge a snapshot previously produced by :meth:`export_all`.

        Accepts records, ``(value, {strategy: True})`` pairs, or the
        :meth:`get_all` mapping. The merge is an additive union; nothing is
        written if any entry is invalid.
        """
        if isinstance(snapshot, Mapping):
            self.set_multiple(snapshot)
            return
        records: List[SafeStringRecord] = []
        for entry in snapshot:
            if isinstance(entry, SafeStringRecord):
                records.append(entry)
            else:
                value, markings = entry
                records.append(SafeStringRecord.from_markings(value, markings))
        self._merge(records)

    def _merge(self, records: List[SafeStringRecord]) -> None:
        for record in records:
            self._safe_strings.setdefault(record.value, set()).update(record.strategies)
        logger.debug("Merged %d safe string entries (registry size %d)", len(records), len(self))

    def export_all(self) -> List[SafeStringRecord]:
        """Return every entry, in first-registration order."""
        return [
            SafeStringRecord(value=value, strategies=frozenset(marks))
            for value, marks in self._safe_strings.items()
        ]

    def get_all(self) -> Dict[str, Dict[str, bool]]:
        """Return every entry as ``{string: {strategy: True}}``."""
        return {
            value: {s.value: True for s in ordered(marks)}
            for value, marks in self._safe_strings.items()
        }

    def copy(self) -> "SafeStringRegistry":
        """Return an independent registry holding the same entries."""
        clone = SafeStringRegistry(self.default_strategy)
        clone._merge(self.export_all())
        return clone

    def clear(self) -> None:
        """Drop every entry, starting a new unit of work."""
        self._safe_strings.clear()

    def __contains__(self, value: Any) -> bool:
        return self.is_safe(value)

    def __len__(self) -> int:
        return len(self._safe_strings)

    def __repr__(self) -> str:
        return f"SafeStringRegistry(entries={len(self)})"


__all__ = ["SafeStringRegistry", "SnapshotLike"]
