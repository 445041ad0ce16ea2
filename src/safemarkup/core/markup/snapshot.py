"""Registry transfer format.

A snapshot is the ordered list of every (value, strategies) pair a registry
holds. It is what a multi-step operation carries from one unit of work to the
next so trust state does not have to be re-derived.

Wire form (JSON)::

    {"version": 1,
     "safeStrings": [{"value": "&lt;b&gt;", "strategies": {"html": true}}]}
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from safemarkup.core.exceptions import SnapshotFormatError, UnsafeMarkingError

from .strategies import Strategy

SNAPSHOT_VERSION = 1


def validate_markings(markings: Any) -> FrozenSet[Strategy]:
    """Validate a ``{strategy: True}`` mapping and return its strategies.

    Raises:
        UnsafeMarkingError: if ``markings`` is not a mapping or any marking is
            not the literal True.
        UnknownStrategyError: for an unrecognized strategy name.
    """
    if not isinstance(markings, Mapping):
        raise UnsafeMarkingError(
            "Safe string markings must be a mapping of strategy to True",
            context={"type": type(markings).__name__},
        )
    strategies = set()
    for name, marking in markings.items():
        strategy = Strategy.coerce(name)
        if marking is not True:
            # Danger - something is very wrong.
            raise UnsafeMarkingError(
                "Only the value True is accepted for safe strings",
                context={"strategy": strategy.value, "marking": repr(marking)},
            )
        strategies.add(strategy)
    return frozenset(strategies)


def ordered(strategies: Iterable[Strategy]) -> List[Strategy]:
    """Return ``strategies`` in declaration order."""
    present = set(strategies)
    return [s for s in Strategy if s in present]


@dataclass(frozen=True)
class SafeStringRecord:
    """One exported registry entry."""

    value: str
    strategies: FrozenSet[Strategy]

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", str(self.value))
        object.__setattr__(
            self, "strategies", frozenset(Strategy.coerce(s) for s in self.strategies)
        )

    @property
    def markings(self) -> Dict[str, bool]:
        return {s.value: True for s in ordered(self.strategies)}

    def as_pair(self) -> Tuple[str, Dict[str, bool]]:
        return self.value, self.markings

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "strategies": self.markings}

    @classmethod
    def from_markings(cls, value: Any, markings: Any) -> "SafeStringRecord":
        text = str(value)
        return cls(value=text, strategies=validate_markings(markings))

    @classmethod
    def from_dict(cls, data: Any) -> "SafeStringRecord":
        if not isinstance(data, Mapping) or "value" not in data or "strategies" not in data:
            raise SnapshotFormatError(
                "Snapshot entries must be objects with 'value' and 'strategies'",
                context={"entry": repr(data)[:80]},
            )
        if not isinstance(data["value"], str):
            raise SnapshotFormatError(
                "Snapshot entry 'value' must be a string",
                context={"type": type(data["value"]).__name__},
            )
        return cls.from_markings(data["value"], data["strategies"])


def dumps(records: Iterable[SafeStringRecord]) -> str:
    """Serialize ``records`` to the JSON wire form."""
    payload = {
        "version": SNAPSHOT_VERSION,
        "safeStrings": [record.to_dict() for record in records],
    }
    return json.dumps(payload, ensure_ascii=False)


def loads(text: str) -> List[SafeStringRecord]:
    """Decode the JSON wire form produced by :func:`dumps`."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotFormatError(f"Snapshot is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise SnapshotFormatError("Snapshot must be a JSON object")
    version = payload.get("version")
    if version != SNAPSHOT_VERSION:
        raise SnapshotFormatError(
            f"Unsupported snapshot version: {version!r}",
            context={"expected": SNAPSHOT_VERSION},
        )
    entries = payload.get("safeStrings")
    if not isinstance(entries, list):
        raise SnapshotFormatError("Snapshot 'safeStrings' must be a list")
    return [SafeStringRecord.from_dict(entry) for entry in entries]


__all__ = [
    "SNAPSHOT_VERSION",
    "SafeStringRecord",
    "dumps",
    "loads",
    "ordered",
    "validate_markings",
]
