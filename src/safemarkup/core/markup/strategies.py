"""Escaping strategies a safety mark can be recorded under."""
from __future__ import annotations

from enum import Enum
from typing import Union

from safemarkup.core.exceptions import UnknownStrategyError


class Strategy(str, Enum):
    """Output context a safety mark guarantees safety for.

    - HTML: safe when inserted into HTML body text.
    - ALL: safe under any escaping context; implies every other strategy.
    """

    HTML = "html"
    ALL = "all"

    @classmethod
    def coerce(cls, value: Union["Strategy", str]) -> "Strategy":
        """Return the member for ``value`` (a member or its name)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownStrategyError(
                f"Unknown escaping strategy: {value!r}",
                context={"strategy": str(value), "known": [s.value for s in cls]},
            ) from None


StrategyLike = Union[Strategy, str]

__all__ = ["Strategy", "StrategyLike"]
