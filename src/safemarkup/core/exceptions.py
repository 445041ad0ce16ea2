from __future__ import annotations

from typing import Any, Dict, Mapping


class SafeMarkupError(Exception):
    """Base exception for the safe-markup engine."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class UnsafeMarkingError(SafeMarkupError, ValueError):
    """Raised when a safety mark is written with anything but the literal True."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        SafeMarkupError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class UnknownStrategyError(SafeMarkupError, ValueError):
    """Raised for an escaping strategy name that is not recognized."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        SafeMarkupError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class MissingPlaceholderError(SafeMarkupError, LookupError):
    """Raised when a template references a token absent from the argument map."""

    def __init__(
        self,
        message: str = "",
        *,
        token: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if token:
            ctx["token"] = token
        SafeMarkupError.__init__(self, message, context=ctx)
        LookupError.__init__(self, message)
        self.token = token


class SnapshotFormatError(SafeMarkupError, ValueError):
    """Raised when a serialized registry snapshot cannot be decoded."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        SafeMarkupError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class ConfigError(SafeMarkupError):
    """Raised when configuration cannot be loaded or fails schema validation."""


__all__ = [
    "SafeMarkupError",
    "UnsafeMarkingError",
    "UnknownStrategyError",
    "MissingPlaceholderError",
    "SnapshotFormatError",
    "ConfigError",
]
