"""Trusted-markup capability and value stringification.

A value is trusted markup when it implements ``__html__``, the protocol
shared by markupsafe, Jinja2 and Django. Such values are known safe by
construction and are recognized without a registry lookup.
"""
from __future__ import annotations

from typing import Any

from markupsafe import Markup

#: Canonical trusted-markup type.
TrustedMarkup = Markup


class PlainText(str):
    """A string explicitly tagged as untrusted text."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"PlainText({str.__repr__(self)})"


def is_trusted_markup(value: Any) -> bool:
    """Return True if ``value`` carries the trusted-markup capability.

    Never stringifies ``value``.
    """
    return callable(getattr(value, "__html__", None))


def trusted(text: Any) -> Markup:
    """Wrap ``text`` as trusted markup without escaping it.

    Only use this for markup the caller composed itself.
    """
    return Markup(text)


def to_text(value: Any, charset: str = "utf-8") -> str:
    """Stringify ``value`` for escaping or registry lookup.

    Bytes are decoded strictly in ``charset`` and raise UnicodeDecodeError
    when invalid.
    """
    if value is None:
        return ""
    if is_trusted_markup(value):
        return str(value.__html__())
    if isinstance(value, str):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(charset)
    return str(value)


__all__ = ["PlainText", "TrustedMarkup", "is_trusted_markup", "to_text", "trusted"]
