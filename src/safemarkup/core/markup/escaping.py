"""Escaping primitives.

Both primitives either fully succeed or fully fail: there is no mode in which
part of a string is escaped and part left raw.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from markupsafe import Markup, escape

from .strategies import Strategy
from .values import to_text

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"

DEFAULT_ALLOWED_PROTOCOLS = (
    "http",
    "https",
    "ftp",
    "news",
    "nntp",
    "tel",
    "telnet",
    "mailto",
    "irc",
    "ssh",
    "sftp",
    "webcal",
    "rtsp",
)


def _validated_text(text: Any, charset: str) -> Optional[str]:
    """Return ``text`` as a str that is well-formed in ``charset``, else None."""
    try:
        value = to_text(text, charset)
        # Lone surrogates and unencodable characters fail here.
        value.encode(charset)
    except UnicodeError:
        return None
    return value


def escape_html(text: Any, registry: Any = None, *, charset: Optional[str] = None) -> str:
    """Encode ``& < > " '`` in ``text`` for display as HTML.

    ``text`` must be well-formed in ``charset`` (default utf-8). Invalid input
    (undecodable bytes, lone surrogates, characters the charset cannot
    represent) yields an empty string instead of raising, since this runs
    inline during output generation and the input is untrusted anyway.

    On success the escaped string is registered safe under ``html`` in
    ``registry`` when one is given. Trusted markup is escaped like any other
    text; use the formatter or ``registry.is_safe`` to pass it through.
    """
    value = _validated_text(text, charset or DEFAULT_CHARSET)
    if value is None:
        logger.warning(
            "Refusing to escape text that is not valid %s; emitting empty string",
            charset or DEFAULT_CHARSET,
        )
        return ""
    escaped = str(escape(value))
    if registry is not None:
        registry.mark_safe(escaped, Strategy.HTML)
    return escaped


def check_plain(text: Any, registry: Any, *, charset: Optional[str] = None) -> str:
    """Escape ``text`` and record the result as safe markup in ``registry``."""
    return escape_html(text, registry, charset=charset)


def strip_dangerous_protocols(uri: Any, allowed_protocols: Optional[Iterable[str]] = None) -> str:
    """Strip URI schemes that are not in ``allowed_protocols``.

    The leading scheme (text before the first colon) is removed repeatedly
    until the value is stable, so ``javascript:javascript:x`` loses both.
    A colon after the first ``/``, ``?`` or ``#`` is part of a path, query or
    fragment and does not start a scheme. Schemes compare case-insensitively.

    This does not validate that the result is a well-formed URL.

    Example:
        >>> strip_dangerous_protocols("javascript:alert(1)")
        'alert(1)'
        >>> strip_dangerous_protocols("https://example.com/a:b")
        'https://example.com/a:b'
    """
    allowed = frozenset(
        p.lower() for p in (allowed_protocols if allowed_protocols is not None else DEFAULT_ALLOWED_PROTOCOLS)
    )
    value = to_text(uri)
    while True:
        before = value
        colon = value.find(":")
        if colon > 0:
            protocol = value[:colon]
            if any(c in protocol for c in "/?#"):
                break
            if protocol.lower() not in allowed:
                value = value[colon + 1:]
        if value == before:
            break
    return value


def filter_bad_protocol(
    uri: Any,
    registry: Any = None,
    *,
    allowed_protocols: Optional[Iterable[str]] = None,
    charset: Optional[str] = None,
) -> str:
    """Make an already-encoded URI attribute value safe.

    Entities are decoded first so encoded schemes such as ``javascript&#58;``
    are seen, dangerous protocols are stripped, and the result is escaped
    (and registered, when ``registry`` is given).
    """
    decoded = Markup(to_text(uri)).unescape()
    return escape_html(
        strip_dangerous_protocols(decoded, allowed_protocols),
        registry,
        charset=charset,
    )


__all__ = [
    "DEFAULT_ALLOWED_PROTOCOLS",
    "DEFAULT_CHARSET",
    "check_plain",
    "escape_html",
    "filter_bad_protocol",
    "strip_dangerous_protocols",
]
