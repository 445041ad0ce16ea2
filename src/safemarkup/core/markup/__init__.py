"""Safe-string tracking and contextual placeholder escaping.

Components:
- registry: SafeStringRegistry, the per-unit-of-work store of safe strings
- escaping: escape_html, strip_dangerous_protocols and friends
- tokenizer: linear lexer for @name, %name, :name and !name tokens
- formatter: PlaceholderFormatter applying per-sigil escaping
- snapshot: transfer format for carrying trust state between steps
- context: MarkupContext bundling a registry and formatter
- jinja: optional Jinja2 filters (import ``safemarkup.core.markup.jinja``)
"""
from __future__ import annotations

from .context import MarkupContext
from .escaping import (
    DEFAULT_ALLOWED_PROTOCOLS,
    check_plain,
    escape_html,
    filter_bad_protocol,
    strip_dangerous_protocols,
)
from .formatter import FormattedString, PlaceholderFormatter
from .registry import SafeStringRegistry
from .snapshot import SafeStringRecord, dumps, loads
from .strategies import Strategy
from .tokenizer import Literal, Placeholder, tokenize
from .values import PlainText, TrustedMarkup, is_trusted_markup, to_text, trusted

__all__ = [
    # Registry
    "SafeStringRegistry",
    "Strategy",
    # Values
    "PlainText",
    "TrustedMarkup",
    "is_trusted_markup",
    "to_text",
    "trusted",
    # Escaping
    "DEFAULT_ALLOWED_PROTOCOLS",
    "check_plain",
    "escape_html",
    "filter_bad_protocol",
    "strip_dangerous_protocols",
    # Formatting
    "FormattedString",
    "Literal",
    "Placeholder",
    "PlaceholderFormatter",
    "tokenize",
    # Transfer
    "SafeStringRecord",
    "dumps",
    "loads",
    # Scope
    "MarkupContext",
]
