"""Jinja2 integration.

Makes an autoescaping Jinja2 environment aware of a registry, so strings
already known to be markup are not escaped a second time:

    env = Environment(autoescape=True)
    install(env, registry)

    {{ value }}                                   {# registry-safe strings pass #}
    {{ value|safe_escape }}                       {# explicit escape filter #}
    {{ "Hi %name"|format_placeholders({"%name": user}) }}
"""
from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from jinja2 import Environment
from markupsafe import Markup

from .escaping import escape_html
from .formatter import PlaceholderFormatter
from .registry import SafeStringRegistry
from .strategies import Strategy
from .values import is_trusted_markup, to_text


def registry_escape(registry: SafeStringRegistry, *, charset: Optional[str] = None) -> Callable[[Any], Markup]:
    """Build an escape filter that consults ``registry`` first."""

    def safe_escape(value: Any) -> Markup:
        if is_trusted_markup(value):
            return Markup(value.__html__())
        if registry.is_safe(value, Strategy.HTML):
            return Markup(to_text(value))
        return Markup(escape_html(value, registry, charset=charset))

    return safe_escape


def registry_finalize(registry: SafeStringRegistry, inner: Optional[Callable[[Any], Any]] = None) -> Callable[[Any], Any]:
    """Build an ``Environment.finalize`` that turns registry-safe strings into Markup."""

    def finalize(value: Any) -> Any:
        if inner is not None:
            value = inner(value)
        if isinstance(value, str) and not is_trusted_markup(value) and registry.is_safe(value, Strategy.HTML):
            return Markup(value)
        return value

    return finalize


def install(
    env: Environment,
    registry: SafeStringRegistry,
    *,
    formatter: Optional[PlaceholderFormatter] = None,
) -> Environment:
    """Register the ``safe_escape`` and ``format_placeholders`` filters on ``env``.

    Also wraps ``env.finalize`` so registry-safe strings skip autoescaping.
    """
    formatter = formatter or PlaceholderFormatter(registry)

    def format_placeholders(template: str, args: Mapping[str, Any]) -> Any:
        return formatter.format_markup(template, args)

    env.filters["safe_escape"] = registry_escape(registry, charset=formatter.charset)
    env.filters["format_placeholders"] = format_placeholders
    env.finalize = registry_finalize(registry, env.finalize)
    return env


__all__ = ["install", "registry_escape", "registry_finalize"]
