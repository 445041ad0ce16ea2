"""Placeholder formatter.

Replaces typed placeholder tokens in a template with escaped argument values.
The sigil says where a value is going, and the formatter picks the escaping:

- ``@name``: escaped to HTML unless the value is already safe. The default
  choice for anything displayed in body text.
- ``%name``: escaped like ``@name``, then wrapped in emphasis markup
  (``<em class="placeholder">...</em>`` by default).
- ``:name``: escaped to HTML and stripped of dangerous URI schemes unless the
  value is already safe. For ``href``/``src`` values, always inside quotes.
  The result is free of script-executing schemes but is not guaranteed to be
  a well-formed URL.
- ``!name``: inserted verbatim. Only for values that are already complete
  markup, or for non-HTML output. Unless the value is itself known safe, the
  whole result is reported as not safe and is not registered.

Values that are already safe when the call starts are passed through as-is
in ``@``, ``%`` and ``:`` slots, without re-validation. In particular a
string marked safe under ``html`` (for example by escaping it in an earlier
``@`` slot) and placed in a ``:`` slot keeps any scheme it has.

Strings escaped during a call are registered only after every token has
been substituted, so no occurrence is affected by another occurrence of the
same call. A ``:`` value is registered in its stripped form only.

The template itself is never escaped; any untrusted content must arrive
through arguments.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union, TYPE_CHECKING

from markupsafe import Markup

from safemarkup.core.exceptions import MissingPlaceholderError

from .escaping import DEFAULT_ALLOWED_PROTOCOLS, DEFAULT_CHARSET, escape_html, strip_dangerous_protocols
from .registry import SafeStringRegistry
from .strategies import Strategy
from .tokenizer import Literal, tokenize
from .values import to_text

if TYPE_CHECKING:
    from safemarkup.core.config import MarkupConfig

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_WRAPPER = ('<em class="placeholder">', "</em>")


class Substitution(NamedTuple):
    """Text produced for one token."""

    text: str
    # Whether ``text`` is known safe markup.
    is_safe: bool
    # Freshly escaped string to register once the call completes.
    escaped: Optional[str] = None


SigilHandler = Callable[[Any], Substitution]


class FormattedString(NamedTuple):
    """Result of :meth:`PlaceholderFormatter.format`."""

    output: str
    is_safe: bool

    def __str__(self) -> str:
        return self.output


class PlaceholderFormatter:
    """Format placeholder templates against one registry.

    Example:
        formatter = PlaceholderFormatter(SafeStringRegistry())
        formatter.format("Hello @name", {"@name": "<b>"})
        # FormattedString(output='Hello &lt;b&gt;', is_safe=True)
    """

    def __init__(
        self,
        registry: SafeStringRegistry,
        *,
        config: Optional["MarkupConfig"] = None,
        charset: Optional[str] = None,
        allowed_protocols: Optional[Iterable[str]] = None,
        placeholder_wrapper: Optional[Tuple[str, str]] = None,
    ) -> None:
        self.registry = registry
        if config is not None:
            charset = charset or config.charset
            if allowed_protocols is None:
                allowed_protocols = config.allowed_protocols
            placeholder_wrapper = placeholder_wrapper or config.placeholder_wrapper
        self.charset = charset or DEFAULT_CHARSET
        self.allowed_protocols = tuple(
            allowed_protocols if allowed_protocols is not None else DEFAULT_ALLOWED_PROTOCOLS
        )
        self.placeholder_wrapper = placeholder_wrapper or DEFAULT_PLACEHOLDER_WRAPPER
        self._handlers: Dict[str, SigilHandler] = {
            "@": self._escape_text,
            "%": self._emphasize,
            ":": self._escape_url,
            "!": self._insert_raw,
        }

    # ---- sigil handlers ----

    def _escape_text(self, value: Any) -> Substitution:
        if self.registry.is_safe(value, Strategy.HTML):
            return Substitution(to_text(value, self.charset), True)
        escaped = escape_html(value, charset=self.charset)
        return Substitution(escaped, True, escaped)

    def _emphasize(self, value: Any) -> Substitution:
        inner = self._escape_text(value)
        open_tag, close_tag = self.placeholder_wrapper
        return inner._replace(text=f"{open_tag}{inner.text}{close_tag}")

    def _escape_url(self, value: Any) -> Substitution:
        if self.registry.is_safe(value, Strategy.HTML):
            return Substitution(to_text(value, self.charset), True)
        # The escaped input may still carry a scheme; only the stripped form is registered.
        stripped = strip_dangerous_protocols(escape_html(value, charset=self.charset), self.allowed_protocols)
        return Substitution(stripped, True, stripped)

    def _insert_raw(self, value: Any) -> Substitution:
        return Substitution(to_text(value, self.charset), self.registry.is_safe(value, Strategy.HTML))

    # ---- public API ----

    def format(self, template: str, args: Mapping[str, Any]) -> FormattedString:
        """Substitute every placeholder in ``template`` from ``args``.

        Tokens are replaced in one left-to-right pass, each argument escaped
        on its own against the registry as it stood when the call started.
        Where argument keys overlap, the longest key matching at a position
        wins. Unused ``args`` entries are ignored.

        Returns:
            FormattedString whose ``is_safe`` is True unless a ``!`` value
            was not already known safe. Escaped argument values are
            registered under ``html``, and so is the output when it is safe.

        Raises:
            MissingPlaceholderError: a token in ``template`` has no entry in
                ``args``. Nothing is registered in that case.
        """
        safe = True
        pieces: List[str] = []
        fresh: List[str] = []
        for part in tokenize(to_text(template), args):
            if isinstance(part, Literal):
                pieces.append(part.text)
                continue
            key = part.key
            if key not in args:
                raise MissingPlaceholderError(
                    f"Placeholder {key} has no replacement value",
                    token=key,
                    context={"available": sorted(str(k) for k in args)},
                )
            substitution = self._handlers[part.sigil](args[key])
            if not substitution.is_safe:
                if safe:
                    logger.debug("Raw placeholder %s is not known safe; result will not be marked safe", key)
                safe = False
            if substitution.escaped is not None:
                fresh.append(substitution.escaped)
            pieces.append(substitution.text)

        for escaped in fresh:
            self.registry.mark_safe(escaped, Strategy.HTML)
        output = "".join(pieces)
        if safe:
            self.registry.mark_safe(output, Strategy.HTML)
        return FormattedString(output, safe)

    def format_markup(self, template: str, args: Mapping[str, Any]) -> Union[Markup, str]:
        """Format ``template`` and return Markup when the result is safe.

        Autoescaping renderers leave Markup alone, so safe results are not
        escaped again while unsafe ones still are.
        """
        output, safe = self.format(template, args)
        return Markup(output) if safe else output


__all__ = ["DEFAULT_PLACEHOLDER_WRAPPER", "FormattedString", "PlaceholderFormatter", "Substitution"]
