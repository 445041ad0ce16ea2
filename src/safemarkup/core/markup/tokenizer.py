"""Placeholder lexer.

A placeholder token is a sigil (``@``, ``%``, ``:`` or ``!``) followed by a
name. Tokens are resolved in two ways, in this order:

1. Known keys: when the caller supplies the argument keys, any key that
   matches at a sigil is a token, wherever it appears (``x@name``,
   ``@site-name``). Where keys overlap, the longest one wins, so
   ``@site-name`` beats ``@site``.
2. Identifier runs: otherwise a sigil immediately followed by a run of
   identifier characters (ASCII letters, digits and underscore) is a token,
   unless the sigil directly follows an identifier character in literal
   text (``user@example.com``, ``10:30``). These are the tokens a caller
   forgot to map.

A sigil that matches neither rule is literal text. The scan is a single
left-to-right pass; at each sigil only the keys for that sigil are tried.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple, Union

SIGILS = frozenset("@%:!")

_IDENT_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


@dataclass(frozen=True)
class Literal:
    """Template text copied to the output unchanged."""

    text: str


@dataclass(frozen=True)
class Placeholder:
    """A ``sigil + name`` token to be replaced by its argument."""

    sigil: str
    name: str

    @property
    def key(self) -> str:
        return self.sigil + self.name


Part = Union[Literal, Placeholder]


def is_identifier_char(char: str) -> bool:
    return char in _IDENT_CHARS


def _keys_by_sigil(keys: Iterable[object]) -> Dict[str, List[str]]:
    grouped: Dict[str, List[str]] = {}
    for key in keys:
        if isinstance(key, str) and len(key) > 1 and key[0] in SIGILS:
            grouped.setdefault(key[0], []).append(key)
    for candidates in grouped.values():
        candidates.sort(key=len, reverse=True)
    return grouped


def tokenize(template: str, keys: Iterable[object] = ()) -> Tuple[Part, ...]:
    """Split ``template`` into literal runs and placeholder tokens.

    Args:
        template: Text containing placeholder tokens.
        keys: Argument keys (full token text, e.g. ``"@name"``) to match
            before falling back to identifier runs.

    Example:
        >>> tokenize("Hi @name!")
        (Literal(text='Hi '), Placeholder(sigil='@', name='name'), Literal(text='!'))
    """
    known = _keys_by_sigil(keys)
    parts: List[Part] = []
    length = len(template)
    literal_start = 0
    i = 0
    while i < length:
        char = template[i]
        if char not in SIGILS:
            i += 1
            continue
        end = 0
        for key in known.get(char, ()):
            if template.startswith(key, i):
                end = i + len(key)
                break
        if (
            not end
            and i + 1 < length
            and template[i + 1] in _IDENT_CHARS
            and (i == literal_start or template[i - 1] not in _IDENT_CHARS)
        ):
            end = i + 1
            while end < length and template[end] in _IDENT_CHARS:
                end += 1
        if not end:
            i += 1
            continue
        if literal_start < i:
            parts.append(Literal(template[literal_start:i]))
        parts.append(Placeholder(char, template[i + 1:end]))
        literal_start = i = end
    if literal_start < length:
        parts.append(Literal(template[literal_start:]))
    return tuple(parts)


__all__ = ["Literal", "Part", "Placeholder", "SIGILS", "is_identifier_char", "tokenize"]
