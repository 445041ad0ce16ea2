"""
safemarkup - safe-string tracking and contextual placeholder escaping

Tracks which strings are already valid markup so they are not escaped twice,
and formats placeholder templates with per-sigil escaping rules so untrusted
values can never be interpreted as markup.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
