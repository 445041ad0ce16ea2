"""Core engine: safe-string registry, escaping primitives and placeholder formatting."""
