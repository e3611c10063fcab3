"""Common utility functions."""

from typing import Any


def get_value(obj: Any, key: str) -> Any:
    """Get value from dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def collapse_whitespace(text: str | None) -> str:
    """Collapse runs of whitespace to single spaces and strip the ends."""
    if not text:
        return ""
    return " ".join(text.split())
