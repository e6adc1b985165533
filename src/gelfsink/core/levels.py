"""Log level helpers."""

from __future__ import annotations

import logging

__all__ = ["get_level_by_name", "ensure_level"]


def get_level_by_name(name: str) -> int:
    """Resolve a logging level from a friendly name."""

    stripped = name.strip()
    if stripped.isdigit():
        return int(stripped)
    resolved = logging.getLevelName(stripped.upper())
    if isinstance(resolved, int):
        return resolved
    raise ValueError(f"Unknown log level: {name}")


def ensure_level(value: int | str) -> int:
    """Normalize user supplied level values."""

    if isinstance(value, int):
        return value
    return get_level_by_name(value)
