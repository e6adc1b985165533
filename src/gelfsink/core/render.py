"""GELF payload rendering."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable, Mapping, Tuple, Union

__all__ = [
    "GELF_VERSION",
    "RESERVED_KEYS",
    "StaticField",
    "PayloadRenderer",
    "escape_json_string",
    "render",
]

GELF_VERSION = "1.1"
RESERVED_KEYS = frozenset({"version", "host", "short_message"})

StaticFieldsInput = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


def escape_json_string(text: str) -> str:
    """Return ``text`` escaped for use between JSON double quotes."""

    return json.dumps(text, ensure_ascii=False)[1:-1]


@dataclass(frozen=True, slots=True)
class StaticField:
    """Key/value pair attached to every rendered message, stored escaped."""

    key: str
    value: str

    @classmethod
    def escaped(cls, key: str, value: str) -> "StaticField":
        return cls(key=escape_json_string(str(key)), value=escape_json_string(str(value)))


def _normalize_fields(static_fields: StaticFieldsInput) -> list[Tuple[str, str]]:
    if static_fields is None:
        return []
    if isinstance(static_fields, Mapping):
        return [(str(key), str(value)) for key, value in static_fields.items()]
    return [(str(key), str(value)) for key, value in static_fields]


class PayloadRenderer:
    """Render message text into a single-line GELF JSON document.

    The host and static fields are escaped once here and baked into a
    pre-rendered prefix, so each :meth:`render` call only escapes the message.
    """

    def __init__(self, host: str, static_fields: StaticFieldsInput = None) -> None:
        pairs = _normalize_fields(static_fields)
        for key, _ in pairs:
            if not key:
                raise ValueError("Static field keys must be non-empty")
            if key in RESERVED_KEYS:
                raise ValueError(f"Static field key '{key}' is reserved by GELF")

        self.host = host
        self.static_fields: Tuple[StaticField, ...] = tuple(
            StaticField.escaped(key, value) for key, value in pairs
        )
        parts = [
            f'"version" : "{GELF_VERSION}",',
            f'"host" : "{escape_json_string(host)}",',
        ]
        parts.extend(f'"{field.key}" : "{field.value}",' for field in self.static_fields)
        self._prefix = "{" + "".join(parts) + '"short_message" : "'

    def render(self, message: str) -> bytes:
        document = self._prefix + escape_json_string(message) + '"}'
        # lone surrogates become \udXXX escapes, which is still valid JSON
        return document.encode("utf-8", errors="backslashreplace")

    def __repr__(self) -> str:
        return f"PayloadRenderer(host={self.host!r}, static_fields={len(self.static_fields)})"


def render(host: str, static_fields: StaticFieldsInput, message: str) -> bytes:
    """Render a single GELF payload without keeping a renderer around."""

    return PayloadRenderer(host, static_fields).render(message)
