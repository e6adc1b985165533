"""Configuration schema definition for gelfsink."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from ..core.chunking import MAX_CHUNKS
from ..handlers.queue_async import QueueConfig


class ConfigurationError(ValueError):
    """Raised when configuration validation fails."""


DEFAULT_CONFIG: Dict[str, Any] = {
    "destination": {
        "host": "localhost",
        "port": 12201,
    },
    "source": {
        "host": "",
    },
    "static_fields": {},
    "chunking": {
        "max_chunks": MAX_CHUNKS,
        "on_overflow": "warn",
    },
    "handler": {
        "level": "NOTSET",
        "format": "%(message)s",
    },
    "logging": {
        "loggers": [],
        "propagate": True,
    },
    "async": {
        "use_queue_listener": False,
        "queue_maxsize": 1000,
        "graceful_shutdown_timeout_s": 5.0,
    },
}


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration mapping."""

    return deepcopy(DEFAULT_CONFIG)


@dataclass(slots=True)
class DestinationConfig:
    host: str = "localhost"
    port: int = 12201


@dataclass(slots=True)
class ChunkingConfig:
    max_chunks: int = MAX_CHUNKS
    on_overflow: str = "warn"


@dataclass(slots=True)
class HandlerOptions:
    level: str | int = "NOTSET"
    format: str = "%(message)s"


@dataclass(slots=True)
class AttachConfig:
    """Which loggers receive the sink; an empty list means the root logger."""

    loggers: List[str] = field(default_factory=list)
    propagate: bool = True


@dataclass(slots=True)
class GelfSinkConfig:
    destination: DestinationConfig
    source_host: str | None
    static_fields: List[Tuple[str, str]]
    chunking: ChunkingConfig
    handler: HandlerOptions
    attach: AttachConfig
    async_config: QueueConfig
    raw: Dict[str, Any] = field(repr=False, default_factory=dict)


def _to_destination(data: Mapping[str, Any]) -> DestinationConfig:
    return DestinationConfig(
        host=str(data.get("host", "localhost")).strip(),
        port=int(data.get("port", 12201)),
    )


def _to_source_host(data: Mapping[str, Any]) -> str | None:
    host = data.get("host")
    if host is None:
        return None
    text = str(host).strip()
    return text or None


def _to_static_fields(data: Any) -> List[Tuple[str, str]]:
    if isinstance(data, Mapping):
        return [(str(key), str(value)) for key, value in data.items()]
    pairs: List[Tuple[str, str]] = []
    if isinstance(data, Iterable) and not isinstance(data, (str, bytes)):
        for item in data:
            if isinstance(item, Mapping):
                pairs.extend((str(key), str(value)) for key, value in item.items())
                continue
            entry = tuple(item) if isinstance(item, Iterable) and not isinstance(item, (str, bytes)) else ()
            if len(entry) != 2:
                raise ConfigurationError(f"Static field entries must be [key, value] pairs, got {item!r}")
            key, value = entry
            pairs.append((str(key), str(value)))
    return pairs


def _to_chunking(data: Mapping[str, Any]) -> ChunkingConfig:
    return ChunkingConfig(
        max_chunks=int(data.get("max_chunks", MAX_CHUNKS)),
        on_overflow=str(data.get("on_overflow", "warn")).lower(),
    )


def _to_handler(data: Mapping[str, Any]) -> HandlerOptions:
    return HandlerOptions(
        level=data.get("level", "NOTSET"),
        format=str(data.get("format", "%(message)s")),
    )


def _to_attach(data: Mapping[str, Any]) -> AttachConfig:
    loggers_raw = data.get("loggers", [])
    if isinstance(loggers_raw, str):
        loggers = [name.strip() for name in loggers_raw.split(",") if name.strip()]
    elif isinstance(loggers_raw, Iterable):
        loggers = [str(name) for name in loggers_raw]
    else:
        loggers = []
    return AttachConfig(loggers=loggers, propagate=bool(data.get("propagate", True)))


def _to_async(data: Mapping[str, Any]) -> QueueConfig:
    return QueueConfig(
        use_queue_listener=bool(data.get("use_queue_listener", False)),
        queue_maxsize=int(data.get("queue_maxsize", 1000)),
        graceful_shutdown_timeout_s=float(data.get("graceful_shutdown_timeout_s", 5.0)),
    )


def build_config(data: Mapping[str, Any]) -> GelfSinkConfig:
    return GelfSinkConfig(
        destination=_to_destination(data.get("destination", {})),
        source_host=_to_source_host(data.get("source", {})),
        static_fields=_to_static_fields(data.get("static_fields", {})),
        chunking=_to_chunking(data.get("chunking", {})),
        handler=_to_handler(data.get("handler", {})),
        attach=_to_attach(data.get("logging", {})),
        async_config=_to_async(data.get("async", {})),
        raw=deepcopy({k: v for k, v in data.items()}),
    )
