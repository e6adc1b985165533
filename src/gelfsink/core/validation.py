"""Configuration validation helpers."""

from __future__ import annotations

from ..config.schema import ConfigurationError, GelfSinkConfig
from .chunking import MAX_CHUNKS
from .levels import ensure_level
from .render import RESERVED_KEYS
from .transport import OVERFLOW_POLICIES


def validate_configuration(config: GelfSinkConfig) -> None:
    """Reject configurations that could not produce a working sink."""

    if not config.destination.host:
        raise ConfigurationError("Destination host must not be empty")
    if not 0 < config.destination.port <= 65535:
        raise ConfigurationError(f"Destination port {config.destination.port} is outside 1..65535")

    if not 1 <= config.chunking.max_chunks <= MAX_CHUNKS:
        raise ConfigurationError(
            f"chunking.max_chunks must be between 1 and {MAX_CHUNKS}, got {config.chunking.max_chunks}"
        )
    if config.chunking.on_overflow not in OVERFLOW_POLICIES:
        raise ConfigurationError(
            f"chunking.on_overflow must be one of {', '.join(OVERFLOW_POLICIES)}, "
            f"got '{config.chunking.on_overflow}'"
        )

    seen: set[str] = set()
    for key, _ in config.static_fields:
        if not key:
            raise ConfigurationError("Static field keys must not be empty")
        if key in RESERVED_KEYS:
            raise ConfigurationError(f"Static field '{key}' collides with a reserved GELF key")
        if key in seen:
            raise ConfigurationError(f"Static field '{key}' is defined more than once")
        seen.add(key)

    try:
        ensure_level(config.handler.level)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    if config.async_config.use_queue_listener and config.async_config.queue_maxsize <= 0:
        raise ConfigurationError("async.queue_maxsize must be positive when the queue listener is enabled")
