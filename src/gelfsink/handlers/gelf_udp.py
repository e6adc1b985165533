"""GELF UDP handler implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from ..core.chunking import MAX_CHUNKS
from ..core.render import PayloadRenderer
from ..core.transport import ChunkingTransport
from ..utils.hostname import local_hostname

__all__ = ["GELFUDPConfig", "GELFUDPHandler", "build_gelf_udp_handler"]

_DEFAULT_FORMAT = "%(message)s"


@dataclass(slots=True)
class GELFUDPConfig:
    host: str = "localhost"
    port: int = 12201
    source_host: str | None = None
    static_fields: List[Tuple[str, str]] = field(default_factory=list)
    max_chunks: int = MAX_CHUNKS
    on_overflow: str = "warn"
    level: int = logging.NOTSET
    format: str = _DEFAULT_FORMAT


class GELFUDPHandler(logging.Handler):
    """Logging handler that renders records as GELF and sends them over UDP.

    The renderer and transport are injected; the handler only binds them to
    :mod:`logging`. Records are fed concurrently: unlike the base class the
    handler does not hold its I/O lock while emitting, since every datagram
    is sent with a single self-contained socket call.
    """

    def __init__(
        self,
        renderer: PayloadRenderer,
        transport: ChunkingTransport,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level)
        self.renderer = renderer
        self.transport = transport
        self.setFormatter(logging.Formatter(_DEFAULT_FORMAT))

    def handle(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        rv = self.filter(record)
        if isinstance(rv, logging.LogRecord):
            record = rv
        if rv:
            self.emit(record)
        return bool(rv)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = self.renderer.render(self.format(record))
            self.transport.send(payload)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            self.transport.close()
        finally:
            super().close()


def build_gelf_udp_handler(config: GELFUDPConfig | None = None) -> GELFUDPHandler:
    """Resolve the destination and build a ready-to-attach handler.

    Raises :class:`~gelfsink.core.transport.ResolutionError` when the
    destination host does not resolve.
    """

    cfg = config or GELFUDPConfig()
    renderer = PayloadRenderer(local_hostname(cfg.source_host), cfg.static_fields)
    transport = ChunkingTransport.connect(
        cfg.host,
        cfg.port,
        max_chunks=cfg.max_chunks,
        on_overflow=cfg.on_overflow,
    )
    handler = GELFUDPHandler(renderer, transport, level=cfg.level)
    handler.setFormatter(logging.Formatter(cfg.format))
    return handler
