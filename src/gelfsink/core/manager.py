"""Sink manager wiring the GELF handler into explicit loggers."""

from __future__ import annotations

import logging
from typing import List

from ..config.schema import GelfSinkConfig
from ..handlers.gelf_udp import GELFUDPConfig, GELFUDPHandler, build_gelf_udp_handler
from ..handlers.queue_async import QueueCoordinator
from .levels import ensure_level
from .validation import validate_configuration

_LOGGER = logging.getLogger(__name__)


def handler_config(config: GelfSinkConfig) -> GELFUDPConfig:
    """Translate the loaded configuration into handler settings."""

    return GELFUDPConfig(
        host=config.destination.host,
        port=config.destination.port,
        source_host=config.source_host,
        static_fields=list(config.static_fields),
        max_chunks=config.chunking.max_chunks,
        on_overflow=config.chunking.on_overflow,
        level=ensure_level(config.handler.level),
        format=config.handler.format,
    )


class SinkManager:
    """Own one GELF sink and its attachment to loggers.

    Managers are created by the application and passed to wherever they are
    needed; nothing is registered process-wide. Construction validates the
    configuration and resolves the destination, so an unusable sink fails
    here rather than on the first record.
    """

    def __init__(self, config: GelfSinkConfig) -> None:
        validate_configuration(config)
        self.config = config
        self.gelf_handler: GELFUDPHandler = build_gelf_udp_handler(handler_config(config))
        self.coordinator: QueueCoordinator | None = None
        if config.async_config.use_queue_listener:
            self.coordinator = QueueCoordinator(config=config.async_config, handlers=[self.gelf_handler])
        self._attached: List[logging.Logger] = []

    @property
    def handler(self) -> logging.Handler:
        """The handler producers should log through."""

        if self.coordinator is not None:
            return self.coordinator.handler()
        return self.gelf_handler

    @property
    def started(self) -> bool:
        return bool(self._attached)

    def start(self) -> None:
        """Attach the sink to the configured loggers."""

        if self._attached:
            return
        if self.coordinator is not None:
            self.coordinator.start()
        front = self.handler
        front.setLevel(self.gelf_handler.level)
        names = self.config.attach.loggers or [""]
        for name in names:
            logger = logging.getLogger(name or None)
            logger.addHandler(front)
            if name:
                logger.propagate = self.config.attach.propagate
            self._attached.append(logger)
        _LOGGER.debug(
            "GELF sink attached to %s, sending to %s:%s",
            ", ".join(name or "root" for name in names),
            self.config.destination.host,
            self.config.destination.port,
        )

    def shutdown(self) -> None:
        """Detach from loggers, drain any queue and release the socket."""

        front = self.handler
        for logger in self._attached:
            logger.removeHandler(front)
        self._attached.clear()
        if self.coordinator is not None:
            self.coordinator.stop()
        self.gelf_handler.close()

    def __enter__(self) -> "SinkManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc: BaseException | None, tb) -> None:  # type: ignore[override]
        self.shutdown()
