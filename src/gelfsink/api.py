"""Public API surface for gelfsink."""

from __future__ import annotations

import os
from typing import Any, Mapping

from .config.loader import load_configuration
from .core.manager import SinkManager, handler_config
from .core.validation import validate_configuration
from .handlers.gelf_udp import GELFUDPHandler, build_gelf_udp_handler


def configure(
    overrides: Mapping[str, Any] | None = None,
    *,
    path: str | os.PathLike[str] | None = None,
    start: bool = True,
) -> SinkManager:
    """Load configuration, build a sink and return its manager.

    The caller owns the returned manager and is responsible for calling
    :meth:`SinkManager.shutdown`.
    """

    manager = SinkManager(load_configuration(overrides, path=path))
    if start:
        manager.start()
    return manager


def build_handler(
    overrides: Mapping[str, Any] | None = None,
    *,
    path: str | os.PathLike[str] | None = None,
) -> GELFUDPHandler:
    """Return a GELF handler that is not attached to any logger."""

    config = load_configuration(overrides, path=path)
    validate_configuration(config)
    return build_gelf_udp_handler(handler_config(config))
