"""gelfsink public API."""

from .api import build_handler, configure
from .core.manager import SinkManager
from .core.render import PayloadRenderer, render
from .core.transport import (
    ChunkingTransport,
    GELFChunkOverflowWarning,
    GELFTransportError,
    ResolutionError,
)
from .core.validation import ConfigurationError
from .handlers.gelf_udp import GELFUDPHandler
from .version import __version__

__all__ = [
    "configure",
    "build_handler",
    "SinkManager",
    "PayloadRenderer",
    "render",
    "ChunkingTransport",
    "GELFUDPHandler",
    "ResolutionError",
    "GELFTransportError",
    "GELFChunkOverflowWarning",
    "ConfigurationError",
    "__version__",
]
