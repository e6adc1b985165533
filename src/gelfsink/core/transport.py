"""Chunking UDP transport for GELF payloads."""

from __future__ import annotations

import logging
import socket
import warnings
from dataclasses import dataclass
from typing import Any, Tuple

from .chunking import (
    MAX_CHUNK_SIZE,
    MAX_CHUNKS,
    MessageIdGenerator,
    MessageIdSource,
    chunk_count,
    iter_chunks,
)

__all__ = [
    "OVERFLOW_POLICIES",
    "ChunkingTransport",
    "Destination",
    "GELFChunkOverflowWarning",
    "GELFTransportError",
    "ResolutionError",
    "resolve_destination",
]

OVERFLOW_POLICIES = ("warn", "drop")

_LOGGER = logging.getLogger(__name__)


class GELFTransportError(RuntimeError):
    """Raised when the transport cannot be constructed."""


class ResolutionError(GELFTransportError):
    """Raised when the destination host resolves to no address."""


class GELFChunkOverflowWarning(UserWarning):
    """Issued when a payload needs more chunks than GELF allows."""


@dataclass(frozen=True, slots=True)
class Destination:
    """A UDP endpoint resolved once at construction."""

    host: str
    port: int
    family: int
    sockaddr: Tuple[Any, ...]


def resolve_destination(host: str, port: int) -> Destination:
    """Resolve ``host``/``port`` to the first UDP candidate address."""

    try:
        candidates = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as exc:
        raise ResolutionError(f"Cannot resolve Graylog host address: {host}") from exc
    if not candidates:
        raise ResolutionError(f"Cannot resolve Graylog host address: {host}")
    family, _, _, _, sockaddr = candidates[0]
    return Destination(host=host, port=port, family=family, sockaddr=tuple(sockaddr))


class ChunkingTransport:
    """Send GELF payloads to one UDP destination, chunking large ones.

    Payloads shorter than ``chunk_size`` go out as a single datagram. Larger
    payloads are split into a chunk series sharing one random message id.
    Socket errors are discarded per datagram; nothing is retried.
    """

    def __init__(
        self,
        sock: socket.socket,
        destination: Destination,
        *,
        chunk_size: int = MAX_CHUNK_SIZE,
        max_chunks: int = MAX_CHUNKS,
        on_overflow: str = "warn",
        id_source: MessageIdSource | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 1 <= max_chunks <= MAX_CHUNKS:
            raise ValueError(f"max_chunks must be between 1 and {MAX_CHUNKS}")
        if on_overflow not in OVERFLOW_POLICIES:
            raise ValueError(f"Unknown overflow policy: {on_overflow}")
        self._sock = sock
        self.destination = destination
        self.chunk_size = chunk_size
        self.max_chunks = max_chunks
        self.on_overflow = on_overflow
        self.id_source: MessageIdSource = id_source or MessageIdGenerator()
        self._closed = False

    @classmethod
    def connect(cls, host: str, port: int, **options: Any) -> "ChunkingTransport":
        """Resolve the destination and return a transport bound to it."""

        destination = resolve_destination(host, port)
        sock = socket.socket(destination.family, socket.SOCK_DGRAM)
        try:
            sock.connect(destination.sockaddr)
        except OSError as exc:
            sock.close()
            raise GELFTransportError(f"Cannot connect UDP socket to {host}:{port}") from exc
        try:
            transport = cls(sock, destination, **options)
        except BaseException:
            sock.close()
            raise
        _LOGGER.debug("GELF transport connected to %s:%s via %s", host, port, destination.sockaddr)
        return transport

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, payload: bytes) -> None:
        """Send ``payload`` as one datagram or as a chunk series.

        Over-cap payloads are dropped. With ``on_overflow="warn"`` a
        :class:`GELFChunkOverflowWarning` is issued whose text carries the payload
        size; under the default warnings filter a repeat of the same size from the
        same call site is shown only once.
        """

        if self._closed:
            return
        if len(payload) < self.chunk_size:
            self._send_datagram(payload)
            return

        total = chunk_count(len(payload), self.chunk_size)
        if total > self.max_chunks:
            if self.on_overflow == "warn":
                warnings.warn(
                    f"GELF payload of {len(payload)} bytes needs {total} chunks "
                    f"(limit {self.max_chunks}); message dropped",
                    GELFChunkOverflowWarning,
                    stacklevel=2,
                )
            return

        message_id = self.id_source.next_id()
        for datagram in iter_chunks(payload, message_id, self.chunk_size):
            self._send_datagram(datagram)

    def _send_datagram(self, datagram: bytes) -> None:
        try:
            self._sock.send(datagram)
        except OSError:
            # best-effort delivery: a lost datagram is not reported
            pass

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()

    def __enter__(self) -> "ChunkingTransport":
        return self

    def __exit__(self, exc_type, exc: BaseException | None, tb) -> None:  # type: ignore[override]
        self.close()

    def __repr__(self) -> str:
        return f"ChunkingTransport(destination={self.destination.host}:{self.destination.port})"
