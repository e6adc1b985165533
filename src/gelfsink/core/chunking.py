"""GELF chunk series construction."""

from __future__ import annotations

import random
import struct
import threading
from dataclasses import dataclass
from typing import Iterator, Protocol

__all__ = [
    "CHUNK_MAGIC",
    "HEADER_SIZE",
    "MAX_CHUNK_SIZE",
    "MAX_CHUNKS",
    "ChunkHeader",
    "MessageIdGenerator",
    "MessageIdSource",
    "chunk_count",
    "iter_chunks",
]

CHUNK_MAGIC = b"\x1e\x0f"
MAX_CHUNK_SIZE = 1000
MAX_CHUNKS = 128

_HEADER = struct.Struct("!2s8sBB")
HEADER_SIZE = _HEADER.size


@dataclass(frozen=True, slots=True)
class ChunkHeader:
    """The 12-byte header that prefixes every datagram of a chunk series."""

    message_id: bytes
    sequence: int
    total: int

    def __post_init__(self) -> None:
        if len(self.message_id) != 8:
            raise ValueError("GELF message ids are exactly 8 bytes")
        if not 0 < self.total <= 255:
            raise ValueError(f"Chunk total {self.total} does not fit in one byte")
        if not 0 <= self.sequence < self.total:
            raise ValueError(f"Chunk sequence {self.sequence} outside 0..{self.total - 1}")

    def pack(self) -> bytes:
        return _HEADER.pack(CHUNK_MAGIC, self.message_id, self.sequence, self.total)

    @classmethod
    def unpack(cls, datagram: bytes) -> "ChunkHeader":
        if len(datagram) < HEADER_SIZE:
            raise ValueError("Datagram is shorter than a chunk header")
        magic, message_id, sequence, total = _HEADER.unpack_from(datagram)
        if magic != CHUNK_MAGIC:
            raise ValueError("Datagram does not carry the GELF chunk magic")
        return cls(message_id=message_id, sequence=sequence, total=total)


class MessageIdSource(Protocol):
    def next_id(self) -> bytes:
        ...


class MessageIdGenerator:
    """Produce random 8-byte message ids from a per-thread generator.

    Every thread lazily gets its own :class:`random.Random`, so the hot
    logging path never contends on a shared lock.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _generator(self) -> random.Random:
        rng = getattr(self._local, "rng", None)
        if rng is None:
            rng = random.Random()
            self._local.rng = rng
        return rng

    def next_id(self) -> bytes:
        return self._generator().getrandbits(64).to_bytes(8, "big")


def chunk_count(size: int, chunk_size: int = MAX_CHUNK_SIZE) -> int:
    """Number of ``chunk_size`` segments needed to cover ``size`` bytes."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return -(-size // chunk_size)


def iter_chunks(payload: bytes, message_id: bytes, chunk_size: int = MAX_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the datagrams of the chunk series for ``payload`` in sequence order."""

    total = chunk_count(len(payload), chunk_size)
    view = memoryview(payload)
    for sequence in range(total):
        header = ChunkHeader(message_id=message_id, sequence=sequence, total=total)
        start = sequence * chunk_size
        yield header.pack() + view[start : start + chunk_size].tobytes()
