from __future__ import annotations

import logging
import os
import socket
from pathlib import Path
from typing import Dict, Iterator, List

import pytest

from gelfsink.config import loader
from gelfsink.core.chunking import ChunkHeader


class UDPReceiver:
    """Loopback UDP socket collecting datagrams sent by a transport under test."""

    def __init__(self) -> None:
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, 4 * 1024 * 1024)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(2.0)

    @property
    def port(self) -> int:
        return self.sock.getsockname()[1]

    def recv(self) -> bytes:
        return self.sock.recv(65535)

    def recv_many(self, count: int) -> List[bytes]:
        return [self.recv() for _ in range(count)]

    def assert_idle(self) -> None:
        self.sock.settimeout(0.2)
        try:
            with pytest.raises(socket.timeout):
                self.sock.recv(65535)
        finally:
            self.sock.settimeout(2.0)

    def close(self) -> None:
        self.sock.close()


class FakeSocket:
    """Stand-in socket recording datagrams, optionally failing every send."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[bytes] = []
        self.closed = False
        self.peer: object = None

    def connect(self, address: object) -> None:
        self.peer = address

    def send(self, data: bytes) -> int:
        self.sent.append(bytes(data))
        if self.fail:
            raise OSError(111, "Connection refused")
        return len(data)

    def close(self) -> None:
        self.closed = True


def _reassemble(datagrams: List[bytes]) -> Dict[bytes, bytes]:
    """Group chunk datagrams by message id and join them in sequence order."""

    series: Dict[bytes, Dict[int, bytes]] = {}
    totals: Dict[bytes, int] = {}
    for datagram in datagrams:
        header = ChunkHeader.unpack(datagram)
        series.setdefault(header.message_id, {})[header.sequence] = datagram[12:]
        totals[header.message_id] = header.total
    messages: Dict[bytes, bytes] = {}
    for message_id, parts in series.items():
        assert sorted(parts) == list(range(totals[message_id]))
        messages[message_id] = b"".join(parts[idx] for idx in sorted(parts))
    return messages


@pytest.fixture
def udp_receiver() -> Iterator[UDPReceiver]:
    receiver = UDPReceiver()
    yield receiver
    receiver.close()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    user_dir = tmp_path / "user-config"
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(user_dir))
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.delenv("GELFSINK_CONFIG", raising=False)
    for key in list(os.environ):
        if key.startswith("GELFSINK__"):
            monkeypatch.delenv(key)
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.__class__.__module__.startswith("gelfsink"):
            root.removeHandler(handler)


@pytest.fixture
def reassemble():
    return _reassemble


@pytest.fixture
def fake_socket() -> FakeSocket:
    return FakeSocket()


@pytest.fixture
def failing_socket() -> FakeSocket:
    return FakeSocket(fail=True)
