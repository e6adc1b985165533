"""Local host name discovery."""

from __future__ import annotations

import socket

__all__ = ["local_hostname"]


def local_hostname(configured: str | None = None) -> str:
    """Return ``configured`` if set, otherwise the machine's host name."""

    if configured:
        return configured
    return socket.gethostname() or "localhost"
