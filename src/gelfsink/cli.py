"""gelfsink CLI -- typer-based command interface.

Commands:
    gelfsink send MESSAGE     Send one GELF message
    gelfsink bench            Log from several threads through one shared sink
"""

from __future__ import annotations

import logging
import threading
import time
from typing import List, Tuple

import typer

from .core.transport import GELFTransportError
from .handlers.gelf_udp import GELFUDPConfig, GELFUDPHandler, build_gelf_udp_handler

app = typer.Typer(
    name="gelfsink",
    help="Send log records to a Graylog GELF UDP input.",
    no_args_is_help=True,
)


def _parse_fields(raw: List[str]) -> List[Tuple[str, str]]:
    fields: List[Tuple[str, str]] = []
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{item}'", param_hint="--field")
        fields.append((key, value))
    return fields


def _open_handler(config: GELFUDPConfig) -> GELFUDPHandler:
    try:
        return build_gelf_udp_handler(config)
    except (GELFTransportError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


@app.command("send")
def send(
    message: str = typer.Argument(..., help="Message text for short_message"),
    host: str = typer.Option("localhost", "--host", "-H", help="Graylog host"),
    port: int = typer.Option(12201, "--port", "-p", help="Graylog GELF UDP port"),
    field: List[str] = typer.Option([], "--field", "-f", help="Static field as key=value (repeatable)"),
    source: str = typer.Option("", "--source", help="Value for the host field (default: this machine)"),
) -> None:
    """Send a single message."""
    config = GELFUDPConfig(host=host, port=port, static_fields=_parse_fields(field), source_host=source or None)
    handler = _open_handler(config)
    try:
        record = logging.LogRecord("gelfsink.cli", logging.INFO, __file__, 0, message, None, None)
        handler.handle(record)
    finally:
        handler.close()
    typer.echo(f"Sent {len(handler.renderer.render(message))} bytes to {host}:{port}")


@app.command("bench")
def bench(
    threads: int = typer.Option(1, "--threads", "-t", min=1, help="Producer threads"),
    messages: int = typer.Option(100, "--messages", "-n", min=1, help="Messages per thread"),
    size: int = typer.Option(0, "--size", "-s", min=0, help="Pad each message to this many bytes"),
    host: str = typer.Option("localhost", "--host", "-H", help="Graylog host"),
    port: int = typer.Option(12201, "--port", "-p", help="Graylog GELF UDP port"),
) -> None:
    """Log from several threads through one shared handler and time it.

    Examples:
        gelfsink bench --threads 4 --messages 1000
        gelfsink bench -t 8 -s 5000 --host graylog.internal
    """
    handler = _open_handler(GELFUDPConfig(host=host, port=port))
    logger = logging.getLogger("gelfsink.bench")
    logger.propagate = False
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    text = "bench message".ljust(size, "x")

    def produce() -> None:
        for _ in range(messages):
            logger.info(text)

    workers = [threading.Thread(target=produce, name=f"bench-{idx}") for idx in range(threads)]
    started = time.perf_counter()
    try:
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
    finally:
        elapsed = time.perf_counter() - started
        logger.removeHandler(handler)
        handler.close()

    total = threads * messages
    rate = total / elapsed if elapsed > 0 else float("inf")
    typer.echo(f"{total} messages from {threads} threads in {elapsed:.3f}s ({rate:,.0f} msg/s)")


def main() -> None:
    """Entry point for the gelfsink CLI."""
    app()


if __name__ == "__main__":
    main()
