from __future__ import annotations

import json
import logging
import socket

import pytest

import gelfsink
from gelfsink.core.manager import SinkManager
from gelfsink.core.transport import ResolutionError
from gelfsink.core.validation import ConfigurationError


def _overrides(port: int, **extra):
    data = {
        "destination": {"host": "127.0.0.1", "port": port},
        "source": {"host": "svc-host"},
        "static_fields": {"_app": "tests"},
        "logging": {"loggers": ["tests.manager"], "propagate": False},
    }
    data.update(extra)
    return data


def test_configure_attaches_to_named_loggers(udp_receiver) -> None:
    manager = gelfsink.configure(_overrides(udp_receiver.port))
    logger = logging.getLogger("tests.manager")
    logger.setLevel(logging.INFO)
    try:
        assert manager.handler in logger.handlers
        assert logger.propagate is False
        logger.warning("hello %s", "graylog")
        document = json.loads(udp_receiver.recv())
    finally:
        manager.shutdown()

    assert document["short_message"] == "hello graylog"
    assert document["host"] == "svc-host"
    assert document["_app"] == "tests"
    assert manager.handler not in logger.handlers
    assert manager.gelf_handler.transport.closed


def test_root_logger_is_the_default_target(udp_receiver) -> None:
    overrides = _overrides(udp_receiver.port, logging={"loggers": []})
    with gelfsink.configure(overrides, start=False) as manager:
        assert manager.handler in logging.getLogger().handlers
    assert manager.handler not in logging.getLogger().handlers


def test_managers_are_independent(udp_receiver) -> None:
    first = gelfsink.configure(_overrides(udp_receiver.port), start=False)
    second = gelfsink.configure(_overrides(udp_receiver.port), start=False)
    try:
        assert first.gelf_handler is not second.gelf_handler
        assert not first.started and not second.started
    finally:
        first.shutdown()
        second.shutdown()


def test_queued_delivery_flushes_on_shutdown(udp_receiver) -> None:
    overrides = _overrides(
        udp_receiver.port,
        **{"async": {"use_queue_listener": True, "queue_maxsize": 100, "graceful_shutdown_timeout_s": 2.0}},
    )
    manager = gelfsink.configure(overrides)
    logger = logging.getLogger("tests.manager")
    logger.setLevel(logging.INFO)
    assert manager.handler is not manager.gelf_handler
    for idx in range(20):
        logger.info("queued %s", idx)
    manager.shutdown()

    messages = [json.loads(d)["short_message"] for d in udp_receiver.recv_many(20)]
    assert sorted(messages) == sorted(f"queued {idx}" for idx in range(20))


def test_invalid_configuration_fails_before_any_socket(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(socket, "socket", lambda *a, **k: pytest.fail("socket created"))
    with pytest.raises(ConfigurationError):
        gelfsink.configure({"destination": {"port": 0}})


def test_unresolvable_destination_fails_at_configure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(socket, "getaddrinfo", lambda *a, **k: [])
    with pytest.raises(ResolutionError):
        gelfsink.configure({"destination": {"host": "graylog.invalid"}})


def test_build_handler_is_unattached(udp_receiver) -> None:
    handler = gelfsink.build_handler({"destination": {"host": "127.0.0.1", "port": udp_receiver.port}})
    try:
        assert handler not in logging.getLogger().handlers
        assert isinstance(handler, gelfsink.GELFUDPHandler)
    finally:
        handler.close()


def test_manager_accepts_loaded_config(udp_receiver) -> None:
    from gelfsink.config.loader import load_configuration

    config = load_configuration(_overrides(udp_receiver.port, handler={"level": "ERROR"}))
    manager = SinkManager(config)
    try:
        assert manager.gelf_handler.level == logging.ERROR
    finally:
        manager.shutdown()
