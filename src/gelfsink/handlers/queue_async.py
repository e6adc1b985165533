"""Background delivery built on QueueHandler/QueueListener."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener
from typing import Iterable, List, cast

__all__ = ["QueueConfig", "QueueCoordinator"]


@dataclass(slots=True)
class QueueConfig:
    use_queue_listener: bool = False
    queue_maxsize: int = 1000
    graceful_shutdown_timeout_s: float = 5.0


class QueueCoordinator:
    """Move sends off producer threads onto a single listener thread.

    Producers enqueue without blocking; when the queue is full the record is
    discarded and counted in :attr:`dropped`.
    """

    def __init__(self, *, config: QueueConfig, handlers: Iterable[logging.Handler]) -> None:
        self.config = config
        self.handlers: List[logging.Handler] = list(handlers)
        self.queue: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=config.queue_maxsize)
        self.queue_handler = _DroppingQueueHandler(self.queue)
        self.listener = _BlockingSentinelListener(self.queue, *self.handlers, respect_handler_level=True)
        self._started = False

    @property
    def dropped(self) -> int:
        return self.queue_handler.dropped

    def start(self) -> None:
        if self._started:
            return
        self.listener.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        deadline = time.monotonic() + self.config.graceful_shutdown_timeout_s
        while not self.queue.empty() and time.monotonic() < deadline:
            time.sleep(0.01)
        self._discard_pending()
        self.listener.stop()
        self._started = False

    def _discard_pending(self) -> None:
        while True:
            try:
                self.queue.get_nowait()
            except queue.Empty:
                return
            self.queue.task_done()
            self.queue_handler.count_drop()

    def __enter__(self) -> "QueueCoordinator":
        self.start()
        return self

    def __exit__(self, exc_type, exc: BaseException | None, tb) -> None:  # type: ignore[override]
        self.stop()

    def handler(self) -> logging.Handler:
        """Return the queue handler to attach to loggers."""

        return self.queue_handler


class _DroppingQueueHandler(QueueHandler):
    """Queue handler that drops records instead of blocking when full."""

    def __init__(self, queue_: queue.Queue[logging.LogRecord]) -> None:
        super().__init__(queue_)
        self.dropped = 0
        self._count_lock = threading.Lock()

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        target = cast(queue.Queue[logging.LogRecord], self.queue)
        try:
            target.put_nowait(record)
        except queue.Full:
            self.count_drop()

    def count_drop(self) -> None:
        with self._count_lock:
            self.dropped += 1


class _BlockingSentinelListener(QueueListener):
    """Listener whose stop sentinel waits for room in a full queue."""

    def enqueue_sentinel(self) -> None:
        self.queue.put(self._sentinel)
