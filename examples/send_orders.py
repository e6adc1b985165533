"""Minimal example sending application logs to Graylog over GELF UDP."""

from __future__ import annotations

import logging
import time

import gelfsink


def main() -> None:
    manager = gelfsink.configure(
        {
            "destination": {"host": "localhost", "port": 12201},
            "static_fields": {"_app": "gelfsink-demo", "_env": "dev"},
            "logging": {"loggers": ["examples.orders"], "propagate": False},
        }
    )
    logger = logging.getLogger("examples.orders")
    logger.setLevel(logging.INFO)
    try:
        for order_id in range(1, 4):
            logger.info("processed order %s total=%.2f", order_id, order_id * 19.99)
            time.sleep(0.1)
        logger.warning("large payload follows: %s", "x" * 3000)
    finally:
        manager.shutdown()


if __name__ == "__main__":
    main()
