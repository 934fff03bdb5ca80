"""
Root logger configuration shared by the order and product services.

Every line is tagged with the emitting service so the output of both
processes can be interleaved in one terminal or collector.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(service_name)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Client libraries that log one line per catalog call at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


class _ServiceFormatter(logging.Formatter):
    """Stamps records with the service name unless the caller passed one via ``extra``."""

    def __init__(self, service_name: str) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "service_name"):
            record.service_name = self.service_name
        return super().format(record)


def setup_logging(service_name: str, level: str | None = None) -> None:
    """
    Send log output for ``service_name`` to stdout.

    The level is ``level`` if given, else ``LOG_LEVEL``, else INFO. Calling
    again (tests import both apps into one process) retags the existing
    handlers instead of adding duplicates.
    """
    root = logging.getLogger()
    root.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())

    if not root.handlers:
        root.addHandler(logging.StreamHandler(sys.stdout))
    formatter = _ServiceFormatter(service_name)
    for handler in root.handlers:
        handler.setFormatter(formatter)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
