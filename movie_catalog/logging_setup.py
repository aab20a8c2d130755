"""Logging setup for the service and its command line tools."""

from __future__ import annotations

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

# Noisy loggers to quiet down
NOISY_LOGGERS = [
    "pymongo",
    "httpx",
    "httpcore",
    "confluent_kafka",
]


class ContextFormatter(logging.Formatter):
    """
    Console formatter that renders `extra={...}` context.

    Known context fields are appended as `key=value` pairs after the
    message, in the order listed below.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Identifiers
        "movie_id",
        "movie_name",
        "action",
        # Kafka
        "topic",
        "key",
        "partition",
        "offset",
        # HTTP
        "path",
        # Failures
        "error",
    ]

    def __init__(self, fmt: str = DEFAULT_FORMAT):
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        context = [
            f"{field}={getattr(record, field)}"
            for field in self.EXTRA_FIELDS
            if getattr(record, field, None) is not None
        ]
        if not context:
            return line

        # Keep a traceback, if any, below the context.
        head, sep, tail = line.partition("\n")
        return f"{head} {' '.join(context)}{sep}{tail}"


def setup_logging(level: str | int = "INFO", suppress_noisy: bool = True) -> logging.Logger:
    """Install one console handler on the root logger.

    Safe to call more than once; an earlier handler installed here is
    replaced rather than duplicated.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, "_movie_catalog", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter())
    handler._movie_catalog = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    if suppress_noisy:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("movie_catalog")
