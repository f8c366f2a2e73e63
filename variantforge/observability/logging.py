"""Logging setup for variantforge.

Library modules log through ``logging.getLogger(__name__)``; this module
only decides how the ``variantforge`` logger tree is printed:

- text: ``"%(asctime)s - %(name)s - %(levelname)s - %(message)s"``
- json: one JSON object per record, for CI log collection

Example:
    >>> configure_logging(level="DEBUG", json_format=True)
    >>> with log_context(variant="sqlite/en"):
    ...     logger.info("Writing t/sqlite/en/basic.py")  # record carries variant
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER = "variantforge"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_context_fields: ContextVar[dict[str, Any] | None] = ContextVar(
    "variantforge_log_context", default=None
)

# Attributes every LogRecord has; anything else came in through ``extra=``
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """JSON formatter.

    Output fields: timestamp, level, logger, message, plus ``context``
    (fields bound with log_context), ``data`` (``extra=`` fields) and
    ``exception`` when present.
    """

    def __init__(self, extra_fields: dict[str, Any] | None = None) -> None:
        super().__init__()
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _context_fields.get()
        if context:
            log_data["context"] = dict(context)

        data = {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}
        if data:
            log_data["data"] = data

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in self.extra_fields.items():
            log_data.setdefault(key, value)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the ``variantforge`` logger.

    Args:
        level: Minimum log level, as a number or a name like "DEBUG".
        json_format: Emit JSON records instead of text lines.
        stream: Destination, stderr by default.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.handlers.clear()
    root_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter() if json_format else logging.Formatter(TEXT_FORMAT))

    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


def setup_logging(verbose: bool, log_format: str = "text") -> logging.Logger:
    """Configure logging based on verbosity level."""
    return configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        json_format=log_format == "json",
    )


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to JSON log records emitted inside the block."""
    current = dict(_context_fields.get() or {})
    current.update(kwargs)
    token = _context_fields.set(current)
    try:
        yield
    finally:
        _context_fields.reset(token)


def get_context() -> dict[str, Any]:
    return dict(_context_fields.get() or {})
