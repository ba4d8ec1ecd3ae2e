"""Logging setup: one ``agentport`` logger, human-readable or JSON lines on stderr."""
from __future__ import annotations

import json
import logging
import sys
from typing import TextIO

from agentport_core.errors import ConfigError

_ROOT = "agentport"
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Records logged with ``extra={"document": ...}`` carry that document
    (an id or a path) as a separate field.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": record.created,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        document = getattr(record, "document", None)
        if document is not None:
            payload["document"] = str(document)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the root agentport logger.

    The handler is installed once; later calls only change the level.

    Raises:
        ConfigError: If *level* is not a standard level name.
    """
    name = level.upper()
    if name not in _LEVELS:
        msg = f"Unknown log level {level!r}; expected one of {', '.join(_LEVELS)}"
        raise ConfigError(msg)

    logger = logging.getLogger(_ROOT)
    logger.setLevel(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_output:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))

    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the agentport namespace."""
    return logging.getLogger(f"{_ROOT}.{name}")
