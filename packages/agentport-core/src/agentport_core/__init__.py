"""Agentport Core: shared config, errors, and logging."""
from __future__ import annotations

from agentport_core.config import (
    AgentportConfig,
    IndexConfig,
    LoggingConfig,
    PathsConfig,
    PolicyConfig,
    ValidationConfig,
)
from agentport_core.errors import (
    AgentportError,
    ConfigError,
    DocumentError,
    DocumentIOError,
    MalformedDocumentError,
    SchemaViolationError,
    UnknownToolError,
)
from agentport_core.logging import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "AgentportConfig",
    "AgentportError",
    "ConfigError",
    "DocumentError",
    "DocumentIOError",
    "IndexConfig",
    "LoggingConfig",
    "MalformedDocumentError",
    "PathsConfig",
    "PolicyConfig",
    "SchemaViolationError",
    "UnknownToolError",
    "ValidationConfig",
    "__version__",
    "get_logger",
    "setup_logging",
]
