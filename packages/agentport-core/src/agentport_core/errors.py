from __future__ import annotations


class AgentportError(Exception):
    """Base exception for all agentport errors."""


# ── Document Errors ──────────────────────────────────────────────────

class DocumentError(AgentportError):
    """Base for errors tied to a single agent document."""


class MalformedDocumentError(DocumentError):
    """Metadata block cannot be parsed (e.g. opening marker never closed)."""


class UnknownToolError(DocumentError):
    """A source document declares a tool outside the known vocabulary."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: '{name}'")


class SchemaViolationError(DocumentError):
    """Document metadata violates schema invariants."""


class DocumentIOError(DocumentError):
    """Reading or writing a document failed."""


# ── Config Errors ────────────────────────────────────────────────────

class ConfigError(AgentportError):
    """Invalid or missing configuration."""
