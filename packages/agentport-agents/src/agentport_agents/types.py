"""Agent document types for the source and target schemas."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


# ── Vocabularies ─────────────────────────────────────────────────────

class Capability(enum.Enum):
    """Permission flags of the target schema, in emission order."""
    READ = "read"
    GREP = "grep"
    GLOB = "glob"
    EDIT = "edit"
    WRITE = "write"
    BASH = "bash"
    WEBFETCH = "webfetch"
    TODOWRITE = "todowrite"
    TODOREAD = "todoread"
    LIST = "list"
    PATCH = "patch"


class SourceTool(enum.Enum):
    """Tool names accepted in a source document's ``tools`` field."""
    READ = "Read"
    WRITE = "Write"
    EDIT = "Edit"
    MULTI_EDIT = "MultiEdit"
    BASH = "Bash"
    GLOB = "Glob"
    GREP = "Grep"
    WEB_FETCH = "WebFetch"


class AgentMode(enum.Enum):
    SUBAGENT = "subagent"


class Category(enum.Enum):
    """Index sections, in the order they appear in the index document."""
    CORE_ARCHITECTURE = "core-architecture"
    DEVELOPMENT_PATTERNS = "development-patterns"
    QUALITY_OPTIMIZATION = "quality-optimization"
    UNCATEGORIZED = "uncategorized"


class DiagnosticKind(enum.Enum):
    MALFORMED_DOCUMENT = "malformed-document"
    UNKNOWN_TOOL = "unknown-tool"
    SCHEMA_VIOLATION = "schema-violation"
    IO_FAILURE = "io-failure"


# ── Metadata ─────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class SourceMetadata:
    """Metadata block of a source agent document."""
    name: str
    description: str
    tools: frozenset[str] = frozenset()
    extra: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TargetMetadata:
    """Metadata block of a target agent document.

    The schema mapper produces a partial record (``mode`` and
    ``temperature`` unset, only derived capabilities present); the policy
    defaulter completes it.
    """
    description: str
    mode: AgentMode | None = None
    temperature: float | None = None
    capabilities: dict[Capability, bool] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AgentDocument:
    """A single agent document: identity, metadata, and verbatim body.

    ``metadata`` is ``None`` for narrative documents that carry no
    metadata block.
    """
    id: str
    metadata: SourceMetadata | TargetMetadata | None
    body: str
    path: Path | None = None
    # metadata mapping exactly as parsed, kept for validation
    fields: dict[str, object] = field(default_factory=dict)

    @property
    def is_narrative(self) -> bool:
        return self.metadata is None


@dataclass(frozen=True, slots=True)
class ParsedDocument:
    """Raw output of the parser: the metadata mapping and the body."""
    metadata: dict[str, object]
    body: str
    has_metadata_block: bool = False
    duplicate_fields: tuple[str, ...] = ()


# ── Derived records ──────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class IndexEntry:
    id: str
    description: str
    category: Category


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single finding about one document."""
    document_id: str
    kind: DiagnosticKind
    message: str
    path: Path | None = None

    def __str__(self) -> str:
        return f"{self.document_id}: [{self.kind.value}] {self.message}"
