"""Agentport Agents: parsing, schema mapping, validation, and indexing of agent documents."""
from __future__ import annotations

from agentport_agents.emitter import emit, write_document
from agentport_agents.index import DEFAULT_RULES, CategoryRule, build_index, categorize
from agentport_agents.loader import CorpusLoader, Discovery, DuplicateDocument
from agentport_agents.parser import parse, read_document, to_document
from agentport_agents.pipeline import AgentPipeline, PipelineReport, convert_document
from agentport_agents.policy import ConversionPolicy, apply_defaults
from agentport_agents.smoke import SmokeCheck, SmokeResult, run_smoke_test
from agentport_agents.tool_mapping import TOOL_MAP, map_capabilities, map_metadata
from agentport_agents.types import (
    AgentDocument,
    AgentMode,
    Capability,
    Category,
    Diagnostic,
    DiagnosticKind,
    IndexEntry,
    ParsedDocument,
    SourceMetadata,
    SourceTool,
    TargetMetadata,
)
from agentport_agents.validator import AgentValidator

__all__ = [
    "DEFAULT_RULES",
    "TOOL_MAP",
    "AgentDocument",
    "AgentMode",
    "AgentPipeline",
    "AgentValidator",
    "Capability",
    "Category",
    "CategoryRule",
    "ConversionPolicy",
    "CorpusLoader",
    "Diagnostic",
    "DiagnosticKind",
    "Discovery",
    "DuplicateDocument",
    "IndexEntry",
    "ParsedDocument",
    "PipelineReport",
    "SmokeCheck",
    "SmokeResult",
    "SourceMetadata",
    "SourceTool",
    "TargetMetadata",
    "apply_defaults",
    "build_index",
    "categorize",
    "convert_document",
    "emit",
    "map_capabilities",
    "map_metadata",
    "parse",
    "read_document",
    "run_smoke_test",
    "to_document",
    "write_document",
]
