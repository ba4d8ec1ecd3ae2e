"""Agent document validation: checks either schema and collects diagnostics."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from agentport_core.errors import SchemaViolationError

from agentport_agents.tool_mapping import is_known_tool
from agentport_agents.types import (
    AgentMode,
    Capability,
    Diagnostic,
    DiagnosticKind,
    SourceMetadata,
    TargetMetadata,
)

if TYPE_CHECKING:
    from agentport_agents.types import AgentDocument

_ID_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")
DEFAULT_DESCRIPTION_MAX_LENGTH = 1024
_CAPABILITY_NAMES = [cap.value for cap in Capability]
_MODE_NAMES = [mode.value for mode in AgentMode]


class AgentValidator:
    """Validates an AgentDocument against the source or target schema.

    Every check runs; all findings are returned together.  Narrative
    documents (no metadata block) are always valid.
    """

    def __init__(
        self, max_description_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH
    ) -> None:
        self._max_description_length = max_description_length

    def validate(self, document: AgentDocument) -> list[Diagnostic]:
        """Return a list of diagnostics.

        An empty list means the document is valid.
        """
        metadata = document.metadata
        if metadata is None:
            return []

        errors: list[str] = []

        # Id check
        if not _ID_PATTERN.match(document.id):
            errors.append(
                f"Agent id must be lowercase alphanumeric with hyphens: "
                f"'{document.id}'."
            )

        # Description checks
        if not metadata.description:
            errors.append("Agent description is required.")
        elif len(metadata.description) > self._max_description_length:
            errors.append(
                f"Agent description exceeds {self._max_description_length} "
                f"characters ({len(metadata.description)} chars)."
            )

        if isinstance(metadata, TargetMetadata):
            errors.extend(self._check_target(document, metadata))
        else:
            errors.extend(self._check_source_name(document, metadata))

        diagnostics = [
            self._diagnostic(document, DiagnosticKind.SCHEMA_VIOLATION, e)
            for e in errors
        ]

        # Tool vocabulary check (source schema only)
        if isinstance(metadata, SourceMetadata):
            diagnostics.extend(
                self._diagnostic(
                    document,
                    DiagnosticKind.UNKNOWN_TOOL,
                    f"Unknown tool '{tool}'.",
                )
                for tool in sorted(metadata.tools)
                if not is_known_tool(tool)
            )

        return diagnostics

    def validate_strict(self, document: AgentDocument) -> None:
        """Validate and raise SchemaViolationError if invalid.

        Raises:
            SchemaViolationError: With all validation messages joined.
        """
        diagnostics = self.validate(document)
        if diagnostics:
            combined = "; ".join(d.message for d in diagnostics)
            msg = f"Agent '{document.id}' validation failed: {combined}"
            raise SchemaViolationError(msg)

    # ── Schema-specific checks ────────────────────────────────

    @staticmethod
    def _check_source_name(
        document: AgentDocument, metadata: SourceMetadata
    ) -> list[str]:
        if not metadata.name:
            return ["Agent name is required."]
        if metadata.name != document.id:
            return [
                f"Agent name '{metadata.name}' does not match its file "
                f"name '{document.id}'."
            ]
        return []

    @staticmethod
    def _check_target(
        document: AgentDocument, metadata: TargetMetadata
    ) -> list[str]:
        mode, temperature, tools = _target_fields(document, metadata)
        errors: list[str] = []

        if mode not in _MODE_NAMES:
            errors.append(
                f"Agent mode must be one of {', '.join(_MODE_NAMES)}: {mode!r}."
            )

        if (
            isinstance(temperature, bool)
            or not isinstance(temperature, (int, float))
            or not 0.0 <= temperature <= 1.0
        ):
            errors.append(
                f"Agent temperature must be a number within [0, 1]: {temperature!r}."
            )

        if not isinstance(tools, dict):
            errors.append("Agent tools must be a mapping of capability to boolean.")
            return errors

        missing = [name for name in _CAPABILITY_NAMES if name not in tools]
        if missing:
            errors.append(f"Missing capability flag(s): {', '.join(missing)}.")
        for name in _CAPABILITY_NAMES:
            if name in tools and not isinstance(tools[name], bool):
                errors.append(
                    f"Capability '{name}' must be true or false: {tools[name]!r}."
                )
        unknown = sorted(str(k) for k in tools if k not in _CAPABILITY_NAMES)
        if unknown:
            errors.append(f"Unknown capability name(s): {', '.join(unknown)}.")
        return errors

    @staticmethod
    def _diagnostic(
        document: AgentDocument, kind: DiagnosticKind, message: str
    ) -> Diagnostic:
        return Diagnostic(
            document_id=document.id,
            kind=kind,
            message=message,
            path=document.path,
        )


def _target_fields(
    document: AgentDocument, metadata: TargetMetadata
) -> tuple[Any, Any, Any]:
    """Mode, temperature, and tools as they appear in the document.

    Parsed documents keep their raw fields so ill-typed values can be
    reported; documents built in memory fall back to the typed record.
    """
    if document.fields:
        return (
            document.fields.get("mode"),
            document.fields.get("temperature"),
            document.fields.get("tools"),
        )
    return (
        metadata.mode.value if metadata.mode is not None else None,
        metadata.temperature,
        {cap.value: value for cap, value in metadata.capabilities.items()},
    )
