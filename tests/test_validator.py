"""Tests for AgentValidator."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
from agentport_agents.parser import parse, to_document
from agentport_agents.pipeline import convert_document
from agentport_agents.types import (
    AgentDocument,
    AgentMode,
    Capability,
    DiagnosticKind,
    SourceMetadata,
    TargetMetadata,
)
from agentport_agents.validator import AgentValidator
from agentport_core.errors import SchemaViolationError


def _source(doc_id: str = "re-frame-db-designer", **kwargs) -> AgentDocument:
    defaults = {
        "name": doc_id,
        "description": "Shapes app-db.",
        "tools": frozenset({"Read", "Edit"}),
    }
    defaults.update(kwargs)
    return AgentDocument(id=doc_id, metadata=SourceMetadata(**defaults), body="Body\n")


def _messages(diagnostics) -> list[str]:
    return [d.message for d in diagnostics]


class TestSourceValidation:
    def test_valid(self) -> None:
        assert AgentValidator().validate(_source()) == []

    def test_bad_id(self) -> None:
        diagnostics = AgentValidator().validate(_source("Re_Frame", name="Re_Frame"))

        assert len(diagnostics) == 1
        assert diagnostics[0].kind is DiagnosticKind.SCHEMA_VIOLATION
        assert "lowercase" in diagnostics[0].message

    def test_missing_description(self) -> None:
        diagnostics = AgentValidator().validate(_source(description=""))

        assert _messages(diagnostics) == ["Agent description is required."]

    def test_description_too_long(self) -> None:
        validator = AgentValidator(max_description_length=10)
        diagnostics = validator.validate(_source(description="x" * 11))

        assert "exceeds 10 characters" in diagnostics[0].message

    def test_missing_name(self) -> None:
        diagnostics = AgentValidator().validate(_source(name=""))

        assert _messages(diagnostics) == ["Agent name is required."]

    def test_name_must_match_id(self) -> None:
        diagnostics = AgentValidator().validate(_source(name="something-else"))

        assert "does not match" in diagnostics[0].message

    def test_unknown_tools(self) -> None:
        diagnostics = AgentValidator().validate(
            _source(tools=frozenset({"Read", "Zap", "Delete"}))
        )

        assert [d.kind for d in diagnostics] == [DiagnosticKind.UNKNOWN_TOOL] * 2
        assert _messages(diagnostics) == ["Unknown tool 'Delete'.", "Unknown tool 'Zap'."]

    def test_collects_every_finding(self) -> None:
        diagnostics = AgentValidator().validate(
            _source("BadId", name="", description="", tools=frozenset({"Nope"}))
        )

        assert len(diagnostics) == 4

    def test_diagnostic_carries_path(self) -> None:
        document = AgentDocument(
            id="a",
            metadata=SourceMetadata(name="a", description=""),
            body="",
            path=Path("agents/a.md"),
        )
        diagnostic = AgentValidator().validate(document)[0]

        assert diagnostic.path == Path("agents/a.md")
        assert str(diagnostic) == "a: [schema-violation] Agent description is required."


class TestTargetValidation:
    def test_converted_output_is_valid(self) -> None:
        source = to_document("re-frame-db-designer", parse(textwrap.dedent("""\
            ---
            name: re-frame-db-designer
            description: Shapes app-db.
            tools: Read, Edit, MultiEdit
            ---
            Body
        """)))
        target = to_document("re-frame-db-designer", parse(convert_document(source)))

        assert AgentValidator().validate(target) == []

    def test_in_memory_record(self) -> None:
        document = AgentDocument(
            id="a",
            metadata=TargetMetadata(
                description="d",
                mode=AgentMode.SUBAGENT,
                temperature=0.3,
                capabilities={cap: False for cap in Capability},
            ),
            body="",
        )
        assert AgentValidator().validate(document) == []

    def test_missing_capability_flags(self) -> None:
        text = "---\ndescription: d\nmode: subagent\ntemperature: 0.3\ntools:\n  read: true\n---\n"
        diagnostics = AgentValidator().validate(to_document("a", parse(text)))

        assert len(diagnostics) == 1
        assert diagnostics[0].message.startswith("Missing capability flag(s): grep, glob, edit")

    def test_ill_typed_fields(self) -> None:
        flags = "".join(f"  {cap.value}: false\n" for cap in Capability if cap is not Capability.BASH)
        text = (
            "---\ndescription: d\nmode: primary\ntemperature: 2\ntools:\n"
            f"{flags}  bash: sometimes\n  teleport: true\n---\n"
        )
        messages = _messages(AgentValidator().validate(to_document("a", parse(text))))

        assert any(m.startswith("Agent mode must be one of subagent") for m in messages)
        assert any(m.startswith("Agent temperature must be a number") for m in messages)
        assert "Capability 'bash' must be true or false: 'sometimes'." in messages
        assert "Unknown capability name(s): teleport." in messages
        assert len(messages) == 4

    def test_tools_not_a_mapping(self) -> None:
        text = "---\ndescription: d\nmode: subagent\ntemperature: 0.3\ntools: [read]\n---\n"
        messages = _messages(AgentValidator().validate(to_document("a", parse(text))))

        assert messages == ["Agent tools must be a mapping of capability to boolean."]

    def test_boolean_temperature_rejected(self) -> None:
        flags = "".join(f"  {cap.value}: false\n" for cap in Capability)
        text = f"---\ndescription: d\nmode: subagent\ntemperature: true\ntools:\n{flags}---\n"
        messages = _messages(AgentValidator().validate(to_document("a", parse(text))))

        assert messages == ["Agent temperature must be a number within [0, 1]: True."]


class TestNarrativeAndStrict:
    def test_narrative_always_valid(self) -> None:
        document = to_document("NOTES", parse("# Free-form notes\n"))
        assert AgentValidator().validate(document) == []

    def test_validate_strict_raises(self) -> None:
        with pytest.raises(SchemaViolationError, match="description is required"):
            AgentValidator().validate_strict(_source(description=""))

    def test_validate_strict_passes(self) -> None:
        AgentValidator().validate_strict(_source())
