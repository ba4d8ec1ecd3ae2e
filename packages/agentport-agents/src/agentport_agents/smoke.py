"""Smoke test: runs the whole conversion in memory over one sample document."""
from __future__ import annotations

import logging
import textwrap
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agentport_core.errors import AgentportError

from agentport_agents.parser import parse, read_document, to_document
from agentport_agents.pipeline import convert_document
from agentport_agents.policy import ConversionPolicy
from agentport_agents.types import Capability
from agentport_agents.validator import AgentValidator

if TYPE_CHECKING:
    from pathlib import Path

    from agentport_agents.types import AgentDocument

logger = logging.getLogger("agentport.agents.smoke")

SAMPLE_ID = "re-frame-event-handler"

SAMPLE_DOCUMENT = textwrap.dedent("""\
    ---
    name: re-frame-event-handler
    description: Designs and reviews re-frame event handlers and their effects.
    tools: Read, Write, Edit, MultiEdit, Bash, Glob, Grep
    ---

    You are an expert in re-frame event handlers.

    When asked to add an event, register it with `reg-event-fx`, keep the
    handler pure, and describe side effects as data.
""")

# Capability map the built-in sample must convert to under the default policy.
SAMPLE_CAPABILITIES: dict[Capability, bool] = {
    Capability.READ: True,
    Capability.GREP: True,
    Capability.GLOB: True,
    Capability.EDIT: True,
    Capability.WRITE: True,
    Capability.BASH: True,
    Capability.WEBFETCH: False,
    Capability.TODOWRITE: False,
    Capability.TODOREAD: False,
    Capability.LIST: False,
    Capability.PATCH: False,
}


@dataclass(frozen=True, slots=True)
class SmokeCheck:
    name: str
    passed: bool
    detail: str = ""


@dataclass(frozen=True, slots=True)
class SmokeResult:
    document_id: str
    checks: list[SmokeCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return bool(self.checks) and all(c.passed for c in self.checks)


def run_smoke_test(
    path: Path | None = None,
    *,
    policy: ConversionPolicy | None = None,
    validator: AgentValidator | None = None,
) -> SmokeResult:
    """Parse, convert, re-parse, and validate one document without writing.

    Uses the built-in sample when *path* is ``None``; the capability map
    is only compared against a known expectation for the sample.
    """
    policy = policy or ConversionPolicy()
    validator = validator or AgentValidator()
    checks: list[SmokeCheck] = []

    try:
        if path is None:
            source = to_document(SAMPLE_ID, parse(SAMPLE_DOCUMENT))
        else:
            source = read_document(path)
    except AgentportError as exc:
        return SmokeResult(
            document_id=SAMPLE_ID if path is None else path.stem,
            checks=[SmokeCheck("parse", False, str(exc))],
        )
    checks.append(SmokeCheck("parse", True))

    try:
        first = convert_document(source, policy)
        second = convert_document(source, policy)
    except AgentportError as exc:
        checks.append(SmokeCheck("convert", False, str(exc)))
        return SmokeResult(document_id=source.id, checks=checks)
    checks.append(SmokeCheck("convert", True))
    checks.append(
        SmokeCheck(
            "idempotent",
            first == second,
            "" if first == second else "two runs produced different output",
        )
    )

    converted = to_document(source.id, parse(first))
    checks.append(
        SmokeCheck(
            "body preserved",
            converted.body == source.body,
            "" if converted.body == source.body else "body changed during conversion",
        )
    )

    diagnostics = validator.validate(converted)
    checks.append(
        SmokeCheck(
            "valid output",
            not diagnostics,
            "; ".join(d.message for d in diagnostics),
        )
    )

    if path is None:
        checks.append(_check_sample_capabilities(converted, policy))

    result = SmokeResult(document_id=source.id, checks=checks)
    logger.info("Smoke test %s for %s", "passed" if result.passed else "failed", source.id)
    return result


def _check_sample_capabilities(
    converted: AgentDocument, policy: ConversionPolicy
) -> SmokeCheck:
    capabilities = getattr(converted.metadata, "capabilities", {})
    mismatched = [
        cap.value
        for cap, expected in SAMPLE_CAPABILITIES.items()
        if capabilities.get(cap) is not (expected and cap not in policy.disabled)
    ]
    return SmokeCheck(
        "capabilities",
        not mismatched,
        f"unexpected flag(s): {', '.join(mismatched)}" if mismatched else "",
    )
