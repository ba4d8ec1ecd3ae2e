"""Tool mapping: translates source tool names to target capabilities."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from agentport_core.errors import UnknownToolError

from agentport_agents.types import Capability, SourceTool, TargetMetadata

if TYPE_CHECKING:
    from collections.abc import Iterable

    from agentport_agents.types import SourceMetadata

logger = logging.getLogger("agentport.agents.tool_mapping")

# ── Tool map ──────────────────────────────────────────────────

# Every source tool maps to exactly one capability; Edit and MultiEdit
# both map to ``edit``.
TOOL_MAP: dict[SourceTool, Capability] = {
    SourceTool.READ: Capability.READ,
    SourceTool.WRITE: Capability.WRITE,
    SourceTool.EDIT: Capability.EDIT,
    SourceTool.MULTI_EDIT: Capability.EDIT,
    SourceTool.BASH: Capability.BASH,
    SourceTool.GLOB: Capability.GLOB,
    SourceTool.GREP: Capability.GREP,
    SourceTool.WEB_FETCH: Capability.WEBFETCH,
}

_BY_NAME: dict[str, SourceTool] = {tool.value: tool for tool in SourceTool}


def lookup_tool(name: str) -> SourceTool:
    """Resolve a source tool name (case-sensitive).

    Raises:
        UnknownToolError: If *name* is not in the source vocabulary.
    """
    tool = _BY_NAME.get(name)
    if tool is None:
        raise UnknownToolError(name)
    return tool


def is_known_tool(name: str) -> bool:
    return name in _BY_NAME


def parse_tools(value: Any) -> list[str]:
    """Split a ``tools`` field into individual tool names.

    Accepts the comma-separated string form (``Read, Write, Bash``) and
    the YAML list form.  Blank entries are dropped; order is preserved.
    """
    if value is None:
        return []
    items = value if isinstance(value, list) else str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


def map_capabilities(tools: Iterable[str]) -> dict[Capability, bool]:
    """Map source tool names to the capabilities they enable.

    The result depends only on the set of names: order and repetition
    are irrelevant.  Only enabled capabilities appear in the result.

    Raises:
        UnknownToolError: On the first unrecognized tool, in sorted order
            so the reported name is stable.
    """
    capabilities: dict[Capability, bool] = {}
    for name in sorted(set(tools)):
        capabilities[TOOL_MAP[lookup_tool(name)]] = True
    return {cap: True for cap in Capability if cap in capabilities}


def map_metadata(source: SourceMetadata) -> TargetMetadata:
    """Translate source metadata into a partial target record.

    Only ``description`` and the derived capabilities are filled in;
    mode, temperature, and the remaining capabilities are left to the
    policy defaulter.
    """
    capabilities = map_capabilities(source.tools)
    logger.debug(
        "Mapped %d tool(s) of '%s' to %d capability(ies)",
        len(source.tools),
        source.name,
        len(capabilities),
    )
    return TargetMetadata(
        description=source.description,
        capabilities=capabilities,
    )


def collapsed_tools() -> dict[Capability, list[SourceTool]]:
    """Capabilities that more than one source tool maps onto."""
    sources: dict[Capability, list[SourceTool]] = {}
    for tool, cap in TOOL_MAP.items():
        sources.setdefault(cap, []).append(tool)
    return {cap: tools for cap, tools in sources.items() if len(tools) > 1}
