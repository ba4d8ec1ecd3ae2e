"""Agent document parser: splits the metadata block from the verbatim body."""
from __future__ import annotations

import contextlib
import logging
import re
from collections import Counter
from typing import TYPE_CHECKING, Any

import yaml
from agentport_core.errors import DocumentIOError, MalformedDocumentError

from agentport_agents.tool_mapping import parse_tools
from agentport_agents.types import (
    AgentDocument,
    AgentMode,
    Capability,
    ParsedDocument,
    SourceMetadata,
    TargetMetadata,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("agentport.agents.parser")

_MARKER = "---"
_TOP_LEVEL_KEY = re.compile(r"^([A-Za-z_][\w-]*)\s*:")
_SOURCE_FIELDS = frozenset({"name", "description", "tools"})


def parse(raw_text: str) -> ParsedDocument:
    """Split *raw_text* into a metadata mapping and the body.

    The metadata block opens with a ``---`` line at the very start of the
    text and closes at the next ``---`` line.  Everything after the
    closing line is the body, byte for byte.  Text that does not open
    with the marker is a narrative document: empty metadata, the whole
    text as body.

    Raises:
        MalformedDocumentError: If the block is opened but never closed,
            or if it does not describe a mapping.
    """
    lines = raw_text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != _MARKER:
        return ParsedDocument(metadata={}, body=raw_text)

    closing = next(
        (i for i in range(1, len(lines)) if lines[i].rstrip() == _MARKER),
        None,
    )
    if closing is None:
        msg = "Metadata block opened with '---' but never closed"
        raise MalformedDocumentError(msg)

    block = "".join(lines[1:closing])
    body = "".join(lines[closing + 1 :])
    return ParsedDocument(
        metadata=_parse_block(block),
        body=body,
        has_metadata_block=True,
        duplicate_fields=_duplicate_keys(block),
    )


def _parse_block(block: str) -> dict[str, Any]:
    """Parse the metadata block with safe_load, falling back to a line scan.

    Source descriptions routinely contain unquoted ``: `` sequences that
    YAML rejects; those blocks are read line by line instead.  Unquoted
    `` #`` inside a value is kept as text rather than read as a comment.
    """
    try:
        result = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        logger.debug("YAML rejected metadata block, scanning lines: %s", exc)
        return _scan_lines(block)

    if result is None:
        return {}
    if not isinstance(result, dict):
        msg = f"Metadata block must be a mapping, got {type(result).__name__}"
        raise MalformedDocumentError(msg)
    meta = {str(k): v for k, v in result.items()}
    if " #" in block:
        _restore_hash_text(meta, _scan_lines(block))
    return meta


def _restore_hash_text(meta: dict[str, Any], scanned: dict[str, Any]) -> None:
    """Put back the `` #...`` tail YAML dropped from plain string values."""
    for key, value in meta.items():
        raw = scanned.get(key)
        if (
            isinstance(value, str)
            and isinstance(raw, str)
            and raw != value
            and " #" in raw
            and raw.startswith(value)
        ):
            logger.debug("Keeping '#' text in metadata field %r", key)
            meta[key] = raw


def _scan_lines(block: str) -> dict[str, Any]:
    """Line-oriented ``key: value`` reader.

    Indented ``key: value`` lines under an empty top-level value become a
    nested mapping, indented ``- item`` lines become a list.  Later
    duplicates overwrite earlier ones.
    """
    meta: dict[str, Any] = {}
    current: str | None = None
    for line in block.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if not line[0].isspace():
            key, sep, value = line.partition(":")
            if not sep:
                current = None
                continue
            current = key.strip()
            meta[current] = _unquote(value.strip())
            continue
        if current is None:
            continue
        if meta[current] != "" and not isinstance(meta[current], (dict, list)):
            continue
        item = line.strip()
        if item.startswith("- "):
            if not isinstance(meta[current], list):
                meta[current] = []
            meta[current].append(_unquote(item[2:].strip()))
        elif ":" in item:
            if not isinstance(meta[current], dict):
                meta[current] = {}
            sub_key, _, sub_value = item.partition(":")
            meta[current][sub_key.strip()] = _scalar(_unquote(sub_value.strip()))
    return meta


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _scalar(value: str) -> Any:
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def _duplicate_keys(block: str) -> tuple[str, ...]:
    counts = Counter(
        match.group(1)
        for match in map(_TOP_LEVEL_KEY.match, block.splitlines())
        if match
    )
    return tuple(key for key, count in counts.items() if count > 1)


# ── Document construction ────────────────────────────────────

def is_target_shape(metadata: dict[str, Any]) -> bool:
    """True when a metadata mapping follows the target schema."""
    return "mode" in metadata or isinstance(metadata.get("tools"), dict)


def to_document(
    doc_id: str,
    parsed: ParsedDocument,
    path: Path | None = None,
) -> AgentDocument:
    """Interpret a parsed document under the schema its metadata follows."""
    if not parsed.has_metadata_block:
        return AgentDocument(id=doc_id, metadata=None, body=parsed.body, path=path)

    meta = parsed.metadata
    metadata: SourceMetadata | TargetMetadata
    if is_target_shape(meta):
        metadata = _target_from_raw(meta)
    else:
        metadata = _source_from_raw(meta)
    return AgentDocument(
        id=doc_id,
        metadata=metadata,
        body=parsed.body,
        path=path,
        fields=dict(meta),
    )


def read_document(path: Path) -> AgentDocument:
    """Read and parse the agent document at *path*.

    The document id is the file name without its extension.

    Raises:
        DocumentIOError: If the file cannot be read.
        MalformedDocumentError: If its metadata block is malformed.
    """
    try:
        text = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise DocumentIOError(msg) from exc

    parsed = parse(text)
    if parsed.duplicate_fields:
        logger.warning(
            "Duplicate metadata field(s) %s in %s (last occurrence wins)",
            ", ".join(parsed.duplicate_fields),
            path,
        )
    return to_document(path.stem, parsed, path)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _source_from_raw(meta: dict[str, Any]) -> SourceMetadata:
    return SourceMetadata(
        name=_as_text(meta.get("name")),
        description=_as_text(meta.get("description")),
        tools=frozenset(parse_tools(meta.get("tools"))),
        extra={
            str(k): _as_text(v) for k, v in meta.items() if k not in _SOURCE_FIELDS
        },
    )


def _target_from_raw(meta: dict[str, Any]) -> TargetMetadata:
    """Build a target record, keeping only well-typed values.

    Ill-typed values are left out here; the validator reports them from
    the raw fields kept on the document.
    """
    mode: AgentMode | None = None
    with contextlib.suppress(ValueError):
        mode = AgentMode(meta.get("mode"))

    temperature = meta.get("temperature")
    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        temperature = None

    tools = meta.get("tools")
    capabilities: dict[Capability, bool] = {}
    if isinstance(tools, dict):
        for cap in Capability:
            value = tools.get(cap.value)
            if isinstance(value, bool):
                capabilities[cap] = value

    return TargetMetadata(
        description=_as_text(meta.get("description")),
        mode=mode,
        temperature=float(temperature) if temperature is not None else None,
        capabilities=capabilities,
    )
