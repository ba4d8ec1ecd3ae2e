"""Document emitter: serializes target metadata plus the preserved body."""
from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

import yaml
from agentport_core.errors import DocumentIOError, SchemaViolationError

from agentport_agents.types import Capability, TargetMetadata

logger = logging.getLogger("agentport.agents.emitter")

_MARKER = "---\n"


def metadata_to_dict(metadata: TargetMetadata) -> dict[str, Any]:
    """Lay out target metadata in the fixed emission key order.

    Raises:
        SchemaViolationError: If mode or temperature is unset, i.e. the
            record was not completed by the policy defaulter.
    """
    if metadata.mode is None or metadata.temperature is None:
        msg = "Target metadata is incomplete (mode/temperature unset); apply defaults first"
        raise SchemaViolationError(msg)
    return {
        "description": metadata.description,
        "mode": metadata.mode.value,
        "temperature": metadata.temperature,
        "tools": {
            cap.value: bool(metadata.capabilities.get(cap, False))
            for cap in Capability
        },
    }


def emit(metadata: TargetMetadata, body: str) -> str:
    """Serialize *metadata* and *body* into a target document.

    The metadata block is YAML in a fixed key order and the body follows
    the closing marker verbatim, so identical input always yields
    identical output.
    """
    block = yaml.safe_dump(
        metadata_to_dict(metadata),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )
    return f"{_MARKER}{block}{_MARKER}{body}"


def _atomic_write(path: Path, content: str) -> None:
    """Write content to path atomically using tempfile + os.replace."""
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(tmp, _file_mode(path))
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _file_mode(path: Path) -> int:
    """Mode of the file at *path*, or what a plain ``open`` would create."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_document(path: Path, text: str) -> bool:
    """Write *text* to *path* atomically.

    Returns ``False`` (and leaves the file untouched) when the existing
    content is already identical.

    Raises:
        DocumentIOError: If the file cannot be written.
    """
    try:
        if path.is_file() and path.read_bytes().decode("utf-8") == text:
            logger.debug("Unchanged: %s", path)
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write(path, text)
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot write {path}: {exc}"
        raise DocumentIOError(msg) from exc
    logger.debug("Wrote %s", path)
    return True
