"""Corpus discovery: finds agent documents on disk and de-duplicates them by id."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger("agentport.agents.loader")

_DOCUMENT_GLOB = "*.md"


@dataclass(frozen=True, slots=True)
class DuplicateDocument:
    """A document skipped because an earlier file already claimed its id."""
    id: str
    path: Path
    kept: Path


@dataclass(frozen=True, slots=True)
class Discovery:
    """Result of scanning one corpus directory."""
    root: Path
    documents: dict[str, Path] = field(default_factory=dict)
    duplicates: list[DuplicateDocument] = field(default_factory=list)


class CorpusLoader:
    """Discovers agent documents under a directory tree.

    Every ``*.md`` file is a candidate; its id is the file name without
    extension.  Files are visited in sorted path order and the first file
    to claim an id wins: later files with the same id are reported as
    duplicates and skipped.  Hidden directories and the *exclude* paths
    (the index document, an output directory nested in the corpus) are
    never scanned.
    """

    def __init__(self, exclude: Iterable[Path] = ()) -> None:
        self._exclude: list[Path] = [
            Path(p).expanduser().resolve() for p in exclude
        ]

    def discover(self, root: Path) -> Discovery:
        """Scan *root* recursively and return documents keyed by id."""
        resolved = root.expanduser().resolve()
        discovery = Discovery(root=resolved)
        if not resolved.is_dir():
            logger.warning("Corpus directory does not exist: %s", resolved)
            return discovery

        for path in sorted(resolved.rglob(_DOCUMENT_GLOB)):
            if not path.is_file() or self._is_excluded(resolved, path):
                continue
            doc_id = path.stem
            kept = discovery.documents.get(doc_id)
            if kept is not None:
                logger.warning(
                    "Duplicate agent id '%s' at %s (keeping %s)",
                    doc_id,
                    path,
                    kept,
                    extra={"document": doc_id},
                )
                discovery.duplicates.append(
                    DuplicateDocument(id=doc_id, path=path, kept=kept)
                )
                continue
            discovery.documents[doc_id] = path

        logger.info(
            "Discovered %d document(s) under %s", len(discovery.documents), resolved
        )
        return discovery

    def _is_excluded(self, root: Path, path: Path) -> bool:
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts[:-1]):
            return True
        return any(path == ex or ex in path.parents for ex in self._exclude)
