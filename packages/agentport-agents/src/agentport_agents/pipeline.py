"""Pipeline driver: discovery, conversion, validation, and index regeneration."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from agentport_core.errors import (
    AgentportError,
    DocumentIOError,
    MalformedDocumentError,
    SchemaViolationError,
    UnknownToolError,
)

from agentport_agents.emitter import emit, write_document
from agentport_agents.index import DEFAULT_RULES, build_index, rules_from_config
from agentport_agents.loader import CorpusLoader
from agentport_agents.parser import parse, read_document, to_document
from agentport_agents.policy import ConversionPolicy, apply_defaults
from agentport_agents.tool_mapping import map_metadata
from agentport_agents.types import (
    Diagnostic,
    DiagnosticKind,
    SourceMetadata,
    TargetMetadata,
)
from agentport_agents.validator import AgentValidator

if TYPE_CHECKING:
    from collections.abc import Iterable

    from agentport_core.config import AgentportConfig

    from agentport_agents.index import CategoryRule
    from agentport_agents.loader import Discovery, DuplicateDocument
    from agentport_agents.smoke import SmokeResult
    from agentport_agents.types import AgentDocument

logger = logging.getLogger("agentport.agents.pipeline")

_ERROR_KINDS: tuple[tuple[type[Exception], DiagnosticKind], ...] = (
    (MalformedDocumentError, DiagnosticKind.MALFORMED_DOCUMENT),
    (UnknownToolError, DiagnosticKind.UNKNOWN_TOOL),
    (SchemaViolationError, DiagnosticKind.SCHEMA_VIOLATION),
    (DocumentIOError, DiagnosticKind.IO_FAILURE),
    (OSError, DiagnosticKind.IO_FAILURE),
)


def convert_document(
    document: AgentDocument,
    policy: ConversionPolicy | None = None,
) -> str:
    """Convert one document to the target schema and serialize it.

    Narrative documents pass through unchanged.  Documents already in the
    target schema are re-normalized under *policy*.

    Raises:
        UnknownToolError: If a source document declares an unknown tool.
    """
    metadata = document.metadata
    if metadata is None:
        return document.body
    if isinstance(metadata, SourceMetadata):
        partial = map_metadata(metadata)
    else:
        partial = TargetMetadata(
            description=metadata.description,
            capabilities=metadata.capabilities,
        )
    return emit(apply_defaults(partial, policy), document.body)


@dataclass(slots=True)
class PipelineReport:
    """Outcome of one pipeline operation."""

    mode: str
    dry_run: bool = False
    processed: list[str] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    duplicates: list[DuplicateDocument] = field(default_factory=list)
    orphans: list[Path] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    index_path: Path | None = None
    index_changed: bool = False

    @property
    def failed(self) -> list[str]:
        """Ids of documents that could not be processed at all."""
        return sorted({
            d.document_id
            for d in self.diagnostics
            if d.document_id not in self.processed
        })

    @property
    def ok(self) -> bool:
        if not self.processed:
            return False
        if self.mode == "validate":
            return not self.diagnostics
        if self.mode == "index-check":
            return not self.index_changed
        return True

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


class AgentPipeline:
    """Orchestrates the conversion of a source corpus into target documents.

    Each document is handled independently: a failure is recorded as a
    diagnostic and the batch moves on.  The index is rebuilt after every
    document of the run has been processed, and left untouched when none was.
    """

    def __init__(
        self,
        source_dir: Path,
        target_dir: Path,
        index_path: Path,
        *,
        policy: ConversionPolicy | None = None,
        validator: AgentValidator | None = None,
        rules: Iterable[CategoryRule] = DEFAULT_RULES,
        index_title: str = "Agent Index",
        index_from: str = "source",
    ) -> None:
        self.source_dir = Path(source_dir)
        self.target_dir = Path(target_dir)
        self.index_path = Path(index_path)
        self.policy = policy or ConversionPolicy()
        self.validator = validator or AgentValidator()
        self.rules = tuple(rules)
        self.index_title = index_title
        self.index_from = index_from

    @classmethod
    def from_config(
        cls, config: AgentportConfig, base_dir: Path | None = None
    ) -> AgentPipeline:
        """Build a pipeline from configuration; relative paths resolve against *base_dir*.

        Raises:
            ConfigError: If the policy or index rules are invalid.
        """
        base = Path.cwd() if base_dir is None else Path(base_dir)
        return cls(
            source_dir=base / config.paths.source_dir,
            target_dir=base / config.paths.target_dir,
            index_path=base / config.paths.index_path,
            policy=ConversionPolicy.from_config(config.policy),
            validator=AgentValidator(config.validation.max_description_length),
            rules=rules_from_config(config.index.categories),
            index_title=config.index.title,
            index_from=config.index.source,
        )

    # ── Operations ────────────────────────────────────────────

    def convert_all(self, dry_run: bool = False) -> PipelineReport:
        """Convert every source document, validate the outputs, rebuild the index."""
        report = PipelineReport(mode="convert", dry_run=dry_run)
        discovery = self._discover(self.source_dir, self.target_dir)
        report.duplicates.extend(discovery.duplicates)

        sources: list[AgentDocument] = []
        outputs: list[AgentDocument] = []
        for doc_id, path in discovery.documents.items():
            target_path = self.target_dir / f"{doc_id}.md"
            try:
                document = read_document(path)
                sources.append(document)
                text = convert_document(document, self.policy)
                if dry_run:
                    changed = _differs(target_path, text)
                else:
                    changed = write_document(target_path, text)
                converted = to_document(doc_id, parse(text), target_path)
            except (AgentportError, OSError) as exc:
                self._record_failure(report, doc_id, path, exc)
                continue

            report.processed.append(doc_id)
            (report.written if changed else report.unchanged).append(target_path)
            report.diagnostics.extend(self.validator.validate(converted))
            outputs.append(converted)

        report.orphans.extend(self._orphans(discovery))
        corpus = outputs if self.index_from == "target" else sources
        self._publish_index(report, corpus, check=dry_run)

        logger.info(
            "Converted %d document(s): %d written, %d unchanged, %d failed",
            len(report.processed),
            len(report.written),
            len(report.unchanged),
            len(report.failed),
        )
        return report

    def validate_all(self) -> PipelineReport:
        """Validate the source corpus and any existing target documents; write nothing."""
        report = PipelineReport(mode="validate")
        corpora = [self._discover(self.source_dir, self.target_dir)]
        if self.target_dir.is_dir():
            corpora.append(self._discover(self.target_dir))

        for discovery in corpora:
            report.duplicates.extend(discovery.duplicates)
            for doc_id, path in discovery.documents.items():
                try:
                    document = read_document(path)
                except (AgentportError, OSError) as exc:
                    self._record_failure(report, doc_id, path, exc)
                    continue
                report.processed.append(doc_id)
                report.diagnostics.extend(self.validator.validate(document))

        logger.info(
            "Validated %d document(s): %d diagnostic(s)",
            len(report.processed),
            len(report.diagnostics),
        )
        return report

    def rebuild_index_only(self, check: bool = False) -> PipelineReport:
        """Regenerate the index from the configured corpus.

        With *check*, nothing is written and the report records whether
        the index on disk is out of date.
        """
        report = PipelineReport(mode="index-check" if check else "index", dry_run=check)
        if self.index_from == "target":
            discovery = self._discover(self.target_dir)
        else:
            discovery = self._discover(self.source_dir, self.target_dir)
        report.duplicates.extend(discovery.duplicates)

        documents: list[AgentDocument] = []
        for doc_id, path in discovery.documents.items():
            try:
                documents.append(read_document(path))
            except (AgentportError, OSError) as exc:
                self._record_failure(report, doc_id, path, exc)
                continue
            report.processed.append(doc_id)

        self._publish_index(report, documents, check=check)
        return report

    def smoke_test(self, path: Path | None = None) -> SmokeResult:
        """Run the in-memory pipeline over one sample document."""
        from agentport_agents.smoke import run_smoke_test

        return run_smoke_test(path, policy=self.policy, validator=self.validator)

    # ── Helpers ───────────────────────────────────────────────

    def _discover(self, root: Path, *exclude: Path) -> Discovery:
        return CorpusLoader(exclude=(self.index_path, *exclude)).discover(root)

    def _publish_index(
        self,
        report: PipelineReport,
        documents: list[AgentDocument],
        *,
        check: bool,
    ) -> None:
        if not report.processed:
            logger.warning(
                "No documents processed; leaving %s untouched", self.index_path
            )
            return
        text = build_index(documents, self.rules, title=self.index_title)
        report.index_path = self.index_path
        if check:
            report.index_changed = _differs(self.index_path, text)
            return
        try:
            report.index_changed = write_document(self.index_path, text)
        except DocumentIOError as exc:
            self._record_failure(report, self.index_path.stem, self.index_path, exc)

    def _orphans(self, discovery: Discovery) -> list[Path]:
        """Target documents whose source no longer exists."""
        if not self.target_dir.is_dir():
            return []
        orphans = [
            path
            for path in sorted(self.target_dir.glob("*.md"))
            if path.stem not in discovery.documents and path != self.index_path
        ]
        for path in orphans:
            logger.warning(
                "Target document has no source: %s", path, extra={"document": path.stem}
            )
        return orphans

    @staticmethod
    def _record_failure(
        report: PipelineReport, doc_id: str, path: Path, exc: Exception
    ) -> None:
        kind = next(
            (k for cls, k in _ERROR_KINDS if isinstance(exc, cls)),
            DiagnosticKind.SCHEMA_VIOLATION,
        )
        logger.warning("Skipping %s: %s", path, exc, extra={"document": doc_id})
        report.diagnostics.append(
            Diagnostic(document_id=doc_id, kind=kind, message=str(exc), path=path)
        )


def _differs(path: Path, text: str) -> bool:
    try:
        return path.read_bytes().decode("utf-8") != text
    except (OSError, UnicodeDecodeError):
        return True
