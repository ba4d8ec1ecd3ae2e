"""Index builder: regenerates the categorized summary of all agent documents."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from agentport_core.errors import ConfigError

from agentport_agents.types import Category, IndexEntry, SourceMetadata

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from agentport_agents.types import AgentDocument

logger = logging.getLogger("agentport.agents.index")

_HEADINGS: dict[Category, str] = {
    Category.CORE_ARCHITECTURE: "Core Architecture",
    Category.DEVELOPMENT_PATTERNS: "Development Patterns",
    Category.QUALITY_OPTIMIZATION: "Quality & Optimization",
    Category.UNCATEGORIZED: "Uncategorized",
}

_GENERATED_NOTICE = (
    "<!-- Generated by agentport from the agent corpus. "
    "Edits are overwritten on the next run. -->"
)


@dataclass(frozen=True, slots=True)
class CategoryRule:
    """Assigns *category* to ids containing any of *keywords*."""
    category: Category
    keywords: tuple[str, ...]

    def matches(self, doc_id: str) -> bool:
        return any(keyword in doc_id for keyword in self.keywords)


DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        Category.CORE_ARCHITECTURE,
        (
            "setup", "event", "subscription", "effect", "interceptor",
            "db", "state", "architecture",
        ),
    ),
    CategoryRule(
        Category.DEVELOPMENT_PATTERNS,
        (
            "component", "view", "-form", "rout", "http", "api",
            "pattern", "data",
        ),
    ),
    CategoryRule(
        Category.QUALITY_OPTIMIZATION,
        (
            "test", "debug", "performance", "optimi", "review",
            "security", "accessibility", "refactor", "lint", "quality",
        ),
    ),
)


def rules_from_config(categories: Mapping[str, list[str]]) -> tuple[CategoryRule, ...]:
    """Build category rules from a ``category -> keywords`` mapping.

    An empty mapping yields the built-in rules.  Rules keep the mapping's
    order, which decides ties (first match wins).

    Raises:
        ConfigError: If a category name is unknown.
    """
    if not categories:
        return DEFAULT_RULES
    rules: list[CategoryRule] = []
    for name, keywords in categories.items():
        try:
            category = Category(name)
        except ValueError:
            msg = f"Unknown index category: '{name}'"
            raise ConfigError(msg) from None
        rules.append(
            CategoryRule(category, tuple(str(k).lower() for k in keywords))
        )
    return tuple(rules)


def categorize(doc_id: str, rules: Iterable[CategoryRule] = DEFAULT_RULES) -> Category:
    """First matching rule wins; no match falls into ``uncategorized``."""
    for rule in rules:
        if rule.matches(doc_id):
            return rule.category
    return Category.UNCATEGORIZED


def summarize(document: AgentDocument) -> str:
    """One-line description for the index.

    An explicit ``summary`` field wins; otherwise the first non-empty line
    of the description.  Literal ``\\n`` escapes, common in single-line
    source descriptions, count as line breaks.
    """
    metadata = document.metadata
    if metadata is None:
        return ""
    if isinstance(metadata, SourceMetadata) and metadata.extra.get("summary"):
        return metadata.extra["summary"].strip()
    text = metadata.description.replace("\\n", "\n")
    return next((line.strip() for line in text.splitlines() if line.strip()), "")


def index_entries(
    documents: Iterable[AgentDocument],
    rules: Iterable[CategoryRule] = DEFAULT_RULES,
) -> list[IndexEntry]:
    """Derive index entries, sorted by id.  Narrative documents are skipped."""
    rules = tuple(rules)
    entries = [
        IndexEntry(
            id=document.id,
            description=summarize(document),
            category=categorize(document.id, rules),
        )
        for document in documents
        if not document.is_narrative
    ]
    return sorted(entries, key=lambda e: e.id)


def build_index(
    documents: Iterable[AgentDocument],
    rules: Iterable[CategoryRule] = DEFAULT_RULES,
    title: str = "Agent Index",
) -> str:
    """Render the full index document from scratch.

    The three primary categories always appear, in fixed order;
    ``uncategorized`` appears only when some document matched no rule.
    Entries follow their heading directly, so an empty section is just
    its heading.
    Output depends only on the documents, never on previous runs.
    """
    entries = index_entries(documents, rules)
    grouped: dict[Category, list[IndexEntry]] = {category: [] for category in Category}
    for entry in entries:
        grouped[entry.category].append(entry)

    uncategorized = grouped[Category.UNCATEGORIZED]
    if uncategorized:
        logger.warning(
            "%d agent(s) matched no category: %s",
            len(uncategorized),
            ", ".join(e.id for e in uncategorized),
        )

    lines = [f"# {title}", "", _GENERATED_NOTICE, ""]
    for category in Category:
        section = grouped[category]
        if category is Category.UNCATEGORIZED and not section:
            continue
        lines.append(f"## {_HEADINGS[category]}")
        lines.extend(_format_entry(entry) for entry in section)
        lines.append("")
    return "\n".join(lines).rstrip("\n") + "\n"


def _format_entry(entry: IndexEntry) -> str:
    if entry.description:
        return f"- **{entry.id}**: {entry.description}"
    return f"- **{entry.id}**"
