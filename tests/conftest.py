from __future__ import annotations

import logging
import textwrap
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


SOURCE_TEMPLATE = textwrap.dedent("""\
    ---
    name: {name}
    description: {description}
    tools: {tools}
    ---

    You are the {name} agent.
""")


def source_text(
    name: str,
    description: str = "Helps with things.",
    tools: str = "Read, Grep",
) -> str:
    return SOURCE_TEMPLATE.format(name=name, description=description, tools=tools)


def write_agent(directory: Path, name: str, content: str | None = None, **kwargs) -> Path:
    """Write an agent document named after *name* and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.md"
    path.write_text(content if content is not None else source_text(name, **kwargs), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_agentport_logger():
    """Drop handlers installed by setup_logging so each test starts clean."""
    yield
    logger = logging.getLogger("agentport")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    """A small source corpus under tmp_path/agents."""
    source = tmp_path / "agents"
    write_agent(source, "re-frame-event-handler", tools="Read, Write, Edit, MultiEdit, Bash")
    write_agent(source, "reagent-component-builder", tools="Read, Write, Edit")
    write_agent(source, "re-frame-test-writer", tools="Read, Bash, Grep, Glob")
    return source
