"""Resolves effective configuration from config files and global CLI options."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

import typer
from agentport_agents import AgentPipeline
from agentport_core.config import AgentportConfig
from agentport_core.errors import ConfigError
from agentport_core.logging import get_logger, setup_logging
from rich.console import Console
from rich.markup import escape

console = Console()
logger = get_logger("cli")


@dataclass(frozen=True, slots=True)
class CLIState:
    """Global options captured by the root callback."""
    config_path: Path | None = None
    source_dir: str | None = None
    target_dir: str | None = None
    index_path: str | None = None
    log_level: str | None = None
    json_logs: bool = False


def load_config(state: CLIState) -> AgentportConfig:
    """Load layered config (or an explicit file) and apply CLI path overrides."""
    if state.config_path is not None:
        if not state.config_path.is_file():
            msg = f"Config file not found: {state.config_path}"
            raise ConfigError(msg)
        config = AgentportConfig.from_toml(state.config_path)
    else:
        config = AgentportConfig.load()

    overrides = {
        key: value
        for key, value in (
            ("source_dir", state.source_dir),
            ("target_dir", state.target_dir),
            ("index_path", state.index_path),
        )
        if value is not None
    }
    if overrides:
        config = dataclasses.replace(
            config, paths=dataclasses.replace(config.paths, **overrides)
        )
    return config


def resolve(ctx: typer.Context) -> tuple[AgentportConfig, AgentPipeline]:
    """Resolve config and pipeline for a command, exiting with status 2 on bad config."""
    state: CLIState = ctx.obj or CLIState()
    try:
        config = load_config(state)
        pipeline = AgentPipeline.from_config(config)
        setup_logging(
            level=state.log_level or config.logging.level,
            json_output=state.json_logs or config.logging.json,
        )
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise typer.Exit(2) from None

    logger.debug(
        "Resolved paths: source=%s target=%s index=%s",
        pipeline.source_dir,
        pipeline.target_dir,
        pipeline.index_path,
    )
    return config, pipeline


def build_pipeline(ctx: typer.Context) -> AgentPipeline:
    return resolve(ctx)[1]
