from __future__ import annotations

from pathlib import Path

import typer
from agentport_core import __version__

from agentport_cli.commands.config import config_command, tools_command
from agentport_cli.commands.pipeline import (
    convert_command,
    index_command,
    smoke_command,
    validate_command,
)
from agentport_cli.settings import CLIState, console

app = typer.Typer(
    name="agentport",
    help="Convert agent documents between host schemas and keep their index current.",
    no_args_is_help=True,
)

app.command("convert")(convert_command)
app.command("index")(index_command)
app.command("validate")(validate_command)
app.command("smoke")(smoke_command)
app.command("config")(config_command)
app.command("tools")(tools_command)


@app.callback()
def _root(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Explicit config file (skips global/project lookup)",
    ),
    source: str | None = typer.Option(
        None, "--source", help="Directory holding source agent documents"
    ),
    target: str | None = typer.Option(
        None, "--target", help="Directory receiving converted documents"
    ),
    index: str | None = typer.Option(
        None, "--index", help="Path of the generated index document"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Emit log records as JSON lines"
    ),
) -> None:
    """Capture global options for the subcommands."""
    ctx.obj = CLIState(
        config_path=config,
        source_dir=source,
        target_dir=target,
        index_path=index,
        log_level=log_level,
        json_logs=json_logs,
    )


@app.command()
def version() -> None:
    """Show the agentport version."""
    console.print(f"agentport {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
