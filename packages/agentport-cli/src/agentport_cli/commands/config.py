from __future__ import annotations

import typer
from agentport_agents import TOOL_MAP, Capability
from agentport_agents.tool_mapping import collapsed_tools
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from agentport_cli.settings import resolve

console = Console()


def config_command(ctx: typer.Context) -> None:
    """Show the effective configuration and conversion policy."""
    config, pipeline = resolve(ctx)
    policy = pipeline.policy

    disabled = ", ".join(
        cap.value for cap in Capability if cap in policy.disabled
    ) or "-"
    lines = [
        f"[bold]Source dir:[/bold]    {pipeline.source_dir}",
        f"[bold]Target dir:[/bold]    {pipeline.target_dir}",
        f"[bold]Index:[/bold]         {pipeline.index_path} "
        f"(from {pipeline.index_from})",
        f"[bold]Mode:[/bold]          {policy.mode.value}",
        f"[bold]Temperature:[/bold]   {policy.temperature}",
        f"[bold]Disabled:[/bold]      {disabled}",
        f"[bold]Max desc len:[/bold]  {config.validation.max_description_length}",
        f"[bold]Log level:[/bold]     {config.logging.level}",
    ]
    console.print(Panel(
        "\n".join(lines),
        title="agentport configuration",
        border_style="cyan",
    ))


def tools_command() -> None:
    """Show how source tool names map onto target capabilities."""
    collapsed = collapsed_tools()
    table = Table(
        title="Tool Mapping",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Source tool", style="bold")
    table.add_column("Capability")
    table.add_column("Note", style="dim")

    for tool, cap in TOOL_MAP.items():
        note = ""
        if cap in collapsed:
            others = [t.value for t in collapsed[cap] if t is not tool]
            note = f"shares '{cap.value}' with {', '.join(others)}"
        table.add_row(tool.value, cap.value, note)

    console.print(table)
