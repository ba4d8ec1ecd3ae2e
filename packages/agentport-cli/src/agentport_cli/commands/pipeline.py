"""Pipeline commands: convert, index, validate, smoke."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agentport_cli.settings import build_pipeline

if TYPE_CHECKING:
    from agentport_agents import PipelineReport, SmokeResult

console = Console()


def convert_command(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Report what would change without writing anything",
    ),
) -> None:
    """Convert every source agent document and rebuild the index."""
    pipeline = build_pipeline(ctx)
    report = pipeline.convert_all(dry_run=dry_run)

    verb = "Would write" if dry_run else "Wrote"
    for path in report.written:
        console.print(f"  [green]{verb}[/green] {path}")
    console.print(
        f"\n[bold]{len(report.processed)}[/bold] document(s) converted "
        f"([green]{len(report.written)} changed[/green], "
        f"[dim]{len(report.unchanged)} unchanged[/dim])."
    )
    _report_index(report)
    _report_problems(report)
    raise typer.Exit(report.exit_code)


def index_command(
    ctx: typer.Context,
    source: str | None = typer.Option(
        None,
        "--from",
        help="Corpus to index: 'source' or 'target' (defaults to config)",
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Exit non-zero if the index on disk is out of date; write nothing",
    ),
) -> None:
    """Regenerate the agent index without converting anything."""
    pipeline = build_pipeline(ctx)
    if source is not None:
        if source not in ("source", "target"):
            console.print(
                f"[red]Invalid --from value:[/red] '{source}' "
                "(expected 'source' or 'target')."
            )
            raise typer.Exit(2)
        pipeline.index_from = source

    report = pipeline.rebuild_index_only(check=check)
    console.print(
        f"Indexed [bold]{len(report.processed)}[/bold] document(s) "
        f"from the {pipeline.index_from} corpus."
    )
    _report_index(report)
    _report_problems(report)
    raise typer.Exit(report.exit_code)


def validate_command(ctx: typer.Context) -> None:
    """Validate source and target documents; exit non-zero on any diagnostic."""
    pipeline = build_pipeline(ctx)
    report = pipeline.validate_all()

    if report.diagnostics:
        table = Table(
            title="Diagnostics",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Document", style="bold")
        table.add_column("Kind")
        table.add_column("Message")
        table.add_column("Path", style="dim")
        for diagnostic in report.diagnostics:
            table.add_row(
                diagnostic.document_id,
                diagnostic.kind.value,
                escape(diagnostic.message),
                str(diagnostic.path or "-"),
            )
        console.print(table)

    _report_duplicates(report)
    console.print()
    if not report.processed:
        console.print("[red]No documents could be validated.[/red]")
    elif report.ok:
        console.print(
            f"[green]All {len(report.processed)} document(s) passed validation.[/green]"
        )
    else:
        console.print(
            f"[red]{len(report.diagnostics)} diagnostic(s) across "
            f"{len(report.processed)} document(s).[/red]"
        )
    raise typer.Exit(report.exit_code)


def smoke_command(
    ctx: typer.Context,
    path: str | None = typer.Argument(
        None,
        help="Agent document to run through the pipeline. "
        "If omitted, a built-in sample is used.",
    ),
) -> None:
    """Run the pipeline in memory over one sample document and report PASS/FAIL."""
    pipeline = build_pipeline(ctx)
    result = pipeline.smoke_test(Path(path) if path is not None else None)
    _report_smoke(result)
    if not result.passed:
        raise typer.Exit(1)


# ── Reporting ────────────────────────────────────────────────


def _report_index(report: PipelineReport) -> None:
    if report.index_path is None:
        if not report.processed:
            console.print("[yellow]Index not rebuilt: no documents processed[/yellow]")
        return
    if report.mode == "index-check" or report.dry_run:
        state = "[yellow]out of date[/yellow]" if report.index_changed else "[green]up to date[/green]"
    else:
        state = "[green]updated[/green]" if report.index_changed else "[dim]unchanged[/dim]"
    console.print(f"Index {report.index_path}: {state}")


def _report_problems(report: PipelineReport) -> None:
    """Name every skipped or failed document explicitly."""
    _report_duplicates(report)
    for path in report.orphans:
        console.print(f"  [yellow]ORPHAN[/yellow] {path} (no matching source document)")

    failed = set(report.failed)
    for diagnostic in report.diagnostics:
        label = "[red]FAIL[/red]" if diagnostic.document_id in failed else "[yellow]WARN[/yellow]"
        console.print(f"  {label} {escape(str(diagnostic))}")
        if diagnostic.path is not None:
            console.print(f"        [dim]{diagnostic.path}[/dim]")


def _report_duplicates(report: PipelineReport) -> None:
    for duplicate in report.duplicates:
        console.print(
            f"  [yellow]SKIP[/yellow] {duplicate.path} "
            f"(duplicate id '{duplicate.id}', kept {duplicate.kept})"
        )


def _report_smoke(result: SmokeResult) -> None:
    for check in result.checks:
        mark = "[green]OK[/green]  " if check.passed else "[red]FAIL[/red]"
        line = f"  {mark} {check.name}"
        if check.detail:
            line += f" [dim]({escape(check.detail)})[/dim]"
        console.print(line)
    console.print()
    if result.passed:
        console.print(f"[green]PASS[/green] smoke test ({result.document_id})")
    else:
        console.print(f"[red]FAIL[/red] smoke test ({result.document_id})")
