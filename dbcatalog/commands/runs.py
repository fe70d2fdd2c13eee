"""Run log commands."""

import json
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..logging import get_run_logger

console = Console()

STATUS_STYLES = {
    "success": "green",
    "error": "red",
    "started": "yellow",
    "interrupted": "magenta",
}


def list_runs(
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of runs to show"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status (success, error, interrupted, started)"),
    since_hours: Optional[int] = typer.Option(None, "--since-hours", help="Only runs of the last N hours"),
):
    """List recorded export runs, newest first."""
    run_logger = get_run_logger()
    if not run_logger.enabled:
        console.print("[yellow]Run logging is disabled (DBCATALOG_RUN_LOGGING_ENABLED=false).[/yellow]")
        return

    runs = run_logger.query_runs(status=status, since_hours=since_hours, limit=limit)
    if not runs:
        console.print("[yellow]No runs recorded.[/yellow]")
        return

    table = Table(title="Export runs")
    table.add_column("Run", style="cyan")
    table.add_column("Time (UTC)")
    table.add_column("Engine", style="blue")
    table.add_column("Databases")
    table.add_column("Output")
    table.add_column("Status")
    table.add_column("Entries", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Duration", justify="right")

    for run in runs:
        databases = json.loads(run["databases"]) if run["databases"] else []
        output = run["output_mode"] or "-"
        if run["cached"]:
            output += " (cached)"
        run_status = run["status"] or "-"
        style = STATUS_STYLES.get(run_status, "white")
        errors = (run["introspection_errors"] or 0) + (run["artifact_errors"] or 0)
        table.add_row(
            run["run_id"],
            run["timestamp"],
            run["engine"] or "-",
            escape(", ".join(databases)),
            output,
            f"[{style}]{run_status}[/{style}]",
            str(run["entries_count"] or 0),
            str(errors),
            f"{run['duration_ms']}ms" if run["duration_ms"] is not None else "-",
        )

    console.print(table)

    failed = [run for run in runs if run["status"] == "error" and run["error_message"]]
    for run in failed:
        console.print(
            f"[red]{run['run_id']}: {escape(run['error_type'] or 'Error')}: {escape(run['error_message'])}[/red]"
        )
