"""dbcatalog - Main entry point."""

import typer
from rich.console import Console

from .commands import export, runs
from .config import settings
from .logging import get_default_run_db_path

app = typer.Typer(
    name="dbcatalog",
    help="Catalog database schemas into JSON, XML or a reviewable file tree",
    add_completion=False,
)

# Add commands
app.command("export")(export.export_catalog)
app.command("runs")(runs.list_runs)

console = Console()


@app.command()
def config():
    """Show current configuration."""
    console.print("[bold]Current Configuration[/bold]")
    console.print(f"  Output directory: {settings.output_dir}")
    console.print(f"  Snapshot: {settings.snapshot_path}")
    console.print(f"  XML export: {settings.xml_path}")
    console.print(f"  Type language: {settings.type_language}")
    console.print(f"  Run logging: {'Enabled' if settings.run_logging_enabled else 'Disabled'}")
    if settings.run_logging_enabled:
        console.print(f"  Run log: {settings.run_logging_db_path or get_default_run_db_path()}")
        console.print(f"  Retention: {settings.run_logging_retention_days} days")


@app.callback()
def main():
    """
    dbcatalog - Catalog database schemas.

    Reads a YAML configuration naming a server and its databases, introspects
    every table, view, function and procedure, and exports the catalog.

    Examples:

        dbcatalog export --config catalog.yaml --output files

        dbcatalog export --config catalog.yaml --output json

        dbcatalog export --config catalog.yaml --output debug --cached

        dbcatalog runs --status error
    """
    pass


if __name__ == "__main__":
    app()
