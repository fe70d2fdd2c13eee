"""Export command - catalogs database schemas and renders them."""

import logging
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..config import CatalogConfig, load_config, settings
from ..database.models import Catalog, filter_catalog
from ..errors import CatalogUnavailableError, ConfigError, IntrospectionError, SnapshotError
from ..export import ExportReport, OutputMode, create_renderer, load_template
from ..introspection import run_introspection
from ..logging import log_export_run
from ..snapshot import SnapshotSource

console = Console()
logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


def _load_catalog(
    config: CatalogConfig,
    cached: bool,
    snapshot_path: str,
) -> Tuple[Catalog, List[IntrospectionError]]:
    if cached:
        console.print(f"[blue]Loading cached catalog from {escape(snapshot_path)}[/blue]")
        return SnapshotSource(snapshot_path).load()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Introspecting {len(config.databases)} database(s)...", total=None)
        return run_introspection(config)


def _print_errors(title: str, errors: list) -> None:
    if not errors:
        return
    table = Table(title=title)
    table.add_column("Code", style="red")
    table.add_column("Error")
    for error in errors:
        table.add_row(error.code, escape(str(error)))
    console.print(table)


def _print_summary(catalog: Catalog, mode: OutputMode, report: ExportReport) -> None:
    console.print(f"\n[bold]Catalog: {len(catalog)} entries across {len(catalog.get_databases())} database(s)[/bold]")
    if mode in (OutputMode.JSON, OutputMode.XML):
        for path in report.written:
            console.print(f"[green]Written {escape(str(path))}[/green]")
    elif mode == OutputMode.FILES:
        console.print(f"[green]Written {len(report.written)} file(s)[/green]")
        if report.skipped:
            console.print(f"[yellow]Skipped {report.skipped} entries without an exportable database[/yellow]")


def export_catalog(
    config_path: str = typer.Option(..., "--config", "-c", help="YAML configuration file"),
    output: OutputMode = typer.Option(OutputMode.JSON, "--output", "-o", help="Output mode"),
    cached: bool = typer.Option(False, "--cached", help="Reuse the last snapshot instead of querying the databases"),
    snapshot: Optional[str] = typer.Option(None, "--snapshot", help="Snapshot file (default: DBCATALOG_SNAPSHOT_PATH)"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Info document template (overrides the config)"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-d", help="Root directory of the file tree"),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Type definition language: go or python"),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 2 when any database or file failed"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and detailed debug output"),
):
    """Catalog the configured databases and export the result.

    Each configured database is introspected concurrently. Failures of one
    database do not stop the others; they are reported at the end.

    Examples:
        dbcatalog export --config catalog.yaml --output files

        dbcatalog export -c catalog.yaml -o debug --cached
    """
    configure_logging(verbose)

    snapshot_path = snapshot or settings.snapshot_path
    try:
        config = load_config(config_path)
        template_path = template or config.template
        template_text = load_template(template_path) if template_path else None
        renderer = create_renderer(
            output,
            json_path=snapshot_path,
            xml_path=settings.xml_path,
            output_dir=output_dir or settings.output_dir,
            language=language or settings.type_language,
            template=template_text,
            console=console,
            verbose=verbose,
        )
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        for key, value in e.details.items():
            console.print(f"  {key}: {value}", markup=False)
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold blue]Cataloging {config.engine.value} databases[/bold blue]\n"
        f"Server: {escape(config.server)}\n"
        f"Databases: {escape(', '.join(config.databases))}\n"
        f"Output: {output.value}{' (cached)' if cached else ''}",
        title="dbcatalog",
    ))

    try:
        with log_export_run(
            engine=config.engine.value,
            server=config.server,
            databases=config.databases,
            output_mode=output.value,
            cached=cached,
            arguments={
                "config": config_path,
                "snapshot": snapshot_path,
                "template": template_path,
                "output_dir": output_dir,
                "language": language,
                "strict": strict,
            },
        ) as ctx:
            catalog, errors = _load_catalog(config, cached, snapshot_path)
            catalog = filter_catalog(catalog, config.include_tables, config.exclude_tables)

            ctx.entries_count = len(catalog)
            ctx.columns_count = sum(len(entry.columns) for entry in catalog)
            ctx.dependencies_count = sum(len(entry.dependencies) for entry in catalog)
            ctx.error_count = len(errors)

            report = renderer.render(catalog)
            ctx.artifacts_written = len(report.written)
            ctx.artifact_errors = len(report.errors)
    except SnapshotError as e:
        console.print(f"[red]Cannot use snapshot: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except CatalogUnavailableError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        _print_errors("Connection errors", e.errors)
        raise typer.Exit(1)

    _print_summary(catalog, output, report)
    _print_errors("Introspection errors", errors)
    _print_errors("Write errors", report.errors)

    if errors or report.errors:
        console.print(f"[yellow]Completed with {len(errors) + len(report.errors)} error(s)[/yellow]")
        if strict:
            raise typer.Exit(2)
    else:
        logger.info("Export completed without errors")
