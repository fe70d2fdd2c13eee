"""Debug rendering of a catalog to the console."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..database.models import Catalog, CatalogEntry
from .base import ExportReport, OutputMode, Renderer


class DebugRenderer(Renderer):
    """Prints the catalog for inspection; writes no files."""

    mode = OutputMode.DEBUG

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console()
        self.verbose = verbose

    def render(self, catalog: Catalog) -> ExportReport:
        table = Table(title=f"Catalog ({len(catalog)} entries)")
        table.add_column("Database", style="cyan")
        table.add_column("Schema", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Kind")
        table.add_column("Columns", justify="right")
        table.add_column("Dependencies", justify="right")
        table.add_column("Definition", justify="right")

        for entry in catalog:
            table.add_row(
                escape(entry.database),
                escape(entry.schema),
                escape(entry.name),
                entry.kind.value,
                str(len(entry.columns)),
                str(len(entry.dependencies)),
                f"{len(entry.definition)} chars" if entry.definition else "-",
            )
        self.console.print(table)

        if self.verbose:
            for entry in catalog:
                self._print_entry(entry)

        return ExportReport()

    def _print_entry(self, entry: CatalogEntry) -> None:
        self.console.print(f"\n[bold]{entry.kind.value} {escape(entry.qualified_name)}[/bold]")
        for col in entry.columns:
            flags = []
            if not col.nullable:
                flags.append("NOT NULL")
            if col.is_identity:
                flags.append("IDENTITY")
            self.console.print(f"  {col.name}: {col.type_name} {' '.join(flags)}".rstrip(), markup=False)
        for dep in entry.dependencies:
            target = ".".join(p for p in (dep.referenced_database, dep.referenced_schema, dep.referenced_table) if p)
            self.console.print(f"  -> {target}", markup=False)
