"""File-tree export: one directory per database and schema."""

import logging
from pathlib import Path
from typing import Optional, Union

from ..database.models import Catalog, CatalogEntry
from ..errors import WriteError
from .base import ExportReport, OutputMode, Renderer
from .info_document import INFO_SUFFIX, render_info_document
from .paths import clean_path_component, directory_parts, is_exportable_database, is_within
from .templates import DEFAULT_INFO_TEMPLATE
from .type_definitions import GoStructGenerator, TypeDefinitionGenerator

logger = logging.getLogger(__name__)

# Definitions up to this length are not worth a .sql file
MIN_DEFINITION_LENGTH = 10


class FileTreeRenderer(Renderer):
    """Writes ``<root>/<database>/<schema>/`` artifacts for every entry.

    Per entry: the raw definition (``.sql``, only for non-trivial
    definitions), an information document (``.info.md``) and a generated
    type definition (``.go`` or ``.py``, only when the entry has columns).
    Entries without an exportable database are skipped. A failed artifact
    is reported and the export moves on.
    """

    mode = OutputMode.FILES

    def __init__(
        self,
        root: Union[str, Path] = "vcs",
        generator: Optional[TypeDefinitionGenerator] = None,
        template: str = DEFAULT_INFO_TEMPLATE,
    ):
        """Initialize the file-tree renderer.

        Args:
            root: Root directory of the tree
            generator: Type definition generator (default: Go structs)
            template: Info document template (already validated)
        """
        self.root = Path(root)
        self.generator = generator or GoStructGenerator()
        self.template = template

    def entry_directory(self, entry: CatalogEntry) -> Path:
        db_dir, schema_dir = directory_parts(entry.database, entry.schema)
        return self.root / db_dir / schema_dir

    def render(self, catalog: Catalog) -> ExportReport:
        report = ExportReport()
        for entry in catalog:
            if not is_exportable_database(entry.database) or not entry.name:
                logger.debug("Skipping %s: no exportable location", entry.qualified_name)
                report.skipped += 1
                continue
            self._write_entry(entry, report)

        logger.info(
            "File export finished: %d file(s) written, %d error(s), %d entries skipped",
            len(report.written),
            len(report.errors),
            report.skipped,
        )
        return report

    def _write_entry(self, entry: CatalogEntry, report: ExportReport) -> None:
        directory = self.entry_directory(entry)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = WriteError("Cannot create directory", path=str(directory), cause=e)
            logger.error("%s", error)
            report.errors.append(error)
            return

        base_name = clean_path_component(entry.name)

        definition_file = None
        if len(entry.definition) > MIN_DEFINITION_LENGTH:
            sql_name = base_name + ".sql"
            if self._write_artifact(directory, sql_name, entry.definition, report):
                definition_file = sql_name

        info = render_info_document(entry, definition_file=definition_file, template=self.template)
        self._write_artifact(directory, base_name + INFO_SUFFIX, info, report)

        if entry.columns:
            content = self.generator.generate(entry)
            self._write_artifact(directory, base_name + self.generator.file_suffix, content, report)

    def _write_artifact(self, directory: Path, file_name: str, content: str, report: ExportReport) -> bool:
        path = directory / file_name
        if not is_within(path, directory):
            error = WriteError("Refusing to write outside the schema directory", path=str(path))
            logger.error("%s", error)
            report.errors.append(error)
            return False
        return self.write_text(path, content, report)
