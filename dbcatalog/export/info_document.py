"""Markdown information documents for catalog entries."""

from pathlib import Path
from typing import Optional

from ..database.models import CatalogEntry
from ..errors import ConfigError
from .annotations import extract_annotations, parse_change_history
from .paths import clean_path_component, directory_parts
from .templates import (
    COLUMNS_HEADER,
    DEFAULT_INFO_TEMPLATE,
    DEPENDENCIES_HEADER,
    HISTORY_HEADER,
    TEMPLATE_FIELDS,
)

INFO_SUFFIX = ".info.md"


def _cell(value) -> str:
    """Escape a value for use in a markdown table cell."""
    return str(value).replace("|", "\\|").replace("\r", " ").replace("\n", " ")


def render_column_table(entry: CatalogEntry) -> str:
    lines = [COLUMNS_HEADER]
    for col in entry.columns:
        lines.append("|".join([
            _cell(col.name),
            _cell(col.type_name),
            str(col.max_length),
            str(col.precision),
            str(col.scale),
            _cell(col.collation),
            str(int(col.nullable)),
            str(int(col.is_identity)),
        ]))
    return "\n".join(lines)


def render_history_table(definition: str) -> str:
    lines = [HISTORY_HEADER]
    for fields in parse_change_history(definition):
        lines.append("|".join(_cell(f.strip()) for f in fields))
    return "\n".join(lines)


def dependency_link(entry: CatalogEntry, database: str, schema: str, table: str) -> str:
    """Relative path from an entry's info document to another object's."""
    db_dir, schema_dir = directory_parts(database or entry.database, schema or entry.schema)
    return f"../../{db_dir}/{schema_dir}/{clean_path_component(table)}{INFO_SUFFIX}"


def render_dependency_table(entry: CatalogEntry) -> str:
    lines = [DEPENDENCIES_HEADER]
    for dep in entry.dependencies:
        if dep.is_empty():
            continue
        database = dep.referenced_database or entry.database
        schema = dep.referenced_schema or entry.schema
        link = dependency_link(entry, database, schema, dep.referenced_table)
        lines.append(
            f"{_cell(database.lower())}|{_cell(schema.lower())}|"
            f"[{_cell(dep.referenced_table)}]({link})"
        )
    return "\n".join(lines)


def validate_template(template: str) -> None:
    """Check that a template only uses known placeholders.

    Raises:
        ConfigError: If formatting fails
    """
    sample = {name: "" for name in TEMPLATE_FIELDS}
    try:
        template.format_map(sample)
    except (KeyError, IndexError, ValueError) as e:
        raise ConfigError(
            f"Invalid info document template: {e!r}",
            details={"allowed_fields": list(TEMPLATE_FIELDS)},
        )


def load_template(path: str) -> str:
    """Read and validate a custom template file.

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    try:
        template = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read template {path}: {e}", details={"path": path})
    validate_template(template)
    return template


def render_info_document(
    entry: CatalogEntry,
    definition_file: Optional[str] = None,
    template: str = DEFAULT_INFO_TEMPLATE,
) -> str:
    """Render the information document of an entry.

    Args:
        entry: Catalog entry
        definition_file: File name of the exported definition, linked from
            the heading when given
        template: Document template

    Returns:
        Markdown text
    """
    annotation = extract_annotations(entry.definition)
    db_dir, schema_dir = entry.database.lower(), entry.schema.lower()
    qualified_name = f"{db_dir}.{schema_dir}.{entry.name}"

    definition_link = ""
    if definition_file:
        definition_link = f"./{definition_file}"
        title = f"{entry.kind.value} [{qualified_name}]({definition_link})"
    else:
        title = f"{entry.kind.value} {qualified_name}"

    fields = {
        "title": title,
        "kind": entry.kind.value,
        "qualified_name": qualified_name,
        "description": annotation.description,
        "creator": annotation.creator,
        "created": annotation.created_text,
        "columns": render_column_table(entry),
        "history": render_history_table(entry.definition),
        "dependencies": render_dependency_table(entry),
        "definition_link": definition_link,
    }
    return template.format_map(fields)
