"""Path helpers for the file-tree export."""

from pathlib import Path
from typing import Tuple

SEPARATORS = ("/", "\\")

# Databases of this length or shorter have no exportable location
MIN_DATABASE_LENGTH = 1
PLACEHOLDER_DATABASE = "."


def clean_path_component(value: str) -> str:
    """Make an identifier safe to use as a single path segment.

    Separators become ``-`` and the relative names ``.`` and ``..`` are
    rewritten so a component can never leave its parent directory.
    """
    cleaned = value
    for separator in SEPARATORS:
        cleaned = cleaned.replace(separator, "-")
    cleaned = cleaned.replace("\x00", "")
    if cleaned in ("", ".", ".."):
        cleaned = cleaned.replace(".", "_") or "_"
    return cleaned


def is_exportable_database(database: str) -> bool:
    """Check whether entries of a database have a file-tree location."""
    if not database or database == PLACEHOLDER_DATABASE:
        return False
    return len(database) > MIN_DATABASE_LENGTH


def directory_parts(database: str, schema: str) -> Tuple[str, str]:
    """Lowercased, cleaned directory segments for a database and schema."""
    return clean_path_component(database.lower()), clean_path_component(schema.lower())


def is_within(path: Path, parent: Path) -> bool:
    """Check whether ``path`` resolves to a location under ``parent``."""
    try:
        path.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True
