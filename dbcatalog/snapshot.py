"""Catalog snapshots: reuse a previous export instead of querying the engines."""

import logging
from pathlib import Path
from typing import List, Tuple, Union

from .database.models import Catalog
from .errors import IntrospectionError, SnapshotError
from .export.structured import catalog_from_json, catalog_from_xml, catalog_to_json, catalog_to_xml

logger = logging.getLogger(__name__)


def _is_xml(path: Path) -> bool:
    return path.suffix.lower() == ".xml"


def save_snapshot(catalog: Catalog, path: Union[str, Path]) -> Path:
    """Write a snapshot (XML when the file name ends in .xml, JSON otherwise).

    Raises:
        SnapshotError: If the file cannot be written
    """
    path = Path(path)
    content = catalog_to_xml(catalog) if _is_xml(path) else catalog_to_json(catalog)
    try:
        path.write_text(content, encoding="utf-8", newline="")
    except OSError as e:
        raise SnapshotError(f"Cannot write snapshot: {e}", path=str(path))
    logger.info("Snapshot written to %s (%d entries)", path, len(catalog))
    return path


def load_snapshot(path: Union[str, Path]) -> Catalog:
    """Read a snapshot written by a previous export.

    Raises:
        SnapshotError: If the file is missing or not a valid catalog
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"Snapshot not found: {path}", path=str(path))
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot: {e}", path=str(path))

    try:
        catalog = catalog_from_xml(text) if _is_xml(path) else catalog_from_json(text)
    except ValueError as e:
        raise SnapshotError(f"Invalid snapshot: {e}", path=str(path))

    logger.info("Loaded %d entries from snapshot %s", len(catalog), path)
    return catalog


class SnapshotSource:
    """Catalog source backed by a snapshot file.

    Has the same result shape as the orchestrator, so an export can run
    from either.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Tuple[Catalog, List[IntrospectionError]]:
        return load_snapshot(self.path), []
