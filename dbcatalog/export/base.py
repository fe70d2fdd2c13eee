"""Base classes for catalog renderers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Union

from ..database.models import Catalog
from ..errors import WriteError

logger = logging.getLogger(__name__)


class OutputMode(str, Enum):
    """Output shapes a catalog can be rendered into."""
    JSON = "json"
    XML = "xml"
    FILES = "files"
    DEBUG = "debug"


@dataclass
class ExportReport:
    """Outcome of one export pass."""
    written: List[Path] = field(default_factory=list)
    errors: List[WriteError] = field(default_factory=list)
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors


class Renderer(ABC):
    """Renders a catalog into one output shape."""

    mode: OutputMode

    @abstractmethod
    def render(self, catalog: Catalog) -> ExportReport:
        """Render the catalog.

        Write failures are collected in the returned report, never raised.
        """

    def write_text(self, path: Union[str, Path], content: str, report: ExportReport) -> bool:
        """Write one artifact, recording success or failure in the report."""
        path = Path(path)
        try:
            path.write_text(content, encoding="utf-8", newline="")
        except OSError as e:
            error = WriteError("Cannot write file", path=str(path), cause=e)
            logger.error("%s", error)
            report.errors.append(error)
            return False
        report.written.append(path)
        return True
