"""Export pipeline: render a catalog as JSON, XML, a file tree or a debug view."""

from pathlib import Path
from typing import Optional, Union

from rich.console import Console

from .base import ExportReport, OutputMode, Renderer
from .debug import DebugRenderer
from .file_tree import FileTreeRenderer
from .info_document import load_template, render_info_document
from .structured import (
    JsonRenderer,
    XmlRenderer,
    catalog_from_json,
    catalog_from_xml,
    catalog_to_json,
    catalog_to_xml,
)
from .templates import DEFAULT_INFO_TEMPLATE
from .type_definitions import get_generator


def create_renderer(
    mode: Union[OutputMode, str],
    *,
    json_path: Union[str, Path] = "data.json",
    xml_path: Union[str, Path] = "data.xml",
    output_dir: Union[str, Path] = "vcs",
    language: str = "go",
    template: Optional[str] = None,
    console: Optional[Console] = None,
    verbose: bool = False,
) -> Renderer:
    """Build the renderer for an output mode.

    Args:
        mode: Output mode
        json_path: Target of the JSON export
        xml_path: Target of the XML export
        output_dir: Root of the file-tree export
        language: Type definition language of the file-tree export
        template: Info document template text (default template when None)
        console: Console of the debug view
        verbose: Print column and dependency details in the debug view

    Raises:
        ValueError: If the mode or language is unknown
    """
    mode = OutputMode(mode)
    if mode == OutputMode.JSON:
        return JsonRenderer(json_path)
    if mode == OutputMode.XML:
        return XmlRenderer(xml_path)
    if mode == OutputMode.FILES:
        return FileTreeRenderer(
            root=output_dir,
            generator=get_generator(language),
            template=template or DEFAULT_INFO_TEMPLATE,
        )
    return DebugRenderer(console=console, verbose=verbose)


__all__ = [
    "OutputMode",
    "ExportReport",
    "Renderer",
    "JsonRenderer",
    "XmlRenderer",
    "FileTreeRenderer",
    "DebugRenderer",
    "create_renderer",
    "catalog_to_json",
    "catalog_from_json",
    "catalog_to_xml",
    "catalog_from_xml",
    "load_template",
    "render_info_document",
]
