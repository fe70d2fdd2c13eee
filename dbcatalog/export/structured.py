"""Structured serialization of a catalog (JSON and XML).

Both formats keep the field order of the data model and round-trip
exactly: loading a document and serializing it again yields the same text.
XML values holding characters XML 1.0 forbids (most control characters)
are stored base64-encoded with an ``encoding="base64"`` attribute.
"""

import base64
import json
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Union
from xml.sax.saxutils import escape

from ..database.models import Catalog, CatalogEntry, ColumnDescriptor, DependencyRef
from .base import ExportReport, OutputMode, Renderer

XML_ENTITIES = {"\r": "&#13;", '"': "&quot;"}

# Characters XML 1.0 cannot carry, even as character references
INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def catalog_to_data(catalog: Catalog) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in catalog]


def catalog_from_data(data: List[Dict[str, Any]]) -> Catalog:
    """Build a catalog from decoded snapshot data.

    Raises:
        ValueError: If the data is not a list of entries
    """
    if not isinstance(data, list):
        raise ValueError("Catalog data must be a list of entries")
    try:
        return Catalog(entries=[CatalogEntry.from_dict(item) for item in data])
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed catalog entry: {e!r}")


def catalog_to_json(catalog: Catalog) -> str:
    return json.dumps(catalog_to_data(catalog), indent=2, ensure_ascii=False) + "\n"


def catalog_from_json(text: str) -> Catalog:
    """Parse a JSON catalog document.

    Raises:
        ValueError: If the document is not a valid catalog
    """
    return catalog_from_data(json.loads(text))


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _xml_fields(data: Dict[str, Any], indent: str) -> List[str]:
    lines = []
    for key, value in data.items():
        text = _xml_text(value)
        if INVALID_XML_CHARS.search(text):
            encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
            lines.append(f'{indent}<{key} encoding="base64">{encoded}</{key}>')
        elif text:
            lines.append(f"{indent}<{key}>{escape(text, XML_ENTITIES)}</{key}>")
        else:
            lines.append(f"{indent}<{key}/>")
    return lines


def catalog_to_xml(catalog: Catalog) -> str:
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', "<catalog>"]
    for entry in catalog:
        data = entry.to_dict()
        columns = data.pop("columns")
        dependencies = data.pop("dependencies")

        lines.append("  <entry>")
        lines.extend(_xml_fields(data, "    "))

        lines.append("    <columns>")
        for column in columns:
            lines.append("      <column>")
            lines.extend(_xml_fields(column, "        "))
            lines.append("      </column>")
        lines.append("    </columns>")

        lines.append("    <dependencies>")
        for dependency in dependencies:
            lines.append("      <dependency>")
            lines.extend(_xml_fields(dependency, "        "))
            lines.append("      </dependency>")
        lines.append("    </dependencies>")

        lines.append("  </entry>")
    lines.append("</catalog>")
    return "\n".join(lines) + "\n"


def _text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None:
        raise ValueError(f"Missing <{tag}> in <{element.tag}>")
    if child.get("encoding") == "base64":
        try:
            return base64.b64decode(child.text or "", validate=True).decode("utf-8")
        except ValueError as e:
            raise ValueError(f"Invalid base64 content in <{tag}>: {e}")
    return child.text or ""


def _bool(element: ET.Element, tag: str) -> bool:
    value = _text(element, tag)
    if value not in ("true", "false"):
        raise ValueError(f"Invalid boolean in <{tag}>: {value!r}")
    return value == "true"


def catalog_from_xml(text: str) -> Catalog:
    """Parse an XML catalog document.

    Raises:
        ValueError: If the document is not a valid catalog
    """
    try:
        root = ET.fromstring(text.encode("utf-8"))
    except ET.ParseError as e:
        raise ValueError(f"Invalid XML: {e}")
    if root.tag != "catalog":
        raise ValueError(f"Unexpected root element <{root.tag}>")

    entries = []
    for item in root.findall("entry"):
        columns = [
            ColumnDescriptor(
                name=_text(c, "name"),
                type_name=_text(c, "type_name"),
                max_length=int(_text(c, "max_length")),
                precision=int(_text(c, "precision")),
                scale=int(_text(c, "scale")),
                collation=_text(c, "collation"),
                nullable=_bool(c, "nullable"),
                is_identity=_bool(c, "is_identity"),
            )
            for c in item.iterfind("columns/column")
        ]
        dependencies = [
            DependencyRef(
                referenced_database=_text(d, "referenced_database"),
                referenced_schema=_text(d, "referenced_schema"),
                referenced_table=_text(d, "referenced_table"),
            )
            for d in item.iterfind("dependencies/dependency")
        ]
        entries.append(CatalogEntry(
            database=_text(item, "database"),
            schema=_text(item, "schema"),
            name=_text(item, "name"),
            kind=_text(item, "kind"),
            definition=_text(item, "definition"),
            columns=columns,
            dependencies=dependencies,
        ))
    return Catalog(entries=entries)


class JsonRenderer(Renderer):
    """Writes the catalog as a JSON document (also the snapshot format)."""

    mode = OutputMode.JSON

    def __init__(self, path: Union[str, Path] = "data.json"):
        self.path = Path(path)

    def render(self, catalog: Catalog) -> ExportReport:
        report = ExportReport()
        self.write_text(self.path, catalog_to_json(catalog), report)
        return report


class XmlRenderer(Renderer):
    """Writes the catalog as an XML document."""

    mode = OutputMode.XML

    def __init__(self, path: Union[str, Path] = "data.xml"):
        self.path = Path(path)

    def render(self, catalog: Catalog) -> ExportReport:
        report = ExportReport()
        self.write_text(self.path, catalog_to_xml(catalog), report)
        return report
