"""Generated type definitions (Go structs, Python dataclasses) for entries."""

import keyword
import re
from abc import ABC, abstractmethod
from typing import Dict, Type

from ..database.models import CatalogEntry
from ..database.type_mappers import GoTypeMapper, PythonTypeMapper, TypeMapper


def to_identifier(name: str, fallback: str = "field") -> str:
    """Turn an arbitrary object or column name into an identifier."""
    ident = re.sub(r"\W", "_", name or "", flags=re.ASCII)
    if not ident.strip("_"):
        ident = fallback
    if ident[0].isdigit():
        ident = "_" + ident
    return ident


class TypeDefinitionGenerator(ABC):
    """Generates a type definition file from an entry's columns."""

    file_suffix: str = ""
    mapper_class: Type[TypeMapper] = TypeMapper

    def __init__(self):
        self.mapper = self.mapper_class()

    @abstractmethod
    def generate(self, entry: CatalogEntry) -> str:
        """Generate the file content for an entry."""


class GoStructGenerator(TypeDefinitionGenerator):
    """Generates a Go struct with JSON tags."""

    file_suffix = ".go"
    mapper_class = GoTypeMapper

    def __init__(self, package: str = "main"):
        super().__init__()
        self.package = package

    def generate(self, entry: CatalogEntry) -> str:
        struct_name = to_identifier(entry.name, fallback="Object")
        field_lines = []
        needs_time = False
        used = set()

        for col in entry.columns:
            go_type = self.mapper.to_target_type(col.type_name)
            needs_time = needs_time or go_type.startswith("time.")
            field_name = to_identifier(col.name)
            field_name = field_name[0].upper() + field_name[1:]
            while field_name in used:
                field_name += "_"
            used.add(field_name)
            tag = col.name.replace("\\", "\\\\").replace('"', '\\"')
            field_lines.append(f"\t{field_name} {go_type} `json:\"{tag}\"`")

        lines = [f"package {self.package}", ""]
        if needs_time:
            lines.extend(['import "time"', ""])
        lines.append(f"// {struct_name} represents the {entry.kind.value.lower()} {entry.qualified_name}")
        lines.append(f"type {struct_name} struct {{")
        lines.extend(field_lines)
        lines.append("}")
        return "\n".join(lines) + "\n"


class PythonDataclassGenerator(TypeDefinitionGenerator):
    """Generates a Python dataclass."""

    file_suffix = ".py"
    mapper_class = PythonTypeMapper

    IMPORTS = {
        "datetime": "from datetime import datetime",
        "date": "from datetime import date",
        "Decimal": "from decimal import Decimal",
        "Any": "from typing import Any",
    }

    def generate(self, entry: CatalogEntry) -> str:
        class_name = to_identifier(entry.name, fallback="Object")
        class_name = class_name[0].upper() + class_name[1:]
        field_lines = []
        imports = {"from dataclasses import dataclass"}
        optional = False
        used = set()

        for col in entry.columns:
            py_type = self.mapper.to_target_type(col.type_name)
            if py_type in self.IMPORTS:
                imports.add(self.IMPORTS[py_type])
            if col.nullable and py_type != "Any":
                py_type = f"Optional[{py_type}]"
                optional = True
            field_name = to_identifier(col.name)
            if keyword.iskeyword(field_name):
                field_name += "_"
            while field_name in used:
                field_name += "_"
            used.add(field_name)
            field_lines.append(f"    {field_name}: {py_type}")

        if optional:
            imports.add("from typing import Optional")
        if not field_lines:
            field_lines.append("    pass")

        lines = sorted(imports)
        lines.extend(["", "", "@dataclass"])
        lines.append(f"class {class_name}:")
        lines.append(f'    """Row of the {entry.kind.value.lower()} {entry.qualified_name}."""')
        lines.append("")
        lines.extend(field_lines)
        return "\n".join(lines) + "\n"


GENERATORS: Dict[str, Type[TypeDefinitionGenerator]] = {
    "go": GoStructGenerator,
    "python": PythonDataclassGenerator,
}


def get_generator(language: str) -> TypeDefinitionGenerator:
    """Get the type definition generator for a target language.

    Raises:
        ValueError: If the language is not supported
    """
    try:
        return GENERATORS[language.lower()]()
    except KeyError:
        raise ValueError(
            f"Unsupported type language: {language}. "
            f"Supported: {', '.join(sorted(GENERATORS))}"
        )
