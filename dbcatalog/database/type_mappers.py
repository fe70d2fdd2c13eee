"""Mapping of engine column types to target-language primitives."""

from abc import ABC
from typing import Dict


def normalize_type_name(db_type: str) -> str:
    """Lowercase a type name and strip any length/precision suffix.

    ``DECIMAL(10,2)`` becomes ``decimal``, ``nvarchar`` stays ``nvarchar``.
    """
    if not db_type:
        return ""
    base = db_type.split("(", 1)[0]
    return " ".join(base.lower().split())


class TypeMapper(ABC):
    """Base class for database type mapping.

    Subclasses provide a fixed lookup table; unrecognized types map to the
    language's untyped placeholder.
    """

    language: str = ""
    TYPE_MAP: Dict[str, str] = {}
    PLACEHOLDER: str = ""

    def to_target_type(self, db_type: str) -> str:
        """Convert a database type name to a target-language type."""
        return self.TYPE_MAP.get(normalize_type_name(db_type), self.PLACEHOLDER)

    def is_known(self, db_type: str) -> bool:
        return normalize_type_name(db_type) in self.TYPE_MAP


class GoTypeMapper(TypeMapper):
    """Type mapper for generated Go structs."""

    language = "go"
    PLACEHOLDER = "interface{}"
    TYPE_MAP = {
        # Integer types
        "int": "int",
        "integer": "int",
        "bigint": "int64",
        "smallint": "int16",
        "tinyint": "uint8",
        # String types
        "varchar": "string",
        "nvarchar": "string",
        "char": "string",
        "nchar": "string",
        "text": "string",
        "ntext": "string",
        "uniqueidentifier": "string",
        "uuid": "string",
        # Date/Time types
        "datetime": "time.Time",
        "datetime2": "time.Time",
        "smalldatetime": "time.Time",
        "datetimeoffset": "time.Time",
        "date": "time.Time",
        "timestamp": "time.Time",
        # Boolean
        "bit": "bool",
        "boolean": "bool",
        # Floating point types
        "float": "float64",
        "double": "float64",
        "real": "float32",
        "decimal": "float64",
        "numeric": "float64",
        "money": "float64",
        "smallmoney": "float64",
        # Binary types
        "binary": "[]byte",
        "varbinary": "[]byte",
        "blob": "[]byte",
    }


class PythonTypeMapper(TypeMapper):
    """Type mapper for generated Python dataclasses."""

    language = "python"
    PLACEHOLDER = "Any"
    TYPE_MAP = {
        # Integer types
        "int": "int",
        "integer": "int",
        "bigint": "int",
        "smallint": "int",
        "tinyint": "int",
        # String types
        "varchar": "str",
        "nvarchar": "str",
        "char": "str",
        "nchar": "str",
        "text": "str",
        "ntext": "str",
        "uniqueidentifier": "str",
        "uuid": "str",
        # Date/Time types
        "datetime": "datetime",
        "datetime2": "datetime",
        "smalldatetime": "datetime",
        "datetimeoffset": "datetime",
        "timestamp": "datetime",
        "date": "date",
        # Boolean
        "bit": "bool",
        "boolean": "bool",
        # Floating point types
        "float": "float",
        "double": "float",
        "real": "float",
        "decimal": "Decimal",
        "numeric": "Decimal",
        "money": "Decimal",
        "smallmoney": "Decimal",
        # Binary types
        "binary": "bytes",
        "varbinary": "bytes",
        "blob": "bytes",
    }
