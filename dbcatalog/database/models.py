"""Catalog data models for schema introspection."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


class ObjectKind(str, Enum):
    """Kinds of catalogued database objects."""
    TABLE = "Table"
    VIEW = "View"
    FUNCTION = "Function"
    PROCEDURE = "Procedure"

    @classmethod
    def from_engine(cls, raw: str) -> "ObjectKind":
        """Normalize an engine-reported object type.

        Raises:
            ValueError: If the type is not recognized
        """
        if raw is None:
            raise ValueError("Object type is missing")
        value = str(raw).strip().upper()

        for kind in cls:
            if value == kind.value.upper():
                return kind
        if "VIEW" in value:
            return cls.VIEW
        if value in ("BASE TABLE", "LOCAL TEMPORARY", "TEMPORARY TABLE", "EXTERNAL TABLE", "TRANSIENT"):
            return cls.TABLE
        if value.endswith("TABLE"):
            return cls.TABLE
        if value in ("MACRO", "TABLE_MACRO", "SCALAR FUNCTION", "TABLE FUNCTION"):
            return cls.FUNCTION
        if value in ("PROC", "STORED PROCEDURE"):
            return cls.PROCEDURE
        raise ValueError(f"Unknown object type: {raw!r}")


@dataclass(frozen=True)
class ColumnDescriptor:
    """Represents a column of a table, view or routine result."""
    name: str
    type_name: str
    max_length: int = 0
    precision: int = 0
    scale: int = 0
    collation: str = ""
    nullable: bool = True
    is_identity: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type_name": self.type_name,
            "max_length": self.max_length,
            "precision": self.precision,
            "scale": self.scale,
            "collation": self.collation,
            "nullable": self.nullable,
            "is_identity": self.is_identity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnDescriptor":
        return cls(
            name=data["name"],
            type_name=data["type_name"],
            max_length=int(data.get("max_length", 0)),
            precision=int(data.get("precision", 0)),
            scale=int(data.get("scale", 0)),
            collation=data.get("collation") or "",
            nullable=bool(data.get("nullable", True)),
            is_identity=bool(data.get("is_identity", False)),
        )


@dataclass(frozen=True)
class DependencyRef:
    """A directed edge to an object the owning entry depends on."""
    referenced_database: str
    referenced_schema: str
    referenced_table: str

    def is_empty(self) -> bool:
        """Check whether the edge names no target object."""
        return not (self.referenced_table or "").strip()

    def to_dict(self) -> Dict[str, str]:
        return {
            "referenced_database": self.referenced_database,
            "referenced_schema": self.referenced_schema,
            "referenced_table": self.referenced_table,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyRef":
        return cls(
            referenced_database=data.get("referenced_database") or "",
            referenced_schema=data.get("referenced_schema") or "",
            referenced_table=data.get("referenced_table") or "",
        )


@dataclass
class CatalogEntry:
    """Represents one introspected table, view, function or procedure.

    Empty and self-referential dependency edges are dropped on construction,
    so every entry only ever carries informative edges.
    """
    database: str
    schema: str
    name: str
    kind: ObjectKind
    definition: str = ""
    columns: List[ColumnDescriptor] = field(default_factory=list)
    dependencies: List[DependencyRef] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.kind, ObjectKind):
            self.kind = ObjectKind.from_engine(self.kind)
        self.definition = self.definition or ""
        self.columns = list(self.columns)
        self.dependencies = [d for d in self.dependencies if self._keeps_dependency(d)]

    @property
    def identity(self) -> Tuple[str, str, str]:
        return (self.database, self.schema, self.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.database}.{self.schema}.{self.name}"

    def _keeps_dependency(self, dep: DependencyRef) -> bool:
        if dep.is_empty():
            return False
        target = (
            (dep.referenced_database or self.database).casefold(),
            (dep.referenced_schema or self.schema).casefold(),
            dep.referenced_table.casefold(),
        )
        own = (self.database.casefold(), self.schema.casefold(), self.name.casefold())
        return target != own

    def to_dict(self) -> Dict[str, Any]:
        return {
            "database": self.database,
            "schema": self.schema,
            "name": self.name,
            "kind": self.kind.value,
            "definition": self.definition,
            "columns": [c.to_dict() for c in self.columns],
            "dependencies": [d.to_dict() for d in self.dependencies],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogEntry":
        return cls(
            database=data["database"],
            schema=data.get("schema") or "",
            name=data["name"],
            kind=ObjectKind.from_engine(data["kind"]),
            definition=data.get("definition") or "",
            columns=[ColumnDescriptor.from_dict(c) for c in data.get("columns") or []],
            dependencies=[DependencyRef.from_dict(d) for d in data.get("dependencies") or []],
        )


@dataclass
class Catalog:
    """Ordered collection of catalog entries produced by one run.

    The (database, schema, name) identity of every entry is unique.
    """
    entries: List[CatalogEntry] = field(default_factory=list)

    def __post_init__(self):
        entries = list(self.entries)
        self.entries = []
        self._identities = set()
        self.extend(entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return self.entries == other.entries

    def add(self, entry: CatalogEntry) -> None:
        """Append an entry.

        Raises:
            ValueError: If an entry with the same identity already exists
        """
        if entry.identity in self._identities:
            raise ValueError(f"Duplicate catalog entry: {entry.qualified_name}")
        self._identities.add(entry.identity)
        self.entries.append(entry)

    def extend(self, entries: Iterable[CatalogEntry]) -> None:
        for entry in entries:
            self.add(entry)

    def contains(self, database: str, schema: str, name: str) -> bool:
        return (database, schema, name) in self._identities

    def get(self, database: str, schema: str, name: str) -> Optional[CatalogEntry]:
        """Find an entry by its identity."""
        for entry in self.entries:
            if entry.identity == (database, schema, name):
                return entry
        return None

    def get_databases(self) -> List[str]:
        """Database names in order of first appearance."""
        seen = []
        for entry in self.entries:
            if entry.database not in seen:
                seen.append(entry.database)
        return seen

    def filter(self, include: Optional[Sequence[str]] = None, exclude: Optional[Sequence[str]] = None) -> "Catalog":
        return filter_catalog(self, include, exclude)


def filter_catalog(
    catalog: Catalog,
    include: Optional[Sequence[str]] = None,
    exclude: Optional[Sequence[str]] = None,
) -> Catalog:
    """Filter a catalog by bare object name.

    Names are matched exactly against the entry name only, without schema or
    database qualification. A non-empty include list keeps only listed names;
    the exclude list always wins over the include list. The input catalog is
    left untouched and the relative order of kept entries is preserved.
    """
    includes = set(include or [])
    excludes = set(exclude or [])

    kept = []
    for entry in catalog:
        if includes and entry.name not in includes:
            continue
        if entry.name in excludes:
            continue
        kept.append(entry)
    return Catalog(entries=kept)
