"""In-memory engine adapter for orchestrator tests."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from dbcatalog.config import CatalogConfig
from dbcatalog.database.base import EngineAdapter, ObjectRef
from dbcatalog.database.models import ColumnDescriptor, DependencyRef, ObjectKind
from dbcatalog.errors import QueryError


def fake_config(*databases: str) -> CatalogConfig:
    """Configuration naming the given databases of a fake server."""
    return CatalogConfig(server="fake-server", engine="mssql", databases=list(databases))


class FakeConnection:
    """Stands in for a DB-API connection; only tracks close()."""

    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeAdapter(EngineAdapter):
    """Adapter serving a fixed object list from memory.

    Failures can be injected per database (``fail_connect``) or per object
    (``fail_on`` raises a QueryError, ``crash_on`` raises a plain
    RuntimeError). ``on_object`` is called with each object name before its
    columns are read.
    """

    engine = "fake"

    def __init__(
        self,
        database: str,
        objects: Sequence[Tuple[str, str, ObjectKind]] = (),
        columns: Optional[Dict[str, List[ColumnDescriptor]]] = None,
        definitions: Optional[Dict[str, str]] = None,
        dependencies: Optional[Dict[str, List[DependencyRef]]] = None,
        fail_connect: bool = False,
        fail_on: Sequence[str] = (),
        crash_on: Sequence[str] = (),
        on_object: Optional[Callable[[str], Any]] = None,
    ):
        super().__init__(database)
        self.objects = list(objects)
        self.columns = columns or {}
        self.definitions = definitions or {}
        self.dependencies = dependencies or {}
        self.fail_connect = fail_connect
        self.fail_on = set(fail_on)
        self.crash_on = set(crash_on)
        self.on_object = on_object
        self.calls: List[Tuple[str, str]] = []
        self.closed = False

    def _open_connection(self):
        if self.fail_connect:
            raise OSError("connection refused")
        return FakeConnection()

    def close(self):
        super().close()
        self.closed = True

    def list_objects(self, database: str) -> List[ObjectRef]:
        self.connect()
        return list(self.objects)

    def describe_columns(self, database: str, schema: str, name: str) -> List[ColumnDescriptor]:
        self.calls.append(("columns", name))
        if self.on_object is not None:
            self.on_object(name)
        if name in self.fail_on:
            raise QueryError(
                "Query failed",
                database=self.database,
                object_name=self._qualify(schema, name),
                cause=RuntimeError("Invalid object name"),
            )
        if name in self.crash_on:
            raise RuntimeError("driver crashed")
        return list(self.columns.get(name, []))

    def get_definition(self, database: str, schema: str, name: str) -> str:
        self.calls.append(("definition", name))
        return self.definitions.get(name, "")

    def list_dependencies(self, database: str, schema: str, name: str) -> List[DependencyRef]:
        self.calls.append(("dependencies", name))
        return list(self.dependencies.get(name, []))


class FakeAdapterFactory:
    """Adapter factory handing out FakeAdapters configured per database."""

    def __init__(self, specs: Dict[str, Dict[str, Any]]):
        self.specs = specs
        self.created: Dict[str, FakeAdapter] = {}

    def __call__(self, config: CatalogConfig, database: str) -> FakeAdapter:
        adapter = FakeAdapter(database, **self.specs.get(database, {}))
        self.created[database] = adapter
        return adapter
