"""DuckDB engine adapter."""

from pathlib import Path
from typing import Any, List, Optional, Sequence

from .base import EngineAdapter, ObjectRef
from .models import ColumnDescriptor, ObjectKind


class DuckDBAdapter(EngineAdapter):
    """Adapter for DuckDB database files.

    DuckDB has schemas and a queryable catalog but no dependency tracking,
    so dependency lists are always empty. Macros are catalogued as
    functions.
    """

    engine = "duckdb"
    supports_dependencies = False

    LIST_OBJECTS_SQL = """
        SELECT table_schema, table_name, table_type
        FROM (
            SELECT table_schema, table_name, table_type, 0 AS part
            FROM information_schema.tables
            WHERE table_catalog = current_database()
              AND table_schema NOT IN ('information_schema', 'pg_catalog')
            UNION ALL
            SELECT schema_name, function_name, 'FUNCTION', 1 AS part
            FROM duckdb_functions()
            WHERE database_name = current_database()
              AND NOT internal
              AND function_type IN ('macro', 'table_macro')
        )
        ORDER BY part, table_schema, table_name
    """

    COLUMNS_SQL = """
        SELECT
            column_name,
            data_type,
            character_maximum_length,
            numeric_precision,
            numeric_scale,
            collation_name,
            is_nullable
        FROM information_schema.columns
        WHERE table_catalog = current_database()
          AND table_schema = ?
          AND table_name = ?
        ORDER BY ordinal_position
    """

    DEFINITION_SQL = """
        SELECT sql FROM duckdb_views()
        WHERE database_name = current_database()
          AND schema_name = ?
          AND view_name = ?
          AND NOT internal
        UNION ALL
        SELECT macro_definition FROM duckdb_functions()
        WHERE database_name = current_database()
          AND schema_name = ?
          AND function_name = ?
          AND NOT internal
          AND function_type IN ('macro', 'table_macro')
    """

    def __init__(
        self,
        database_path: str,
        database: Optional[str] = None,
        read_only: bool = True,
    ):
        """Initialize DuckDB adapter.

        Args:
            database_path: Path to .duckdb file
            database: Label for the catalog entries (defaults to file stem)
            read_only: Open database in read-only mode (default True for introspection)
        """
        super().__init__(database or Path(database_path).stem)
        self.database_path = database_path
        self.read_only = read_only

    @classmethod
    def from_config(cls, config, database: str) -> "DuckDBAdapter":
        return cls(
            database_path=config.server,
            database=database,
            read_only=config.options.get("read_only", True),
        )

    def _open_connection(self):
        try:
            import duckdb
        except ImportError:
            raise ImportError(
                "duckdb is required. "
                "Install it with: pip install duckdb"
            )
        if not Path(self.database_path).exists():
            raise FileNotFoundError(f"DuckDB database file not found: {self.database_path}")
        return duckdb.connect(self.database_path, read_only=self.read_only)

    def _run(self, sql: str, params: Sequence[Any]) -> List[Sequence[Any]]:
        return self._connection.execute(sql, list(params)).fetchall()

    def list_objects(self, database: str) -> List[ObjectRef]:
        rows = self._fetch_all(self.LIST_OBJECTS_SQL)
        objects = []
        with self._decoding():
            for row in rows:
                objects.append((row[0], row[1], ObjectKind.from_engine(row[2])))
        return objects

    def describe_columns(self, database: str, schema: str, name: str) -> List[ColumnDescriptor]:
        object_name = self._qualify(schema, name)
        rows = self._fetch_all(self.COLUMNS_SQL, (schema, name), object_name=object_name)
        columns = []
        with self._decoding(object_name):
            for row in rows:
                columns.append(ColumnDescriptor(
                    name=row[0],
                    type_name=row[1],
                    max_length=int(row[2] or 0),
                    precision=int(row[3] or 0),
                    scale=int(row[4] or 0),
                    collation=row[5] or "",
                    nullable=(row[6] == 'YES'),
                ))
        return columns

    def get_definition(self, database: str, schema: str, name: str) -> str:
        object_name = self._qualify(schema, name)
        rows = self._fetch_all(
            self.DEFINITION_SQL,
            (schema, name, schema, name),
            object_name=object_name,
        )
        with self._decoding(object_name):
            if not rows:
                return ""
            return rows[0][0] or ""
