"""SQLite engine adapter."""

import sqlite3
from pathlib import Path
from typing import List, Optional

from .base import EngineAdapter, ObjectRef
from .models import ColumnDescriptor, ObjectKind


class SQLiteAdapter(EngineAdapter):
    """Adapter for single-file SQLite databases.

    SQLite has neither schemas nor dependency tracking: every object gets
    the ``main`` schema placeholder and an empty dependency list. The
    configured database name only labels the entries; the file is given by
    ``database_path``.
    """

    engine = "sqlite"
    supports_schemas = False
    supports_dependencies = False

    LIST_OBJECTS_SQL = """
        SELECT name, type
        FROM sqlite_master
        WHERE type IN ('table', 'view')
          AND name NOT LIKE 'sqlite_%'
        ORDER BY rowid
    """

    COLUMNS_SQL = "SELECT cid, name, type, \"notnull\", dflt_value, pk FROM pragma_table_info(?)"

    DEFINITION_SQL = "SELECT sql FROM sqlite_master WHERE name = ? AND type = 'view'"

    def __init__(self, database_path: str, database: Optional[str] = None):
        """Initialize SQLite adapter.

        Args:
            database_path: Path to the database file (opened read-only)
            database: Label for the catalog entries (defaults to file stem)
        """
        super().__init__(database or Path(database_path).stem)
        self.database_path = database_path

    @classmethod
    def from_config(cls, config, database: str) -> "SQLiteAdapter":
        return cls(database_path=config.server, database=database)

    def _open_connection(self):
        uri = Path(self.database_path).resolve().as_uri() + "?mode=ro"
        return sqlite3.connect(uri, uri=True)

    def list_objects(self, database: str) -> List[ObjectRef]:
        rows = self._fetch_all(self.LIST_OBJECTS_SQL)
        objects = []
        with self._decoding():
            for row in rows:
                objects.append((self.SCHEMA_PLACEHOLDER, row[0], ObjectKind.from_engine(row[1])))
        return objects

    def describe_columns(self, database: str, schema: str, name: str) -> List[ColumnDescriptor]:
        rows = self._fetch_all(self.COLUMNS_SQL, (name,), object_name=name)
        columns = []
        with self._decoding(name):
            single_key = sum(1 for row in rows if row[5]) == 1
            for cid, col_name, col_type, notnull, _default, pk in rows:
                col_type = col_type or ""
                columns.append(ColumnDescriptor(
                    name=col_name,
                    type_name=col_type,
                    nullable=not notnull,
                    # A lone INTEGER PRIMARY KEY is an alias of the rowid
                    is_identity=single_key and bool(pk) and col_type.upper() == "INTEGER",
                ))
        return columns

    def get_definition(self, database: str, schema: str, name: str) -> str:
        rows = self._fetch_all(self.DEFINITION_SQL, (name,), object_name=name)
        with self._decoding(name):
            if not rows:
                return ""
            return rows[0][0] or ""
