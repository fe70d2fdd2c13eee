"""SQL Server engine adapter."""

from typing import Any, Dict, List, Optional

from .base import EngineAdapter, ObjectRef
from .models import ColumnDescriptor, DependencyRef, ObjectKind


def quote_identifier(name: str) -> str:
    """Quote a SQL Server identifier with brackets."""
    return "[" + name.replace("]", "]]") + "]"


class MSSQLAdapter(EngineAdapter):
    """Adapter for SQL Server, with schemas and dependency tracking."""

    engine = "mssql"
    DEFAULT_PORT = 1433
    DEFAULT_DRIVER = "ODBC Driver 18 for SQL Server"

    LIST_OBJECTS_SQL = """
        SELECT TABLE_SCHEMA, TABLE_NAME, TABLE_TYPE
        FROM {db}.INFORMATION_SCHEMA.TABLES
        UNION ALL
        SELECT ROUTINE_SCHEMA, ROUTINE_NAME, ROUTINE_TYPE
        FROM {db}.INFORMATION_SCHEMA.ROUTINES
    """

    COLUMNS_SQL = """
        SELECT
            c.name,
            tp.name AS type_name,
            c.max_length,
            c.[precision],
            c.scale,
            ISNULL(c.collation_name, '') AS collation_name,
            c.is_nullable,
            c.is_identity
        FROM {db}.sys.columns c WITH(NOLOCK)
        JOIN {db}.sys.types tp WITH(NOLOCK) ON c.user_type_id = tp.user_type_id
        WHERE c.[object_id] = OBJECT_ID(?)
        ORDER BY c.column_id
    """

    DEFINITION_SQL = "SELECT ISNULL(OBJECT_DEFINITION(OBJECT_ID(?)), '') AS [definition]"

    DEPENDENCIES_SQL = """
        SELECT
            ISNULL(d.referenced_database_name, DB_NAME()) AS referenced_database_name,
            ISNULL(d.referenced_schema_name, ISNULL(OBJECT_SCHEMA_NAME(d.referenced_id), '')) AS referenced_schema_name,
            ISNULL(d.referenced_entity_name, '') AS referenced_entity_name
        FROM {db}.sys.sql_expression_dependencies d
        WHERE d.referencing_id = OBJECT_ID(?)
    """

    def __init__(
        self,
        server: str,
        database: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        port: Optional[int] = None,
        driver: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        """Initialize SQL Server adapter.

        Args:
            server: Host name or address
            database: Database to introspect (the connection is bound to it)
            user: Login name; trusted connection when omitted
            password: Login password
            port: TCP port (default 1433)
            driver: ODBC driver name
            options: Extra ODBC connection string keywords
        """
        super().__init__(database)
        self.server = server
        self.user = user
        self.password = password
        self.port = port or self.DEFAULT_PORT
        self.driver = driver or self.DEFAULT_DRIVER
        self.options = options or {}

    @classmethod
    def from_config(cls, config, database: str) -> "MSSQLAdapter":
        return cls(
            server=config.server,
            database=database,
            user=config.user,
            password=config.password,
            port=config.port,
            driver=config.driver,
            options=config.options,
        )

    def connection_string(self) -> str:
        """Build the ODBC connection string."""
        parts = {
            "DRIVER": "{" + self.driver + "}",
            "SERVER": f"{self.server},{self.port}",
            "DATABASE": self.database,
        }
        if self.user:
            parts["UID"] = self.user
            parts["PWD"] = self.password or ""
        else:
            parts["Trusted_Connection"] = "yes"
        for key, value in self.options.items():
            parts[key] = value
        return ";".join(f"{k}={v}" for k, v in parts.items())

    def _open_connection(self):
        try:
            import pyodbc
        except ImportError:
            raise ImportError(
                "pyodbc is required for SQL Server. "
                "Install it with: pip install 'dbcatalog-cli[mssql]'"
            )
        return pyodbc.connect(self.connection_string(), autocommit=True)

    def _object_id_name(self, database: str, schema: str, name: str) -> str:
        return ".".join(quote_identifier(part) for part in (database, schema, name))

    def list_objects(self, database: str) -> List[ObjectRef]:
        rows = self._fetch_all(self.LIST_OBJECTS_SQL.format(db=quote_identifier(database)))
        objects = []
        with self._decoding():
            for row in rows:
                objects.append((row[0], row[1], ObjectKind.from_engine(row[2])))
        return objects

    def describe_columns(self, database: str, schema: str, name: str) -> List[ColumnDescriptor]:
        object_name = self._qualify(schema, name)
        rows = self._fetch_all(
            self.COLUMNS_SQL.format(db=quote_identifier(database)),
            (self._object_id_name(database, schema, name),),
            object_name=object_name,
        )
        columns = []
        with self._decoding(object_name):
            for row in rows:
                columns.append(ColumnDescriptor(
                    name=row[0],
                    type_name=row[1],
                    max_length=int(row[2]),
                    precision=int(row[3]),
                    scale=int(row[4]),
                    collation=row[5] or "",
                    nullable=bool(row[6]),
                    is_identity=bool(row[7]),
                ))
        return columns

    def get_definition(self, database: str, schema: str, name: str) -> str:
        object_name = self._qualify(schema, name)
        rows = self._fetch_all(
            self.DEFINITION_SQL,
            (self._object_id_name(database, schema, name),),
            object_name=object_name,
        )
        with self._decoding(object_name):
            if not rows:
                return ""
            return rows[0][0] or ""

    def list_dependencies(self, database: str, schema: str, name: str) -> List[DependencyRef]:
        object_name = self._qualify(schema, name)
        rows = self._fetch_all(
            self.DEPENDENCIES_SQL.format(db=quote_identifier(database)),
            (self._object_id_name(database, schema, name),),
            object_name=object_name,
        )
        dependencies = []
        with self._decoding(object_name):
            for row in rows:
                dependencies.append(DependencyRef(
                    referenced_database=row[0] or "",
                    referenced_schema=row[1] or "",
                    referenced_table=row[2] or "",
                ))
        return dependencies
