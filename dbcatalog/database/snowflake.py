"""Snowflake engine adapter."""

import os
from typing import Any, Dict, List, Optional

from .base import EngineAdapter, ObjectRef
from .models import ColumnDescriptor, ObjectKind


class SnowflakeAdapter(EngineAdapter):
    """Adapter for Snowflake databases.

    Object dependencies are only exposed through ACCOUNT_USAGE, which needs
    elevated privileges, so dependency lists are always empty.
    """

    engine = "snowflake"
    supports_dependencies = False

    LIST_OBJECTS_SQL = """
        SELECT TABLE_SCHEMA, TABLE_NAME, TABLE_TYPE
        FROM INFORMATION_SCHEMA.TABLES
        WHERE TABLE_SCHEMA <> 'INFORMATION_SCHEMA'
        UNION ALL
        SELECT FUNCTION_SCHEMA, FUNCTION_NAME, 'FUNCTION'
        FROM INFORMATION_SCHEMA.FUNCTIONS
        UNION ALL
        SELECT PROCEDURE_SCHEMA, PROCEDURE_NAME, 'PROCEDURE'
        FROM INFORMATION_SCHEMA.PROCEDURES
    """

    COLUMNS_SQL = """
        SELECT
            COLUMN_NAME,
            DATA_TYPE,
            CHARACTER_MAXIMUM_LENGTH,
            NUMERIC_PRECISION,
            NUMERIC_SCALE,
            COLLATION_NAME,
            IS_NULLABLE,
            IS_IDENTITY
        FROM INFORMATION_SCHEMA.COLUMNS
        WHERE TABLE_SCHEMA = %s
          AND TABLE_NAME = %s
        ORDER BY ORDINAL_POSITION
    """

    DEFINITION_SQL = """
        SELECT VIEW_DEFINITION FROM INFORMATION_SCHEMA.VIEWS
        WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
        UNION ALL
        SELECT FUNCTION_DEFINITION FROM INFORMATION_SCHEMA.FUNCTIONS
        WHERE FUNCTION_SCHEMA = %s AND FUNCTION_NAME = %s
        UNION ALL
        SELECT PROCEDURE_DEFINITION FROM INFORMATION_SCHEMA.PROCEDURES
        WHERE PROCEDURE_SCHEMA = %s AND PROCEDURE_NAME = %s
    """

    def __init__(
        self,
        database: str,
        account: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        warehouse: Optional[str] = None,
        role: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(database)
        self.account = account or os.environ.get("SNOWFLAKE_ACCOUNT")
        self.user = user or os.environ.get("SNOWFLAKE_USER")
        self.password = password or os.environ.get("SNOWFLAKE_PASSWORD")
        self.warehouse = warehouse or os.environ.get("SNOWFLAKE_WAREHOUSE")
        self.role = role or os.environ.get("SNOWFLAKE_ROLE")
        self.options = options or {}

    @classmethod
    def from_config(cls, config, database: str) -> "SnowflakeAdapter":
        options = dict(config.options)
        return cls(
            database=database,
            account=config.server,
            user=config.user,
            password=config.password,
            warehouse=options.pop("warehouse", None),
            role=options.pop("role", None),
            options=options,
        )

    def _open_connection(self):
        try:
            import snowflake.connector
        except ImportError:
            raise ImportError(
                "snowflake-connector-python is required. "
                "Install it with: pip install 'dbcatalog-cli[snowflake]'"
            )

        return snowflake.connector.connect(
            account=self.account,
            user=self.user,
            password=self.password,
            warehouse=self.warehouse,
            database=self.database,
            role=self.role,
            **self.options,
        )

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
                    is_identity=(row[7] == 'YES'),
                ))
        return columns

    def get_definition(self, database: str, schema: str, name: str) -> str:
        object_name = self._qualify(schema, name)
        rows = self._fetch_all(
            self.DEFINITION_SQL,
            (schema, name) * 3,
            object_name=object_name,
        )
        with self._decoding(object_name):
            if not rows:
                return ""
            return rows[0][0] or ""
