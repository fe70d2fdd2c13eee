"""Abstract base class for engine adapters."""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, List, Optional, Sequence, Tuple

from ..errors import ConnectionError, DecodeError, IntrospectionError, QueryError
from .models import ColumnDescriptor, DependencyRef, ObjectKind

logger = logging.getLogger(__name__)

ObjectRef = Tuple[str, str, ObjectKind]


class EngineAdapter(ABC):
    """Uniform introspection surface over one database of one engine.

    An adapter owns exactly one DB-API connection, opened lazily and closed
    by ``close()`` or on leaving the ``with`` block. Query text is owned by
    each subclass as class-level constants.

    Every driver failure is re-raised as ``ConnectionError``, ``QueryError``
    or ``DecodeError`` carrying the database and object being read. Nothing
    is retried here.
    """

    engine: str = ""
    supports_schemas: bool = True
    supports_dependencies: bool = True

    # Schema value used for every object of engines without schemas
    SCHEMA_PLACEHOLDER = "main"

    def __init__(self, database: str):
        self.database = database
        self._connection = None

    @abstractmethod
    def _open_connection(self):
        """Open and return a DB-API connection for ``self.database``."""

    def connect(self):
        """Establish the connection if not already open."""
        if self._connection is not None:
            return self._connection
        try:
            self._connection = self._open_connection()
        except IntrospectionError:
            raise
        except Exception as e:
            raise ConnectionError(
                f"Cannot connect to {self.engine} database",
                database=self.database,
                cause=e,
            ) from e
        logger.debug("Connected to %s database %s", self.engine, self.database)
        return self._connection

    def close(self):
        """Close the connection."""
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None

    def _run(self, sql: str, params: Sequence[Any]) -> List[Sequence[Any]]:
        """Execute a query on the raw connection and fetch every row."""
        cursor = self._connection.cursor()
        try:
            cursor.execute(sql, tuple(params))
            return cursor.fetchall()
        finally:
            cursor.close()

    def _fetch_all(self, sql: str, params: Sequence[Any] = (), object_name: Optional[str] = None) -> List[Sequence[Any]]:
        """Execute a query, mapping driver failures to ``QueryError``."""
        self.connect()
        try:
            return self._run(sql, params)
        except Exception as e:
            raise QueryError(
                "Query failed",
                database=self.database,
                object_name=object_name,
                cause=e,
            ) from e

    @contextmanager
    def _decoding(self, object_name: Optional[str] = None):
        """Map row-shape failures inside the block to ``DecodeError``."""
        try:
            yield
        except IntrospectionError:
            raise
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise DecodeError(
                "Unexpected result row",
                database=self.database,
                object_name=object_name,
                cause=e,
            ) from e

    @staticmethod
    def _qualify(schema: str, name: str) -> str:
        if schema:
            return f"{schema}.{name}"
        return name

    @abstractmethod
    def list_objects(self, database: str) -> List[ObjectRef]:
        """Enumerate tables, views and (where supported) routines.

        Args:
            database: Database name

        Returns:
            List of (schema, name, kind) tuples in engine discovery order
        """

    @abstractmethod
    def describe_columns(self, database: str, schema: str, name: str) -> List[ColumnDescriptor]:
        """Get all columns of an object, in ordinal order."""

    @abstractmethod
    def get_definition(self, database: str, schema: str, name: str) -> str:
        """Get the stored source of a view or routine; empty for tables."""

    def list_dependencies(self, database: str, schema: str, name: str) -> List[DependencyRef]:
        """Get the objects an object depends on.

        Engines without dependency tracking return an empty list.
        """
        return []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
