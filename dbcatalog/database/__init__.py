"""Database introspection module for dbcatalog.

This module provides engine-agnostic introspection through the
EngineAdapter interface, with implementations for SQL Server, SQLite,
DuckDB and Snowflake.
"""

from .models import (
    ObjectKind,
    ColumnDescriptor,
    DependencyRef,
    CatalogEntry,
    Catalog,
    filter_catalog,
)
from .base import EngineAdapter
from .type_mappers import TypeMapper, GoTypeMapper, PythonTypeMapper
from .mssql import MSSQLAdapter
from .sqlite import SQLiteAdapter
from .duckdb import DuckDBAdapter
from .snowflake import SnowflakeAdapter
from ..config import EngineKind

ADAPTERS = {
    EngineKind.MSSQL: MSSQLAdapter,
    EngineKind.SQLITE: SQLiteAdapter,
    EngineKind.DUCKDB: DuckDBAdapter,
    EngineKind.SNOWFLAKE: SnowflakeAdapter,
}


def create_adapter(config, database: str) -> EngineAdapter:
    """Build the adapter for one target database of a configuration."""
    adapter_class = ADAPTERS[EngineKind(config.engine)]
    return adapter_class.from_config(config, database)


__all__ = [
    # Data models
    "ObjectKind",
    "ColumnDescriptor",
    "DependencyRef",
    "CatalogEntry",
    "Catalog",
    "filter_catalog",
    # Base classes
    "EngineAdapter",
    # Type mappers
    "TypeMapper",
    "GoTypeMapper",
    "PythonTypeMapper",
    # Adapters
    "MSSQLAdapter",
    "SQLiteAdapter",
    "DuckDBAdapter",
    "SnowflakeAdapter",
    "ADAPTERS",
    "create_adapter",
]
