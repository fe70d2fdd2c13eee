"""Shared pytest fixtures for dbcatalog tests."""

import sqlite3

import pytest

from dbcatalog.config import CatalogConfig
from dbcatalog.database.models import (
    Catalog,
    CatalogEntry,
    ColumnDescriptor,
    DependencyRef,
    ObjectKind,
)
from dbcatalog.logging import run_service
from dbcatalog.logging.run_service import RunLogger


OPEN_ORDERS_VIEW = """CREATE VIEW open_orders AS
-- Author: Jane Doe
-- Created: 2023-04-01
-- Description: Orders that are not shipped yet
/*
Commit;jdoe;2023-05-02;Added total
*/
SELECT o.id, o.total, c.name
FROM orders o JOIN customers c ON c.id = o.customer_id
WHERE o.shipped = 0"""


@pytest.fixture(autouse=True)
def isolated_run_log(tmp_path, monkeypatch):
    """Record runs in a per-test database instead of ~/.dbcatalog."""
    run_logger = RunLogger(db_path=str(tmp_path / "runs.db"))
    monkeypatch.setattr(run_service, "_run_logger", run_logger)
    yield run_logger
    if run_logger.db is not None:
        run_logger.db.close()


@pytest.fixture
def orders_entry():
    """A SQL Server table with columns and no definition."""
    return CatalogEntry(
        database="Sales",
        schema="dbo",
        name="Orders",
        kind=ObjectKind.TABLE,
        columns=[
            ColumnDescriptor(name="id", type_name="int", max_length=4, precision=10, nullable=False, is_identity=True),
            ColumnDescriptor(name="created", type_name="datetime", max_length=8, precision=23, scale=3),
            ColumnDescriptor(name="note", type_name="nvarchar", max_length=200, collation="Latin1_General_CI_AS"),
        ],
    )


@pytest.fixture
def open_orders_entry():
    """A SQL Server view with an annotated definition and dependencies."""
    return CatalogEntry(
        database="Sales",
        schema="dbo",
        name="v_OpenOrders",
        kind=ObjectKind.VIEW,
        definition=(
            "CREATE VIEW dbo.v_OpenOrders AS\r\n"
            "-- Ersteller/in: Jane Doe\r\n"
            "-- Erstelldatum: 2023-04-01\r\n"
            "-- Kommentar: Open orders per customer\r\n"
            "/*\r\n"
            "Commit;jdoe;2023-05-02;Added region\r\n"
            "*/\r\n"
            "SELECT * FROM dbo.Orders WHERE shipped = 0"
        ),
        columns=[
            ColumnDescriptor(name="id", type_name="int", max_length=4, precision=10, nullable=False),
        ],
        dependencies=[
            DependencyRef("Sales", "dbo", "Orders"),
            DependencyRef("Archive", "", "OrderHistory"),
        ],
    )


@pytest.fixture
def sample_catalog(orders_entry, open_orders_entry):
    """Catalog spanning two databases."""
    return Catalog(entries=[
        orders_entry,
        open_orders_entry,
        CatalogEntry(
            database="Archive",
            schema="dbo",
            name="OrderHistory",
            kind=ObjectKind.TABLE,
            columns=[ColumnDescriptor(name="id", type_name="bigint", max_length=8, precision=19, nullable=False)],
        ),
        CatalogEntry(
            database="Archive",
            schema="dbo",
            name="usp_Purge",
            kind=ObjectKind.PROCEDURE,
            definition="CREATE PROCEDURE dbo.usp_Purge AS DELETE FROM dbo.OrderHistory",
            dependencies=[DependencyRef("Archive", "dbo", "OrderHistory")],
        ),
    ])


@pytest.fixture
def sqlite_db_path(tmp_path):
    """A SQLite file with two tables and an annotated view."""
    path = tmp_path / "shop.db"
    conn = sqlite3.connect(str(path))
    conn.executescript(
        """
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email VARCHAR(255)
        );
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER NOT NULL REFERENCES customers(id),
            total DECIMAL(10,2),
            shipped BOOLEAN NOT NULL DEFAULT 0
        );
        """
    )
    conn.execute(OPEN_ORDERS_VIEW)
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def duckdb_db_path(tmp_path):
    """A DuckDB file with a table, a view and a macro."""
    duckdb = pytest.importorskip("duckdb")
    path = tmp_path / "warehouse.duckdb"
    conn = duckdb.connect(str(path))
    conn.execute(
        """
        CREATE TABLE customers (
            id INTEGER NOT NULL,
            name VARCHAR,
            amount DECIMAL(10,2)
        )
        """
    )
    conn.execute("CREATE VIEW big_customers AS SELECT id, name FROM customers WHERE amount > 1000")
    conn.execute("CREATE MACRO add_one(x) AS x + 1")
    conn.close()
    return path


@pytest.fixture
def sqlite_config(sqlite_db_path):
    """Configuration cataloging the SQLite fixture under the label 'shop'."""
    return CatalogConfig(server=str(sqlite_db_path), engine="sqlite", databases=["shop"])
