"""Tests for the SQL Server and Snowflake adapters with mocked connections."""

from unittest.mock import MagicMock, patch

import pytest

from dbcatalog.config import CatalogConfig
from dbcatalog.database import MSSQLAdapter, SnowflakeAdapter, create_adapter
from dbcatalog.database.models import DependencyRef, ObjectKind
from dbcatalog.database.mssql import quote_identifier
from dbcatalog.errors import ConnectionError, DecodeError, QueryError


def _mock_connection(*results):
    """Connection whose cursor returns the given row lists, one per query."""
    connection = MagicMock()
    cursor = connection.cursor.return_value
    cursor.fetchall.side_effect = list(results)
    return connection, cursor


class TestMSSQLConnectionString:
    """Test ODBC connection string building."""

    def test_sql_login(self):
        """Test user/password authentication."""
        adapter = MSSQLAdapter(server="db01", database="Sales", user="sa", password="secret")

        assert adapter.connection_string() == (
            "DRIVER={ODBC Driver 18 for SQL Server};SERVER=db01,1433;DATABASE=Sales;UID=sa;PWD=secret"
        )

    def test_trusted_connection(self):
        """Test that omitting the user uses integrated security."""
        adapter = MSSQLAdapter(server="db01", database="Sales", port=14330, options={"TrustServerCertificate": "yes"})

        conn_str = adapter.connection_string()

        assert "SERVER=db01,14330" in conn_str
        assert "Trusted_Connection=yes" in conn_str
        assert "UID" not in conn_str
        assert conn_str.endswith("TrustServerCertificate=yes")

    def test_quote_identifier(self):
        """Test bracket quoting with escaping."""
        assert quote_identifier("Orders") == "[Orders]"
        assert quote_identifier("odd]name") == "[odd]]name]"

    def test_from_config(self):
        """Test the factory for mssql configurations."""
        config = CatalogConfig(
            server="db01", user="sa", password="pw", dbtype="MSSQL", port=1500,
            driver="ODBC Driver 17 for SQL Server", databases=["Sales"],
        )

        adapter = create_adapter(config, "Sales")

        assert isinstance(adapter, MSSQLAdapter)
        assert adapter.port == 1500
        assert adapter.driver == "ODBC Driver 17 for SQL Server"


class TestMSSQLIntrospection:
    """Test SQL Server queries and row decoding."""

    def test_list_objects(self):
        """Test that tables, views and routines are normalized."""
        connection, cursor = _mock_connection([
            ("dbo", "Orders", "BASE TABLE"),
            ("dbo", "v_OpenOrders", "VIEW"),
            ("dbo", "fn_Total", "FUNCTION"),
            ("etl", "usp_Load", "PROCEDURE"),
        ])
        adapter = MSSQLAdapter(server="db01", database="Sales")

        with patch.object(MSSQLAdapter, "_open_connection", return_value=connection):
            objects = adapter.list_objects("Sales")

        assert objects == [
            ("dbo", "Orders", ObjectKind.TABLE),
            ("dbo", "v_OpenOrders", ObjectKind.VIEW),
            ("dbo", "fn_Total", ObjectKind.FUNCTION),
            ("etl", "usp_Load", ObjectKind.PROCEDURE),
        ]
        sql = cursor.execute.call_args[0][0]
        assert "[Sales].INFORMATION_SCHEMA.TABLES" in sql
        assert "[Sales].INFORMATION_SCHEMA.ROUTINES" in sql

    def test_describe_columns(self):
        """Test column decoding and the object id parameter."""
        connection, cursor = _mock_connection([
            ("id", "int", 4, 10, 0, "", False, True),
            ("note", "nvarchar", 200, 0, 0, "Latin1_General_CI_AS", True, False),
        ])
        adapter = MSSQLAdapter(server="db01", database="Sales")

        with patch.object(MSSQLAdapter, "_open_connection", return_value=connection):
            columns = adapter.describe_columns("Sales", "dbo", "Orders")

        assert cursor.execute.call_args[0][1] == ("[Sales].[dbo].[Orders]",)
        assert columns[0].is_identity is True
        assert columns[0].nullable is False
        assert columns[1].max_length == 200
        assert columns[1].collation == "Latin1_General_CI_AS"

    def test_get_definition(self):
        """Test that a missing definition becomes an empty string."""
        connection, _ = _mock_connection([(None,)], [("CREATE VIEW v AS SELECT 1",)])
        adapter = MSSQLAdapter(server="db01", database="Sales")

        with patch.object(MSSQLAdapter, "_open_connection", return_value=connection):
            assert adapter.get_definition("Sales", "dbo", "Orders") == ""
            assert adapter.get_definition("Sales", "dbo", "v") == "CREATE VIEW v AS SELECT 1"

    def test_list_dependencies(self):
        """Test that dependency rows become DependencyRefs."""
        connection, cursor = _mock_connection([
            ("Sales", "dbo", "Orders"),
            ("Archive", "", "OrderHistory"),
            ("Sales", "", ""),
        ])
        adapter = MSSQLAdapter(server="db01", database="Sales")

        with patch.object(MSSQLAdapter, "_open_connection", return_value=connection):
            deps = adapter.list_dependencies("Sales", "dbo", "v_OpenOrders")

        assert deps == [
            DependencyRef("Sales", "dbo", "Orders"),
            DependencyRef("Archive", "", "OrderHistory"),
            DependencyRef("Sales", "", ""),
        ]
        assert "[Sales].sys.sql_expression_dependencies" in cursor.execute.call_args[0][0]

    def test_connect_failure(self):
        """Test that driver connection errors become ConnectionError."""
        adapter = MSSQLAdapter(server="db01", database="Sales")

        with patch.object(MSSQLAdapter, "_open_connection", side_effect=RuntimeError("Login failed")):
            with pytest.raises(ConnectionError) as exc_info:
                adapter.list_objects("Sales")

        assert exc_info.value.database == "Sales"
        assert "Login failed" in str(exc_info.value)

    def test_query_failure(self):
        """Test that driver query errors become QueryError with the object."""
        connection, cursor = _mock_connection()
        cursor.execute.side_effect = RuntimeError("Invalid object name")
        adapter = MSSQLAdapter(server="db01", database="Sales")

        with patch.object(MSSQLAdapter, "_open_connection", return_value=connection):
            with pytest.raises(QueryError) as exc_info:
                adapter.describe_columns("Sales", "dbo", "Orders")

        assert exc_info.value.object_name == "dbo.Orders"
        assert cursor.close.called

    def test_decode_failure(self):
        """Test that short rows become DecodeError."""
        connection, _ = _mock_connection([("id", "int")])
        adapter = MSSQLAdapter(server="db01", database="Sales")

        with patch.object(MSSQLAdapter, "_open_connection", return_value=connection):
            with pytest.raises(DecodeError):
                adapter.describe_columns("Sales", "dbo", "Orders")

    def test_close(self):
        """Test that leaving the context closes the connection."""
        connection, _ = _mock_connection([])

        with patch.object(MSSQLAdapter, "_open_connection", return_value=connection):
            with MSSQLAdapter(server="db01", database="Sales") as adapter:
                adapter.list_objects("Sales")

        connection.close.assert_called_once()


class TestSnowflakeAdapter:
    """Test Snowflake queries and row decoding."""

    def test_from_config(self):
        """Test that warehouse and role are taken from the options."""
        config = CatalogConfig(
            server="xy12345", user="loader", password="pw", dbtype="snowflake",
            databases=["ANALYTICS"], options={"warehouse": "WH", "role": "READER", "login_timeout": 30},
        )

        adapter = create_adapter(config, "ANALYTICS")

        assert isinstance(adapter, SnowflakeAdapter)
        assert adapter.account == "xy12345"
        assert adapter.warehouse == "WH"
        assert adapter.role == "READER"
        assert adapter.options == {"login_timeout": 30}
        assert config.options["warehouse"] == "WH"

    def test_list_objects(self):
        """Test normalization of Snowflake object types."""
        connection, _ = _mock_connection([
            ("PUBLIC", "ORDERS", "BASE TABLE"),
            ("PUBLIC", "V_ORDERS", "VIEW"),
            ("PUBLIC", "FN", "FUNCTION"),
            ("PUBLIC", "SP", "PROCEDURE"),
        ])
        adapter = SnowflakeAdapter(database="ANALYTICS", account="a", user="u", password="p")

        with patch.object(SnowflakeAdapter, "_open_connection", return_value=connection):
            kinds = [kind for _, _, kind in adapter.list_objects("ANALYTICS")]

        assert kinds == [ObjectKind.TABLE, ObjectKind.VIEW, ObjectKind.FUNCTION, ObjectKind.PROCEDURE]

    def test_describe_columns(self):
        """Test YES/NO flags and missing numeric values."""
        connection, cursor = _mock_connection([
            ("ID", "NUMBER", None, 38, 0, None, "NO", "YES"),
            ("NAME", "TEXT", 16777216, None, None, "en-ci", "YES", "NO"),
        ])
        adapter = SnowflakeAdapter(database="ANALYTICS", account="a", user="u", password="p")

        with patch.object(SnowflakeAdapter, "_open_connection", return_value=connection):
            columns = adapter.describe_columns("ANALYTICS", "PUBLIC", "ORDERS")

        assert cursor.execute.call_args[0][1] == ("PUBLIC", "ORDERS")
        assert columns[0].nullable is False
        assert columns[0].is_identity is True
        assert columns[0].precision == 38
        assert columns[1].max_length == 16777216
        assert columns[1].collation == "en-ci"

    def test_get_definition(self):
        """Test that the definition query binds schema and name three times."""
        connection, cursor = _mock_connection([("CREATE VIEW V_ORDERS AS SELECT 1",)])
        adapter = SnowflakeAdapter(database="ANALYTICS", account="a", user="u", password="p")

        with patch.object(SnowflakeAdapter, "_open_connection", return_value=connection):
            definition = adapter.get_definition("ANALYTICS", "PUBLIC", "V_ORDERS")

        assert definition == "CREATE VIEW V_ORDERS AS SELECT 1"
        assert cursor.execute.call_args[0][1] == ("PUBLIC", "V_ORDERS") * 3

    def test_environment_fallback(self, monkeypatch):
        """Test that credentials fall back to SNOWFLAKE_* variables."""
        monkeypatch.setenv("SNOWFLAKE_ACCOUNT", "env-account")
        monkeypatch.setenv("SNOWFLAKE_USER", "env-user")

        adapter = SnowflakeAdapter(database="ANALYTICS")

        assert adapter.account == "env-account"
        assert adapter.user == "env-user"
