"""Tests for the catalog data model and filtering."""

import pytest

from dbcatalog.database.models import (
    Catalog,
    CatalogEntry,
    ColumnDescriptor,
    DependencyRef,
    ObjectKind,
    filter_catalog,
)


def _entry(name, database="Sales", schema="dbo", **kwargs):
    return CatalogEntry(database=database, schema=schema, name=name, kind=ObjectKind.TABLE, **kwargs)


class TestObjectKind:
    """Test normalization of engine object types."""

    @pytest.mark.parametrize("raw,expected", [
        ("BASE TABLE", ObjectKind.TABLE),
        ("table", ObjectKind.TABLE),
        ("Table", ObjectKind.TABLE),
        ("LOCAL TEMPORARY", ObjectKind.TABLE),
        ("VIEW", ObjectKind.VIEW),
        ("MATERIALIZED VIEW", ObjectKind.VIEW),
        ("FUNCTION", ObjectKind.FUNCTION),
        ("macro", ObjectKind.FUNCTION),
        ("PROCEDURE", ObjectKind.PROCEDURE),
    ])
    def test_from_engine(self, raw, expected):
        """Test that engine type names map to the four kinds."""
        assert ObjectKind.from_engine(raw) == expected

    def test_unknown_kind_rejected(self):
        """Test that unrecognized types raise ValueError."""
        with pytest.raises(ValueError):
            ObjectKind.from_engine("SEQUENCE")

    def test_entry_coerces_kind(self):
        """Test that entries accept the kind as a string."""
        entry = CatalogEntry(database="db", schema="main", name="t", kind="View")
        assert entry.kind is ObjectKind.VIEW


class TestCatalogEntry:
    """Test CatalogEntry invariants."""

    def test_empty_dependency_dropped(self):
        """Test that an edge without a target table is dropped."""
        entry = _entry("v", dependencies=[
            DependencyRef("Sales", "dbo", ""),
            DependencyRef("", "", "  "),
            DependencyRef("Sales", "dbo", "Orders"),
        ])
        assert entry.dependencies == [DependencyRef("Sales", "dbo", "Orders")]

    def test_self_dependency_dropped(self):
        """Test that edges to the entry itself are dropped, case-insensitively."""
        entry = _entry("Orders", dependencies=[
            DependencyRef("sales", "DBO", "orders"),
            DependencyRef("", "", "Orders"),
            DependencyRef("Sales", "dbo", "Customers"),
        ])
        assert entry.dependencies == [DependencyRef("Sales", "dbo", "Customers")]

    def test_identity_and_qualified_name(self):
        """Test the identity triple and dotted name."""
        entry = _entry("Orders")
        assert entry.identity == ("Sales", "dbo", "Orders")
        assert entry.qualified_name == "Sales.dbo.Orders"

    def test_dict_roundtrip(self, open_orders_entry):
        """Test that to_dict/from_dict preserve every field."""
        restored = CatalogEntry.from_dict(open_orders_entry.to_dict())
        assert restored == open_orders_entry

    def test_dict_field_order(self, orders_entry):
        """Test the serialized field order."""
        assert list(orders_entry.to_dict()) == [
            "database", "schema", "name", "kind", "definition", "columns", "dependencies",
        ]
        assert list(orders_entry.columns[0].to_dict()) == [
            "name", "type_name", "max_length", "precision", "scale", "collation", "nullable", "is_identity",
        ]

    def test_column_defaults(self):
        """Test zero-valued column defaults."""
        col = ColumnDescriptor(name="c", type_name="text")
        assert (col.max_length, col.precision, col.scale, col.collation) == (0, 0, 0, "")
        assert col.nullable is True
        assert col.is_identity is False


class TestCatalog:
    """Test the Catalog collection."""

    def test_duplicate_identity_rejected(self):
        """Test that two entries with the same identity cannot coexist."""
        catalog = Catalog(entries=[_entry("Orders")])
        with pytest.raises(ValueError):
            catalog.add(_entry("Orders"))

    def test_same_name_other_schema_allowed(self):
        """Test that identity includes schema and database."""
        catalog = Catalog(entries=[_entry("Orders"), _entry("Orders", schema="hist"), _entry("Orders", database="Archive")])
        assert len(catalog) == 3

    def test_get_and_contains(self, sample_catalog):
        """Test lookup by identity."""
        assert sample_catalog.contains("Archive", "dbo", "OrderHistory")
        assert sample_catalog.get("Archive", "dbo", "OrderHistory").kind == ObjectKind.TABLE
        assert sample_catalog.get("Archive", "dbo", "Missing") is None

    def test_get_databases(self, sample_catalog):
        """Test databases are listed in order of appearance."""
        assert sample_catalog.get_databases() == ["Sales", "Archive"]

    def test_equality(self, sample_catalog):
        """Test catalogs compare by their entries."""
        assert Catalog(entries=list(sample_catalog)) == sample_catalog
        assert Catalog() != sample_catalog


class TestFilterCatalog:
    """Test include/exclude filtering."""

    @pytest.fixture
    def catalog(self):
        return Catalog(entries=[
            _entry("Orders"),
            _entry("Customers"),
            _entry("Invoices"),
            _entry("Orders", schema="hist"),
        ])

    def test_no_lists_keeps_everything(self, catalog):
        """Test that empty lists keep every entry in order."""
        assert filter_catalog(catalog) == catalog
        assert filter_catalog(catalog, [], []) == catalog

    def test_include(self, catalog):
        """Test that a non-empty include list keeps only listed names."""
        result = filter_catalog(catalog, include=["Invoices", "Orders"])
        assert [(e.schema, e.name) for e in result] == [("dbo", "Orders"), ("dbo", "Invoices"), ("hist", "Orders")]

    def test_exclude(self, catalog):
        """Test that excluded names are dropped."""
        result = filter_catalog(catalog, exclude=["Orders"])
        assert [e.name for e in result] == ["Customers", "Invoices"]

    def test_exclude_wins_over_include(self, catalog):
        """Test that a name in both lists is excluded."""
        result = filter_catalog(catalog, include=["Orders", "Customers"], exclude=["Orders"])
        assert [e.name for e in result] == ["Customers"]

    def test_bare_names_only(self, catalog):
        """Test that qualified names do not match."""
        result = filter_catalog(catalog, include=["dbo.Orders"])
        assert len(result) == 0

    def test_matching_is_case_sensitive(self, catalog):
        """Test that names must match exactly."""
        assert len(filter_catalog(catalog, include=["orders"])) == 0

    def test_input_untouched_and_deterministic(self, catalog):
        """Test that filtering twice yields equal results and leaves the input alone."""
        first = filter_catalog(catalog, include=["Orders"], exclude=["Invoices"])
        second = catalog.filter(include=["Orders"], exclude=["Invoices"])
        assert first == second
        assert len(catalog) == 4
