"""Tests for data models."""

import pytest
from pydantic import ValidationError

from sqlserver_to_erd.models import (
    CatalogSnapshot, ColumnInfo, DatabaseSchema, DiagramStyle, ERDConfig,
    IndexInfo, Relationship, RelationshipType, RenderOptions, TableRow,
    TableSchema, entity_name
)


class TestColumnInfo:
    """Test ColumnInfo model."""

    def test_column_info_creation(self):
        """Test basic column info creation."""
        column = ColumnInfo(name="CustomerId", data_type="int", ordinal_position=2)

        assert column.name == "CustomerId"
        assert column.data_type == "int"
        assert column.is_nullable
        assert not column.is_primary_key
        assert not column.is_identity

    def test_ordinal_position_is_one_based(self):
        """Test ordinal position validation."""
        with pytest.raises(ValidationError):
            ColumnInfo(name="Id", data_type="int", ordinal_position=0)

    def test_column_is_frozen(self):
        """Test columns cannot be changed after construction."""
        column = ColumnInfo(name="Id", data_type="int", ordinal_position=1)
        with pytest.raises(ValidationError):
            column.name = "Other"


class TestTableSchema:
    """Test TableSchema model."""

    def _table(self):
        return TableSchema(
            schema_name="dbo",
            name="Order",
            columns=[
                ColumnInfo(name="Total", data_type="money", ordinal_position=4),
                ColumnInfo(name="LineNo", data_type="int", ordinal_position=2, is_primary_key=True),
                ColumnInfo(name="OrderId", data_type="int", ordinal_position=1, is_primary_key=True),
                ColumnInfo(name="Note", data_type="nvarchar", ordinal_position=3),
            ],
        )

    def test_primary_keys_property(self):
        """Test primary keys come back in ordinal order."""
        assert [c.name for c in self._table().primary_keys] == ["OrderId", "LineNo"]

    def test_non_key_columns_property(self):
        """Test non-key columns come back in ordinal order."""
        assert [c.name for c in self._table().non_key_columns] == ["Note", "Total"]

    def test_get_column_ignores_case(self):
        """Test column lookup is case-insensitive."""
        assert self._table().get_column("orderid").name == "OrderId"
        assert self._table().get_column("missing") is None

    def test_key_is_case_insensitive(self):
        """Test table identity ignores case."""
        upper = TableSchema(schema_name="Sales", name="Orders")
        lower = TableSchema(schema_name="sales", name="ORDERS")
        assert upper.key == lower.key


class TestEntityName:
    """Test rendered entity names."""

    def test_default_schema_is_bare(self):
        assert TableSchema(schema_name="dbo", name="Orders").entity_name == "Orders"

    def test_other_schema_is_qualified(self):
        assert TableSchema(schema_name="sales", name="Orders").entity_name == "sales.Orders"

    def test_helper_matches_property(self):
        assert entity_name("sales", "Orders") == "sales.Orders"


class TestIndexInfo:
    """Test IndexInfo model."""

    def test_single_column_unique(self):
        index = IndexInfo(name="UX_Profile_UserId", is_unique=True, columns=["UserId"])
        assert index.is_single_column_unique("userid")

    def test_primary_key_index_does_not_count(self):
        index = IndexInfo(name="PK_Profile", is_unique=True, is_primary_key=True, columns=["UserId"])
        assert not index.is_single_column_unique("UserId")

    def test_composite_index_does_not_count(self):
        index = IndexInfo(name="UX_Pair", is_unique=True, columns=["UserId", "Kind"])
        assert not index.is_single_column_unique("UserId")


class TestRelationship:
    """Test Relationship model."""

    def test_relationship_creation(self):
        """Test basic relationship creation."""
        relationship = Relationship(
            constraint_name="FK_Order_Customer",
            source_schema="dbo",
            source_table="Order",
            source_column="CustomerId",
            target_schema="dbo",
            target_table="Customer",
            target_column="Id",
            source_entity="Order",
            target_entity="Customer",
        )

        assert relationship.relationship_type == RelationshipType.ONE_TO_MANY
        assert relationship.is_optional
        assert relationship.key == "Order->Customer"


class TestRenderOptions:
    """Test RenderOptions model."""

    def test_defaults(self):
        options = RenderOptions()

        assert options.include_descriptions
        assert options.include_data_types
        assert not options.include_indexes
        assert options.include_relationships
        assert options.max_tables == 0
        assert options.exclude_schemas == ["sys", "INFORMATION_SCHEMA"]
        assert options.theme is None

    def test_default_exclude_schemas_are_not_shared(self):
        first = RenderOptions()
        first.exclude_schemas.append("audit")
        assert RenderOptions().exclude_schemas == ["sys", "INFORMATION_SCHEMA"]

    def test_negative_max_tables_rejected(self):
        with pytest.raises(ValidationError):
            RenderOptions(max_tables=-1)


class TestERDConfig:
    """Test ERDConfig model."""

    def test_erd_config_creation(self):
        """Test basic ERD config creation."""
        config = ERDConfig(connection_string="mssql+pyodbc://server/db")

        assert config.diagram_style == DiagramStyle.ENTITY
        assert config.output_file == "erd_output.puml"
        assert config.log_level == "INFO"

    def test_diagram_style_any_case(self):
        assert ERDConfig(diagram_style="CLASS").diagram_style == DiagramStyle.CLASS

    def test_erd_config_validation(self):
        """Test ERD config validation."""
        with pytest.raises(ValueError):
            ERDConfig(log_level="INVALID")


class TestCatalogSnapshot:
    """Test CatalogSnapshot parsing."""

    def test_rows_accept_schema_key(self):
        snapshot = CatalogSnapshot(**{
            "database_name": "Shop",
            "tables": [{"schema": "sales", "name": "Orders"}],
        })
        assert snapshot.tables[0] == TableRow(schema="sales", name="Orders")
        assert snapshot.tables[0].schema_name == "sales"


class TestDatabaseSchema:
    """Test DatabaseSchema model."""

    def test_generated_at_defaults_to_utc(self):
        schema = DatabaseSchema(database_name="Shop")
        assert schema.generated_at.utcoffset().total_seconds() == 0

    def test_collections_cannot_be_mutated(self):
        """Test tables, columns and indexes are immutable once built."""
        table = TableSchema(
            schema_name="dbo", name="Orders",
            columns=[ColumnInfo(name="Id", data_type="int", ordinal_position=1)],
            indexes=[IndexInfo(name="PK_Orders", is_unique=True, is_primary_key=True, columns=["Id"])],
        )
        schema = DatabaseSchema(database_name="Shop", tables=[table])

        assert isinstance(schema.tables, tuple)
        assert isinstance(table.columns, tuple)
        assert isinstance(table.indexes[0].columns, tuple)
        with pytest.raises(AttributeError):
            schema.tables.append(table)
        with pytest.raises(AttributeError):
            schema.relationships.append(None)
