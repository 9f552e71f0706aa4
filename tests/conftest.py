"""Shared fixtures for the test suite."""

from datetime import datetime, timezone

import pytest

from sqlserver_to_erd.models import (
    CatalogSnapshot, ColumnInfo, ColumnRow, ForeignKeyRow, IndexInfo,
    IndexRow, TableRow, TableSchema
)


GENERATED_AT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def make_column(name, data_type="INT", position=1, **kwargs):
    """Build a ColumnInfo with sensible defaults."""
    return ColumnInfo(name=name, data_type=data_type, ordinal_position=position, **kwargs)


def make_table(name, columns=(), schema="dbo", indexes=(), **kwargs):
    """Build a TableSchema with sensible defaults."""
    return TableSchema(schema_name=schema, name=name, columns=list(columns),
                       indexes=list(indexes), **kwargs)


def make_unique_index(name, column, is_primary_key=False):
    """Build a unique single-column index."""
    return IndexInfo(name=name, is_unique=True, is_primary_key=is_primary_key, columns=[column])


def make_fk(source_table, source_column, target_table, target_column,
            source_schema="dbo", target_schema="dbo", name=None):
    """Build a foreign key row."""
    return ForeignKeyRow(
        constraint_name=name or f"FK_{source_table}_{target_table}",
        source_schema=source_schema,
        source_table=source_table,
        source_column=source_column,
        target_schema=target_schema,
        target_table=target_table,
        target_column=target_column,
    )


@pytest.fixture
def shop_snapshot():
    """Catalog with dbo.Customer and dbo.[Order] referencing it through a nullable column."""
    return CatalogSnapshot(
        database_name="Shop",
        tables=[
            TableRow(schema="dbo", name="Customer"),
            TableRow(schema="dbo", name="Order"),
        ],
        columns=[
            ColumnRow(schema="dbo", table="Customer", name="Id", data_type="int",
                      is_nullable=False, is_primary_key=True, is_identity=True, ordinal_position=1),
            ColumnRow(schema="dbo", table="Customer", name="Name", data_type="nvarchar",
                      is_nullable=False, max_length=100, ordinal_position=2),
            ColumnRow(schema="dbo", table="Order", name="Id", data_type="int",
                      is_nullable=False, is_primary_key=True, ordinal_position=1),
            ColumnRow(schema="dbo", table="Order", name="CustomerId", data_type="int",
                      is_nullable=True, is_foreign_key=True, referenced_schema="dbo",
                      referenced_table="Customer", referenced_column="Id", ordinal_position=2),
        ],
        indexes=[
            IndexRow(schema="dbo", table="Customer", name="PK_Customer", index_type="CLUSTERED",
                     is_unique=True, is_primary_key=True, columns=["Id"]),
            IndexRow(schema="dbo", table="Order", name="PK_Order", index_type="CLUSTERED",
                     is_unique=True, is_primary_key=True, columns=["Id"]),
            IndexRow(schema="dbo", table="Order", name="IX_Order_CustomerId",
                     columns=["CustomerId"]),
        ],
        foreign_keys=[make_fk("Order", "CustomerId", "Customer", "Id", name="FK_Order_Customer")],
    )
