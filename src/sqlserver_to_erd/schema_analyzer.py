"""Schema analyzer assembling the schema model from catalog rows."""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from .models import (
    CatalogSnapshot, ColumnInfo, ColumnRow, DatabaseSchema, IndexInfo,
    IndexRow, RenderOptions, TableRow, TableSchema, table_key
)
from .relationship_resolver import resolve_relationships
from .table_filter import filter_tables


logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """Builds a filtered DatabaseSchema from a catalog snapshot."""

    def __init__(self, options: RenderOptions):
        """Initialize schema analyzer.

        Args:
            options: Render options holding the filter settings
        """
        self.options = options
        self.warnings: List[str] = []

    def build_schema(self, snapshot: CatalogSnapshot,
                     generated_at: Optional[datetime] = None) -> DatabaseSchema:
        """Filter tables, attach columns and indexes, and resolve relationships.

        Args:
            snapshot: Rows read from the catalog
            generated_at: Timestamp for the diagram header, defaults to now (UTC)

        Returns:
            DatabaseSchema ready for rendering
        """
        result = filter_tables(snapshot.tables, self.options)
        self.warnings = list(result.warnings)

        columns_by_table = self._group_rows(snapshot.columns)
        indexes_by_table = self._group_rows(snapshot.indexes)

        tables = [
            self.parse_table_schema(row, columns_by_table.get(table_key(row.schema_name, row.name), []),
                                    indexes_by_table.get(table_key(row.schema_name, row.name), []))
            for row in result.tables
        ]

        relationships = []
        if self.options.include_relationships:
            relationships = resolve_relationships(snapshot.foreign_keys, tables)

        schema_data = {
            "database_name": snapshot.database_name,
            "tables": tables,
            "relationships": relationships,
        }
        if generated_at is not None:
            schema_data["generated_at"] = generated_at

        logger.info(f"Built schema for {len(tables)} tables in database {snapshot.database_name}")
        return DatabaseSchema(**schema_data)

    def parse_table_schema(self, row: TableRow, columns: List[ColumnRow],
                           indexes: List[IndexRow]) -> TableSchema:
        """Create a TableSchema from its catalog rows.

        Args:
            row: Table row
            columns: Column rows of the table
            indexes: Index rows of the table

        Returns:
            TableSchema with columns and indexes populated
        """
        return TableSchema(
            schema_name=row.schema_name,
            name=row.name,
            table_type=row.kind,
            description=row.description,
            columns=[self.extract_column_info(column) for column in columns],
            indexes=[self.extract_index_info(index) for index in indexes],
        )

    def extract_column_info(self, row: ColumnRow) -> ColumnInfo:
        """Convert a column row to ColumnInfo."""
        return ColumnInfo(
            name=row.name,
            data_type=row.data_type,
            max_length=row.max_length,
            precision=row.precision,
            scale=row.scale,
            numeric_precision=row.numeric_precision,
            numeric_scale=row.numeric_scale,
            is_nullable=row.is_nullable,
            is_primary_key=row.is_primary_key,
            is_foreign_key=row.is_foreign_key,
            is_identity=row.is_identity,
            ordinal_position=row.ordinal_position,
            default_value=row.default_value,
            description=row.description,
            referenced_schema=row.referenced_schema,
            referenced_table=row.referenced_table,
            referenced_column=row.referenced_column,
        )

    def extract_index_info(self, row: IndexRow) -> IndexInfo:
        """Convert an index row to IndexInfo."""
        return IndexInfo(
            name=row.name,
            index_type=row.index_type,
            is_unique=row.is_unique,
            is_primary_key=row.is_primary_key,
            columns=list(row.columns),
        )

    def _group_rows(self, rows) -> Dict[tuple, list]:
        grouped = defaultdict(list)
        for row in rows:
            grouped[table_key(row.schema_name, row.table)].append(row)
        return grouped
