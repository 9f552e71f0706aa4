"""SQL Server to ERD Tool - Generate PlantUML diagrams from SQL Server database catalogs."""

__version__ = "0.1.0"

from .models import (
    CatalogSnapshot, ColumnInfo, DatabaseSchema, DiagramStyle, IndexInfo,
    Relationship, RelationshipType, RenderOptions, TableSchema
)
from .table_filter import filter_tables
from .relationship_resolver import resolve_relationships
from .type_formatter import format_data_type
from .schema_analyzer import SchemaAnalyzer
from .erd_generator import ERDGenerator, render

__all__ = [
    "CatalogSnapshot",
    "ColumnInfo",
    "DatabaseSchema",
    "DiagramStyle",
    "IndexInfo",
    "Relationship",
    "RelationshipType",
    "RenderOptions",
    "TableSchema",
    "filter_tables",
    "resolve_relationships",
    "format_data_type",
    "SchemaAnalyzer",
    "ERDGenerator",
    "render",
]
