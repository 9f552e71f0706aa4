"""Pydantic data models for SQL Server to ERD tool."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_SCHEMA = "dbo"
SYSTEM_SCHEMAS = ["sys", "INFORMATION_SCHEMA"]


class DiagramStyle(str, Enum):
    """Supported PlantUML diagram styles."""
    ENTITY = "entity"
    CLASS = "class"


class RelationshipType(str, Enum):
    """Types of relationships between tables."""
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"


# Raw catalog rows

class TableRow(BaseModel):
    """A base table as returned by the catalog."""
    schema_name: str = Field(..., alias="schema", description="Schema name")
    name: str = Field(..., description="Table name")
    kind: str = Field(default="BASE TABLE", description="Table type")
    description: Optional[str] = Field(None, description="MS_Description of the table")

    model_config = ConfigDict(populate_by_name=True)


class ColumnRow(BaseModel):
    """A column as returned by the catalog."""
    schema_name: str = Field(..., alias="schema", description="Schema name")
    table: str = Field(..., description="Owning table name")
    name: str = Field(..., description="Column name")
    data_type: str = Field(..., description="Declared data type")
    is_nullable: bool = Field(default=True, description="Whether NULL is allowed")
    default_value: Optional[str] = Field(None, description="Column default expression")
    max_length: Optional[int] = Field(None, description="Character length, -1 for MAX")
    precision: Optional[int] = Field(None, description="Generic precision")
    scale: Optional[int] = Field(None, description="Generic scale")
    numeric_precision: Optional[int] = Field(None, description="Numeric precision")
    numeric_scale: Optional[int] = Field(None, description="Numeric scale")
    is_primary_key: bool = Field(default=False, description="Part of the primary key")
    is_foreign_key: bool = Field(default=False, description="Part of a foreign key")
    is_identity: bool = Field(default=False, description="Identity column")
    referenced_schema: Optional[str] = Field(None, description="FK target schema")
    referenced_table: Optional[str] = Field(None, description="FK target table")
    referenced_column: Optional[str] = Field(None, description="FK target column")
    ordinal_position: int = Field(..., ge=1, description="1-based column position")
    description: Optional[str] = Field(None, description="MS_Description of the column")

    model_config = ConfigDict(populate_by_name=True)


class IndexRow(BaseModel):
    """An index as returned by the catalog."""
    schema_name: str = Field(..., alias="schema", description="Schema name")
    table: str = Field(..., description="Owning table name")
    name: str = Field(..., description="Index name")
    index_type: str = Field(default="NONCLUSTERED", description="Index type label")
    is_unique: bool = Field(default=False, description="Unique index")
    is_primary_key: bool = Field(default=False, description="Backs the primary key")
    columns: List[str] = Field(default_factory=list, description="Member columns in key order")

    model_config = ConfigDict(populate_by_name=True)


class ForeignKeyRow(BaseModel):
    """One column pair of a foreign-key constraint."""
    constraint_name: str = Field(..., description="Constraint name")
    source_schema: str = Field(..., description="Referencing schema")
    source_table: str = Field(..., description="Referencing table")
    source_column: str = Field(..., description="Referencing column")
    target_schema: str = Field(..., description="Referenced schema")
    target_table: str = Field(..., description="Referenced table")
    target_column: str = Field(..., description="Referenced column")


class CatalogSnapshot(BaseModel):
    """Everything read from the catalog in one pass."""
    database_name: str = Field(..., description="Database name")
    tables: List[TableRow] = Field(default_factory=list)
    columns: List[ColumnRow] = Field(default_factory=list)
    indexes: List[IndexRow] = Field(default_factory=list)
    foreign_keys: List[ForeignKeyRow] = Field(default_factory=list)


# Schema model

class ColumnInfo(BaseModel):
    """Information about a table column."""
    name: str = Field(..., description="Column name")
    data_type: str = Field(..., description="SQL Server data type")
    max_length: Optional[int] = Field(None, description="Maximum length for string types, -1 for MAX")
    precision: Optional[int] = Field(None, description="Precision for numeric types")
    scale: Optional[int] = Field(None, description="Scale for numeric types")
    numeric_precision: Optional[int] = Field(None, description="Precision from numeric metadata")
    numeric_scale: Optional[int] = Field(None, description="Scale from numeric metadata")
    is_nullable: bool = Field(default=True, description="Whether the column allows NULL")
    is_primary_key: bool = Field(default=False, description="Whether this is a primary key")
    is_foreign_key: bool = Field(default=False, description="Whether this is a foreign key")
    is_identity: bool = Field(default=False, description="Whether this is an identity column")
    ordinal_position: int = Field(..., ge=1, description="1-based position in the table")
    default_value: Optional[str] = Field(None, description="Column default expression")
    description: Optional[str] = Field(None, description="Column description")
    referenced_schema: Optional[str] = Field(None, description="FK target schema")
    referenced_table: Optional[str] = Field(None, description="FK target table")
    referenced_column: Optional[str] = Field(None, description="FK target column")

    model_config = ConfigDict(frozen=True)


class IndexInfo(BaseModel):
    """Information about a table index."""
    name: str = Field(..., description="Index name")
    index_type: str = Field(default="NONCLUSTERED", description="Index type label")
    is_unique: bool = Field(default=False, description="Whether the index is unique")
    is_primary_key: bool = Field(default=False, description="Whether the index backs the primary key")
    columns: Tuple[str, ...] = Field(default_factory=tuple, description="Member columns in key order")

    model_config = ConfigDict(frozen=True)

    def is_single_column_unique(self, column_name: str) -> bool:
        """Whether this is a unique, non-PK index on exactly ``column_name``."""
        return (self.is_unique
                and not self.is_primary_key
                and len(self.columns) == 1
                and self.columns[0].lower() == column_name.lower())


class TableSchema(BaseModel):
    """Schema information for a SQL Server table."""
    schema_name: str = Field(..., description="Schema name")
    name: str = Field(..., description="Table name")
    table_type: str = Field(default="BASE TABLE", description="Table type")
    description: Optional[str] = Field(None, description="Table description")
    columns: Tuple[ColumnInfo, ...] = Field(default_factory=tuple, description="Table columns")
    indexes: Tuple[IndexInfo, ...] = Field(default_factory=tuple, description="Table indexes")

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple:
        """Case-insensitive identity of the table."""
        return table_key(self.schema_name, self.name)

    @property
    def entity_name(self) -> str:
        """Name used for the table in the diagram."""
        return entity_name(self.schema_name, self.name)

    @property
    def primary_keys(self) -> List[ColumnInfo]:
        """Get primary key columns in ordinal order."""
        return sorted((col for col in self.columns if col.is_primary_key), key=_column_order)

    @property
    def non_key_columns(self) -> List[ColumnInfo]:
        """Get non primary key columns in ordinal order."""
        return sorted((col for col in self.columns if not col.is_primary_key), key=_column_order)

    @property
    def ordered_columns(self) -> List[ColumnInfo]:
        """Get all columns in ordinal order."""
        return sorted(self.columns, key=_column_order)

    def get_column(self, name: str) -> Optional[ColumnInfo]:
        """Find a column by name, ignoring case."""
        for column in self.columns:
            if column.name.lower() == name.lower():
                return column
        return None


class Relationship(BaseModel):
    """Foreign-key relationship between two tables in the diagram."""
    constraint_name: str = Field(..., description="Foreign-key constraint name")
    source_schema: str = Field(..., description="Referencing schema")
    source_table: str = Field(..., description="Referencing table")
    source_column: str = Field(..., description="Referencing column")
    target_schema: str = Field(..., description="Referenced schema")
    target_table: str = Field(..., description="Referenced table")
    target_column: str = Field(..., description="Referenced column")
    source_entity: str = Field(..., description="Rendered name of the referencing table")
    target_entity: str = Field(..., description="Rendered name of the referenced table")
    relationship_type: RelationshipType = Field(default=RelationshipType.ONE_TO_MANY)
    is_optional: bool = Field(default=True, description="Whether the referencing column is nullable")

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> str:
        """Directed identity of the rendered edge."""
        return relationship_key(self.source_entity, self.target_entity)


class DatabaseSchema(BaseModel):
    """The filtered database schema handed to the renderer."""
    database_name: str = Field(..., description="Database name")
    tables: Tuple[TableSchema, ...] = Field(default_factory=tuple)
    relationships: Tuple[Relationship, ...] = Field(default_factory=tuple)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)


class RenderOptions(BaseModel):
    """Options controlling filtering and PlantUML rendering."""
    include_descriptions: bool = Field(default=True, description="Include table and column descriptions")
    include_data_types: bool = Field(default=True, description="Include column data types")
    include_indexes: bool = Field(default=False, description="Include indexes")
    include_relationships: bool = Field(default=True, description="Include foreign key relationships")
    max_tables: int = Field(default=0, ge=0, description="Maximum number of tables (0 for unlimited)")
    include_schemas: List[str] = Field(default_factory=list, description="Schemas to include (empty for all)")
    exclude_schemas: List[str] = Field(default_factory=lambda: list(SYSTEM_SCHEMAS),
                                       description="Schemas to exclude")
    include_table_patterns: List[str] = Field(default_factory=list, description="Regex patterns to include")
    exclude_table_patterns: List[str] = Field(default_factory=list, description="Regex patterns to exclude")
    exclude_tables: List[str] = Field(default_factory=list, description="Table names to exclude, * and ? wildcards")
    theme: Optional[str] = Field(None, description="PlantUML theme")
    custom_directives: List[str] = Field(default_factory=list, description="Extra PlantUML directives")


class ERDConfig(BaseModel):
    """Configuration for an ERD generation run."""
    connection_string: Optional[str] = Field(None, description="SQLAlchemy URL or ODBC connection string")
    snapshot_file: Optional[str] = Field(None, description="JSON catalog snapshot used instead of a database")
    output_file: str = Field(default="erd_output.puml", description="Output file path")
    diagram_style: DiagramStyle = Field(default=DiagramStyle.ENTITY, description="Diagram style")
    config_file: Optional[str] = Field(None, description="JSON render options file")
    options: RenderOptions = Field(default_factory=RenderOptions)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(None, description="Log file path")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('diagram_style', mode='before')
    @classmethod
    def normalize_diagram_style(cls, v):
        """Accept the style name in any case."""
        if isinstance(v, str):
            return v.lower()
        return v


def table_key(schema_name: str, name: str) -> tuple:
    """Case-insensitive (schema, table) identity."""
    return (schema_name.lower(), name.lower())


def entity_name(schema_name: str, name: str) -> str:
    """Diagram name of a table: bare in the default schema, qualified otherwise."""
    if schema_name == DEFAULT_SCHEMA:
        return name
    return f"{schema_name}.{name}"


def relationship_key(source_entity: str, target_entity: str) -> str:
    """Identity of a rendered edge, used to collapse duplicate foreign keys."""
    return f"{source_entity}->{target_entity}"


def _column_order(column: ColumnInfo) -> tuple:
    return (column.ordinal_position, column.name)
