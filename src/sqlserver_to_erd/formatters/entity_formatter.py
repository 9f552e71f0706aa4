"""PlantUML entity-relationship formatter."""

from typing import List, Sequence

from .base_formatter import END_MARKER, format_header, join_lines, sorted_tables
from ..models import (
    ColumnInfo, DatabaseSchema, Relationship, RelationshipType,
    RenderOptions, TableSchema
)
from ..type_formatter import format_data_type


DEFAULT_STYLING = [
    "skinparam linetype ortho",
    "skinparam roundcorner 5",
    "skinparam class {",
    "    BackgroundColor LightBlue",
    "    BorderColor DarkBlue",
    "    ArrowColor DarkBlue",
    "}",
    "",
]

# (relationship type, optional) -> crow's foot connector, referenced side on the left
CONNECTORS = {
    (RelationshipType.ONE_TO_MANY, True): "||--o{",
    (RelationshipType.ONE_TO_MANY, False): "||--|{",
    (RelationshipType.ONE_TO_ONE, True): "||--o|",
    (RelationshipType.ONE_TO_ONE, False): "||--||",
}


def format_entity_diagram(schema: DatabaseSchema, relationships: Sequence[Relationship],
                          options: RenderOptions) -> str:
    """Format the schema as a PlantUML entity-relationship diagram.

    Args:
        schema: Database schema
        relationships: Resolved relationships
        options: Render options

    Returns:
        PlantUML text
    """
    lines = format_header(schema, options)
    lines.extend(DEFAULT_STYLING)

    for table in sorted_tables(schema.tables):
        lines.extend(format_entity(table, options))

    if options.include_relationships:
        lines.append("")
        lines.append("' Relationships")
        for relationship in relationships:
            lines.append(format_relationship(relationship))

    lines.append("")
    lines.append(END_MARKER)
    return join_lines(lines)


def format_entity(table: TableSchema, options: RenderOptions) -> List[str]:
    """Format one table as an entity block followed by a blank line."""
    lines = [f'entity "{table.entity_name}" {{']

    if options.include_descriptions and table.description:
        lines.append(f"  ' {table.description}")

    primary_keys = table.primary_keys
    other_columns = table.non_key_columns

    for column in primary_keys:
        lines.append(f"  * {format_column(column, options)}")

    if primary_keys and other_columns:
        lines.append("  --")

    for column in other_columns:
        lines.append(f"  {format_column(column, options)}")

    secondary_indexes = sorted((index for index in table.indexes if not index.is_primary_key),
                               key=lambda index: index.name)
    if options.include_indexes and secondary_indexes:
        lines.append("  --")
        lines.append("  ' Indexes:")
        for index in secondary_indexes:
            index_type = "UNIQUE" if index.is_unique else "INDEX"
            lines.append(f"  ' {index_type}: {', '.join(index.columns)}")

    lines.append("}")
    lines.append("")
    return lines


def format_column(column: ColumnInfo, options: RenderOptions) -> str:
    """Format a column line of an entity block."""
    parts = [column.name]

    if options.include_data_types:
        parts.append(f" : {format_data_type(column)}")

    if not column.is_nullable and not column.is_primary_key:
        parts.append(" <<NOT NULL>>")

    if column.is_identity:
        parts.append(" <<IDENTITY>>")

    if options.include_descriptions and column.description:
        parts.append(f" ' {column.description}")

    return "".join(parts)


def format_relationship(relationship: Relationship) -> str:
    """Format a relationship as ``Target <connector> Source : target_column``."""
    connector = CONNECTORS[(relationship.relationship_type, relationship.is_optional)]
    return (f"{relationship.target_entity} {connector} {relationship.source_entity}"
            f" : {relationship.target_column}")
