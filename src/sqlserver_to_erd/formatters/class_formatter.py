"""PlantUML class diagram formatter."""

from typing import Sequence

from .base_formatter import END_MARKER, format_header, join_lines, sorted_tables
from ..models import ColumnInfo, DatabaseSchema, Relationship, RenderOptions
from ..type_formatter import format_data_type


def format_class_diagram(schema: DatabaseSchema, relationships: Sequence[Relationship],
                         options: RenderOptions) -> str:
    """Format the schema as a PlantUML class diagram.

    Cardinality is not drawn in this style; every relationship becomes a
    directed association from the referencing to the referenced table.
    """
    lines = format_header(schema, options)

    for table in sorted_tables(schema.tables):
        lines.append(f"class {table.entity_name} {{")
        for column in table.ordered_columns:
            lines.append(f"  {format_attribute(column, options)}")
        lines.append("}")
        lines.append("")

    if options.include_relationships:
        for relationship in relationships:
            lines.append(f"{relationship.source_entity} --> {relationship.target_entity}")

    lines.append(END_MARKER)
    return join_lines(lines)


def format_attribute(column: ColumnInfo, options: RenderOptions) -> str:
    """Format a column as a class attribute; key columns are public."""
    visibility = "+" if column.is_primary_key else "-"
    line = f"{visibility}{column.name}"
    if options.include_data_types:
        line += f" : {format_data_type(column)}"
    return line
