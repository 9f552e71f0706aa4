"""Shared PlantUML building blocks for the diagram formatters."""

from typing import List, Sequence

from ..models import DatabaseSchema, RenderOptions, TableSchema


START_MARKER = "@startuml"
END_MARKER = "@enduml"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_header(schema: DatabaseSchema, options: RenderOptions) -> List[str]:
    """Build the header lines common to every diagram style.

    Args:
        schema: Database schema
        options: Render options carrying theme and custom directives

    Returns:
        Header lines, ending with a blank line
    """
    lines = [
        START_MARKER,
        f"' Generated on {schema.generated_at.strftime(TIMESTAMP_FORMAT)} UTC",
        f"' Database: {schema.database_name}",
        "",
    ]

    if options.theme:
        lines.append(f"!theme {options.theme}")
        lines.append("")

    lines.extend(options.custom_directives)
    if options.custom_directives:
        lines.append("")

    return lines


def sorted_tables(tables: Sequence[TableSchema]) -> List[TableSchema]:
    """Tables in (schema, name) order, ignoring case like the catalog collation.

    Names differing only in case keep a stable order through the exact
    names as tie-breakers.
    """
    return sorted(tables, key=lambda table: (table.schema_name.lower(), table.name.lower(),
                                             table.schema_name, table.name))


def join_lines(lines: Sequence[str]) -> str:
    """Join diagram lines into newline-terminated text."""
    return "\n".join(lines) + "\n"
