"""ERD generator dispatching to the PlantUML diagram styles."""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

from .models import DatabaseSchema, DiagramStyle, Relationship, RenderOptions
from .formatters import format_class_diagram, format_entity_diagram


logger = logging.getLogger(__name__)


Formatter = Callable[[DatabaseSchema, Sequence[Relationship], RenderOptions], str]

FILE_EXTENSIONS = [".puml", ".plantuml", ".pu"]


def parse_style(style: Union[DiagramStyle, str]) -> Optional[DiagramStyle]:
    """Parse a style name case-insensitively, None if unknown."""
    if isinstance(style, DiagramStyle):
        return style
    try:
        return DiagramStyle(str(style).lower())
    except ValueError:
        return None


def render(schema: DatabaseSchema, relationships: Sequence[Relationship],
           options: RenderOptions, style: Union[DiagramStyle, str]) -> str:
    """Render a schema in the requested diagram style.

    Args:
        schema: Database schema
        relationships: Resolved relationships
        options: Render options
        style: ``entity`` or ``class``

    Returns:
        PlantUML text

    Raises:
        ValueError: If the style is unknown
    """
    return ERDGenerator(options).generate_erd(schema, style, relationships)


class ERDGenerator:
    """Generates PlantUML ERDs in the supported styles."""

    def __init__(self, options: RenderOptions):
        """Initialize ERD generator.

        Args:
            options: Render options
        """
        self.options = options
        self.formatters: Dict[DiagramStyle, Formatter] = {
            DiagramStyle.ENTITY: format_entity_diagram,
            DiagramStyle.CLASS: format_class_diagram,
        }

    def generate_erd(self, schema: DatabaseSchema, style: Union[DiagramStyle, str],
                     relationships: Optional[Sequence[Relationship]] = None) -> str:
        """Generate the ERD for a schema.

        Args:
            schema: Database schema
            style: Diagram style
            relationships: Relationships to draw, defaults to ``schema.relationships``

        Returns:
            Generated PlantUML string

        Raises:
            ValueError: If the style is unknown
        """
        diagram_style = parse_style(style)
        if diagram_style is None:
            raise ValueError(f"Unknown diagram type: {style}")
        formatter = self.formatters[diagram_style]

        if relationships is None:
            relationships = schema.relationships

        if not schema.tables:
            logger.warning("No tables in schema - generating an empty diagram")

        logger.info(f"Generating PlantUML {diagram_style.value} diagram for {len(schema.tables)} tables")
        content = formatter(schema, relationships, self.options)
        logger.info(f"Generated diagram with {len(schema.tables)} tables and {len(relationships)} relationships")
        return content

    def get_formatter(self, style: Union[DiagramStyle, str]) -> Optional[Formatter]:
        """Get the formatter for a style, or None if the style is unknown."""
        diagram_style = parse_style(style)
        if diagram_style is None:
            return None
        return self.formatters.get(diagram_style)

    def get_supported_styles(self) -> List[str]:
        """Get list of supported diagram style names."""
        return [style.value for style in self.formatters]

    def get_file_extension(self) -> str:
        """Get the default file extension for PlantUML output."""
        return FILE_EXTENSIONS[0]
