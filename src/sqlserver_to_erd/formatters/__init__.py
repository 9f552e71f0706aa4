"""Formatters for the supported PlantUML diagram styles."""

from .class_formatter import format_class_diagram
from .entity_formatter import format_entity_diagram

__all__ = [
    "format_class_diagram",
    "format_entity_diagram",
]
