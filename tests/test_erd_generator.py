"""Tests for the ERD generator and the end-to-end pipeline."""

import pytest

from sqlserver_to_erd.erd_generator import ERDGenerator, parse_style, render
from sqlserver_to_erd.models import DiagramStyle, RenderOptions
from sqlserver_to_erd.schema_analyzer import SchemaAnalyzer

from conftest import GENERATED_AT


EXPECTED_SHOP_ERD = """@startuml
' Generated on 2024-01-02 03:04:05 UTC
' Database: Shop

skinparam linetype ortho
skinparam roundcorner 5
skinparam class {
    BackgroundColor LightBlue
    BorderColor DarkBlue
    ArrowColor DarkBlue
}

entity "Customer" {
  * Id : INT <<IDENTITY>>
  --
  Name : NVARCHAR(100) <<NOT NULL>>
}

entity "Order" {
  * Id : INT
  --
  CustomerId : INT
}


' Relationships
Customer ||--o{ Order : Id

@enduml
"""


@pytest.fixture
def shop_schema(shop_snapshot):
    return SchemaAnalyzer(RenderOptions()).build_schema(shop_snapshot, generated_at=GENERATED_AT)


class TestERDGenerator:
    """Test ERDGenerator."""

    def test_end_to_end_entity_diagram(self, shop_schema):
        assert ERDGenerator(RenderOptions()).generate_erd(shop_schema, DiagramStyle.ENTITY) == EXPECTED_SHOP_ERD

    def test_rendering_is_deterministic(self, shop_schema):
        generator = ERDGenerator(RenderOptions(include_indexes=True))
        assert generator.generate_erd(shop_schema, "entity") == generator.generate_erd(shop_schema, "entity")

    def test_class_style(self, shop_schema):
        text = ERDGenerator(RenderOptions()).generate_erd(shop_schema, "class")
        assert "class Customer {" in text
        assert "Order --> Customer\n@enduml\n" in text

    def test_style_name_ignores_case(self, shop_schema):
        assert ERDGenerator(RenderOptions()).generate_erd(shop_schema, "ENTITY") == EXPECTED_SHOP_ERD

    def test_unknown_style_raises(self, shop_schema):
        with pytest.raises(ValueError, match="Unknown diagram type"):
            ERDGenerator(RenderOptions()).generate_erd(shop_schema, "sequence")

    def test_explicit_relationships_override_schema(self, shop_schema):
        text = ERDGenerator(RenderOptions()).generate_erd(shop_schema, "entity", relationships=[])
        assert "||--" not in text

    def test_supported_styles(self):
        generator = ERDGenerator(RenderOptions())
        assert generator.get_supported_styles() == ["entity", "class"]
        assert generator.get_file_extension() == ".puml"
        assert generator.get_formatter("nope") is None


class TestRender:
    """Test the render function."""

    def test_render(self, shop_schema):
        text = render(shop_schema, shop_schema.relationships, RenderOptions(), "entity")
        assert text == EXPECTED_SHOP_ERD

    def test_parse_style(self):
        assert parse_style("Class") == DiagramStyle.CLASS
        assert parse_style(DiagramStyle.ENTITY) == DiagramStyle.ENTITY
        assert parse_style("graph") is None
