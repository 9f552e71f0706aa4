"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from sqlserver_to_erd import main as main_module
from sqlserver_to_erd.main import main, split_values


@pytest.fixture(autouse=True)
def quiet_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main_module, "setup_logging", lambda *args, **kwargs: None)
    for key in ("CONNECTION_STRING", "SNAPSHOT_FILE", "OUTPUT_FILE", "DIAGRAM_TYPE",
                "CONFIG_FILE", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def snapshot_file(tmp_path, shop_snapshot):
    path = tmp_path / "catalog.json"
    path.write_text(shop_snapshot.model_dump_json(by_alias=True))
    return str(path)


class TestMain:
    """Test the sqlserver-to-erd command."""

    def test_generates_entity_diagram(self, tmp_path, snapshot_file):
        output = tmp_path / "out" / "schema.puml"
        result = CliRunner().invoke(main, ["--snapshot", snapshot_file, "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "Tables processed: 2" in result.output
        content = output.read_text(encoding="utf-8")
        assert content.startswith("@startuml\n")
        assert "Customer ||--o{ Order : Id" in content

    def test_class_diagram_without_relationships(self, tmp_path, snapshot_file):
        output = tmp_path / "schema.plantuml"
        result = CliRunner().invoke(main, ["--snapshot", snapshot_file, "-o", str(output),
                                           "-t", "class", "--no-include-relationships"])

        assert result.exit_code == 0, result.output
        content = output.read_text(encoding="utf-8")
        assert "class Order {" in content
        assert "-->" not in content

    def test_exclude_tables_and_theme(self, tmp_path, snapshot_file):
        output = tmp_path / "schema.pu"
        result = CliRunner().invoke(main, ["--snapshot", snapshot_file, "-o", str(output),
                                           "--exclude-tables", "cust*,audit", "--theme", "plain"])

        assert result.exit_code == 0, result.output
        content = output.read_text(encoding="utf-8")
        assert "!theme plain" in content
        assert 'entity "Customer"' not in content
        assert "||--" not in content

    def test_config_file_is_merged(self, tmp_path, snapshot_file):
        options = tmp_path / "options.json"
        options.write_text('{"IncludeIndexes": true, "CustomDirectives": ["hide circle"]}')
        output = tmp_path / "schema.puml"

        result = CliRunner().invoke(main, ["--snapshot", snapshot_file, "-o", str(output),
                                           "--config", str(options)])

        assert result.exit_code == 0, result.output
        content = output.read_text(encoding="utf-8")
        assert "hide circle\n" in content
        assert "  ' INDEX: CustomerId" in content

    def test_bad_extension_exits_with_error(self, tmp_path, snapshot_file):
        result = CliRunner().invoke(main, ["--snapshot", snapshot_file, "-o", str(tmp_path / "schema.txt")])

        assert result.exit_code == 1
        assert "PlantUML extension" in result.output

    def test_missing_source_exits_with_error(self, tmp_path):
        result = CliRunner().invoke(main, ["-o", str(tmp_path / "schema.puml")])

        assert result.exit_code == 1
        assert "connection string or a catalog snapshot" in result.output

    def test_unknown_type_is_rejected(self, tmp_path, snapshot_file):
        result = CliRunner().invoke(main, ["--snapshot", snapshot_file, "-o", str(tmp_path / "s.puml"),
                                           "-t", "sequence"])
        assert result.exit_code == 2

    def test_dry_run(self, snapshot_file):
        result = CliRunner().invoke(main, ["--snapshot", snapshot_file, "--dry-run",
                                           "--exclude-schemas", "audit", "--max-tables", "3"])

        assert result.exit_code == 0, result.output
        assert "Exclude Schemas: audit" in result.output
        assert "Max Tables: 3" in result.output


def test_split_values():
    assert split_values(("a,b", " c ", "", "d,,")) == ["a", "b", "c", "d"]
