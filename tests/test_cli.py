import json
import sys
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from api_doc_reader.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def restore_sys_path(monkeypatch):
    monkeypatch.setattr(sys, "path", list(sys.path))


def _invoke(*args: str):
    return CliRunner().invoke(main, ["--pythonpath", str(FIXTURES), *args])


class TestCliGenerate:
    def test_generate_from_config(self, tmp_path):
        output_file = tmp_path / "api.yaml"
        result = _invoke("generate", "-c", str(FIXTURES / "petstore.yaml"), "-o", str(output_file))

        assert result.exit_code == 0, result.output
        assert f"Wrote 2 paths to {output_file}" in result.output
        data = yaml.safe_load(output_file.read_text())
        assert data["info"]["title"] == "Petstore"
        assert data["basePath"] == "/v2"
        assert set(data["paths"]) == {"/pets", "/pets/{pet_id}"}
        assert data["tags"] == [{"name": "pets", "description": "Pet operations"}]
        list_pets = data["paths"]["/pets"]["get"]
        assert [p["name"] for p in list_pets["parameters"]] == ["limit", "X-Request-Id"]
        assert list_pets["responses"]["200"]["schema"]["items"] == {"$ref": "#/definitions/Pet"}

    def test_generate_from_arguments(self, tmp_path):
        output_file = tmp_path / "api.json"
        result = _invoke(
            "generate", "petstore_api", "-o", str(output_file), "--include-hidden", "--title", "Pets", "--api-version", "3"
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output_file.read_text())
        assert data["info"] == {"title": "Pets", "version": "3"}
        assert "/admin/reindex" in data["paths"]
        assert data["definitions"]["Pet"]["properties"]["status"]["enum"] == ["available", "sold"]

    def test_format_option_overrides_suffix(self, tmp_path):
        output_file = tmp_path / "api.yaml"
        result = _invoke("generate", "petstore_api", "-o", str(output_file), "--format", "json")

        assert result.exit_code == 0, result.output
        assert json.loads(output_file.read_text())["swagger"] == "2.0"

    def test_missing_output(self):
        result = _invoke("generate", "petstore_api")
        assert result.exit_code == 2
        assert "No output path" in result.output

    def test_missing_locations(self, tmp_path):
        result = _invoke("generate", "-o", str(tmp_path / "api.json"))
        assert result.exit_code == 2
        assert "No resource locations" in result.output

    def test_unknown_location(self, tmp_path):
        result = _invoke("generate", "no_such_resource_module", "-o", str(tmp_path / "api.json"))
        assert result.exit_code == 1
        assert "Cannot import resource location" in result.output

    def test_invalid_config(self, tmp_path):
        config = tmp_path / "api.yaml"
        config.write_text("output_format: xml\n")
        result = _invoke("generate", "petstore_api", "-c", str(config), "-o", str(tmp_path / "api.json"))
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestCliShow:
    def test_show_yaml(self):
        result = _invoke("show", "petstore_api")
        assert result.exit_code == 0, result.output
        assert "swagger: '2.0'" in result.output
        assert "/pets/{pet_id}:" in result.output
        assert "/admin/reindex" not in result.output

    def test_show_json(self):
        result = _invoke("show", "petstore_api", "--format", "json", "--include-hidden")
        assert result.exit_code == 0, result.output
        assert '"swagger": "2.0"' in result.output
        assert '"/admin/reindex"' in result.output
