"""Tests for the 'search' command."""

import json

from click.testing import CliRunner

from fieldscope.cli.commands.search import search


class TestSearchCommand:
    def test_fields(self, petstore_path):
        result = CliRunner().invoke(search, [str(petstore_path), "own"])

        assert result.exit_code == 0
        assert "1 fields matching 'own'" in result.output
        assert "owner_id" in result.output

    def test_schemas_view(self, petstore_path):
        result = CliRunner().invoke(search, [str(petstore_path), "pet", "--view", "schemas", "--json"])

        data = json.loads(result.stdout)["data"]
        assert data["view"] == "schemas"
        assert [hit["name"] for hit in data["results"]][:1] == ["Pet"]
        assert all(hit["score"] > 0 for hit in data["results"])

    def test_limit(self, petstore_path):
        result = CliRunner().invoke(search, [str(petstore_path), "e", "-n", "2", "--json"])

        data = json.loads(result.stdout)["data"]
        assert len(data["results"]) == 2
        assert data["total"] > 2

    def test_no_match(self, petstore_path):
        result = CliRunner().invoke(search, [str(petstore_path), "zzz"])

        assert result.exit_code == 0
        assert "No fields match 'zzz'" in result.output

    def test_bad_view(self, petstore_path):
        result = CliRunner().invoke(search, [str(petstore_path), "x", "--view", "graph"])
        assert result.exit_code == 2
