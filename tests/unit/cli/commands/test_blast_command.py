"""Tests for the 'blast' command."""

import json
from unittest.mock import patch

from click.testing import CliRunner

from fieldscope.cli.commands.blast_radius import blast_radius, format_blast_radius


class TestHumanOutput:
    def test_single_field(self, petstore_path):
        result = CliRunner().invoke(blast_radius, [str(petstore_path), "owner_id"])

        assert result.exit_code == 0
        assert "Blast radius: owner_id" in result.output
        assert "Usage count: 6" in result.output
        assert "YES" in result.output
        assert "PUT /owners/{ownerId}/notes" in result.output

    def test_unknown_field(self, petstore_path):
        result = CliRunner().invoke(blast_radius, [str(petstore_path), "ghost"])

        assert result.exit_code == 1
        assert "Field not found: ghost" in result.stderr

    def test_partial_match_reports_missing(self, petstore_path):
        result = CliRunner().invoke(blast_radius, [str(petstore_path), "limit", "ghost"])

        assert result.exit_code == 0
        assert "Field not found: ghost" in result.stderr
        assert "Blast radius: limit" in result.stdout

    def test_no_fields(self, petstore_path):
        result = CliRunner().invoke(blast_radius, [str(petstore_path)])

        assert result.exit_code == 1
        assert "Provide at least one field" in result.stderr

    @patch("fieldscope.cli.commands.blast_radius.format_blast_radius")
    def test_uses_formatter(self, mock_format, petstore_path):
        mock_format.return_value = "Formatted Output"
        result = CliRunner().invoke(blast_radius, [str(petstore_path), "limit"])

        assert "Formatted Output" in result.output
        (raw,), _ = mock_format.call_args
        assert raw["impacted_endpoints"] == ["GET /pets"]
        assert raw["critical"] is False


class TestJsonOutput:
    def test_envelope(self, users_path):
        result = CliRunner().invoke(blast_radius, [str(users_path), "id", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["status"] == "success"
        assert payload["command"] == "blast"

        data = payload["data"]
        assert data["impacted_schemas"] == ["Patient", "User"]
        assert data["impacted_endpoints"] == ["GET /user", "POST /user", "PUT /user/{id}"]
        assert data["count"] == 5
        assert data["critical"] is True
        assert data["fields"][0]["mutating_breakdown"] == {"POST": 1, "PUT": 1}

    def test_foreign_key_targets(self, users_path):
        result = CliRunner().invoke(blast_radius, [str(users_path), "user_id", "--json"])

        data = json.loads(result.stdout)["data"]
        assert data["fields"][0]["foreign_key_targets"] == ["User"]
        assert data["critical"] is False

    def test_unknown_field_is_error(self, users_path):
        result = CliRunner().invoke(blast_radius, [str(users_path), "ghost", "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["status"] == "error"
        assert payload["error"]["code"] == "FieldNotFoundError"

    def test_no_fields_is_invalid_input(self, users_path):
        result = CliRunner().invoke(blast_radius, [str(users_path), "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"]["code"] == "InvalidInput"

    def test_unreadable_spec(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{nope")

        result = CliRunner().invoke(blast_radius, [str(path), "id", "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"]["code"] == "SpecLoadError"


class TestFormatter:
    def test_not_critical(self):
        text = format_blast_radius({
            "fields": ["limit"],
            "missing": [],
            "impacted_schemas": [],
            "impacted_endpoints": ["GET /pets"],
            "count": 1,
            "critical": False,
            "breakdown": {"GET": 1},
        })

        assert "Critical:    no" in text
        assert "By method:   GET: 1" in text
        assert "Endpoints (1)" in text
