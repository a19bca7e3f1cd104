"""Tests for the top-level command group."""

import json

from click.testing import CliRunner

from fieldscope.cli.main import main


class TestMain:
    def test_help_lists_commands(self):
        result = CliRunner().invoke(main, ["--help"])

        assert result.exit_code == 0
        for command in ("explore", "blast", "search", "stats", "check"):
            assert command in result.output

    def test_config_option_reaches_commands(self, tmp_path, petstore_path):
        config = tmp_path / "config.yaml"
        config.write_text("top_n: 1\n")

        result = CliRunner().invoke(
            main, ["--config", str(config), "stats", str(petstore_path), "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["top_fields"] == [{"name": "name", "usage_count": 6}]
