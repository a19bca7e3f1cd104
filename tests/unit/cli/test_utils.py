"""Unit tests for CLI helpers."""

import logging
from unittest.mock import patch

import click
from click.testing import CliRunner

from fieldscope.cli.utils import (
    build_from_path,
    configure_logging,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    get_config,
    load_index,
)
from fieldscope.config import ExplorerConfig


def run_echo(func, message):
    @click.command()
    def cmd():
        func(message)

    return CliRunner().invoke(cmd)


class TestEcho:
    def test_success(self):
        result = run_echo(echo_success, "done")
        assert "✅ done" in result.stdout

    def test_error_goes_to_stderr(self):
        result = run_echo(echo_error, "broken")
        assert "❌ broken" in result.stderr
        assert result.stdout == ""

    def test_warning(self):
        assert "⚠️  careful" in run_echo(echo_warning, "careful").stdout

    def test_info(self):
        assert "   note" in run_echo(echo_info, "note").stdout


class TestLogging:
    def test_levels(self):
        configure_logging()
        assert logging.getLogger().level == logging.WARNING

        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.INFO

        configure_logging(verbose=True, debug=True)
        assert logging.getLogger().level == logging.DEBUG

        configure_logging()


class TestConfig:
    def test_from_context(self):
        config = ExplorerConfig(top_n=2)
        ctx = click.Context(click.Command("x"), obj={"config": config})
        assert get_config(ctx) is config

    @patch("fieldscope.cli.utils.load_config")
    def test_fallback_loads(self, mock_load):
        mock_load.return_value = ExplorerConfig(top_n=4)
        assert get_config(None).top_n == 4
        mock_load.assert_called_once_with()


class TestLoading:
    def test_build_from_path(self, petstore_path):
        output = build_from_path(str(petstore_path))
        assert "owner_id" in output.index

    def test_load_index_reports_missing_file(self, tmp_path, capsys):
        assert load_index(str(tmp_path / "nope.yaml")) is None
        assert "Failed to load spec" in capsys.readouterr().err

    def test_load_index_reports_fatal_build(self, tmp_path, capsys):
        path = tmp_path / "spec.yaml"
        path.write_text("components:\n  schemas: {}\npaths: {}\n")

        assert load_index(str(path)) is None
        err = capsys.readouterr().err
        assert "Cannot index" in err
        assert "no endpoints" in err

    def test_load_index_reports_malformed_document(self, tmp_path, capsys):
        path = tmp_path / "spec.yaml"
        path.write_text("components:\n  schemas: {}\npaths:\n  /x:\n    get:\n      operationId: 7\n")

        assert load_index(str(path)) is None
        err = capsys.readouterr().err
        assert "Failed to load spec" in err
        assert "operation_id" in err
