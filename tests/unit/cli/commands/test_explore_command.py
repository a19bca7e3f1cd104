"""Tests for the 'explore' command."""

from unittest.mock import patch

from click.testing import CliRunner

from fieldscope.cli.commands.explore import explore
from fieldscope.core.exceptions import NoComponentsSection
from fieldscope.core.result import Err


class TestExploreCommand:
    @patch("fieldscope.cli.commands.explore.ExplorerApp")
    def test_runs_app(self, mock_app_cls, petstore_path):
        app = mock_app_cls.return_value
        app.start.return_value.is_err.return_value = False

        result = CliRunner().invoke(explore, [str(petstore_path)])

        assert result.exit_code == 0
        app.run.assert_called_once_with(app.start.return_value.unwrap.return_value)

    @patch("fieldscope.cli.commands.explore.ExplorerApp")
    def test_start_failure(self, mock_app_cls, petstore_path):
        mock_app_cls.return_value.start.return_value = Err(NoComponentsSection())

        result = CliRunner().invoke(explore, [str(petstore_path)])

        assert result.exit_code == 1
        assert "Cannot explore" in result.stderr
        mock_app_cls.return_value.run.assert_not_called()

    def test_missing_file_rejected_by_click(self, tmp_path):
        result = CliRunner().invoke(explore, [str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2
