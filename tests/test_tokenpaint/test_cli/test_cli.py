"""Tests for the tokenpaint CLI commands."""
from __future__ import annotations

import json

from click.testing import CliRunner

from tokenpaint import __version__
from tokenpaint.cli.main import cli
from tokenpaint.config import TokenPaintConfig
from tokenpaint.host import Host
from tokenpaint.session import ManualScheduler

from tests.test_tokenpaint.conftest import THEME, style_message


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


class TestCLIGroup:
    def test_cli_group_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "syntax colour rules" in result.output

    def test_cli_lists_commands(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert "open" in result.output
        assert "preview" in result.output
        assert "recover" in result.output

    def test_version(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# ---------------------------------------------------------------------------
# open command
# ---------------------------------------------------------------------------


class TestOpenCommand:
    def test_open_help_shows_options(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["open", "--help"])
        assert result.exit_code == 0
        for option in ("--host", "--port", "--workspace", "--user-settings", "--state-db"):
            assert option in result.output


# ---------------------------------------------------------------------------
# preview command
# ---------------------------------------------------------------------------


class TestPreviewCommand:
    def test_default_language(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["preview"])
        assert result.exit_code == 0
        assert result.output.startswith("// preview.cs\n")
        assert "namespace TokenPaint.Preview;" in result.output

    def test_other_language(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["preview", "rust"])
        assert result.exit_code == 0
        assert result.output.startswith("// preview.rs\n")


# ---------------------------------------------------------------------------
# recover command
# ---------------------------------------------------------------------------


class TestRecoverCommand:
    def test_nothing_to_recover(self, tmp_path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, [
            "recover",
            "--state-db", str(tmp_path / "state.db"),
            "--user-settings", str(tmp_path / "settings.json"),
        ])
        assert result.exit_code == 0
        assert "Restored 0, failed 0" in result.output

    def test_recovers_unclosed_session(self, tmp_path) -> None:
        user_settings = tmp_path / "settings.json"
        user_settings.write_text(json.dumps({"editor.fontSize": 14}))
        state_db = tmp_path / "state.db"

        scheduler = ManualScheduler()
        host = Host(
            TokenPaintConfig(state_db_path=str(state_db), user_settings_path=str(user_settings)),
            scheduler=scheduler,
        )
        host.initialize()
        host.open_session(THEME).handle(style_message("function", foreground="#DCDCAA"))
        scheduler.advance(1)
        host.close()

        runner = CliRunner()
        result = runner.invoke(cli, [
            "recover",
            "--state-db", str(state_db),
            "--user-settings", str(user_settings),
        ])
        assert result.exit_code == 0
        assert "editor.semanticTokenColorCustomizations (user): restored" in result.output
        assert "auxiliary (user): restored" in result.output
        assert "Restored 3, failed 0" in result.output
        assert json.loads(user_settings.read_text()) == {"editor.fontSize": 14}
