"""Unit tests for the CLI - Typer command registration and basic behavior."""

from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from logrelay.cli.app import app
from logrelay.core.emitter import LOG_CHANNEL, emitter

runner = CliRunner()


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "demo" in result.output
        assert "levels" in result.output

    def test_levels_table(self):
        result = runner.invoke(app, ["levels"])
        assert result.exit_code == 0
        for name in ("silly", "verbose", "http", "warn", "error"):
            assert name in result.output

    def test_demo_command_exists(self):
        result = runner.invoke(app, ["demo", "--help"])
        assert result.exit_code == 0


class TestDemoCommand:
    def test_demo_writes_log_file(self, tmp_path: Path):
        log_file = tmp_path / "demo.log"
        result = runner.invoke(
            app,
            ["demo", "--no-colors", "--log-level", "info:debug", "--log-file", str(log_file), "-n", "2"],
        )

        assert result.exit_code == 0, result.output
        content = log_file.read_text(encoding="utf-8")
        assert "[LogRelay] Demo pipeline ready" in content
        assert "Finding element" in content
        assert "\x1b" not in content
        # The demo tears the pipeline down on exit.
        assert emitter.listener_count(LOG_CHANNEL) == 0

    def test_demo_lines_carry_request_context(self, tmp_path: Path):
        log_file = tmp_path / "demo.log"
        runner.invoke(app, ["demo", "--log-file", str(log_file), "-n", "1"])

        lines = log_file.read_text(encoding="utf-8").splitlines()
        http_lines = [line for line in lines if "[HTTP]" in line]
        assert http_lines
        # "<timestamp> [req8][sess8][HTTP] ..."
        for line in http_lines:
            header = line[24:]
            assert header.startswith("[")
            assert header.index("[HTTP]") == 20

    def test_invalid_level_exits_nonzero(self):
        result = runner.invoke(app, ["demo", "--log-level", "loud"])
        assert result.exit_code == 1
        assert "Invalid logging settings" in result.output
