"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from term_ui.cli.app import create_app, unescape

runner = CliRunner()


@pytest.fixture
def app():
    return create_app()


class TestUnescape:
    """Tests for shell-friendly byte escapes."""

    def test_escapes(self) -> None:
        assert unescape(r"\e[A") == b"\x1b[A"
        assert unescape(r"\x1b[<0;5;10M") == b"\x1b[<0;5;10M"
        assert unescape(r"a\tb\r\n\\") == b"a\tb\r\n\\"

    def test_plain_and_unicode(self) -> None:
        assert unescape("abc") == b"abc"
        assert unescape("é") == "é".encode("utf-8")
        assert unescape("\\") == b"\\"
        assert unescape(r"\q") == b"\\q"

    def test_bad_hex(self) -> None:
        with pytest.raises(ValueError):
            unescape(r"\xzz")


class TestCommands:
    """Tests for CLI commands."""

    def test_help(self, app) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "decode" in result.stdout

    def test_decode(self, app) -> None:
        result = runner.invoke(app, ["decode", r"\e[A"])
        assert result.exit_code == 0
        assert "1 event(s)" in result.stdout
        assert "up" in result.stdout

    def test_decode_pending(self, app) -> None:
        result = runner.invoke(app, ["decode", r"\e["])
        assert result.exit_code == 0
        assert "0 event(s)" in result.stdout
        assert "Pending" in result.stdout

    def test_decode_flush(self, app) -> None:
        result = runner.invoke(app, ["decode", "--flush", r"\e"])
        assert result.exit_code == 0
        assert "escape" in result.stdout

    def test_decode_bad_escape(self, app) -> None:
        result = runner.invoke(app, ["decode", r"\xzz"])
        assert result.exit_code == 1

    def test_sgr(self, app) -> None:
        result = runner.invoke(app, ["sgr", "--fg", "red", "--attr", "bold", "--mode", "16"])
        assert result.exit_code == 0
        assert "1;31m" in result.stdout
        assert "Sample text" in result.stdout

    def test_sgr_degrades(self, app) -> None:
        result = runner.invoke(app, ["sgr", "--fg", "#ff0000", "--mode", "256"])
        assert result.exit_code == 0
        assert "38;5;196m" in result.stdout

    def test_sgr_errors(self, app) -> None:
        assert runner.invoke(app, ["sgr", "--mode", "88"]).exit_code == 1
        assert runner.invoke(app, ["sgr", "--fg", "nope"]).exit_code == 1
        assert runner.invoke(app, ["sgr", "--attr", "sparkle"]).exit_code == 1

    def test_caps_json(self, app, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COLORTERM", "truecolor")
        result = runner.invoke(app, ["caps", "--json", "--no-terminfo"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["color_mode"] == "rgb"
        assert data["max_colors"] == 16_777_216

    def test_caps_table(self, app) -> None:
        result = runner.invoke(app, ["caps", "--no-terminfo"])
        assert result.exit_code == 0
        assert "color_mode" in result.stdout

    def test_platform_json(self, app) -> None:
        result = runner.invoke(app, ["platform", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert "family" in data
        assert "terminfo_paths" in data
