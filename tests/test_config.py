"""Tests for runtime configuration."""

import json
from pathlib import Path

import pytest

from term_ui import config as config_module
from term_ui.capabilities.detector import Capabilities, CapabilityCache
from term_ui.config import TermConfig, reload


class TestDefaults:
    """Tests for the default configuration."""

    def test_defaults(self) -> None:
        config = TermConfig()
        assert config.backend == "auto"
        assert config.character_set == "unicode"
        assert config.fallback_character_set == "ascii"
        assert config.line_mode == "full_redraw"
        assert config.alternate_screen is True
        assert config.mouse_tracking == "normal"
        assert config.escape_timeout == 0.05
        assert config.query_terminfo is True

    def test_invalid_values(self) -> None:
        for kwargs in (
            {"backend": "curses"},
            {"character_set": "latin1"},
            {"line_mode": "partial"},
            {"mouse_tracking": "all"},
            {"alternate_screen": "yes"},
            {"escape_timeout": 0},
            {"terminfo_timeout": -1.0},
            {"escape_timeout": True},
        ):
            with pytest.raises(ValueError):
                TermConfig(**kwargs)

    def test_error_names_field(self) -> None:
        with pytest.raises(ValueError, match="backend"):
            TermConfig(backend="curses")


class TestCharacterSet:
    """Tests for choosing Unicode or ASCII output."""

    def test_unicode_follows_terminal(self) -> None:
        config = TermConfig()
        assert config.unicode_for(True) is True
        assert config.unicode_for(False) is False

    def test_ascii_preferred(self) -> None:
        assert TermConfig(character_set="ascii").unicode_for(True) is False

    def test_unicode_fallback(self) -> None:
        assert TermConfig(fallback_character_set="unicode").unicode_for(False) is True


class TestSources:
    """Tests for dict, environment and file sources."""

    def test_from_dict(self) -> None:
        config = TermConfig.from_dict({"backend": "tty", "line_mode": "incremental"})
        assert config.backend == "tty"
        assert config.line_mode == "incremental"

    def test_from_dict_overlays_base(self) -> None:
        base = TermConfig(mouse_tracking="any")
        assert TermConfig.from_dict({"backend": "raw"}, base).mouse_tracking == "any"

    def test_unknown_keys(self) -> None:
        with pytest.raises(ValueError, match="colour"):
            TermConfig.from_dict({"colour": "red"})

    def test_from_env(self) -> None:
        config = TermConfig.from_env({
            "TERM_UI_BACKEND": "TTY",
            "TERM_UI_ALTERNATE_SCREEN": "off",
            "TERM_UI_ESCAPE_TIMEOUT": "0.2",
            "TERM_UI_MOUSE": "button",
            "TERM_UI_QUERY_TERMINFO": "no",
        })
        assert config.backend == "tty"
        assert config.alternate_screen is False
        assert config.escape_timeout == 0.2
        assert config.mouse_tracking == "button"
        assert config.query_terminfo is False

    def test_from_env_ignores_empty(self) -> None:
        assert TermConfig.from_env({"TERM_UI_BACKEND": ""}) == TermConfig()

    def test_from_env_invalid(self) -> None:
        with pytest.raises(ValueError, match="TERM_UI_ALTERNATE_SCREEN"):
            TermConfig.from_env({"TERM_UI_ALTERNATE_SCREEN": "maybe"})
        with pytest.raises(ValueError, match="TERM_UI_ESCAPE_TIMEOUT"):
            TermConfig.from_env({"TERM_UI_ESCAPE_TIMEOUT": "soon"})
        with pytest.raises(ValueError):
            TermConfig.from_env({"TERM_UI_BACKEND": "curses"})

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"backend": "raw", "alternate_screen": False}))
        config = TermConfig.from_file(path)
        assert config.backend == "raw"
        assert config.alternate_screen is False

    def test_from_file_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            TermConfig.from_file(path)

    def test_from_file_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            TermConfig.from_file(path)


class TestLoad:
    """Tests for layered loading."""

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"backend": "raw", "mouse_tracking": "any"}))
        config = TermConfig.load(path, environ={"TERM_UI_BACKEND": "tty"})
        assert config.backend == "tty"
        assert config.mouse_tracking == "any"

    def test_missing_default_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", tmp_path / "absent.json")
        assert TermConfig.load(environ={}) == TermConfig()

    def test_default_file_used(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"line_mode": "incremental"}))
        monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATH", path)
        assert TermConfig.load(environ={}).line_mode == "incremental"

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            TermConfig.load(tmp_path / "absent.json", environ={})

    def test_save_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.json"
        config = TermConfig(backend="tty", escape_timeout=0.1)
        config.save(path)
        assert TermConfig.load(path, environ={}) == config

    def test_reload_clears_capability_cache(self, tmp_path: Path) -> None:
        cache = CapabilityCache()
        cache.store(Capabilities())
        path = tmp_path / "config.json"
        path.write_text("{}")
        assert reload(path, environ={}, cache=cache) == TermConfig()
        assert cache.peek() is None
