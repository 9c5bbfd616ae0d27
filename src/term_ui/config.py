"""
Runtime configuration.

Values come from, lowest priority first: built-in defaults, a JSON file
(``~/.config/term-ui/config.json`` unless another path is given) and
``TERM_UI_*`` environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from term_ui.capabilities.detector import CapabilityCache, clear_cache

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "term-ui" / "config.json"

BACKENDS = ("auto", "raw", "tty")
CHARACTER_SETS = ("unicode", "ascii")
LINE_MODES = ("full_redraw", "incremental")
MOUSE_TRACKING_MODES = ("none", "x10", "normal", "button", "any")

# Environment variable -> field name
ENV_VARS: dict[str, str] = {
    "TERM_UI_BACKEND": "backend",
    "TERM_UI_CHARSET": "character_set",
    "TERM_UI_FALLBACK_CHARSET": "fallback_character_set",
    "TERM_UI_LINE_MODE": "line_mode",
    "TERM_UI_ALTERNATE_SCREEN": "alternate_screen",
    "TERM_UI_MOUSE": "mouse_tracking",
    "TERM_UI_ESCAPE_TIMEOUT": "escape_timeout",
    "TERM_UI_TERMINFO_TIMEOUT": "terminfo_timeout",
    "TERM_UI_QUERY_TERMINFO": "query_terminfo",
}

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


@dataclass(frozen=True)
class TermConfig:
    """Session settings. Construct with keywords or via :meth:`load`."""

    # Backend: "auto" attempts raw mode, "raw"/"tty" force one path
    backend: str = "auto"

    # Preferred glyphs, and what to use when the terminal lacks Unicode
    character_set: str = "unicode"
    fallback_character_set: str = "ascii"

    # Redraw strategy for a cooperative renderer. Not interpreted here; an
    # explicit backend receives it in Explicit.options
    line_mode: str = "full_redraw"

    # Raw sessions
    alternate_screen: bool = True
    mouse_tracking: str = "normal"

    # Input and detection timing, in seconds
    escape_timeout: float = 0.05
    terminfo_timeout: float = 1.0
    query_terminfo: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError naming the first invalid field."""
        for name, allowed in (
            ("backend", BACKENDS),
            ("character_set", CHARACTER_SETS),
            ("fallback_character_set", CHARACTER_SETS),
            ("line_mode", LINE_MODES),
            ("mouse_tracking", MOUSE_TRACKING_MODES),
        ):
            value = getattr(self, name)
            if value not in allowed:
                raise ValueError(f"{name} must be one of {', '.join(allowed)}; got {value!r}")
        for name in ("alternate_screen", "query_terminfo"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be a boolean")
        for name in ("escape_timeout", "terminfo_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"{name} must be a positive number; got {value!r}")

    @property
    def prefers_unicode(self) -> bool:
        return self.character_set == "unicode"

    def unicode_for(self, terminal_unicode: bool) -> bool:
        """Whether to emit Unicode glyphs on a terminal with/without Unicode."""
        if not self.prefers_unicode:
            return False
        return terminal_unicode or self.fallback_character_set == "unicode"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: Optional[TermConfig] = None) -> TermConfig:
        """Overlay ``data`` on ``base`` (defaults if omitted); unknown keys are errors."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration key(s): {', '.join(unknown)}")
        return replace(base or cls(), **dict(data))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, base: Optional[TermConfig] = None) -> TermConfig:
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        for var, name in ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            overrides[name] = _coerce(name, raw.strip(), var)
        return cls.from_dict(overrides, base)

    @classmethod
    def from_file(cls, path: Path, base: Optional[TermConfig] = None) -> TermConfig:
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        return cls.from_dict(data, base)

    @classmethod
    def load(
        cls,
        path: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> TermConfig:
        """
        Defaults, then the config file, then the environment.

        A missing file at the default location is fine; a missing file that
        was asked for explicitly is an error.
        """
        config = cls()
        if path is not None:
            config = cls.from_file(Path(path), config)
        elif DEFAULT_CONFIG_PATH.exists():
            config = cls.from_file(DEFAULT_CONFIG_PATH, config)
        return cls.from_env(environ, config)

    def save(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)


def _coerce(name: str, raw: str, var: str) -> Any:
    if name in ("alternate_screen", "query_terminfo"):
        lowered = raw.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{var} must be a boolean (true/false); got {raw!r}")
    if name in ("escape_timeout", "terminfo_timeout"):
        try:
            return float(raw)
        except ValueError:
            raise ValueError(f"{var} must be a number; got {raw!r}") from None
    return raw.lower()


def reload(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
    cache: CapabilityCache | None = None,
) -> TermConfig:
    """Re-read configuration and invalidate the capability cache."""
    config = TermConfig.load(path, environ)
    clear_cache(cache)
    logger.debug("Configuration reloaded: %s", config)
    return config
