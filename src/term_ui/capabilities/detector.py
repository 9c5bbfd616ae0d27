"""
Terminal capability detection.

Detection folds a series of sources over a conservative default snapshot:
``TERM``, ``COLORTERM``, ``TERM_PROGRAM`` (or a platform session hint), the
locale variables and, optionally, the terminfo database. Every source may
only raise the color tier, never lower it, so the result does not depend on
which source happens to be most optimistic.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Mapping, Optional

from term_ui.capabilities import terminfo
from term_ui.core.color import TRUE_COLOR_COUNT, ColorMode
from term_ui.platform import Platform, current_platform

logger = logging.getLogger(__name__)

TRUE_COLOR_PROGRAMS = frozenset({
    "iTerm.app",
    "vscode",
    "WezTerm",
    "kitty",
    "Alacritty",
    "Hyper",
    "WindowsTerminal",
})

COLOR_256_PROGRAMS = frozenset({
    "Apple_Terminal",
    "gnome-terminal",
    "konsole",
    "xfce4-terminal",
})

# Checked in order; the first substring found in TERM wins
TERM_PATTERNS: tuple[tuple[str, ColorMode], ...] = (
    ("truecolor", ColorMode.TRUE_COLOR),
    ("24bit", ColorMode.TRUE_COLOR),
    ("256color", ColorMode.EXTENDED_256),
)

# Only consulted when no pattern matched
TERM_PREFIXES: tuple[tuple[str, ColorMode], ...] = (
    ("xterm", ColorMode.EXTENDED_256),
    ("screen", ColorMode.EXTENDED_256),
    ("tmux", ColorMode.EXTENDED_256),
)

TRUE_COLOR_COLORTERMS = frozenset({"truecolor", "24bit"})


@dataclass(frozen=True)
class Capabilities:
    """What the attached terminal can do. Never mutated after detection."""
    color_mode: ColorMode = ColorMode.STANDARD_16
    max_colors: int = 16
    unicode: bool = False
    mouse: bool = False
    bracketed_paste: bool = False
    focus_events: bool = False
    alternate_screen: bool = True
    terminal_type: Optional[str] = None
    terminal_program: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["color_mode"] = self.color_mode.value
        return data


def update_color_mode(caps: Capabilities, mode: ColorMode, colors: int | None = None) -> Capabilities:
    """Raise ``caps`` to ``mode`` if that is an upgrade; otherwise leave it."""
    if mode.rank <= caps.color_mode.rank:
        return caps
    colors = mode.max_colors if colors is None else colors
    return replace(caps, color_mode=mode, max_colors=max(caps.max_colors, colors))


TerminfoQuery = Callable[[Optional[str]], Optional[int]]


class CapabilityDetector:
    """
    One detection pass over an environment.

    ``environ``, ``platform`` and ``terminfo_query`` are injectable so the
    pass can be run against any environment without touching the real one.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        platform: Platform | None = None,
        query_terminfo: bool = True,
        terminfo_query: TerminfoQuery | None = None,
        terminfo_timeout: float = terminfo.DEFAULT_TIMEOUT,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self.platform = platform or current_platform()
        self.query_terminfo = query_terminfo
        self.terminfo_timeout = terminfo_timeout
        self._terminfo_query = terminfo_query

    def detect(self) -> Capabilities:
        caps = Capabilities()
        for step in (
            self.from_term,
            self.from_colorterm,
            self.from_term_program,
            self.from_locale,
            self.from_terminfo,
            finalize,
        ):
            caps = step(caps)
        logger.debug("Detected capabilities: %s", caps)
        return caps

    def _get(self, name: str) -> Optional[str]:
        value = self.environ.get(name)
        return value if value else None

    def from_term(self, caps: Capabilities) -> Capabilities:
        term = self._get("TERM")
        if term is None:
            return caps
        caps = replace(caps, terminal_type=term)

        # Exact matches skip the pattern checks. dumb only replaces the
        # default tier; a source that already raised it wins.
        if term == "linux":
            return update_color_mode(caps, ColorMode.STANDARD_16)
        if term == "dumb":
            if caps.color_mode.rank > ColorMode.STANDARD_16.rank:
                return caps
            return replace(caps, color_mode=ColorMode.MONOCHROME, max_colors=2)

        for pattern, mode in TERM_PATTERNS:
            if pattern in term:
                return update_color_mode(caps, mode)
        for prefix, mode in TERM_PREFIXES:
            if term.startswith(prefix):
                return update_color_mode(caps, mode)
        return caps

    def from_colorterm(self, caps: Capabilities) -> Capabilities:
        colorterm = self._get("COLORTERM")
        if colorterm in TRUE_COLOR_COLORTERMS:
            return update_color_mode(caps, ColorMode.TRUE_COLOR)
        return caps

    def from_term_program(self, caps: Capabilities) -> Capabilities:
        program = self._get("TERM_PROGRAM") or self.platform.session_hint(self.environ)
        if program is None:
            return caps
        caps = replace(caps, terminal_program=program)
        if program in TRUE_COLOR_PROGRAMS:
            caps = update_color_mode(caps, ColorMode.TRUE_COLOR)
            return replace(caps, mouse=True, bracketed_paste=True, focus_events=True)
        if program in COLOR_256_PROGRAMS:
            caps = update_color_mode(caps, ColorMode.EXTENDED_256)
            return replace(caps, mouse=True, bracketed_paste=True)
        return caps

    def from_locale(self, caps: Capabilities) -> Capabilities:
        locale = self._get("LC_ALL") or self._get("LC_CTYPE") or self._get("LANG") or ""
        locale = locale.lower()
        return replace(caps, unicode="utf-8" in locale or "utf8" in locale)

    def from_terminfo(self, caps: Capabilities) -> Capabilities:
        if not self.query_terminfo or not self.platform.supports_feature("terminfo"):
            return caps
        if self._terminfo_query is not None:
            colors = self._terminfo_query(caps.terminal_type)
        else:
            colors = terminfo.query_colors(caps.terminal_type, timeout=self.terminfo_timeout)
        return apply_terminfo_colors(caps, colors)


def apply_terminfo_colors(caps: Capabilities, colors: int | None) -> Capabilities:
    if colors is None:
        return caps
    if colors >= TRUE_COLOR_COUNT:
        return update_color_mode(caps, ColorMode.TRUE_COLOR, colors)
    if colors >= 256:
        return update_color_mode(caps, ColorMode.EXTENDED_256, colors)
    if colors >= 16:
        return update_color_mode(caps, ColorMode.STANDARD_16, colors)
    if colors >= 8:
        # An 8-color terminal keeps its tier; only the count is recorded
        return replace(caps, max_colors=max(caps.max_colors, colors))
    return caps


def finalize(caps: Capabilities) -> Capabilities:
    """Terminals with 256+ colors are assumed to be modern emulators."""
    if caps.max_colors < 256:
        return caps
    return replace(
        caps,
        mouse=True,
        bracketed_paste=True,
        focus_events=caps.focus_events or caps.max_colors >= TRUE_COLOR_COUNT,
    )


class CapabilityCache:
    """
    Process-lifetime holder for one Capabilities snapshot.

    Reads are a single attribute load and take no lock. Detection runs under
    the lock, so concurrent first readers detect once and all see the same
    snapshot.
    """

    def __init__(self) -> None:
        self._value: Capabilities | None = None
        self._lock = threading.Lock()

    def peek(self) -> Capabilities | None:
        return self._value

    def get(self, factory: Callable[[], Capabilities]) -> Capabilities:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = factory()
            return self._value

    def store(self, value: Capabilities) -> Capabilities:
        with self._lock:
            self._value = value
        return value

    def clear(self) -> None:
        with self._lock:
            self._value = None


default_cache = CapabilityCache()


def detect(
    environ: Mapping[str, str] | None = None,
    *,
    cache: CapabilityCache | None = None,
    platform: Platform | None = None,
    query_terminfo: bool = True,
    terminfo_timeout: float = terminfo.DEFAULT_TIMEOUT,
) -> Capabilities:
    """Run detection now and store the result in the cache."""
    detector = CapabilityDetector(
        environ,
        platform=platform,
        query_terminfo=query_terminfo,
        terminfo_timeout=terminfo_timeout,
    )
    return (cache or default_cache).store(detector.detect())


def get(
    environ: Mapping[str, str] | None = None,
    *,
    cache: CapabilityCache | None = None,
    platform: Platform | None = None,
    query_terminfo: bool = True,
    terminfo_timeout: float = terminfo.DEFAULT_TIMEOUT,
) -> Capabilities:
    """The cached snapshot, detecting it on first use."""
    return (cache or default_cache).get(
        lambda: CapabilityDetector(
            environ,
            platform=platform,
            query_terminfo=query_terminfo,
            terminfo_timeout=terminfo_timeout,
        ).detect()
    )


def clear_cache(cache: CapabilityCache | None = None) -> None:
    """Forget the cached snapshot; safe to call when nothing is cached."""
    (cache or default_cache).clear()


def supports_true_color() -> bool:
    return get().color_mode is ColorMode.TRUE_COLOR


def supports_256_color() -> bool:
    return get().color_mode.at_least(ColorMode.EXTENDED_256)


def supports_unicode() -> bool:
    return get().unicode


def supports_mouse() -> bool:
    return get().mouse


def supports_bracketed_paste() -> bool:
    return get().bracketed_paste


def supports_focus_events() -> bool:
    return get().focus_events


def supports_alternate_screen() -> bool:
    return get().alternate_screen
