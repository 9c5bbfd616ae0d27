"""Logical output commands understood by :class:`~term_ui.codec.encoder.AnsiEncoder`."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from term_ui.core.style import Style


class TerminalMode(Enum):
    """DEC private modes, valued by their mode number."""
    APPLICATION_CURSOR = 1
    MOUSE_X10 = 9
    CURSOR_VISIBLE = 25
    MOUSE_NORMAL = 1000
    MOUSE_BUTTON = 1002
    MOUSE_ANY = 1003
    FOCUS_EVENTS = 1004
    MOUSE_SGR = 1006
    ALTERNATE_SCREEN = 1049
    BRACKETED_PASTE = 2004

    @property
    def is_mouse(self) -> bool:
        return self in MOUSE_MODES


MOUSE_MODES = frozenset({
    TerminalMode.MOUSE_X10,
    TerminalMode.MOUSE_NORMAL,
    TerminalMode.MOUSE_BUTTON,
    TerminalMode.MOUSE_ANY,
    TerminalMode.MOUSE_SGR,
})

# Names used by configuration ("mouse_tracking") for the tracking variants
MOUSE_TRACKING: dict[str, TerminalMode] = {
    "x10": TerminalMode.MOUSE_X10,
    "normal": TerminalMode.MOUSE_NORMAL,
    "button": TerminalMode.MOUSE_BUTTON,
    "any": TerminalMode.MOUSE_ANY,
}


class Direction(Enum):
    UP = "A"
    DOWN = "B"
    FORWARD = "C"
    BACK = "D"


class ClearTarget(Enum):
    """Erase targets, valued by their final CSI parameters."""
    SCREEN = "2J"
    SCREEN_FROM_CURSOR = "0J"
    SCREEN_TO_CURSOR = "1J"
    LINE = "2K"
    LINE_FROM_CURSOR = "K"
    LINE_TO_CURSOR = "1K"


@dataclass(frozen=True)
class CursorTo:
    """Move the cursor to an absolute 1-indexed position."""
    row: int
    col: int


@dataclass(frozen=True)
class CursorMove:
    direction: Direction
    count: int = 1


@dataclass(frozen=True)
class SetStyle:
    style: Style


@dataclass(frozen=True)
class ResetStyle:
    pass


@dataclass(frozen=True)
class SetMode:
    mode: TerminalMode
    enabled: bool = True


@dataclass(frozen=True)
class Clear:
    target: ClearTarget = ClearTarget.SCREEN


@dataclass(frozen=True)
class Scroll:
    """Scroll the region up (positive) or down (negative) by ``lines``."""
    lines: int


@dataclass(frozen=True)
class ScrollRegion:
    top: int
    bottom: int


@dataclass(frozen=True)
class SaveCursor:
    pass


@dataclass(frozen=True)
class RestoreCursor:
    pass


@dataclass(frozen=True)
class Text:
    """Literal text, optionally styled (style is reset afterwards)."""
    content: str
    style: Style | None = None


Command = Union[
    CursorTo,
    CursorMove,
    SetStyle,
    ResetStyle,
    SetMode,
    Clear,
    Scroll,
    ScrollRegion,
    SaveCursor,
    RestoreCursor,
    Text,
]
