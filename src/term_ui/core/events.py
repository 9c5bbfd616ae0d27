"""Input events produced by the decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union


class Key(Enum):
    """Named key constants."""
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()
    ENTER = auto()
    ESCAPE = auto()
    TAB = auto()
    BACKSPACE = auto()
    HOME = auto()
    END = auto()
    PAGE_UP = auto()
    PAGE_DOWN = auto()
    DELETE = auto()
    INSERT = auto()
    F1 = auto()
    F2 = auto()
    F3 = auto()
    F4 = auto()
    F5 = auto()
    F6 = auto()
    F7 = auto()
    F8 = auto()
    F9 = auto()
    F10 = auto()
    F11 = auto()
    F12 = auto()


class Modifier(Enum):
    """Keyboard modifiers, valued by their xterm modifier bit."""
    SHIFT = 1
    ALT = 2
    CTRL = 4
    META = 8

    @classmethod
    def from_xterm(cls, param: int) -> frozenset[Modifier]:
        """
        Decode the xterm modifier parameter (``1 + bitmask``).

        ``ESC [ 1 ; 5 A`` is ctrl+up: 5 - 1 = 4 = CTRL.
        """
        bits = max(param - 1, 0)
        return frozenset(m for m in cls if bits & m.value)


class MouseAction(Enum):
    PRESS = auto()
    RELEASE = auto()
    DRAG = auto()
    MOVE = auto()
    WHEEL = auto()


class MouseButton(Enum):
    LEFT = auto()
    MIDDLE = auto()
    RIGHT = auto()
    WHEEL_UP = auto()
    WHEEL_DOWN = auto()
    NONE = auto()


NO_MODIFIERS: frozenset[Modifier] = frozenset()


@dataclass(frozen=True)
class KeyEvent:
    """
    A key press.

    ``key`` is either a named :class:`Key` or the single character pressed
    (``'c'`` for ctrl+c). ``char`` holds the literal text the key produced,
    when it produced any.
    """
    key: Key | str
    char: str | None = None
    modifiers: frozenset[Modifier] = NO_MODIFIERS
    raw: bytes = field(default=b"", compare=False, repr=False)

    @property
    def is_char(self) -> bool:
        """Check if this is a plain printable character."""
        return self.char is not None and not (self.modifiers - {Modifier.SHIFT})

    @property
    def ctrl(self) -> bool:
        return Modifier.CTRL in self.modifiers

    @property
    def alt(self) -> bool:
        return Modifier.ALT in self.modifiers

    @property
    def shift(self) -> bool:
        return Modifier.SHIFT in self.modifiers

    def describe(self) -> str:
        """Human-readable name such as ``ctrl+c`` or ``shift+tab``."""
        names = [m.name.lower() for m in Modifier if m in self.modifiers]
        if isinstance(self.key, Key):
            names.append(self.key.name.lower())
        elif self.key == " ":
            names.append("space")
        else:
            names.append(self.key)
        return "+".join(names)


@dataclass(frozen=True)
class MouseEvent:
    """A mouse report. Coordinates are 1-indexed terminal cells."""
    action: MouseAction
    button: MouseButton
    x: int
    y: int
    modifiers: frozenset[Modifier] = NO_MODIFIERS


@dataclass(frozen=True)
class PasteEvent:
    """Text delivered between bracketed-paste markers."""
    content: str


@dataclass(frozen=True)
class FocusEvent:
    gained: bool


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


Event = Union[KeyEvent, MouseEvent, PasteEvent, FocusEvent, ResizeEvent]
