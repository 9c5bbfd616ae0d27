"""Color values and terminal color depths."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class ColorMode(Enum):
    """Color depth a terminal can display."""
    MONOCHROME = "mono"     # No color at all, attributes only
    STANDARD_16 = "16"      # Standard 16-color (SGR 30-37, 40-47, 90-97, 100-107)
    EXTENDED_256 = "256"    # Extended 256-color (SGR 38;5;n, 48;5;n)
    TRUE_COLOR = "rgb"      # 24-bit true color (SGR 38;2;r;g;b, 48;2;r;g;b)

    @property
    def rank(self) -> int:
        """Ordering used when merging detection sources (higher is richer)."""
        return _RANKS[self]

    @property
    def max_colors(self) -> int:
        """Nominal number of colors for this depth."""
        return _MAX_COLORS[self]

    @classmethod
    def from_colors(cls, colors: int) -> ColorMode:
        """Pick the richest mode a terminal reporting ``colors`` can show."""
        if colors >= TRUE_COLOR_COUNT:
            return cls.TRUE_COLOR
        if colors >= 256:
            return cls.EXTENDED_256
        if colors >= 16:
            return cls.STANDARD_16
        return cls.MONOCHROME

    def at_least(self, other: ColorMode) -> bool:
        return self.rank >= other.rank


TRUE_COLOR_COUNT = 16_777_216

_RANKS = {
    ColorMode.MONOCHROME: 0,
    ColorMode.STANDARD_16: 1,
    ColorMode.EXTENDED_256: 2,
    ColorMode.TRUE_COLOR: 3,
}

_MAX_COLORS = {
    ColorMode.MONOCHROME: 2,
    ColorMode.STANDARD_16: 16,
    ColorMode.EXTENDED_256: 256,
    ColorMode.TRUE_COLOR: TRUE_COLOR_COUNT,
}


def _check_component(name: str, value: object, upper: int) -> int:
    # bool is an int subclass but never a valid color component
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if not 0 <= value <= upper:
        raise ValueError(f"{name} must be 0-{upper}, got {value}")
    return value


@dataclass(frozen=True)
class Color:
    """
    A color as the terminal understands it.

    ``value`` is a 16-color index (0-15), a 256-palette index, an RGB triple,
    or ``None`` for the terminal's own default color.
    """
    mode: ColorMode
    value: int | tuple[int, int, int] | None

    # Standard 16 colors (index 0-15)
    BLACK: ClassVar[Color]
    RED: ClassVar[Color]
    GREEN: ClassVar[Color]
    YELLOW: ClassVar[Color]
    BLUE: ClassVar[Color]
    MAGENTA: ClassVar[Color]
    CYAN: ClassVar[Color]
    WHITE: ClassVar[Color]
    BRIGHT_BLACK: ClassVar[Color]
    BRIGHT_RED: ClassVar[Color]
    BRIGHT_GREEN: ClassVar[Color]
    BRIGHT_YELLOW: ClassVar[Color]
    BRIGHT_BLUE: ClassVar[Color]
    BRIGHT_MAGENTA: ClassVar[Color]
    BRIGHT_CYAN: ClassVar[Color]
    BRIGHT_WHITE: ClassVar[Color]

    # Terminal default (SGR 39 / 49)
    DEFAULT: ClassVar[Color]

    @classmethod
    def from_16(cls, index: int) -> Color:
        """Create a Color from a standard 16-color index."""
        return cls(ColorMode.STANDARD_16, _check_component("16-color index", index, 15))

    @classmethod
    def from_256(cls, index: int) -> Color:
        """Create a Color from a 256-color index."""
        return cls(ColorMode.EXTENDED_256, _check_component("256-color index", index, 255))

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> Color:
        """Create a Color from RGB values."""
        rgb = (
            _check_component("red", r, 255),
            _check_component("green", g, 255),
            _check_component("blue", b, 255),
        )
        return cls(ColorMode.TRUE_COLOR, rgb)

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Create a Color from ``#rrggbb`` (the leading ``#`` is optional)."""
        digits = text.lstrip("#")
        if len(digits) != 6:
            raise ValueError(f"Hex color must have 6 digits, got {text!r}")
        try:
            value = int(digits, 16)
        except ValueError:
            raise ValueError(f"Invalid hex color: {text!r}") from None
        return cls.from_rgb((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    @property
    def is_default(self) -> bool:
        return self.value is None

    def to_sgr_fg(self) -> str:
        """Return SGR parameters for foreground color."""
        if self.value is None:
            return "39"
        if self.mode == ColorMode.STANDARD_16:
            assert isinstance(self.value, int)
            if self.value < 8:
                return str(30 + self.value)
            return str(90 + self.value - 8)
        elif self.mode == ColorMode.EXTENDED_256:
            return f"38;5;{self.value}"
        else:  # TRUE_COLOR
            assert isinstance(self.value, tuple)
            r, g, b = self.value
            return f"38;2;{r};{g};{b}"

    def to_sgr_bg(self) -> str:
        """Return SGR parameters for background color."""
        if self.value is None:
            return "49"
        if self.mode == ColorMode.STANDARD_16:
            assert isinstance(self.value, int)
            if self.value < 8:
                return str(40 + self.value)
            return str(100 + self.value - 8)
        elif self.mode == ColorMode.EXTENDED_256:
            return f"48;5;{self.value}"
        else:  # TRUE_COLOR
            assert isinstance(self.value, tuple)
            r, g, b = self.value
            return f"48;2;{r};{g};{b}"


# Initialize class-level color constants
Color.BLACK = Color(ColorMode.STANDARD_16, 0)
Color.RED = Color(ColorMode.STANDARD_16, 1)
Color.GREEN = Color(ColorMode.STANDARD_16, 2)
Color.YELLOW = Color(ColorMode.STANDARD_16, 3)
Color.BLUE = Color(ColorMode.STANDARD_16, 4)
Color.MAGENTA = Color(ColorMode.STANDARD_16, 5)
Color.CYAN = Color(ColorMode.STANDARD_16, 6)
Color.WHITE = Color(ColorMode.STANDARD_16, 7)
Color.BRIGHT_BLACK = Color(ColorMode.STANDARD_16, 8)
Color.BRIGHT_RED = Color(ColorMode.STANDARD_16, 9)
Color.BRIGHT_GREEN = Color(ColorMode.STANDARD_16, 10)
Color.BRIGHT_YELLOW = Color(ColorMode.STANDARD_16, 11)
Color.BRIGHT_BLUE = Color(ColorMode.STANDARD_16, 12)
Color.BRIGHT_MAGENTA = Color(ColorMode.STANDARD_16, 13)
Color.BRIGHT_CYAN = Color(ColorMode.STANDARD_16, 14)
Color.BRIGHT_WHITE = Color(ColorMode.STANDARD_16, 15)
Color.DEFAULT = Color(ColorMode.STANDARD_16, None)

NAMED_COLORS: dict[str, Color] = {
    "black": Color.BLACK,
    "red": Color.RED,
    "green": Color.GREEN,
    "yellow": Color.YELLOW,
    "blue": Color.BLUE,
    "magenta": Color.MAGENTA,
    "cyan": Color.CYAN,
    "white": Color.WHITE,
    "bright_black": Color.BRIGHT_BLACK,
    "bright_red": Color.BRIGHT_RED,
    "bright_green": Color.BRIGHT_GREEN,
    "bright_yellow": Color.BRIGHT_YELLOW,
    "bright_blue": Color.BRIGHT_BLUE,
    "bright_magenta": Color.BRIGHT_MAGENTA,
    "bright_cyan": Color.BRIGHT_CYAN,
    "bright_white": Color.BRIGHT_WHITE,
    "default": Color.DEFAULT,
}


def parse_color(text: str) -> Color:
    """
    Parse a color name, ``#rrggbb``, ``rgb(r,g,b)`` or a bare 256-palette index.

    Used by the CLI; raises ValueError for anything else.
    """
    value = text.strip().lower()
    if value in NAMED_COLORS:
        return NAMED_COLORS[value]
    if value.startswith("#"):
        return Color.from_hex(value)
    if value.startswith("rgb(") and value.endswith(")"):
        parts = value[4:-1].split(",")
        if len(parts) != 3:
            raise ValueError(f"rgb() takes three components, got {text!r}")
        try:
            r, g, b = (int(p) for p in parts)
        except ValueError:
            raise ValueError(f"Invalid rgb() color: {text!r}") from None
        return Color.from_rgb(r, g, b)
    if value.isdigit():
        return Color.from_256(int(value))
    raise ValueError(f"Unknown color: {text!r}")
