"""
Graceful degradation for limited terminals.

Colors fall back true-color -> 256 -> 16 -> none, and Unicode box-drawing
and symbol glyphs fall back to ASCII look-alikes.
"""

from __future__ import annotations

from term_ui.core.color import Color, ColorMode

# RGB values used to find the nearest of the 16 standard colors
ANSI_RGB: tuple[tuple[int, int, int], ...] = (
    (0, 0, 0),          # Black
    (128, 0, 0),        # Red
    (0, 128, 0),        # Green
    (128, 128, 0),      # Yellow
    (0, 0, 128),        # Blue
    (128, 0, 128),      # Magenta
    (0, 128, 128),      # Cyan
    (192, 192, 192),    # White
    (128, 128, 128),    # Bright Black
    (255, 0, 0),        # Bright Red
    (0, 255, 0),        # Bright Green
    (255, 255, 0),      # Bright Yellow
    (0, 0, 255),        # Bright Blue
    (255, 0, 255),      # Bright Magenta
    (0, 255, 255),      # Bright Cyan
    (255, 255, 255),    # Bright White
)

ASCII_FALLBACKS: dict[str, str] = {
    # Single-line box drawing
    "─": "-", "│": "|",
    "┌": "+", "┐": "+", "└": "+", "┘": "+",
    "├": "+", "┤": "+", "┬": "+", "┴": "+", "┼": "+",
    # Double-line box drawing
    "═": "=", "║": "|",
    "╔": "+", "╗": "+", "╚": "+", "╝": "+",
    "╠": "+", "╣": "+", "╦": "+", "╩": "+", "╬": "+",
    # Rounded corners
    "╭": "+", "╮": "+", "╯": "+", "╰": "+",
    # Blocks and shades
    "█": "#", "▀": "^", "▄": "_", "▌": "|", "▐": "|",
    "░": ".", "▒": ":", "▓": "#",
    # Arrows
    "←": "<", "→": ">", "↑": "^", "↓": "v",
    # Symbols
    "•": "*", "·": ".", "…": "...", "×": "x", "÷": "/",
    "≠": "!=", "≤": "<=", "≥": ">=",
    "✓": "[x]", "✗": "[ ]",
}

_CUBE_THRESHOLDS = (48, 115, 155, 195, 235)


def _check_rgb(r: int, g: int, b: int) -> None:
    for name, value in (("red", r), ("green", g), ("blue", b)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{name} must be an int, got {type(value).__name__}")
        if not 0 <= value <= 255:
            raise ValueError(f"{name} must be 0-255, got {value}")


def _cube_index(value: int) -> int:
    for index, threshold in enumerate(_CUBE_THRESHOLDS):
        if value < threshold:
            return index
    return 5


def rgb_to_256(r: int, g: int, b: int) -> int:
    """
    Map an RGB color to the nearest 256-palette index.

    Near-gray colors (channel spread of 8 or less) use the 24-step grayscale
    ramp at 232-255; everything else uses the 6x6x6 cube at 16-231.
    """
    _check_rgb(r, g, b)
    if max(r, g, b) - min(r, g, b) <= 8:
        gray_index = round((r + g + b) / 3 / 255 * 23)
        return 232 + min(23, gray_index)
    return 16 + 36 * _cube_index(r) + 6 * _cube_index(g) + _cube_index(b)


def rgb_to_16(r: int, g: int, b: int) -> int:
    """Map an RGB color to the nearest standard color by Euclidean distance."""
    _check_rgb(r, g, b)

    def distance(index: int) -> int:
        ar, ag, ab = ANSI_RGB[index]
        return (r - ar) ** 2 + (g - ag) ** 2 + (b - ab) ** 2

    # min() keeps the lowest index on ties
    return min(range(16), key=distance)


def color_256_to_16(index: int) -> int:
    """Map a 256-palette index to the nearest standard color."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"256-color index must be an int, got {type(index).__name__}")
    if not 0 <= index <= 255:
        raise ValueError(f"256-color index must be 0-255, got {index}")
    if index < 16:
        return index
    if index < 232:
        cube = index - 16
        return rgb_to_16((cube // 36) % 6 * 51, (cube // 6) % 6 * 51, cube % 6 * 51)
    gray = (index - 232) * 10 + 8
    return rgb_to_16(gray, gray, gray)


_CUBE_LEVELS = (0, 95, 135, 175, 215, 255)


def palette_rgb(color: Color) -> tuple[int, int, int] | None:
    """
    Approximate on-screen RGB for a color, using the xterm default palette.

    Returns None for the terminal default, which has no fixed value.
    """
    if color.value is None:
        return None
    if isinstance(color.value, tuple):
        return color.value
    index = color.value
    if color.mode == ColorMode.STANDARD_16 or index < 16:
        return ANSI_RGB[index]
    if index < 232:
        cube = index - 16
        return (_CUBE_LEVELS[cube // 36], _CUBE_LEVELS[(cube // 6) % 6], _CUBE_LEVELS[cube % 6])
    gray = 8 + (index - 232) * 10
    return (gray, gray, gray)


def degrade_color(color: Color, color_mode: ColorMode) -> Color | None:
    """
    Fit ``color`` into ``color_mode``, never upgrading it.

    Returns None when the terminal shows no color at all. The terminal
    default color survives every mode except monochrome.
    """
    if color_mode == ColorMode.MONOCHROME:
        return None
    if color.is_default or color.mode.rank <= color_mode.rank:
        return color

    if color.mode == ColorMode.TRUE_COLOR:
        assert isinstance(color.value, tuple)
        r, g, b = color.value
        if color_mode == ColorMode.EXTENDED_256:
            return Color.from_256(rgb_to_256(r, g, b))
        return Color.from_16(rgb_to_16(r, g, b))

    # 256-color down to 16
    assert isinstance(color.value, int)
    return Color.from_16(color_256_to_16(color.value))


def unicode_to_ascii(char: str) -> str:
    """ASCII fallback for one character; unknown characters pass through."""
    return ASCII_FALLBACKS.get(char, char)


def string_to_ascii(text: str) -> str:
    return "".join(ASCII_FALLBACKS.get(ch, ch) for ch in text)
