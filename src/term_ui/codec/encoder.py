"""
ANSI escape-sequence encoder.

Every function here is pure and returns the exact bytes to write. Invalid
arguments raise ValueError (out of range) or TypeError (wrong type); nothing
is clamped.
"""

from __future__ import annotations

from term_ui.capabilities.fallbacks import degrade_color, string_to_ascii
from term_ui.codec.commands import (
    Clear,
    ClearTarget,
    Command,
    CursorMove,
    CursorTo,
    Direction,
    ResetStyle,
    RestoreCursor,
    SaveCursor,
    Scroll,
    ScrollRegion,
    SetMode,
    SetStyle,
    TerminalMode,
    Text,
)
from term_ui.core.color import NAMED_COLORS, Color, ColorMode
from term_ui.core.style import Attribute, Style


CSI = "\x1b["


def _csi(body: str) -> bytes:
    return (CSI + body).encode("ascii")


def _check_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


def _positive(name: str, value: object) -> int:
    value = _check_int(name, value)
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _byte(name: str, value: object) -> int:
    value = _check_int(name, value)
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be 0-255, got {value}")
    return value


# -- Cursor -------------------------------------------------------------------

def cursor_position(row: int, col: int) -> bytes:
    """Move the cursor to ``(row, col)``, both 1-indexed."""
    return _csi(f"{_positive('row', row)};{_positive('col', col)}H")


def cursor_up(n: int = 1) -> bytes:
    return _csi(f"{_positive('n', n)}A")


def cursor_down(n: int = 1) -> bytes:
    return _csi(f"{_positive('n', n)}B")


def cursor_forward(n: int = 1) -> bytes:
    return _csi(f"{_positive('n', n)}C")


def cursor_back(n: int = 1) -> bytes:
    return _csi(f"{_positive('n', n)}D")


def cursor_show() -> bytes:
    return _csi("?25h")


def cursor_hide() -> bytes:
    return _csi("?25l")


def save_cursor() -> bytes:
    return _csi("s")


def restore_cursor() -> bytes:
    return _csi("u")


# -- Screen -------------------------------------------------------------------

def clear(target: ClearTarget = ClearTarget.SCREEN) -> bytes:
    return _csi(target.value)


def clear_screen() -> bytes:
    return _csi("2J")


def clear_screen_from_cursor() -> bytes:
    return _csi("0J")


def clear_screen_to_cursor() -> bytes:
    return _csi("1J")


def clear_line() -> bytes:
    return _csi("2K")


def clear_line_from_cursor() -> bytes:
    return _csi("K")


def clear_line_to_cursor() -> bytes:
    return _csi("1K")


def set_scroll_region(top: int, bottom: int) -> bytes:
    """Restrict scrolling to rows ``top``..``bottom`` (1-indexed, inclusive)."""
    top = _positive("top", top)
    bottom = _positive("bottom", bottom)
    if bottom < top:
        raise ValueError(f"bottom ({bottom}) must not be above top ({top})")
    return _csi(f"{top};{bottom}r")


def scroll_up(n: int = 1) -> bytes:
    return _csi(f"{_positive('n', n)}S")


def scroll_down(n: int = 1) -> bytes:
    return _csi(f"{_positive('n', n)}T")


def request_window_size() -> bytes:
    """Ask the terminal to report its size as ``ESC [ 8 ; rows ; cols t``."""
    return _csi("18t")


# -- Colors -------------------------------------------------------------------

def _standard_color(color: Color | str) -> Color:
    if isinstance(color, str):
        try:
            return NAMED_COLORS[color.lower()]
        except KeyError:
            raise ValueError(f"Unknown color name: {color!r}") from None
    if not isinstance(color, Color):
        raise TypeError(f"color must be a Color or name, got {type(color).__name__}")
    if color.mode != ColorMode.STANDARD_16:
        raise ValueError(f"Expected a 16-color value, got {color.mode.name}")
    return color


def foreground(color: Color | str) -> bytes:
    """16-color foreground: ``ESC[30-37m``, ``ESC[90-97m`` or ``ESC[39m``."""
    return _csi(_standard_color(color).to_sgr_fg() + "m")


def background(color: Color | str) -> bytes:
    """16-color background: ``ESC[40-47m``, ``ESC[100-107m`` or ``ESC[49m``."""
    return _csi(_standard_color(color).to_sgr_bg() + "m")


def foreground_256(index: int) -> bytes:
    return _csi(f"38;5;{_byte('index', index)}m")


def background_256(index: int) -> bytes:
    return _csi(f"48;5;{_byte('index', index)}m")


def foreground_rgb(r: int, g: int, b: int) -> bytes:
    return _csi(f"38;2;{_byte('red', r)};{_byte('green', g)};{_byte('blue', b)}m")


def background_rgb(r: int, g: int, b: int) -> bytes:
    return _csi(f"48;2;{_byte('red', r)};{_byte('green', g)};{_byte('blue', b)}m")


# -- Attributes ---------------------------------------------------------------

def bold() -> bytes:
    return _csi("1m")


def dim() -> bytes:
    return _csi("2m")


def italic() -> bytes:
    return _csi("3m")


def underline() -> bytes:
    return _csi("4m")


def blink() -> bytes:
    return _csi("5m")


def reverse() -> bytes:
    return _csi("7m")


def hidden() -> bytes:
    return _csi("8m")


def strikethrough() -> bytes:
    return _csi("9m")


def reset() -> bytes:
    return _csi("0m")


def attributes(*attrs: Attribute) -> bytes:
    """Merge attributes into a single SGR sequence, in the order given."""
    if not attrs:
        return b""
    for attr in attrs:
        if not isinstance(attr, Attribute):
            raise TypeError(f"Expected an Attribute, got {type(attr).__name__}")
    return _csi(";".join(str(a.code) for a in attrs) + "m")


def sgr_params(style: Style, color_mode: ColorMode = ColorMode.TRUE_COLOR) -> list[str]:
    """SGR parameters for ``style`` with colors fitted to ``color_mode``."""
    params = [str(attr.code) for attr in style.sorted_attrs()]
    if style.fg is not None:
        fg = degrade_color(style.fg, color_mode)
        if fg is not None:
            params.append(fg.to_sgr_fg())
    if style.bg is not None:
        bg = degrade_color(style.bg, color_mode)
        if bg is not None:
            params.append(bg.to_sgr_bg())
    return params


def sgr(style: Style, color_mode: ColorMode = ColorMode.TRUE_COLOR) -> bytes:
    """
    One merged SGR sequence for a whole style.

    Attributes come first in code order, then foreground, then background:
    ``Style(fg=Color.BRIGHT_BLUE, bg=Color.YELLOW, attrs={UNDERLINE})``
    encodes to ``ESC[4;94;43m``. An empty style encodes to no bytes.
    """
    params = sgr_params(style, color_mode)
    if not params:
        return b""
    return _csi(";".join(params) + "m")


# -- Modes --------------------------------------------------------------------

def enable_mode(mode: TerminalMode) -> bytes:
    return _csi(f"?{mode.value}h")


def disable_mode(mode: TerminalMode) -> bytes:
    return _csi(f"?{mode.value}l")


def set_mode(mode: TerminalMode, enabled: bool) -> bytes:
    return enable_mode(mode) if enabled else disable_mode(mode)


def enable_bracketed_paste() -> bytes:
    return enable_mode(TerminalMode.BRACKETED_PASTE)


def disable_bracketed_paste() -> bytes:
    return disable_mode(TerminalMode.BRACKETED_PASTE)


def enable_focus_events() -> bytes:
    return enable_mode(TerminalMode.FOCUS_EVENTS)


def disable_focus_events() -> bytes:
    return disable_mode(TerminalMode.FOCUS_EVENTS)


def enable_app_cursor() -> bytes:
    return enable_mode(TerminalMode.APPLICATION_CURSOR)


def disable_app_cursor() -> bytes:
    return disable_mode(TerminalMode.APPLICATION_CURSOR)


def enable_sgr_mouse() -> bytes:
    return enable_mode(TerminalMode.MOUSE_SGR)


def disable_sgr_mouse() -> bytes:
    return disable_mode(TerminalMode.MOUSE_SGR)


def enter_alternate_screen() -> bytes:
    return enable_mode(TerminalMode.ALTERNATE_SCREEN)


def leave_alternate_screen() -> bytes:
    return disable_mode(TerminalMode.ALTERNATE_SCREEN)


def _mouse_mode(mode: TerminalMode) -> TerminalMode:
    if not isinstance(mode, TerminalMode) or not mode.is_mouse or mode == TerminalMode.MOUSE_SGR:
        raise ValueError(f"Not a mouse tracking mode: {mode!r}")
    return mode


def enable_mouse_tracking(mode: TerminalMode = TerminalMode.MOUSE_NORMAL) -> bytes:
    return enable_mode(_mouse_mode(mode))


def disable_mouse_tracking(mode: TerminalMode = TerminalMode.MOUSE_NORMAL) -> bytes:
    return disable_mode(_mouse_mode(mode))


# -- Commands -----------------------------------------------------------------

class AnsiEncoder:
    """
    Encodes :mod:`~term_ui.codec.commands` values for one negotiated session.

    Colors are fitted down to ``color_mode`` and never upgraded; with
    ``unicode=False`` text falls back to ASCII look-alike glyphs.
    """

    def __init__(self, color_mode: ColorMode = ColorMode.TRUE_COLOR, unicode: bool = True) -> None:
        self.color_mode = color_mode
        self.unicode = unicode

    def encode(self, command: Command) -> bytes:
        if isinstance(command, CursorTo):
            return cursor_position(command.row, command.col)
        if isinstance(command, CursorMove):
            count = _positive("count", command.count)
            return _csi(f"{count}{command.direction.value}")
        if isinstance(command, SetStyle):
            return sgr(command.style, self.color_mode)
        if isinstance(command, ResetStyle):
            return reset()
        if isinstance(command, SetMode):
            return set_mode(command.mode, command.enabled)
        if isinstance(command, Clear):
            return clear(command.target)
        if isinstance(command, Scroll):
            lines = _check_int("lines", command.lines)
            if lines == 0:
                raise ValueError("lines must be non-zero")
            return scroll_up(lines) if lines > 0 else scroll_down(-lines)
        if isinstance(command, ScrollRegion):
            return set_scroll_region(command.top, command.bottom)
        if isinstance(command, SaveCursor):
            return save_cursor()
        if isinstance(command, RestoreCursor):
            return restore_cursor()
        if isinstance(command, Text):
            return self.text(command.content, command.style)
        raise TypeError(f"Unknown command: {command!r}")

    def encode_all(self, commands: list[Command]) -> bytes:
        return b"".join(self.encode(command) for command in commands)

    def text(self, content: str, style: Style | None = None) -> bytes:
        if not isinstance(content, str):
            raise TypeError(f"content must be str, got {type(content).__name__}")
        if not self.unicode:
            content = string_to_ascii(content)
        body = content.encode("utf-8")
        if style is None:
            return body
        prefix = sgr(style, self.color_mode)
        if not prefix:
            return body
        return prefix + body + reset()


_DEFAULT_ENCODER = AnsiEncoder()


def encode(command: Command, color_mode: ColorMode = ColorMode.TRUE_COLOR) -> bytes:
    """Encode one command; a full-depth, Unicode encoder unless told otherwise."""
    if color_mode == ColorMode.TRUE_COLOR:
        return _DEFAULT_ENCODER.encode(command)
    return AnsiEncoder(color_mode).encode(command)
