"""Value types shared by the encoder, decoder and capability detector."""

from term_ui.core.color import Color, ColorMode, TRUE_COLOR_COUNT, parse_color
from term_ui.core.events import (
    Event,
    FocusEvent,
    Key,
    KeyEvent,
    Modifier,
    MouseAction,
    MouseButton,
    MouseEvent,
    PasteEvent,
    ResizeEvent,
)
from term_ui.core.style import Attribute, Style

__all__ = [
    "Attribute",
    "Color",
    "ColorMode",
    "Event",
    "FocusEvent",
    "Key",
    "KeyEvent",
    "Modifier",
    "MouseAction",
    "MouseButton",
    "MouseEvent",
    "PasteEvent",
    "ResizeEvent",
    "Style",
    "TRUE_COLOR_COUNT",
    "parse_color",
]
