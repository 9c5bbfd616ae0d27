"""
term-ui: terminal control protocol engine

Decodes terminal input into events, encodes output commands into exact
escape sequences, and adapts both to what the attached terminal can
actually do.

Quick Start:
    >>> import term_ui
    >>> events, rest = term_ui.decode(b"\\x1b[<0;5;10M")
    >>> events[0].x, events[0].y
    (5, 10)
    >>> term_ui.encode(term_ui.CursorTo(3, 7))
    b'\\x1b[3;7H'
    >>> caps = term_ui.detect_capabilities()
    >>> result = term_ui.select_backend()

Features:
    - Streaming, resumable input decoder (keys, X10/SGR mouse, bracketed
      paste, focus, resize reports)
    - Byte-exact ANSI encoder for monochrome, 16, 256 and true-color
    - Capability detection from the environment and terminfo
    - Backend selection by attempting raw mode, with a cooperative fallback
    - Sessions that restore the terminal exactly, even on exit
"""

__version__ = "0.1.0"

# Core types
from term_ui.core.color import Color, ColorMode
from term_ui.core.style import Attribute, Style
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

# Codecs
from term_ui.codec.commands import (
    Clear,
    ClearTarget,
    CursorMove,
    CursorTo,
    Direction,
    ResetStyle,
    Scroll,
    ScrollRegion,
    SetMode,
    SetStyle,
    TerminalMode,
    Text,
)
from term_ui.codec.decoder import InputDecoder, decode
from term_ui.codec.encoder import AnsiEncoder, encode

# Capabilities
from term_ui.capabilities.detector import Capabilities
from term_ui.capabilities.detector import detect as detect_capabilities

# Backends
from term_ui.backend.selector import Explicit, Raw, Tty, select_backend, teardown_backend
from term_ui.backend.session import TerminalSession

# Configuration
from term_ui.config import TermConfig

__all__ = [
    # Version
    "__version__",
    # Core types
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
    # Codecs
    "AnsiEncoder",
    "Clear",
    "ClearTarget",
    "CursorMove",
    "CursorTo",
    "Direction",
    "InputDecoder",
    "ResetStyle",
    "Scroll",
    "ScrollRegion",
    "SetMode",
    "SetStyle",
    "TerminalMode",
    "Text",
    "decode",
    "encode",
    # Capabilities
    "Capabilities",
    "detect_capabilities",
    # Backends
    "Explicit",
    "Raw",
    "TerminalSession",
    "Tty",
    "select_backend",
    "teardown_backend",
    # Configuration
    "TermConfig",
]
