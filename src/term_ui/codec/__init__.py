"""Terminal wire codecs: input decoding and ANSI output encoding."""

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
from term_ui.codec.decoder import InputDecoder, ParserMode, ParserState, decode
from term_ui.codec.encoder import AnsiEncoder, encode
from term_ui.codec.reader import InputReader

__all__ = [
    "AnsiEncoder",
    "Clear",
    "ClearTarget",
    "Command",
    "CursorMove",
    "CursorTo",
    "Direction",
    "InputDecoder",
    "InputReader",
    "ParserMode",
    "ParserState",
    "ResetStyle",
    "RestoreCursor",
    "SaveCursor",
    "Scroll",
    "ScrollRegion",
    "SetMode",
    "SetStyle",
    "TerminalMode",
    "Text",
    "decode",
    "encode",
]
