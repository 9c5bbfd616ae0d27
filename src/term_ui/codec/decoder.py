"""
Streaming decoder for terminal input.

Raw bytes go in, :mod:`term_ui.core.events` come out. The decoder is a
byte-at-a-time state machine whose whole state lives in :class:`ParserState`,
so input may be split anywhere: a sequence cut off at the end of one chunk is
retained and completed by the next.

A lone ESC is ambiguous (the Escape key, or the start of a sequence still in
flight). The decoder never guesses: it keeps the partial sequence until the
caller invokes :meth:`InputDecoder.flush`, typically after a short timeout
with no further input (see :class:`term_ui.codec.reader.InputReader`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto

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

logger = logging.getLogger(__name__)

ESC = 0x1B
PASTE_START = b"\x1b[200~"
PASTE_END = b"\x1b[201~"

# Longest CSI/SS3 sequence accepted before it is discarded as garbage
MAX_SEQUENCE_LENGTH = 64
MAX_COORDINATE = 9999


class ParserMode(Enum):
    GROUND = auto()
    ESCAPE = auto()
    CSI = auto()
    SS3 = auto()
    X10_MOUSE = auto()
    UTF8 = auto()
    PASTE = auto()


@dataclass
class ParserState:
    """Everything the decoder remembers between chunks."""
    mode: ParserMode = ParserMode.GROUND
    buffer: bytearray = field(default_factory=bytearray)
    expected: int = 0
    paste: bytearray = field(default_factory=bytearray)

    def reset(self) -> None:
        self.mode = ParserMode.GROUND
        self.buffer.clear()
        self.expected = 0
        self.paste.clear()


# Bytes 0-31 that are not plain ctrl+letter combinations
CONTROL_KEYS: dict[int, Key] = {
    0x08: Key.BACKSPACE,
    0x09: Key.TAB,
    0x0A: Key.ENTER,
    0x0D: Key.ENTER,
}

CONTROL_SYMBOLS: dict[int, str] = {
    0x00: " ",
    0x1C: "\\",
    0x1D: "]",
    0x1E: "^",
    0x1F: "_",
}

# Final byte -> key for ESC [ <final> and ESC [ 1 ; <mod> <final>
CSI_LETTER_KEYS: dict[str, Key] = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
}

# Modified F1-F4 (ESC [ 1 ; m P). "R" is left out because ESC [ 1 ; n R is
# also a cursor position report.
CSI_FUNCTION_KEYS: dict[str, Key] = {
    "P": Key.F1,
    "Q": Key.F2,
    "S": Key.F4,
}

SS3_KEYS: dict[str, Key] = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
    "P": Key.F1,
    "Q": Key.F2,
    "R": Key.F3,
    "S": Key.F4,
}

# ESC [ <n> ~
TILDE_KEYS: dict[int, Key] = {
    1: Key.HOME,
    2: Key.INSERT,
    3: Key.DELETE,
    4: Key.END,
    5: Key.PAGE_UP,
    6: Key.PAGE_DOWN,
    7: Key.HOME,
    8: Key.END,
    11: Key.F1,
    12: Key.F2,
    13: Key.F3,
    14: Key.F4,
    15: Key.F5,
    17: Key.F6,
    18: Key.F7,
    19: Key.F8,
    20: Key.F9,
    21: Key.F10,
    23: Key.F11,
    24: Key.F12,
}

_MOUSE_BUTTONS = (MouseButton.LEFT, MouseButton.MIDDLE, MouseButton.RIGHT, MouseButton.NONE)


def _utf8_length(lead: int) -> int:
    """Total length of a UTF-8 sequence from its lead byte (0 if invalid)."""
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _parse_params(body: str) -> list[int | None] | None:
    """Split ``1;;5`` into ``[1, None, 5]``; None if anything is not a digit."""
    if not body:
        return []
    params: list[int | None] = []
    for part in body.split(";"):
        if not part:
            params.append(None)
        elif part.isdigit():
            params.append(int(part))
        else:
            return None
    return params


def _mouse_modifiers(code: int) -> frozenset[Modifier]:
    mods = set()
    if code & 4:
        mods.add(Modifier.SHIFT)
    if code & 8:
        mods.add(Modifier.ALT)
    if code & 16:
        mods.add(Modifier.CTRL)
    return frozenset(mods)


def mouse_event(code: int, x: int, y: int, released: bool = False) -> MouseEvent | None:
    """
    Build a MouseEvent from a button code shared by the X10 and SGR formats.

    The low two bits select the button, 4/8/16 are shift/alt/ctrl, 32 marks
    motion and 64 marks the wheel. Returns None for codes with no meaning
    here (horizontal wheel, extra buttons).
    """
    base = code & 3
    modifiers = _mouse_modifiers(code)
    if code & 128:
        return None
    if code & 64:
        if base == 0:
            return MouseEvent(MouseAction.WHEEL, MouseButton.WHEEL_UP, x, y, modifiers)
        if base == 1:
            return MouseEvent(MouseAction.WHEEL, MouseButton.WHEEL_DOWN, x, y, modifiers)
        return None
    button = _MOUSE_BUTTONS[base]
    if code & 32:
        action = MouseAction.MOVE if base == 3 else MouseAction.DRAG
    elif released or base == 3:
        # X10 reports every release as button 3
        action = MouseAction.RELEASE
    else:
        action = MouseAction.PRESS
    return MouseEvent(action, button, x, y, modifiers)


class InputDecoder:
    """
    Resumable decoder from terminal input bytes to events.

    >>> decoder = InputDecoder()
    >>> decoder.feed(b"\\x1b[")
    []
    >>> decoder.feed(b"A")
    [KeyEvent(key=<Key.UP: 1>, char=None, modifiers=frozenset())]
    """

    def __init__(self) -> None:
        self.state = ParserState()

    @property
    def mode(self) -> ParserMode:
        return self.state.mode

    @property
    def has_partial_escape(self) -> bool:
        """True while an escape sequence has started but not finished."""
        return self.state.mode in (
            ParserMode.ESCAPE,
            ParserMode.CSI,
            ParserMode.SS3,
            ParserMode.X10_MOUSE,
        )

    @property
    def in_paste(self) -> bool:
        return self.state.mode is ParserMode.PASTE

    @property
    def pending(self) -> bytes:
        """Input received but not yet turned into events."""
        if self.state.mode is ParserMode.PASTE:
            return PASTE_START + bytes(self.state.paste)
        return bytes(self.state.buffer)

    def reset(self) -> None:
        """Forget any partial input."""
        self.state.reset()

    def feed(self, data: bytes) -> list[Event]:
        """Decode a chunk, returning the events it completes."""
        events: list[Event] = []
        view = bytes(data)
        i = 0
        while i < len(view):
            if self.state.mode is ParserMode.PASTE:
                i = self._consume_paste(view, i, events)
            elif self._step(view[i], events):
                i += 1
        return events

    def decode(self, data: bytes) -> tuple[list[Event], bytes]:
        """Like :meth:`feed`, also returning the bytes still pending."""
        events = self.feed(data)
        return events, self.pending

    def flush(self, end_of_stream: bool = False) -> list[Event]:
        """
        Resolve whatever partial input is pending.

        A lone ESC becomes the Escape key. Any longer unfinished sequence
        becomes Escape followed by its remaining bytes decoded as ordinary
        input, so ``ESC [`` yields Escape then ``'['``. Incomplete UTF-8 is
        dropped. An open bracketed paste is only emitted, with whatever
        content arrived, when ``end_of_stream`` is set.
        """
        state = self.state
        mode = state.mode
        if mode is ParserMode.GROUND:
            return []
        if mode is ParserMode.PASTE:
            if not end_of_stream:
                return []
            content = bytes(state.paste)
            state.reset()
            logger.debug("Unterminated paste flushed (%d bytes)", len(content))
            return [PasteEvent(content.decode("utf-8", errors="replace"))]
        if mode is ParserMode.UTF8:
            logger.debug("Dropping incomplete UTF-8 sequence %r", bytes(state.buffer))
            state.reset()
            return []

        rest = bytes(state.buffer[1:])
        state.reset()
        events: list[Event] = [KeyEvent(Key.ESCAPE, raw=b"\x1b")]
        events.extend(self.feed(rest))
        # The tail can only leave a shorter partial behind
        events.extend(self.flush(end_of_stream))
        return events

    # -- State machine --------------------------------------------------------

    def _step(self, byte: int, events: list[Event]) -> bool:
        """Process one byte; False means it must be processed again from ground."""
        mode = self.state.mode
        if mode is ParserMode.GROUND:
            self._ground(byte, events)
            return True
        if mode is ParserMode.ESCAPE:
            return self._escape(byte, events)
        if mode is ParserMode.CSI:
            return self._csi(byte, events)
        if mode is ParserMode.SS3:
            return self._ss3(byte, events)
        if mode is ParserMode.X10_MOUSE:
            self._x10(byte, events)
            return True
        if mode is ParserMode.UTF8:
            return self._utf8(byte, events)
        raise AssertionError(f"Unhandled parser mode {mode}")

    def _ground(self, byte: int, events: list[Event]) -> None:
        state = self.state
        if byte == ESC:
            state.mode = ParserMode.ESCAPE
            state.buffer[:] = b"\x1b"
        elif byte < 0x20 or byte == 0x7F:
            events.append(self._control_key(byte))
        elif byte < 0x7F:
            ch = chr(byte)
            events.append(KeyEvent(ch, ch, raw=bytes([byte])))
        else:
            length = _utf8_length(byte)
            if not length:
                logger.debug("Skipping invalid UTF-8 byte 0x%02x", byte)
                return
            state.mode = ParserMode.UTF8
            state.buffer[:] = bytes([byte])
            state.expected = length - 1

    def _control_key(self, byte: int, modifiers: frozenset[Modifier] = frozenset()) -> KeyEvent:
        raw = bytes([byte])
        if byte == 0x7F:
            return KeyEvent(Key.BACKSPACE, modifiers=modifiers, raw=raw)
        if byte in CONTROL_KEYS:
            return KeyEvent(CONTROL_KEYS[byte], modifiers=modifiers, raw=raw)
        ctrl = modifiers | {Modifier.CTRL}
        if byte in CONTROL_SYMBOLS:
            return KeyEvent(CONTROL_SYMBOLS[byte], modifiers=ctrl, raw=raw)
        return KeyEvent(chr(byte + 0x60), modifiers=ctrl, raw=raw)

    def _escape(self, byte: int, events: list[Event]) -> bool:
        state = self.state
        if byte == ord("["):
            state.mode = ParserMode.CSI
            state.buffer.append(byte)
        elif byte == ord("O"):
            state.mode = ParserMode.SS3
            state.buffer.append(byte)
        elif byte == ESC:
            # ESC ESC: the first one was the Escape key
            events.append(KeyEvent(Key.ESCAPE, raw=b"\x1b"))
        elif 0x20 <= byte < 0x7F:
            ch = chr(byte)
            events.append(KeyEvent(ch, ch, frozenset({Modifier.ALT}), raw=bytes([ESC, byte])))
            state.reset()
        elif byte < 0x20 or byte == 0x7F:
            event = self._control_key(byte, frozenset({Modifier.ALT}))
            events.append(KeyEvent(event.key, event.char, event.modifiers, raw=bytes([ESC, byte])))
            state.reset()
        else:
            events.append(KeyEvent(Key.ESCAPE, raw=b"\x1b"))
            state.reset()
            return False
        return True

    def _csi(self, byte: int, events: list[Event]) -> bool:
        state = self.state
        if byte == ord("M") and len(state.buffer) == 2:
            state.mode = ParserMode.X10_MOUSE
            state.buffer.append(byte)
            state.expected = 3
            return True
        if 0x20 <= byte <= 0x3F:
            state.buffer.append(byte)
            if len(state.buffer) > MAX_SEQUENCE_LENGTH:
                logger.debug("Discarding overlong CSI sequence")
                state.reset()
            return True
        if 0x40 <= byte <= 0x7E:
            state.buffer.append(byte)
            sequence = bytes(state.buffer)
            state.reset()
            self._dispatch_csi(sequence, events)
            return True
        logger.debug("Malformed CSI sequence %r, byte 0x%02x", bytes(state.buffer), byte)
        state.reset()
        return False

    def _ss3(self, byte: int, events: list[Event]) -> bool:
        state = self.state
        if 0x30 <= byte <= 0x3B:
            state.buffer.append(byte)
            if len(state.buffer) > MAX_SEQUENCE_LENGTH:
                logger.debug("Discarding overlong SS3 sequence")
                state.reset()
            return True
        if 0x40 <= byte <= 0x7E:
            state.buffer.append(byte)
            sequence = bytes(state.buffer)
            state.reset()
            self._dispatch_ss3(sequence, events)
            return True
        logger.debug("Malformed SS3 sequence %r, byte 0x%02x", bytes(state.buffer), byte)
        state.reset()
        return False

    def _x10(self, byte: int, events: list[Event]) -> None:
        state = self.state
        state.buffer.append(byte)
        state.expected -= 1
        if state.expected:
            return
        cb, cx, cy = state.buffer[3:6]
        sequence = bytes(state.buffer)
        state.reset()
        x, y = cx - 32, cy - 32
        if cb < 32 or x < 1 or y < 1:
            logger.debug("Malformed X10 mouse report %r", sequence)
            return
        event = mouse_event(cb - 32, x, y)
        if event is None:
            logger.debug("Ignoring X10 mouse report %r", sequence)
        else:
            events.append(event)

    def _utf8(self, byte: int, events: list[Event]) -> bool:
        state = self.state
        if not 0x80 <= byte <= 0xBF:
            logger.debug("Truncated UTF-8 sequence %r", bytes(state.buffer))
            state.reset()
            return False
        state.buffer.append(byte)
        state.expected -= 1
        if state.expected:
            return True
        raw = bytes(state.buffer)
        state.reset()
        try:
            ch = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Skipping invalid UTF-8 sequence %r", raw)
            return True
        events.append(KeyEvent(ch, ch, raw=raw))
        return True

    def _consume_paste(self, view: bytes, i: int, events: list[Event]) -> int:
        paste = self.state.paste
        before = len(paste)
        # The end marker may straddle the previous chunk
        search_from = max(before - len(PASTE_END) + 1, 0)
        paste.extend(view[i:])
        end = paste.find(PASTE_END, search_from)
        if end < 0:
            return len(view)
        consumed = end + len(PASTE_END) - before
        content = bytes(paste[:end])
        self.state.reset()
        events.append(PasteEvent(content.decode("utf-8", errors="replace")))
        return i + consumed

    # -- Dispatch -------------------------------------------------------------

    def _dispatch_csi(self, sequence: bytes, events: list[Event]) -> None:
        body = sequence[2:-1].decode("ascii")
        final = chr(sequence[-1])

        if body.startswith("<") and final in "Mm":
            event = self._sgr_mouse(body[1:], final == "m")
            if event is None:
                logger.debug("Malformed SGR mouse report %r", sequence)
            else:
                events.append(event)
            return

        params = _parse_params(body)
        if params is None:
            # Private (?, >, =), sub-parameters or intermediates: replies
            # and echoes, never keys
            logger.debug("Ignoring CSI sequence %r", sequence)
            return

        event: Event | None = None
        if final == "~":
            if params == [200]:
                self.state.mode = ParserMode.PASTE
                return
            event = self._tilde_key(params, sequence)
        elif final in CSI_LETTER_KEYS or final in CSI_FUNCTION_KEYS:
            key = CSI_LETTER_KEYS.get(final) or CSI_FUNCTION_KEYS[final]
            if not params and final in CSI_LETTER_KEYS:
                event = KeyEvent(key, raw=sequence)
            elif final == "H":
                # ESC [ 1 ; n H is also cursor position (1, n); modified Home
                # arrives as ESC [ 1 ; m ~ or ESC [ 7 ; m ~ instead
                pass
            elif len(params) == 2 and params[0] == 1 and (params[1] or 0) >= 2:
                event = KeyEvent(key, modifiers=Modifier.from_xterm(params[1]), raw=sequence)
        elif final == "Z" and not params:
            event = KeyEvent(Key.TAB, modifiers=frozenset({Modifier.SHIFT}), raw=sequence)
        elif final in "IO" and not params:
            event = FocusEvent(gained=final == "I")
        elif final == "t" and len(params) == 3 and params[0] == 8:
            rows, cols = params[1], params[2]
            if rows and cols and rows <= MAX_COORDINATE and cols <= MAX_COORDINATE:
                event = ResizeEvent(width=cols, height=rows)

        if event is None:
            logger.debug("Ignoring CSI sequence %r", sequence)
        else:
            events.append(event)

    def _tilde_key(self, params: list[int | None], sequence: bytes) -> KeyEvent | None:
        if not params or len(params) > 2 or params[0] is None:
            return None
        key = TILDE_KEYS.get(params[0])
        if key is None:
            return None
        modifiers: frozenset[Modifier] = frozenset()
        if len(params) == 2:
            if params[1] is None or params[1] < 1:
                return None
            modifiers = Modifier.from_xterm(params[1])
        return KeyEvent(key, modifiers=modifiers, raw=sequence)

    def _sgr_mouse(self, body: str, released: bool) -> MouseEvent | None:
        params = _parse_params(body)
        if params is None or len(params) != 3 or None in params:
            return None
        code, x, y = params
        assert code is not None and x is not None and y is not None
        if code > 255 or not 1 <= x <= MAX_COORDINATE or not 1 <= y <= MAX_COORDINATE:
            return None
        return mouse_event(code, x, y, released)

    def _dispatch_ss3(self, sequence: bytes, events: list[Event]) -> None:
        final = chr(sequence[-1])
        key = SS3_KEYS.get(final)
        params = _parse_params(sequence[2:-1].decode("ascii"))
        if key is None or params is None or len(params) > 2:
            logger.debug("Ignoring SS3 sequence %r", sequence)
            return
        modifiers: frozenset[Modifier] = frozenset()
        if params and params[-1] is not None:
            modifiers = Modifier.from_xterm(params[-1])
        events.append(KeyEvent(key, modifiers=modifiers, raw=sequence))


def decode(data: bytes) -> tuple[list[Event], bytes]:
    """
    Decode ``data`` with a fresh decoder.

    Returns the events plus any trailing bytes that form an incomplete
    sequence, for the caller to prepend to its next chunk.
    """
    return InputDecoder().decode(data)
