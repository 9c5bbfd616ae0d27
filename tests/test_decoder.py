"""Tests for the streaming input decoder."""

import pytest

from term_ui.codec import encoder
from term_ui.codec.commands import TerminalMode
from term_ui.codec.decoder import MAX_SEQUENCE_LENGTH, InputDecoder, ParserMode, decode
from term_ui.core.color import Color
from term_ui.core.events import (
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

CTRL = frozenset({Modifier.CTRL})
ALT = frozenset({Modifier.ALT})
SHIFT = frozenset({Modifier.SHIFT})


def feed_bytewise(data: bytes) -> list:
    """Feed one byte at a time, collecting every event."""
    decoder = InputDecoder()
    events = []
    for byte in data:
        events.extend(decoder.feed(bytes([byte])))
    return events


class TestPlainInput:
    """Tests for printable characters and control bytes."""

    def test_single_character(self) -> None:
        assert InputDecoder().feed(b"a") == [KeyEvent("a", "a")]

    def test_several_characters(self) -> None:
        events = InputDecoder().feed(b"abc")
        assert [e.char for e in events] == ["a", "b", "c"]

    def test_ctrl_letter(self) -> None:
        assert InputDecoder().feed(b"\x03") == [KeyEvent("c", modifiers=CTRL)]
        assert InputDecoder().feed(b"\x01") == [KeyEvent("a", modifiers=CTRL)]

    def test_named_control_keys(self) -> None:
        assert InputDecoder().feed(b"\t") == [KeyEvent(Key.TAB)]
        assert InputDecoder().feed(b"\r") == [KeyEvent(Key.ENTER)]
        assert InputDecoder().feed(b"\n") == [KeyEvent(Key.ENTER)]
        assert InputDecoder().feed(b"\x08") == [KeyEvent(Key.BACKSPACE)]
        assert InputDecoder().feed(b"\x7f") == [KeyEvent(Key.BACKSPACE)]

    def test_ctrl_symbols(self) -> None:
        assert InputDecoder().feed(b"\x00") == [KeyEvent(" ", modifiers=CTRL)]
        assert InputDecoder().feed(b"\x1c") == [KeyEvent("\\", modifiers=CTRL)]
        assert InputDecoder().feed(b"\x1f") == [KeyEvent("_", modifiers=CTRL)]

    def test_utf8(self) -> None:
        assert InputDecoder().feed("é".encode()) == [KeyEvent("é", "é")]
        assert InputDecoder().feed("🎉".encode()) == [KeyEvent("🎉", "🎉")]

    def test_utf8_split_across_chunks(self) -> None:
        decoder = InputDecoder()
        data = "中".encode()
        assert decoder.feed(data[:1]) == []
        assert decoder.feed(data[1:2]) == []
        assert decoder.feed(data[2:]) == [KeyEvent("中", "中")]

    def test_invalid_utf8_skipped(self) -> None:
        assert InputDecoder().feed(b"\xffa") == [KeyEvent("a", "a")]
        assert InputDecoder().feed(b"\x80a") == [KeyEvent("a", "a")]

    def test_truncated_utf8_resyncs(self) -> None:
        assert InputDecoder().feed(b"\xc3a") == [KeyEvent("a", "a")]


class TestEscapeSequences:
    """Tests for CSI and SS3 key sequences."""

    @pytest.mark.parametrize(
        "data, key",
        [
            (b"\x1b[A", Key.UP),
            (b"\x1b[B", Key.DOWN),
            (b"\x1b[C", Key.RIGHT),
            (b"\x1b[D", Key.LEFT),
            (b"\x1b[H", Key.HOME),
            (b"\x1b[F", Key.END),
            (b"\x1bOA", Key.UP),
            (b"\x1bOH", Key.HOME),
            (b"\x1bOP", Key.F1),
            (b"\x1bOQ", Key.F2),
            (b"\x1bOR", Key.F3),
            (b"\x1bOS", Key.F4),
            (b"\x1b[1~", Key.HOME),
            (b"\x1b[2~", Key.INSERT),
            (b"\x1b[3~", Key.DELETE),
            (b"\x1b[4~", Key.END),
            (b"\x1b[5~", Key.PAGE_UP),
            (b"\x1b[6~", Key.PAGE_DOWN),
            (b"\x1b[7~", Key.HOME),
            (b"\x1b[8~", Key.END),
            (b"\x1b[15~", Key.F5),
            (b"\x1b[17~", Key.F6),
            (b"\x1b[21~", Key.F10),
            (b"\x1b[23~", Key.F11),
            (b"\x1b[24~", Key.F12),
        ],
    )
    def test_named_keys(self, data: bytes, key: Key) -> None:
        assert InputDecoder().feed(data) == [KeyEvent(key)]

    def test_modified_arrows(self) -> None:
        assert InputDecoder().feed(b"\x1b[1;5A") == [KeyEvent(Key.UP, modifiers=CTRL)]
        assert InputDecoder().feed(b"\x1b[1;2B") == [KeyEvent(Key.DOWN, modifiers=SHIFT)]
        assert InputDecoder().feed(b"\x1b[1;3C") == [KeyEvent(Key.RIGHT, modifiers=ALT)]
        assert InputDecoder().feed(b"\x1b[1;5F") == [KeyEvent(Key.END, modifiers=CTRL)]

    def test_modified_function_keys(self) -> None:
        assert InputDecoder().feed(b"\x1b[1;5P") == [KeyEvent(Key.F1, modifiers=CTRL)]
        assert InputDecoder().feed(b"\x1b[3;5~") == [KeyEvent(Key.DELETE, modifiers=CTRL)]
        assert InputDecoder().feed(b"\x1b[1;2~") == [KeyEvent(Key.HOME, modifiers=SHIFT)]
        assert InputDecoder().feed(b"\x1bO5A") == [KeyEvent(Key.UP, modifiers=CTRL)]

    def test_shift_tab(self) -> None:
        assert InputDecoder().feed(b"\x1b[Z") == [KeyEvent(Key.TAB, modifiers=SHIFT)]

    def test_alt_keys(self) -> None:
        assert InputDecoder().feed(b"\x1bx") == [KeyEvent("x", "x", ALT)]
        assert InputDecoder().feed(b"\x1b\r") == [KeyEvent(Key.ENTER, modifiers=ALT)]
        assert InputDecoder().feed(b"\x1b\x01") == [KeyEvent("a", modifiers=CTRL | ALT)]

    def test_double_escape(self) -> None:
        decoder = InputDecoder()
        assert decoder.feed(b"\x1b\x1b") == [KeyEvent(Key.ESCAPE)]
        assert decoder.pending == b"\x1b"

    def test_escape_before_utf8(self) -> None:
        assert InputDecoder().feed(b"\x1b\xc3\xa9") == [KeyEvent(Key.ESCAPE), KeyEvent("é", "é")]

    def test_focus(self) -> None:
        assert InputDecoder().feed(b"\x1b[I") == [FocusEvent(gained=True)]
        assert InputDecoder().feed(b"\x1b[O") == [FocusEvent(gained=False)]

    def test_resize_report(self) -> None:
        assert InputDecoder().feed(b"\x1b[8;40;120t") == [ResizeEvent(width=120, height=40)]

    def test_resize_report_out_of_range(self) -> None:
        assert InputDecoder().feed(b"\x1b[8;0;80t") == []
        assert InputDecoder().feed(b"\x1b[8;24;10000t") == []

    def test_unknown_sequences_dropped(self) -> None:
        for data in (b"\x1b[99~", b"\x1b[3;0~", b"\x1b[1;1A", b"\x1b[2;5A", b"\x1b[1I", b"\x1b[?25h", b"\x1b[1;2R"):
            assert InputDecoder().feed(data + b"x") == [KeyEvent("x", "x")]

    def test_malformed_csi_reprocesses_byte(self) -> None:
        assert InputDecoder().feed(b"\x1b[1\x01") == [KeyEvent("a", modifiers=CTRL)]

    def test_overlong_sequence_discarded(self) -> None:
        decoder = InputDecoder()
        events = decoder.feed(b"\x1b[" + b"1" * 100 + b"A")
        assert KeyEvent(Key.UP) not in events
        assert not decoder.has_partial_escape
        assert len(decoder.pending) <= MAX_SEQUENCE_LENGTH


class TestMouse:
    """Tests for X10 and SGR mouse reports."""

    def test_sgr_press_and_release(self) -> None:
        decoder = InputDecoder()
        assert decoder.feed(b"\x1b[<0;5;10M") == [MouseEvent(MouseAction.PRESS, MouseButton.LEFT, 5, 10)]
        assert decoder.feed(b"\x1b[<0;5;10m") == [MouseEvent(MouseAction.RELEASE, MouseButton.LEFT, 5, 10)]

    def test_sgr_buttons(self) -> None:
        assert InputDecoder().feed(b"\x1b[<1;1;1M") == [MouseEvent(MouseAction.PRESS, MouseButton.MIDDLE, 1, 1)]
        assert InputDecoder().feed(b"\x1b[<2;1;1M") == [MouseEvent(MouseAction.PRESS, MouseButton.RIGHT, 1, 1)]

    def test_sgr_wheel(self) -> None:
        assert InputDecoder().feed(b"\x1b[<64;3;4M") == [MouseEvent(MouseAction.WHEEL, MouseButton.WHEEL_UP, 3, 4)]
        assert InputDecoder().feed(b"\x1b[<65;3;4M") == [MouseEvent(MouseAction.WHEEL, MouseButton.WHEEL_DOWN, 3, 4)]

    def test_sgr_motion(self) -> None:
        assert InputDecoder().feed(b"\x1b[<32;3;4M") == [MouseEvent(MouseAction.DRAG, MouseButton.LEFT, 3, 4)]
        assert InputDecoder().feed(b"\x1b[<35;3;4M") == [MouseEvent(MouseAction.MOVE, MouseButton.NONE, 3, 4)]

    def test_sgr_modifiers(self) -> None:
        [event] = InputDecoder().feed(b"\x1b[<16;1;1M")
        assert event.modifiers == CTRL
        [event] = InputDecoder().feed(b"\x1b[<4;1;1M")
        assert event.modifiers == SHIFT
        [event] = InputDecoder().feed(b"\x1b[<8;1;1M")
        assert event.modifiers == ALT

    def test_sgr_coordinate_bounds(self) -> None:
        assert InputDecoder().feed(b"\x1b[<0;9999;9999M") == [
            MouseEvent(MouseAction.PRESS, MouseButton.LEFT, 9999, 9999)
        ]
        assert InputDecoder().feed(b"\x1b[<0;10000;1M") == []
        assert InputDecoder().feed(b"\x1b[<0;0;1M") == []

    def test_sgr_malformed(self) -> None:
        for data in (b"\x1b[<0;5M", b"\x1b[<256;1;1M", b"\x1b[<128;1;1M", b"\x1b[<66;1;1M", b"\x1b[<0;1;1;1M"):
            assert InputDecoder().feed(data) == []

    def test_sgr_split_at_every_byte(self) -> None:
        assert feed_bytewise(b"\x1b[<0;5;10M") == [MouseEvent(MouseAction.PRESS, MouseButton.LEFT, 5, 10)]

    def test_x10_press(self) -> None:
        data = b"\x1b[M" + bytes([32, 37, 42])
        assert InputDecoder().feed(data) == [MouseEvent(MouseAction.PRESS, MouseButton.LEFT, 5, 10)]

    def test_x10_release(self) -> None:
        data = b"\x1b[M" + bytes([35, 33, 33])
        assert InputDecoder().feed(data) == [MouseEvent(MouseAction.RELEASE, MouseButton.NONE, 1, 1)]

    def test_x10_wheel_and_drag(self) -> None:
        assert InputDecoder().feed(b"\x1b[M" + bytes([96, 33, 33])) == [
            MouseEvent(MouseAction.WHEEL, MouseButton.WHEEL_UP, 1, 1)
        ]
        assert InputDecoder().feed(b"\x1b[M" + bytes([64, 33, 33])) == [
            MouseEvent(MouseAction.DRAG, MouseButton.LEFT, 1, 1)
        ]

    def test_x10_split(self) -> None:
        data = b"\x1b[M" + bytes([32, 37, 42])
        assert feed_bytewise(data) == [MouseEvent(MouseAction.PRESS, MouseButton.LEFT, 5, 10)]

    def test_x10_malformed(self) -> None:
        assert InputDecoder().feed(b"\x1b[M" + bytes([10, 37, 42])) == []
        assert InputDecoder().feed(b"\x1b[M" + bytes([32, 32, 42])) == []


class TestPaste:
    """Tests for bracketed paste."""

    def test_paste(self) -> None:
        assert InputDecoder().feed(b"\x1b[200~hello\x1b[201~") == [PasteEvent("hello")]

    def test_empty_paste(self) -> None:
        assert InputDecoder().feed(b"\x1b[200~\x1b[201~") == [PasteEvent("")]

    def test_paste_content_is_literal(self) -> None:
        events = InputDecoder().feed(b"\x1b[200~a\x1b[Ab\x03\x1b[201~")
        assert events == [PasteEvent("a\x1b[Ab\x03")]

    def test_paste_utf8(self) -> None:
        assert InputDecoder().feed("\x1b[200~héllo\x1b[201~".encode()) == [PasteEvent("héllo")]

    def test_paste_across_chunks(self) -> None:
        decoder = InputDecoder()
        assert decoder.feed(b"\x1b[200~hel") == []
        assert decoder.in_paste
        assert decoder.feed(b"lo\x1b[20") == []
        assert decoder.feed(b"1~x") == [PasteEvent("hello"), KeyEvent("x", "x")]
        assert not decoder.in_paste

    def test_paste_split_at_every_byte(self) -> None:
        data = b"\x1b[200~hi there\x1b[201~"
        assert feed_bytewise(data) == [PasteEvent("hi there")]

    def test_events_around_paste(self) -> None:
        events = InputDecoder().feed(b"a\x1b[200~b\x1b[201~c")
        assert events == [KeyEvent("a", "a"), PasteEvent("b"), KeyEvent("c", "c")]

    def test_pending_paste(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1b[200~abc")
        assert decoder.pending == b"\x1b[200~abc"


class TestPartialInput:
    """Tests for retaining and flushing partial sequences."""

    def test_split_csi(self) -> None:
        decoder = InputDecoder()
        assert decoder.feed(b"\x1b[") == []
        assert decoder.pending == b"\x1b["
        assert decoder.has_partial_escape
        assert decoder.feed(b"A") == [KeyEvent(Key.UP)]
        assert decoder.pending == b""

    def test_modified_key_split_at_every_byte(self) -> None:
        assert feed_bytewise(b"\x1b[1;5A") == [KeyEvent(Key.UP, modifiers=CTRL)]

    def test_lone_escape_waits(self) -> None:
        decoder = InputDecoder()
        assert decoder.feed(b"\x1b") == []
        assert decoder.mode is ParserMode.ESCAPE

    def test_flush_lone_escape(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1b")
        assert decoder.flush() == [KeyEvent(Key.ESCAPE)]
        assert decoder.mode is ParserMode.GROUND

    def test_flush_partial_csi(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1b[")
        assert decoder.flush() == [KeyEvent(Key.ESCAPE), KeyEvent("[", "[")]

    def test_flush_partial_ss3(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1bO")
        assert decoder.flush() == [KeyEvent(Key.ESCAPE), KeyEvent("O", "O")]

    def test_flush_partial_parameters(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1b[1;5")
        assert [e.key for e in decoder.flush()] == [Key.ESCAPE, "[", "1", ";", "5"]

    def test_flush_nothing(self) -> None:
        assert InputDecoder().flush() == []

    def test_flush_drops_partial_utf8(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\xe4\xb8")
        assert decoder.flush() == []
        assert decoder.pending == b""

    def test_flush_keeps_open_paste(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1b[200~abc")
        assert decoder.flush() == []
        assert decoder.in_paste

    def test_flush_paste_at_end_of_stream(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1b[200~abc")
        assert decoder.flush(end_of_stream=True) == [PasteEvent("abc")]
        assert not decoder.in_paste

    def test_reset(self) -> None:
        decoder = InputDecoder()
        decoder.feed(b"\x1b[1;")
        decoder.reset()
        assert decoder.pending == b""
        assert decoder.feed(b"A") == [KeyEvent("A", "A")]

    def test_decode_returns_pending(self) -> None:
        events, pending = decode(b"ab\x1b[")
        assert events == [KeyEvent("a", "a"), KeyEvent("b", "b")]
        assert pending == b"\x1b["

    def test_decode_incomplete_mouse(self) -> None:
        assert decode(b"\x1b[<0;5") == ([], b"\x1b[<0;5")


class TestEncoderOutputIsNotInput:
    """Sequences the encoder writes must never decode as user input."""

    OUTPUT = [
        encoder.cursor_position(1, 1),
        encoder.cursor_position(1, 2),
        encoder.cursor_position(1, 5),
        encoder.cursor_position(24, 80),
        encoder.cursor_up(1),
        encoder.cursor_up(5),
        encoder.cursor_down(1),
        encoder.cursor_forward(1),
        encoder.cursor_back(2),
        encoder.cursor_hide(),
        encoder.cursor_show(),
        encoder.save_cursor(),
        encoder.restore_cursor(),
        encoder.clear_screen(),
        encoder.clear_screen_from_cursor(),
        encoder.clear_line(),
        encoder.clear_line_from_cursor(),
        encoder.clear_line_to_cursor(),
        encoder.set_scroll_region(1, 24),
        encoder.scroll_up(1),
        encoder.scroll_down(1),
        encoder.request_window_size(),
        encoder.foreground("red"),
        encoder.background(Color.BRIGHT_WHITE),
        encoder.foreground_256(200),
        encoder.background_rgb(10, 20, 30),
        encoder.sgr(Style(fg=Color.BRIGHT_BLUE, bg=Color.YELLOW, attrs={Attribute.UNDERLINE})),
        encoder.reset(),
        encoder.enable_mode(TerminalMode.ALTERNATE_SCREEN),
        encoder.enable_mouse_tracking(TerminalMode.MOUSE_ANY),
        encoder.enable_sgr_mouse(),
        encoder.enable_bracketed_paste(),
        encoder.disable_bracketed_paste(),
        encoder.enable_focus_events(),
    ]

    @pytest.mark.parametrize("sequence", OUTPUT)
    def test_no_events(self, sequence: bytes) -> None:
        assert decode(sequence) == ([], b"")

    def test_concatenated_output(self) -> None:
        assert decode(b"".join(self.OUTPUT)) == ([], b"")
