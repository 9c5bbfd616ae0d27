"""A terminal session: backend selection, mode toggles and guaranteed cleanup."""

from __future__ import annotations

import atexit
import logging
import sys
from typing import Any, BinaryIO, Callable, Optional

from term_ui.backend.selector import (
    BackendSelector,
    Explicit,
    Raw,
    SelectionResult,
)
from term_ui.backend.size import detect_size
from term_ui.capabilities.detector import Capabilities, CapabilityCache, get as get_capabilities
from term_ui.codec.commands import MOUSE_TRACKING, Command, ResetStyle, SetMode, TerminalMode
from term_ui.codec.encoder import AnsiEncoder
from term_ui.codec.reader import InputReader
from term_ui.config import TermConfig
from term_ui.core.events import Event, ResizeEvent
from term_ui.platform import Platform, RawModeAttempt, current_platform

logger = logging.getLogger(__name__)


class TerminalSession:
    """
    Owns the terminal for the lifetime of a UI.

    :meth:`start` selects a backend, negotiates the encoder's color depth and
    character set, and (in raw mode) switches on the screen modes the
    terminal supports. Every toggle is recorded; :meth:`teardown` writes the
    inverse toggles in reverse order, resets the style and leaves raw mode.
    Teardown is idempotent and also registered with :mod:`atexit`.

    Example:
        >>> with TerminalSession() as session:
        ...     session.send(CursorTo(1, 1), Text("hello"))
        ...     event = session.read_event()
    """

    def __init__(
        self,
        config: TermConfig | None = None,
        *,
        selector: BackendSelector | None = None,
        output: BinaryIO | None = None,
        input_fd: int | None = None,
        platform: Platform | None = None,
        cache: CapabilityCache | None = None,
    ) -> None:
        self.config = config or TermConfig()
        self.platform = platform or current_platform()
        self.input_fd = sys.stdin.fileno() if input_fd is None else input_fd
        self.selector = selector or BackendSelector(
            self.input_fd,
            platform=self.platform,
            cache=cache,
            query_terminfo=self.config.query_terminfo,
            terminfo_timeout=self.config.terminfo_timeout,
        )
        self.output = output if output is not None else sys.stdout.buffer
        self.cache = cache
        self.selection: SelectionResult | None = None
        self.capabilities: Capabilities | None = None
        self.encoder = AnsiEncoder()
        self.reader: InputReader | None = None
        self._toggles: list[tuple[TerminalMode, bool]] = []
        self._explicit_raw: RawModeAttempt | None = None
        self._resize_token: Any = None
        self._resize_installed = False
        self._started = False

    # -- Lifecycle ------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._started

    @property
    def raw(self) -> bool:
        """True when this session owns the terminal in raw mode."""
        return isinstance(self.selection, Raw) or self._explicit_raw is not None

    @property
    def toggles(self) -> list[tuple[TerminalMode, bool]]:
        """Mode changes applied so far, oldest first."""
        return list(self._toggles)

    def start(self) -> SelectionResult:
        if self._started:
            assert self.selection is not None
            return self.selection

        backend = self.config.backend
        selection = self.selector.select("auto" if backend == "auto" else (backend, self.config.to_dict()))
        self.selection = selection
        self.capabilities = get_capabilities(
            cache=self.cache,
            platform=self.platform,
            query_terminfo=self.config.query_terminfo,
            terminfo_timeout=self.config.terminfo_timeout,
        )
        if isinstance(selection, Explicit) and selection.backend == "raw":
            attempt = self.platform.enter_raw_mode(self.input_fd)
            if attempt.started:
                self._explicit_raw = attempt
            else:
                logger.warning("Raw backend requested but raw mode %s: %s", attempt.outcome.value, attempt.reason)

        caps = self.capabilities
        self.encoder = AnsiEncoder(caps.color_mode, self.config.unicode_for(caps.unicode))
        self.reader = InputReader(self.input_fd, escape_timeout=self.config.escape_timeout)
        self._started = True
        atexit.register(self.teardown)

        if self.raw:
            self._enter_screen_modes()
        logger.debug("Session started: %s", selection)
        return selection

    def _enter_screen_modes(self) -> None:
        if self.config.alternate_screen:
            self.enable(TerminalMode.ALTERNATE_SCREEN)
        self.disable(TerminalMode.CURSOR_VISIBLE)
        self.enable(TerminalMode.BRACKETED_PASTE)
        self.enable(TerminalMode.FOCUS_EVENTS)
        tracking = MOUSE_TRACKING.get(self.config.mouse_tracking)
        if tracking is not None and self.enable(tracking):
            self.enable(TerminalMode.MOUSE_SGR)
        self.flush()

    def teardown(self) -> None:
        """Undo every toggle (newest first), reset style, leave raw mode."""
        if not self._started:
            return
        self._started = False
        atexit.unregister(self.teardown)

        if self._resize_installed:
            self.platform.restore_resize_handler(self._resize_token)
            self._resize_installed = False

        restore = b"".join(
            self.encoder.encode(SetMode(mode, not enabled)) for mode, enabled in reversed(self._toggles)
        )
        self._toggles.clear()
        try:
            self.output.write(restore + self.encoder.encode(ResetStyle()))
            self.output.flush()
        except (OSError, ValueError) as e:
            # Output already closed; raw mode must still be released
            logger.warning("Could not write terminal restore sequences: %s", e)

        if self._explicit_raw is not None:
            self.platform.leave_raw_mode(self._explicit_raw)
            self._explicit_raw = None
        self.selector.teardown()
        logger.debug("Session torn down")

    def __enter__(self) -> TerminalSession:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.teardown()

    # -- Modes ----------------------------------------------------------------

    def supports(self, mode: TerminalMode) -> bool:
        """Whether the detected capabilities allow switching ``mode``."""
        caps = self.capabilities
        if caps is None:
            return False
        if mode is TerminalMode.ALTERNATE_SCREEN:
            return caps.alternate_screen
        if mode is TerminalMode.BRACKETED_PASTE:
            return caps.bracketed_paste
        if mode is TerminalMode.FOCUS_EVENTS:
            return caps.focus_events
        if mode.is_mouse:
            return caps.mouse
        return True

    def enable(self, mode: TerminalMode) -> bool:
        return self._toggle(mode, True)

    def disable(self, mode: TerminalMode) -> bool:
        return self._toggle(mode, False)

    def _toggle(self, mode: TerminalMode, enabled: bool) -> bool:
        if not self._started:
            raise RuntimeError("Session is not started")
        if not self.supports(mode):
            logger.debug("Skipping %s: not supported by this terminal", mode.name)
            return False
        self.output.write(self.encoder.encode(SetMode(mode, enabled)))
        self._toggles.append((mode, enabled))
        return True

    # -- I/O ------------------------------------------------------------------

    def send(self, *commands: Command) -> None:
        """Encode and write commands for this session's terminal."""
        self.output.write(self.encoder.encode_all(list(commands)))

    def write(self, data: bytes) -> None:
        self.output.write(data)

    def flush(self) -> None:
        self.output.flush()

    def read_event(self, timeout: float = 0.1) -> Optional[Event]:
        if self.reader is None:
            raise RuntimeError("Session is not started")
        return self.reader.read(timeout)

    # -- Size -----------------------------------------------------------------

    def size(self) -> tuple[int, int] | None:
        """Current ``(rows, cols)``, or None if it cannot be determined."""
        return detect_size(fd=self.input_fd, platform=self.platform)

    def resize_event(self) -> ResizeEvent | None:
        size = self.size()
        if size is None:
            return None
        rows, cols = size
        return ResizeEvent(width=cols, height=rows)

    def on_resize(self, callback: Callable[[ResizeEvent], None]) -> bool:
        """
        Call ``callback`` with a ResizeEvent whenever the window changes size.

        Returns False where the platform has no resize signal. The previous
        handler is restored on teardown.
        """
        if not self.platform.signal_available("SIGWINCH"):
            return False

        def _handle() -> None:
            event = self.resize_event()
            if event is not None:
                callback(event)

        token = self.platform.install_resize_handler(_handle)
        if not self._resize_installed:
            self._resize_token = token
            self._resize_installed = True
        return True

    def __repr__(self) -> str:
        kind = "raw" if self.raw else type(self.selection).__name__.lower() if self.selection else "idle"
        return f"TerminalSession({kind}, color_mode={self.encoder.color_mode.value})"


