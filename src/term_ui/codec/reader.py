"""Reading events from a terminal file descriptor."""

from __future__ import annotations

import logging
import os
import select
import sys
import time
from collections import deque
from typing import Optional

from term_ui.codec.decoder import InputDecoder
from term_ui.core.events import Event

logger = logging.getLogger(__name__)

DEFAULT_ESCAPE_TIMEOUT = 0.05


class InputReader:
    """
    Event reader over a file descriptor.

    Uses os.read() to bypass Python's I/O buffering. When a read ends in the
    middle of an escape sequence the reader waits up to ``escape_timeout``
    for the rest before flushing the partial sequence (a lone ESC becomes the
    Escape key). Everything runs in the caller's thread; nothing is read
    unless :meth:`read` is called.
    """

    def __init__(
        self,
        fd: int | None = None,
        decoder: InputDecoder | None = None,
        escape_timeout: float = DEFAULT_ESCAPE_TIMEOUT,
        chunk_size: int = 1024,
    ) -> None:
        self._fd = sys.stdin.fileno() if fd is None else fd
        self.decoder = decoder or InputDecoder()
        self.escape_timeout = escape_timeout
        self.chunk_size = chunk_size
        self._events: deque[Event] = deque()
        self._eof = False

    @property
    def eof(self) -> bool:
        """True once the descriptor has reported end of file."""
        return self._eof and not self._events

    def read(self, timeout: float = 0.1) -> Optional[Event]:
        """
        Read a single event.

        Returns None if no complete event arrived within timeout.
        """
        if self._events:
            return self._events.popleft()
        if self._eof:
            return None

        if self._has_input(timeout):
            self._read_available()
            if self.decoder.has_partial_escape:
                self._wait_for_escape_sequence()

        if self._events:
            return self._events.popleft()
        return None

    def read_blocking(self) -> Event:
        """Read an event, blocking until one is available."""
        while True:
            event = self.read(timeout=1.0)
            if event is not None:
                return event
            if self._eof:
                raise EOFError("Input stream closed")

    def drain(self) -> list[Event]:
        """Return every event already decoded without reading more input."""
        events = list(self._events)
        self._events.clear()
        return events

    def _read_available(self) -> None:
        try:
            data = os.read(self._fd, self.chunk_size)
        except BlockingIOError:
            return
        if not data:
            self._eof = True
            self._events.extend(self.decoder.flush(end_of_stream=True))
            return
        self._events.extend(self.decoder.feed(data))

    def _wait_for_escape_sequence(self) -> None:
        """Give a partial escape sequence ``escape_timeout`` to complete."""
        deadline = time.monotonic() + self.escape_timeout
        while self.decoder.has_partial_escape and not self._eof:
            remaining = deadline - time.monotonic()
            if remaining <= 0 or not self._has_input(remaining):
                break
            self._read_available()

        if self.decoder.has_partial_escape:
            logger.debug("Escape timeout, flushing %r", self.decoder.pending)
            self._events.extend(self.decoder.flush())

    def _has_input(self, timeout: float) -> bool:
        """Check if input is available within timeout."""
        ready, _, _ = select.select([self._fd], [], [], max(timeout, 0))
        return bool(ready)
