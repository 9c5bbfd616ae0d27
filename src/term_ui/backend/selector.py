"""
Backend selection by attempting raw mode.

Environment variables cannot tell whether raw mode will work: over SSH, in
containers or when another program already owns the terminal, ``TERM`` can
promise a capable terminal that this process cannot take over. The selector
therefore *tries* raw mode and branches on what actually happened:

* STARTED: ``Raw(state)``, the terminal is now in raw mode.
* ALREADY_CLAIMED, UNSUPPORTED, FAILED: ``Tty(capabilities)``, a
  cooperative session with the detected capabilities (FAILED also records
  the reason in ``raw_mode_error``).

``select(backend)`` bypasses all of this and returns ``Explicit``.
"""

from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from term_ui.backend.size import detect_size
from term_ui.capabilities import terminfo
from term_ui.capabilities.detector import Capabilities, CapabilityCache, detect as detect_capabilities
from term_ui.core.color import ColorMode
from term_ui.platform import Platform, RawModeAttempt, RawModeOutcome, current_platform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawState:
    """State of a session that owns the terminal in raw mode."""
    raw_mode_started: bool
    fd: int
    attempt: Optional[RawModeAttempt] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class SessionCapabilities:
    """What a cooperative (tty) session has to work with."""
    color_mode: ColorMode
    unicode: bool
    dimensions: Optional[tuple[int, int]]
    terminal: bool
    raw_mode_error: Optional[str] = None
    details: Optional[Capabilities] = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "color_mode": self.color_mode.value,
            "unicode": self.unicode,
            "dimensions": list(self.dimensions) if self.dimensions else None,
            "terminal": self.terminal,
            "raw_mode_error": self.raw_mode_error,
        }


@dataclass(frozen=True)
class Raw:
    state: RawState


@dataclass(frozen=True)
class Tty:
    capabilities: SessionCapabilities


@dataclass(frozen=True)
class Explicit:
    backend: Any
    options: Mapping[str, Any] = field(default_factory=dict)


SelectionResult = Union[Raw, Tty, Explicit]


class BackendSelector:
    """
    Chooses between raw and cooperative terminal handling.

    The raw-mode attempt happens at most once per selector: concurrent and
    repeated calls to :meth:`select` get the first result until
    :meth:`teardown` restores the terminal.
    """

    def __init__(
        self,
        fd: int | None = None,
        platform: Platform | None = None,
        environ: Mapping[str, str] | None = None,
        cache: CapabilityCache | None = None,
        query_terminfo: bool = True,
        terminfo_timeout: float = terminfo.DEFAULT_TIMEOUT,
    ) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.platform = platform or current_platform()
        self.environ = environ
        self.cache = cache
        self.query_terminfo = query_terminfo
        self.terminfo_timeout = terminfo_timeout
        self._lock = threading.Lock()
        self._result: Raw | Tty | None = None

    @property
    def result(self) -> Raw | Tty | None:
        """The auto-selection result, if selection has happened."""
        return self._result

    def select(self, mode: Any = "auto") -> SelectionResult:
        """
        ``"auto"`` attempts raw mode; anything else is an explicit backend.

        An explicit backend may be given with options as
        ``(backend, {"line_mode": "incremental"})``.
        """
        if mode == "auto":
            with self._lock:
                if self._result is None:
                    self._result = self._attempt_raw_mode()
                return self._result
        return explicit(mode)

    def teardown(self) -> None:
        """Leave raw mode if it was started. Safe to call repeatedly."""
        with self._lock:
            result, self._result = self._result, None
        if isinstance(result, Raw) and result.state.attempt is not None:
            self.platform.leave_raw_mode(result.state.attempt)

    def _attempt_raw_mode(self) -> Raw | Tty:
        attempt = self.platform.enter_raw_mode(self.fd)
        outcome = attempt.outcome
        if outcome is RawModeOutcome.STARTED:
            logger.debug("Raw mode started")
            return Raw(RawState(raw_mode_started=True, fd=self.fd, attempt=attempt))
        if outcome is RawModeOutcome.FAILED:
            logger.info("Raw mode failed (%s); using tty backend", attempt.reason)
            return Tty(self.detect_session_capabilities(raw_mode_error=attempt.reason))
        logger.info("Raw mode %s (%s); using tty backend", outcome.value.replace("_", " "), attempt.reason)
        return Tty(self.detect_session_capabilities())

    def detect_session_capabilities(self, raw_mode_error: str | None = None) -> SessionCapabilities:
        """Detect capabilities afresh (replacing the cached snapshot) for a tty session."""
        caps = detect_capabilities(
            self.environ,
            cache=self.cache,
            platform=self.platform,
            query_terminfo=self.query_terminfo,
            terminfo_timeout=self.terminfo_timeout,
        )
        return SessionCapabilities(
            color_mode=caps.color_mode,
            unicode=caps.unicode,
            dimensions=detect_size(fd=self.fd, environ=self.environ, platform=self.platform, use_stty=False),
            terminal=self.platform.is_terminal(self.fd),
            raw_mode_error=raw_mode_error,
            details=caps,
        )


def explicit(mode: Any) -> Explicit:
    """Build an Explicit result from ``backend`` or ``(backend, options)``."""
    if isinstance(mode, tuple):
        if len(mode) != 2:
            raise ValueError("Explicit backend must be (backend, options)")
        backend, options = mode
        if not isinstance(options, Mapping):
            raise TypeError(f"Backend options must be a mapping, got {type(options).__name__}")
        return Explicit(backend, dict(options))
    return Explicit(mode, {})


_default_selector: BackendSelector | None = None
_default_lock = threading.Lock()


def default_selector() -> BackendSelector:
    global _default_selector
    with _default_lock:
        if _default_selector is None:
            _default_selector = BackendSelector()
        return _default_selector


def select_backend(mode: Any = "auto") -> SelectionResult:
    """Select through the process-wide selector (raw mode attempted at most once)."""
    return default_selector().select(mode)


def teardown_backend() -> None:
    with _default_lock:
        selector = _default_selector
    if selector is not None:
        selector.teardown()
