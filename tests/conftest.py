"""Pytest configuration: isolated environment and a scriptable platform."""

import os
import time
from typing import Any, Optional

import pytest

from term_ui.capabilities.detector import clear_cache
from term_ui.platform import Platform, RawModeAttempt, RawModeOutcome

# Variables that change what capability detection or configuration sees
DETECTION_VARS = (
    "TERM",
    "COLORTERM",
    "TERM_PROGRAM",
    "WT_SESSION",
    "LANG",
    "LINES",
    "COLUMNS",
    "TERMINFO",
    "TERMINFO_DIRS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    """Run every test without the developer's terminal settings or cached capabilities."""
    for name in DETECTION_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith(("LC_", "TERM_UI_")):
            monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield
    clear_cache()


class FakePlatform(Platform):
    """
    Platform adapter with scripted answers.

    Records every raw-mode enter/leave and resize-handler call so tests can
    check exactly what the code under test asked the OS to do.
    """

    def __init__(
        self,
        outcome: RawModeOutcome = RawModeOutcome.STARTED,
        reason: Optional[str] = None,
        terminal: bool = True,
        size: Optional[tuple[int, int]] = (24, 80),
        features: frozenset[str] = frozenset(),
        signals: tuple[str, ...] = ("SIGWINCH",),
        delay: float = 0.0,
    ) -> None:
        self.outcome = outcome
        self.reason = reason
        self.terminal = terminal
        self.size = size
        self.features = features
        self.signals = signals
        self.delay = delay
        self.entered: list[int] = []
        self.left: list[RawModeAttempt] = []
        self.resize_handlers: list[Any] = []
        self.restored: list[Any] = []

    def supported_signals(self) -> tuple[str, ...]:
        return self.signals

    def is_terminal(self, fd: int) -> bool:
        return self.terminal

    def terminal_size(self, fd: int) -> Optional[tuple[int, int]]:
        return self.size

    def enter_raw_mode(self, fd: int) -> RawModeAttempt:
        if self.delay:
            time.sleep(self.delay)
        self.entered.append(fd)
        saved = "saved-attributes" if self.outcome is RawModeOutcome.STARTED else None
        return RawModeAttempt(self.outcome, self.reason, fd, saved)

    def leave_raw_mode(self, attempt: RawModeAttempt) -> None:
        self.left.append(attempt)

    def install_resize_handler(self, handler: Any) -> Any:
        self.resize_handlers.append(handler)
        return "previous-handler"

    def restore_resize_handler(self, token: Any) -> None:
        self.restored.append(token)


@pytest.fixture
def make_platform():
    """Factory for FakePlatform instances."""
    return FakePlatform


@pytest.fixture
def fake_platform() -> FakePlatform:
    """A platform where raw mode starts and the terminal is 24x80."""
    return FakePlatform()
