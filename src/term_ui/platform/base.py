"""Types shared by the platform adapters."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional


class OSFamily(Enum):
    LINUX = "linux"
    MACOS = "macos"
    FREEBSD = "freebsd"
    WINDOWS = "windows"
    UNKNOWN = "unknown"

    @property
    def is_unix(self) -> bool:
        return self in (OSFamily.LINUX, OSFamily.MACOS, OSFamily.FREEBSD)


class RawModeOutcome(Enum):
    """What actually happened when raw mode was attempted."""
    STARTED = "started"
    ALREADY_CLAIMED = "already_claimed"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass(frozen=True)
class RawModeAttempt:
    """
    Result of one attempt to put the terminal into raw mode.

    ``saved_attributes`` holds whatever the platform needs to restore the
    terminal afterwards (termios attributes on Unix) and is only set when
    the outcome is STARTED.
    """
    outcome: RawModeOutcome
    reason: str | None = None
    fd: int | None = None
    saved_attributes: Any = field(default=None, compare=False, repr=False)

    @property
    def started(self) -> bool:
        return self.outcome is RawModeOutcome.STARTED

    @classmethod
    def failed(cls, reason: str, fd: int | None = None) -> RawModeAttempt:
        return cls(RawModeOutcome.FAILED, reason, fd)


@dataclass(frozen=True)
class PlatformInfo:
    """Static description of what the host OS offers a terminal program."""
    family: OSFamily
    os_version: tuple[int, int, int] | None
    supports_signals: bool
    supports_pty: bool
    supports_terminfo: bool
    signals: tuple[str, ...]
    terminfo_paths: tuple[str, ...]
    wsl: bool = False
    implementation_status: str = "full"
    minimum_version: tuple[int, int, int] | None = None
    meets_minimum_version: bool | None = None
    vt_support: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "family": self.family.value,
            "os_version": list(self.os_version) if self.os_version else None,
            "supports_signals": self.supports_signals,
            "supports_pty": self.supports_pty,
            "supports_terminfo": self.supports_terminfo,
            "signals": list(self.signals),
            "terminfo_paths": list(self.terminfo_paths),
            "wsl": self.wsl,
            "implementation_status": self.implementation_status,
            "minimum_version": list(self.minimum_version) if self.minimum_version else None,
            "meets_minimum_version": self.meets_minimum_version,
            "vt_support": self.vt_support,
        }


def parse_version(text: str) -> tuple[int, int, int] | None:
    """Parse the leading ``major.minor[.patch]`` of a release string."""
    parts: list[int] = []
    for piece in text.split(".")[:3]:
        digits = ""
        for ch in piece:
            if not ch.isdigit():
                break
            digits += ch
        if not digits:
            break
        parts.append(int(digits))
        if len(digits) != len(piece):
            break
    if len(parts) < 2:
        return None
    while len(parts) < 3:
        parts.append(0)
    return (parts[0], parts[1], parts[2])


ResizeHandler = Callable[[], None]


class Platform:
    """
    Interface every platform adapter implements.

    Callers never branch on the OS themselves; they ask the adapter.
    """

    family: OSFamily = OSFamily.UNKNOWN
    features: frozenset[str] = frozenset()

    def info(self) -> PlatformInfo:
        return PlatformInfo(
            family=self.family,
            os_version=None,
            supports_signals=False,
            supports_pty=False,
            supports_terminfo=False,
            signals=(),
            terminfo_paths=(),
            implementation_status="unsupported",
        )

    def supports_feature(self, feature: str) -> bool:
        """``signals``, ``pty``, ``terminfo`` or ``vt_sequences``."""
        return feature in self.features

    def supported_signals(self) -> tuple[str, ...]:
        return ()

    def signal_available(self, name: str) -> bool:
        return name.upper() in self.supported_signals()

    def terminfo_paths(self, environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
        return ()

    def session_hint(self, environ: Mapping[str, str]) -> Optional[str]:
        """Name of the terminal program implied by session markers, if any."""
        if environ.get("WT_SESSION"):
            return "WindowsTerminal"
        return None

    def is_terminal(self, fd: int) -> bool:
        try:
            return os.isatty(fd)
        except OSError:
            return False

    def terminal_size(self, fd: int) -> tuple[int, int] | None:
        """``(rows, cols)`` as reported by the OS, or None."""
        try:
            size = os.get_terminal_size(fd)
        except (OSError, ValueError):
            return None
        if size.lines < 1 or size.columns < 1:
            return None
        return (size.lines, size.columns)

    def enter_raw_mode(self, fd: int) -> RawModeAttempt:
        return RawModeAttempt(RawModeOutcome.UNSUPPORTED, "raw mode not available on this platform", fd)

    def leave_raw_mode(self, attempt: RawModeAttempt) -> None:
        pass

    def install_resize_handler(self, handler: ResizeHandler) -> Any:
        """Install ``handler`` for window-size changes; returns a restore token."""
        return None

    def restore_resize_handler(self, token: Any) -> None:
        pass
