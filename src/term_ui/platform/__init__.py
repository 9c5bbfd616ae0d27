"""
Platform adapters.

This package is the only place OS-specific behavior lives; everything else
asks :func:`current_platform` instead of checking ``sys.platform``.
"""

from __future__ import annotations

import sys
import threading

from term_ui.platform.base import (
    OSFamily,
    Platform,
    PlatformInfo,
    RawModeAttempt,
    RawModeOutcome,
    parse_version,
)
from term_ui.platform.unix import UnixPlatform
from term_ui.platform.windows import MINIMUM_VERSION, WindowsPlatform

_lock = threading.Lock()
_current: Platform | None = None


def detect_family(sys_platform: str | None = None) -> OSFamily:
    """Map ``sys.platform`` to an :class:`OSFamily`."""
    name = sys.platform if sys_platform is None else sys_platform
    if name.startswith("linux"):
        return OSFamily.LINUX
    if name == "darwin":
        return OSFamily.MACOS
    if name.startswith("freebsd"):
        return OSFamily.FREEBSD
    if name in ("win32", "cygwin"):
        return OSFamily.WINDOWS
    return OSFamily.UNKNOWN


def platform_for(family: OSFamily) -> Platform:
    if family is OSFamily.WINDOWS:
        return WindowsPlatform()
    if family.is_unix:
        return UnixPlatform(family)
    return Platform()


def current_platform() -> Platform:
    """The adapter for the running OS (one instance per process)."""
    global _current
    if _current is None:
        with _lock:
            if _current is None:
                _current = platform_for(detect_family())
    return _current


__all__ = [
    "MINIMUM_VERSION",
    "OSFamily",
    "Platform",
    "PlatformInfo",
    "RawModeAttempt",
    "RawModeOutcome",
    "UnixPlatform",
    "WindowsPlatform",
    "current_platform",
    "detect_family",
    "parse_version",
    "platform_for",
]
