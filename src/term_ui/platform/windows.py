"""
Windows console support (stub tier).

VT sequences need Windows 10 build 10586 or later. Support is queried from
the console mode, never assumed. Raw mode is not implemented and is always
reported as UNSUPPORTED, so sessions on Windows take the cooperative path.
"""

from __future__ import annotations

import logging
import sys
from typing import Mapping, Optional

from term_ui.platform.base import (
    OSFamily,
    Platform,
    PlatformInfo,
    RawModeAttempt,
    RawModeOutcome,
)

logger = logging.getLogger(__name__)

MINIMUM_VERSION = (10, 0, 10586)

STD_OUTPUT_HANDLE = -11
ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004


class WindowsPlatform(Platform):
    family = OSFamily.WINDOWS
    features = frozenset({"vt_sequences"})

    def info(self) -> PlatformInfo:
        version = self.windows_version()
        return PlatformInfo(
            family=self.family,
            os_version=version,
            supports_signals=False,
            supports_pty=False,
            supports_terminfo=False,
            signals=(),
            terminfo_paths=(),
            implementation_status="stub",
            minimum_version=MINIMUM_VERSION,
            meets_minimum_version=self.meets_minimum_version(version),
            vt_support=self.vt_support(),
        )

    def windows_version(self) -> tuple[int, int, int] | None:
        getter = getattr(sys, "getwindowsversion", None)
        if getter is None:
            return None
        version = getter()
        return (version.major, version.minor, version.build)

    def meets_minimum_version(self, version: tuple[int, int, int] | None = None) -> bool:
        if version is None:
            version = self.windows_version()
        return version is not None and version >= MINIMUM_VERSION

    def vt_support(self) -> Optional[bool]:
        """
        Whether the console currently processes VT sequences.

        Reads ENABLE_VIRTUAL_TERMINAL_PROCESSING from GetConsoleMode. Returns
        None when the console API cannot be reached (not on Windows, or no
        console attached).
        """
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        except (ImportError, AttributeError):
            return None
        handle = kernel32.GetStdHandle(STD_OUTPUT_HANDLE)
        mode = ctypes.c_ulong()
        if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
            logger.debug("GetConsoleMode failed; no console attached")
            return None
        return bool(mode.value & ENABLE_VIRTUAL_TERMINAL_PROCESSING)

    def terminfo_paths(self, environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
        return ()

    def enter_raw_mode(self, fd: int) -> RawModeAttempt:
        return RawModeAttempt(
            RawModeOutcome.UNSUPPORTED,
            "raw mode is not implemented for the Windows console",
            fd,
        )
