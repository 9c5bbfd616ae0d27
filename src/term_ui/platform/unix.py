"""Unix (Linux, macOS, FreeBSD) terminal handling."""

from __future__ import annotations

import logging
import os
import signal
from pathlib import Path
from typing import Any, Mapping

from term_ui.platform.base import (
    OSFamily,
    Platform,
    PlatformInfo,
    RawModeAttempt,
    RawModeOutcome,
    ResizeHandler,
    parse_version,
)

logger = logging.getLogger(__name__)

SIGNAL_NAMES = ("SIGWINCH", "SIGTERM", "SIGINT", "SIGHUP", "SIGUSR1", "SIGUSR2")

SYSTEM_TERMINFO_PATHS = (
    "/usr/share/terminfo",
    "/usr/lib/terminfo",
    "/lib/terminfo",
    "/etc/terminfo",
)


class UnixPlatform(Platform):
    """
    POSIX terminal adapter.

    Raw mode goes through termios. Only one raw-mode claim is held per
    adapter; a second attempt reports ALREADY_CLAIMED until the first is
    released.
    """

    features = frozenset({"signals", "pty", "terminfo", "vt_sequences"})

    def __init__(self, family: OSFamily = OSFamily.LINUX, proc_version: Path = Path("/proc/version")) -> None:
        self.family = family
        self._proc_version = proc_version
        self._claimed_fd: int | None = None

    def info(self) -> PlatformInfo:
        return PlatformInfo(
            family=self.family,
            os_version=self.os_version(),
            supports_signals=True,
            supports_pty=True,
            supports_terminfo=True,
            signals=self.supported_signals(),
            terminfo_paths=self.terminfo_paths(),
            wsl=self.is_wsl(),
        )

    def os_version(self) -> tuple[int, int, int] | None:
        return parse_version(os.uname().release)

    def is_wsl(self) -> bool:
        """True when running under Windows Subsystem for Linux."""
        if self.family is not OSFamily.LINUX:
            return False
        try:
            content = self._proc_version.read_text(errors="replace").lower()
        except OSError:
            return False
        return "microsoft" in content or "wsl" in content

    def supported_signals(self) -> tuple[str, ...]:
        return tuple(name for name in SIGNAL_NAMES if hasattr(signal, name))

    def terminfo_paths(self, environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
        """
        Directories searched for terminfo entries, most specific first.

        ``$TERMINFO`` and ``$TERMINFO_DIRS`` come before ``~/.terminfo`` and
        the system locations.
        """
        env = os.environ if environ is None else environ
        paths: list[str] = []
        if env.get("TERMINFO"):
            paths.append(env["TERMINFO"])
        for entry in env.get("TERMINFO_DIRS", "").split(":"):
            if entry:
                paths.append(entry)
        if env.get("HOME"):
            paths.append(str(Path(env["HOME"]) / ".terminfo"))
        paths.extend(SYSTEM_TERMINFO_PATHS)
        # Keep order, drop duplicates
        return tuple(dict.fromkeys(paths))

    def enter_raw_mode(self, fd: int) -> RawModeAttempt:
        if self._claimed_fd is not None:
            return RawModeAttempt(RawModeOutcome.ALREADY_CLAIMED, "raw mode already active in this process", fd)
        try:
            import termios
            import tty
        except ImportError:
            return RawModeAttempt(RawModeOutcome.UNSUPPORTED, "termios is not available", fd)

        if not self.is_terminal(fd):
            return RawModeAttempt.failed("not a terminal", fd)
        try:
            if os.tcgetpgrp(fd) != os.getpgrp():
                return RawModeAttempt(
                    RawModeOutcome.ALREADY_CLAIMED,
                    "terminal is owned by another process group",
                    fd,
                )
        except OSError as e:
            return RawModeAttempt.failed(f"cannot query terminal owner: {e}", fd)

        try:
            saved = termios.tcgetattr(fd)
            tty.setraw(fd, termios.TCSANOW)
        except (termios.error, OSError) as e:
            return RawModeAttempt.failed(str(e), fd)

        self._claimed_fd = fd
        logger.debug("Raw mode started on fd %d", fd)
        return RawModeAttempt(RawModeOutcome.STARTED, None, fd, saved)

    def leave_raw_mode(self, attempt: RawModeAttempt) -> None:
        """Restore the attributes saved by a STARTED attempt."""
        if not attempt.started or attempt.fd is None:
            return
        if self._claimed_fd != attempt.fd:
            return
        import termios

        self._claimed_fd = None
        try:
            termios.tcsetattr(attempt.fd, termios.TCSADRAIN, attempt.saved_attributes)
        except (termios.error, OSError) as e:
            # The terminal may already be gone (hangup); nothing left to restore
            logger.warning("Could not restore terminal attributes: %s", e)
        else:
            logger.debug("Raw mode left on fd %d", attempt.fd)

    def install_resize_handler(self, handler: ResizeHandler) -> Any:
        def _on_sigwinch(signum: int, frame: Any) -> None:
            handler()

        return signal.signal(signal.SIGWINCH, _on_sigwinch)

    def restore_resize_handler(self, token: Any) -> None:
        signal.signal(signal.SIGWINCH, token if token is not None else signal.SIG_DFL)
