"""Tests for the platform adapters."""

import os
import sys
from pathlib import Path

import pytest

from term_ui.platform import (
    MINIMUM_VERSION,
    OSFamily,
    Platform,
    RawModeAttempt,
    RawModeOutcome,
    UnixPlatform,
    WindowsPlatform,
    current_platform,
    detect_family,
    parse_version,
    platform_for,
)
from term_ui.platform.unix import SYSTEM_TERMINFO_PATHS

unix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX terminal APIs")


class TestDetectFamily:
    """Tests for OS family detection."""

    def test_families(self) -> None:
        assert detect_family("linux") == OSFamily.LINUX
        assert detect_family("darwin") == OSFamily.MACOS
        assert detect_family("freebsd13") == OSFamily.FREEBSD
        assert detect_family("win32") == OSFamily.WINDOWS
        assert detect_family("sunos5") == OSFamily.UNKNOWN

    def test_platform_for(self) -> None:
        assert isinstance(platform_for(OSFamily.WINDOWS), WindowsPlatform)
        macos = platform_for(OSFamily.MACOS)
        assert isinstance(macos, UnixPlatform)
        assert macos.family == OSFamily.MACOS
        assert type(platform_for(OSFamily.UNKNOWN)) is Platform

    def test_current_platform_is_shared(self) -> None:
        assert current_platform() is current_platform()


class TestParseVersion:
    """Tests for release string parsing."""

    def test_versions(self) -> None:
        assert parse_version("5.15.0-91-generic") == (5, 15, 0)
        assert parse_version("6.1") == (6, 1, 0)
        assert parse_version("23.1.0") == (23, 1, 0)
        assert parse_version("5.15.90.1-microsoft-standard-WSL2") == (5, 15, 90)

    def test_unparsable(self) -> None:
        assert parse_version("abc") is None
        assert parse_version("10") is None
        assert parse_version("") is None


class TestRawModeAttempt:
    """Tests for the raw-mode result type."""

    def test_failed(self) -> None:
        attempt = RawModeAttempt.failed("boom", 3)
        assert attempt.outcome is RawModeOutcome.FAILED
        assert attempt.reason == "boom"
        assert attempt.fd == 3
        assert not attempt.started

    def test_started(self) -> None:
        assert RawModeAttempt(RawModeOutcome.STARTED, fd=0).started


class TestBasePlatform:
    """Tests for the fallback adapter on unknown systems."""

    def test_unsupported(self) -> None:
        platform = Platform()
        assert platform.enter_raw_mode(0).outcome is RawModeOutcome.UNSUPPORTED
        assert platform.info().implementation_status == "unsupported"
        assert not platform.supports_feature("signals")
        assert platform.terminfo_paths() == ()

    def test_session_hint(self) -> None:
        assert Platform().session_hint({"WT_SESSION": "abc"}) == "WindowsTerminal"
        assert Platform().session_hint({}) is None

    def test_pipe_is_not_a_terminal(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            assert not Platform().is_terminal(read_fd)
            assert Platform().terminal_size(read_fd) is None
        finally:
            os.close(read_fd)
            os.close(write_fd)


class TestUnixPlatform:
    """Tests for the POSIX adapter."""

    def test_terminfo_paths_order(self) -> None:
        environ = {"TERMINFO": "/opt/ti", "TERMINFO_DIRS": "/a::/b", "HOME": "/home/user"}
        paths = UnixPlatform().terminfo_paths(environ)
        assert paths[:4] == ("/opt/ti", "/a", "/b", str(Path("/home/user") / ".terminfo"))
        assert paths[4:] == SYSTEM_TERMINFO_PATHS

    def test_terminfo_paths_deduplicated(self) -> None:
        paths = UnixPlatform().terminfo_paths({"TERMINFO_DIRS": "/usr/share/terminfo"})
        assert paths.count("/usr/share/terminfo") == 1
        assert paths[0] == "/usr/share/terminfo"

    def test_wsl_detection(self, tmp_path: Path) -> None:
        proc = tmp_path / "version"
        proc.write_text("Linux version 5.15.90.1-microsoft-standard-WSL2 (gcc)")
        assert UnixPlatform(proc_version=proc).is_wsl()
        proc.write_text("Linux version 6.1.0-13-amd64 (debian-kernel@lists.debian.org)")
        assert not UnixPlatform(proc_version=proc).is_wsl()

    def test_wsl_missing_file(self, tmp_path: Path) -> None:
        assert not UnixPlatform(proc_version=tmp_path / "missing").is_wsl()

    def test_wsl_only_on_linux(self, tmp_path: Path) -> None:
        proc = tmp_path / "version"
        proc.write_text("microsoft")
        assert not UnixPlatform(OSFamily.MACOS, proc_version=proc).is_wsl()

    def test_features(self) -> None:
        platform = UnixPlatform()
        for feature in ("signals", "pty", "terminfo", "vt_sequences"):
            assert platform.supports_feature(feature)
        assert not platform.supports_feature("teleport")

    @unix_only
    def test_signals(self) -> None:
        platform = UnixPlatform()
        assert "SIGWINCH" in platform.supported_signals()
        assert platform.signal_available("sigwinch")

    @unix_only
    def test_raw_mode_on_pipe_fails(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            attempt = UnixPlatform().enter_raw_mode(read_fd)
        finally:
            os.close(read_fd)
            os.close(write_fd)
        assert attempt.outcome is RawModeOutcome.FAILED
        assert attempt.reason == "not a terminal"

    @unix_only
    def test_leave_ignores_unstarted_attempt(self) -> None:
        UnixPlatform().leave_raw_mode(RawModeAttempt.failed("not a terminal", 0))

    @unix_only
    def test_info(self, tmp_path: Path) -> None:
        info = UnixPlatform(proc_version=tmp_path / "missing").info()
        assert info.family == OSFamily.LINUX
        assert info.supports_signals and info.supports_pty and info.supports_terminfo
        assert info.implementation_status == "full"
        data = info.to_dict()
        assert data["family"] == "linux"
        assert data["wsl"] is False


class TestWindowsPlatform:
    """Tests for the Windows stub adapter."""

    def test_raw_mode_unsupported(self) -> None:
        attempt = WindowsPlatform().enter_raw_mode(0)
        assert attempt.outcome is RawModeOutcome.UNSUPPORTED
        assert attempt.reason

    def test_minimum_version(self) -> None:
        platform = WindowsPlatform()
        assert MINIMUM_VERSION == (10, 0, 10586)
        assert platform.meets_minimum_version((10, 0, 19045))
        assert platform.meets_minimum_version((10, 0, 10586))
        assert not platform.meets_minimum_version((10, 0, 10240))
        assert not platform.meets_minimum_version((6, 3, 9600))

    def test_features(self) -> None:
        platform = WindowsPlatform()
        assert platform.supports_feature("vt_sequences")
        assert not platform.supports_feature("terminfo")
        assert platform.terminfo_paths() == ()

    @unix_only
    def test_info_off_windows(self) -> None:
        info = WindowsPlatform().info()
        assert info.implementation_status == "stub"
        assert info.os_version is None
        assert info.meets_minimum_version is False
        assert info.vt_support is None
        assert info.minimum_version == MINIMUM_VERSION
