"""
Terminal size detection.

Methods are tried most reliable first: an explicit size, the OS query on the
terminal descriptor, ``LINES``/``COLUMNS``, then ``stty size``. Every result
is checked against practical bounds so a hostile environment variable or
terminal reply cannot request a gigantic screen.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Mapping, Optional

from term_ui.platform import Platform, current_platform

logger = logging.getLogger(__name__)

MAX_DIMENSION = 9999

Size = tuple[int, int]


def validate_size(rows: object, cols: object) -> Size:
    """Return ``(rows, cols)`` if both are ints in 1..MAX_DIMENSION."""
    for name, value in (("rows", rows), ("cols", cols)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{name} must be an int, got {type(value).__name__}")
        if not 1 <= value <= MAX_DIMENSION:
            raise ValueError(f"{name} must be 1-{MAX_DIMENSION}, got {value}")
    return (rows, cols)  # type: ignore[return-value]


def _valid_or_none(rows: int, cols: int) -> Optional[Size]:
    if 1 <= rows <= MAX_DIMENSION and 1 <= cols <= MAX_DIMENSION:
        return (rows, cols)
    logger.debug("Ignoring out-of-range size %dx%d", rows, cols)
    return None


def from_env(environ: Mapping[str, str] | None = None) -> Optional[Size]:
    env = os.environ if environ is None else environ
    lines = env.get("LINES", "").strip()
    columns = env.get("COLUMNS", "").strip()
    if not (lines.isdigit() and columns.isdigit()):
        return None
    return _valid_or_none(int(lines), int(columns))


def parse_stty_output(output: str) -> Optional[Size]:
    parts = output.split()
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return None
    return _valid_or_none(int(parts[0]), int(parts[1]))


def from_stty(fd: int, timeout: float = 1.0) -> Optional[Size]:
    try:
        result = subprocess.run(
            ["stty", "size"],
            stdin=fd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("stty size unavailable: %s", e)
        return None
    if result.returncode != 0:
        return None
    return parse_stty_output(result.stdout)


def detect_size(
    size: Size | None = None,
    *,
    fd: int | None = None,
    environ: Mapping[str, str] | None = None,
    platform: Platform | None = None,
    use_stty: bool = True,
) -> Optional[Size]:
    """
    Terminal size as ``(rows, cols)``, or None if every method failed.

    An explicit ``size`` is validated and returned as-is (invalid values
    raise ValueError/TypeError).
    """
    if size is not None:
        return validate_size(*size)

    platform = platform or current_platform()
    fd = 1 if fd is None else fd

    reported = platform.terminal_size(fd)
    if reported is not None:
        result = _valid_or_none(*reported)
        if result is not None:
            return result

    result = from_env(environ)
    if result is not None:
        return result

    if use_stty and platform.is_terminal(fd):
        return from_stty(fd)
    return None
