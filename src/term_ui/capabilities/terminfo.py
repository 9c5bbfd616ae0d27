"""Color count lookup through the terminfo database (``infocmp``)."""

from __future__ import annotations

import logging
import re
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1.0

# infocmp prints "colors#256" (newer ncurses may print "colors#0x100")
COLORS_PATTERN = re.compile(r"\bcolors[#=](0x[0-9a-fA-F]+|\d+)")


def parse_colors(output: str) -> Optional[int]:
    """Extract the ``colors`` capability from infocmp output."""
    match = COLORS_PATTERN.search(output)
    if match is None:
        return None
    text = match.group(1)
    return int(text, 16) if text.startswith("0x") else int(text)


def query_colors(term: str | None = None, timeout: float = DEFAULT_TIMEOUT) -> Optional[int]:
    """
    Ask ``infocmp -1`` how many colors the terminal supports.

    Any failure (binary missing, unknown terminal, non-zero exit, timeout,
    unparsable output) means "no information" and returns None.
    """
    args = ["infocmp", "-1"]
    if term:
        args.append(term)
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        logger.debug("infocmp not found")
        return None
    except subprocess.TimeoutExpired:
        logger.debug("infocmp timed out after %.2fs", timeout)
        return None
    except OSError as e:
        logger.debug("infocmp failed to start: %s", e)
        return None

    if result.returncode != 0:
        logger.debug("infocmp exited with %d", result.returncode)
        return None
    colors = parse_colors(result.stdout)
    if colors is None:
        logger.debug("infocmp output has no colors capability")
    return colors
