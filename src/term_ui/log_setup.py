"""Logging configuration for the command-line tool.

Library modules only create loggers; handlers are attached here, once, by
the CLI. Output goes to stderr so it never mixes with escape sequences
written to stdout.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "term_ui"

_CONSOLE_FMT = "%(name)s: %(message)s"


def setup_logging(*, verbose: bool = False, debug: bool = False) -> logging.Logger:
    root = logging.getLogger(LOGGER_NAME)
    root.handlers.clear()

    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    root.setLevel(level)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=debug,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_CONSOLE_FMT))
    root.addHandler(handler)
    root.propagate = False
    return root
