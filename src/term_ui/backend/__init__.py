"""Backend selection and terminal session management."""

from term_ui.backend.selector import (
    BackendSelector,
    Explicit,
    Raw,
    RawState,
    SelectionResult,
    SessionCapabilities,
    Tty,
    select_backend,
    teardown_backend,
)
from term_ui.backend.session import TerminalSession
from term_ui.backend.size import MAX_DIMENSION, detect_size, validate_size

__all__ = [
    "BackendSelector",
    "Explicit",
    "MAX_DIMENSION",
    "Raw",
    "RawState",
    "SelectionResult",
    "SessionCapabilities",
    "TerminalSession",
    "Tty",
    "detect_size",
    "select_backend",
    "teardown_backend",
    "validate_size",
]
