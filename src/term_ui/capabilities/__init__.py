"""Terminal capability detection and graceful degradation."""

from term_ui.capabilities.detector import (
    Capabilities,
    CapabilityCache,
    CapabilityDetector,
    clear_cache,
    detect,
    get,
    supports_256_color,
    supports_alternate_screen,
    supports_bracketed_paste,
    supports_focus_events,
    supports_mouse,
    supports_true_color,
    supports_unicode,
    update_color_mode,
)
from term_ui.capabilities.fallbacks import (
    color_256_to_16,
    degrade_color,
    rgb_to_16,
    rgb_to_256,
    string_to_ascii,
    unicode_to_ascii,
)

__all__ = [
    "Capabilities",
    "CapabilityCache",
    "CapabilityDetector",
    "clear_cache",
    "color_256_to_16",
    "degrade_color",
    "detect",
    "get",
    "rgb_to_16",
    "rgb_to_256",
    "string_to_ascii",
    "supports_256_color",
    "supports_alternate_screen",
    "supports_bracketed_paste",
    "supports_focus_events",
    "supports_mouse",
    "supports_true_color",
    "supports_unicode",
    "unicode_to_ascii",
    "update_color_mode",
]
