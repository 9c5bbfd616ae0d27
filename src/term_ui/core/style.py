"""Text styles: colors plus SGR attributes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from term_ui.core.color import Color


class Attribute(Enum):
    """Text attributes with their SGR codes."""
    BOLD = 1
    DIM = 2
    ITALIC = 3
    UNDERLINE = 4
    BLINK = 5
    REVERSE = 7
    HIDDEN = 8
    STRIKETHROUGH = 9

    @property
    def code(self) -> int:
        return self.value


@dataclass(frozen=True)
class Style:
    """
    An immutable text style.

    ``fg``/``bg`` of ``None`` mean "leave the current color alone", while
    ``Color.DEFAULT`` explicitly selects the terminal default.
    """
    fg: Color | None = None
    bg: Color | None = None
    attrs: frozenset[Attribute] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Accept any iterable of attributes but always store a frozenset
        if not isinstance(self.attrs, frozenset):
            object.__setattr__(self, "attrs", frozenset(self.attrs))

    @property
    def is_plain(self) -> bool:
        return self.fg is None and self.bg is None and not self.attrs

    def with_fg(self, color: Color | None) -> Style:
        return replace(self, fg=color)

    def with_bg(self, color: Color | None) -> Style:
        return replace(self, bg=color)

    def with_attrs(self, *attrs: Attribute) -> Style:
        return replace(self, attrs=self.attrs | frozenset(attrs))

    def without_attrs(self, *attrs: Attribute) -> Style:
        return replace(self, attrs=self.attrs - frozenset(attrs))

    def sorted_attrs(self) -> list[Attribute]:
        """Attributes in SGR code order, so output is deterministic."""
        return sorted(self.attrs, key=lambda a: a.code)
