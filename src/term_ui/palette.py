"""Render color-degradation swatches to an image.

Each row of the image shows the same hue sweep fitted to one color depth, so
the loss from true color to 256 and 16 colors can be compared side by side.

Example:
    from term_ui.palette import render_palette

    render_palette("palette.png")
"""

from __future__ import annotations

import colorsys
from pathlib import Path
from typing import Union

try:
    from PIL import Image, ImageDraw
    HAS_PIL = True
except ImportError:
    HAS_PIL = False

from term_ui.capabilities.fallbacks import degrade_color, palette_rgb
from term_ui.core.color import Color, ColorMode

ROWS = (ColorMode.TRUE_COLOR, ColorMode.EXTENDED_256, ColorMode.STANDARD_16)


def _check_pil() -> None:
    """Raise ImportError if PIL is not available."""
    if not HAS_PIL:
        raise ImportError(
            "Pillow is required for palette images. "
            "Install with: pip install term-ui[image]"
        )


def hue_sweep(steps: int, saturation: float = 0.8, value: float = 0.9) -> list[Color]:
    """``steps`` true colors evenly spaced around the hue circle."""
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")
    colors = []
    for i in range(steps):
        r, g, b = colorsys.hsv_to_rgb(i / steps, saturation, value)
        colors.append(Color.from_rgb(round(r * 255), round(g * 255), round(b * 255)))
    return colors


def swatch_rows(steps: int = 48) -> list[tuple[ColorMode, list[tuple[int, int, int]]]]:
    """RGB values to paint for each color depth."""
    sweep = hue_sweep(steps)
    rows = []
    for mode in ROWS:
        values = []
        for color in sweep:
            fitted = degrade_color(color, mode)
            rgb = palette_rgb(fitted) if fitted is not None else None
            values.append(rgb or (0, 0, 0))
        rows.append((mode, values))
    return rows


def render_palette(
    output: Union[str, Path],
    steps: int = 48,
    cell_width: int = 16,
    cell_height: int = 32,
) -> Path:
    """Write the swatch image to ``output`` (format from the extension)."""
    _check_pil()
    rows = swatch_rows(steps)
    image = Image.new("RGB", (steps * cell_width, len(rows) * cell_height))
    draw = ImageDraw.Draw(image)
    for row_index, (_, values) in enumerate(rows):
        top = row_index * cell_height
        for col_index, rgb in enumerate(values):
            left = col_index * cell_width
            draw.rectangle(
                [left, top, left + cell_width - 1, top + cell_height - 1],
                fill=rgb,
            )
    output = Path(output)
    image.save(output)
    return output
