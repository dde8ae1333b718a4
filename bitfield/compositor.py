"""
Stamps a glyph grid onto a canvas.

Glyph ink comes from the ORIGINAL frame, not the blurred canvas, so digits
keep the source hue at full saturation over the softened background.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .fonts import FontMetrics, GlyphFont


def clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def sample_color(frame: np.ndarray, x: int, y: int) -> Tuple[int, ...]:
    """Pixel at (x, y), clamped into the frame; always a tuple of channel values."""
    h, w = frame.shape[:2]
    px = frame[clamp(y, 0, h - 1), clamp(x, 0, w - 1)]
    return tuple(int(c) for c in np.atleast_1d(px))


def composite(
    canvas: np.ndarray,
    grid: np.ndarray,
    source_frame: np.ndarray,
    metrics: FontMetrics,
    font: GlyphFont,
) -> np.ndarray:
    if source_frame.size == 0:
        return canvas

    half_w = metrics.char_width // 2
    half_h = metrics.char_height // 2

    x = 0
    y = metrics.baseline_offset
    for line in grid:
        for bit in line:
            color = sample_color(source_frame, x + half_w, y + half_h)
            font.draw(canvas, str(int(bit)), (x, y), color)
            x += metrics.char_width
        x = 0
        y += metrics.char_height

    return canvas
