"""
Glyph font for the bitfield overlay.

Wraps an OpenCV Hershey face at a fixed pixel height. The face is the "font
resource": it is measured once per run (FontMetrics) and then used to stamp
single glyphs onto canvases.

Geometry follows OpenCV's text model:
  descent  = depth below the baseline (getTextSize baseline)
  ascent   = rest of the getTextSize height, above the baseline

draw() positions text by the top-left corner of its line box, so callers can
lay glyphs out on a cell grid without thinking about baselines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import cv2
import numpy as np

from .config import GLYPHS
from .errors import FontError


HERSHEY_FACES = {
    "simplex": cv2.FONT_HERSHEY_SIMPLEX,
    "mono": cv2.FONT_HERSHEY_SIMPLEX,
    "plain": cv2.FONT_HERSHEY_PLAIN,
    "duplex": cv2.FONT_HERSHEY_DUPLEX,
    "complex": cv2.FONT_HERSHEY_COMPLEX,
    "triplex": cv2.FONT_HERSHEY_TRIPLEX,
    "script_simplex": cv2.FONT_HERSHEY_SCRIPT_SIMPLEX,
    "script_complex": cv2.FONT_HERSHEY_SCRIPT_COMPLEX,
}


@dataclass(frozen=True)
class FontMetrics:
    char_width: int
    char_height: int
    baseline_offset: int

    def __post_init__(self):
        if self.char_width <= 0 or self.char_height <= 0:
            raise FontError(
                f"degenerate cell size {self.char_width}x{self.char_height}"
            )


def default_thickness(glyph_height: int) -> int:
    return max(1, int(round(glyph_height / 12.0)))


class GlyphFont:
    def __init__(self, face_name: str, glyph_height: int, thickness: int | None = None):
        if face_name not in HERSHEY_FACES:
            raise FontError(
                f"unknown font face {face_name!r} (choose from {', '.join(sorted(HERSHEY_FACES))})"
            )
        if glyph_height <= 0:
            raise FontError(f"glyph height must be positive, got {glyph_height}")

        self.face_name = face_name
        self.face = HERSHEY_FACES[face_name]
        self.glyph_height = int(glyph_height)
        if thickness is None:
            thickness = default_thickness(self.glyph_height)
        max_thickness = max(1, self.glyph_height // 2)
        if not 1 <= thickness <= max_thickness:
            raise FontError(
                f"thickness must be between 1 and {max_thickness} for {self.glyph_height} px glyphs, got {thickness}"
            )
        self.thickness = int(thickness)
        self.scale = float(cv2.getFontScaleFromHeight(self.face, self.glyph_height, self.thickness))

        _, self.ascent, self.descent = self.measure(GLYPHS[0])
        self.metrics = self._measure_cell()

    def measure(self, text: str) -> Tuple[int, int, int]:
        """Returns (width, ascent, descent) in pixels for text at this scale."""
        if text not in GLYPHS:
            raise FontError(f"no glyph for {text!r}")
        (w, h), baseline = cv2.getTextSize(text, self.face, self.scale, self.thickness)
        # getTextSize height already spans the descender
        return int(w), int(h - baseline), int(baseline)

    def _measure_cell(self) -> FontMetrics:
        widths = [self.measure(g)[0] for g in GLYPHS]
        if min(widths) <= 0:
            raise FontError(f"face {self.face_name!r} renders an empty glyph")
        return FontMetrics(
            char_width=widths[0],
            char_height=int(round(self.ascent + self.descent)),
            baseline_offset=int(round(self.descent)),
        )

    def draw(self, canvas: np.ndarray, text: str, origin: Tuple[int, int], color: Sequence[int]) -> None:
        if text not in GLYPHS:
            raise FontError(f"no glyph for {text!r}")
        x, y = origin
        cv2.putText(
            canvas, text, (int(x), int(y) + self.ascent),
            self.face, self.scale,
            tuple(int(c) for c in color), self.thickness, cv2.LINE_AA,
        )

    def __repr__(self) -> str:
        return (
            f"GlyphFont({self.face_name!r}, height={self.glyph_height}, "
            f"scale={self.scale:.3f}, thickness={self.thickness})"
        )


def load_font(face: str, glyph_height: int, thickness: int | None = None) -> GlyphFont:
    return GlyphFont(face, glyph_height, thickness)
