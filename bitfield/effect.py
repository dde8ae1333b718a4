"""
Darken-and-blur background for the bitfield overlay.
"""

from __future__ import annotations

from fractions import Fraction

import cv2
import numpy as np

from .config import BLUR_SIGMA, DARKEN_FACTOR


def build_darken_lut(factor: float = DARKEN_FACTOR) -> np.ndarray:
    """256-entry table of clamp(round(c * factor)), rounding halves up."""
    # exact rational math: 255 * 0.7 in floats lands just under 178.5
    f = Fraction(str(factor))
    levels = (np.arange(256, dtype=np.int64) * (2 * f.numerator) + f.denominator) // (2 * f.denominator)
    return np.clip(levels, 0, 255).astype(np.uint8)


DARKEN_LUT = build_darken_lut()


def darken(frame: np.ndarray) -> np.ndarray:
    """Per-channel darkening; each output pixel depends only on its input pixel."""
    if frame.size == 0:
        return frame.copy()
    return cv2.LUT(frame, DARKEN_LUT)


def blur(canvas: np.ndarray, sigma: float = BLUR_SIGMA) -> np.ndarray:
    if canvas.size == 0:
        return canvas.copy()
    return cv2.GaussianBlur(
        canvas, (0, 0),
        sigmaX=sigma, sigmaY=sigma,
        borderType=cv2.BORDER_REPLICATE,
    )


def transform(frame: np.ndarray) -> np.ndarray:
    """Returns a new darkened, blurred canvas. The input frame is left untouched."""
    return blur(darken(frame))
