"""
Fixed effect constants and CLI defaults.

The darkening factor and blur sigma are part of the look and are not
exposed on the command line. Seed, font face and glyph height are.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional


# =========================
# EFFECT
# =========================
DARKEN_FACTOR = 0.7
BLUR_SIGMA = 8.0
GLYPHS = ("0", "1")

# =========================
# DEFAULTS
# =========================
DEFAULT_SEED = 0
DEFAULT_FONT_FACE = "simplex"
DEFAULT_IMAGE_GLYPH_HEIGHT = 128
DEFAULT_VIDEO_GLYPH_HEIGHT = 24

DEFAULT_IMAGE_INPUT = "input.png"
DEFAULT_VIDEO_INPUT = "input.mp4"

DEFAULT_CODEC = "mp4v"  # mp4v|h264
DEFAULT_FPS = 30.0

LOG_EVERY_FRAMES = 10


@dataclass(frozen=True)
class OverlayConfig:
    seed: int = DEFAULT_SEED
    font_face: str = DEFAULT_FONT_FACE
    glyph_height: int = DEFAULT_IMAGE_GLYPH_HEIGHT
    thickness: Optional[int] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "OverlayConfig":
        return cls(
            seed=args.seed,
            font_face=args.font,
            glyph_height=args.glyph_height,
            thickness=args.thickness,
        )
