"""
Per-frame bitfield pipeline and the ordered frame loop around it.

process_frame() is the whole effect for one frame. run_frames() drives it
over a decoded stream and feeds a sink in decode order; an image is the
single-frame case.
"""

from __future__ import annotations

import time
from typing import Iterable, Optional, Protocol, Tuple

import numpy as np
from tqdm import tqdm

from .compositor import composite
from .config import LOG_EVERY_FRAMES
from .console import format_eta, log
from .effect import transform
from .fonts import FontMetrics, GlyphFont
from .glyph_grid import RandomSource, generate_grid


class FrameSink(Protocol):
    def write(self, canvas: np.ndarray, timestamp: float) -> None:
        ...


def grid_size(width: int, height: int, metrics: FontMetrics) -> Tuple[int, int]:
    """(text_width, text_height): whole cells that fit the frame."""
    return width // metrics.char_width, height // metrics.char_height


def process_frame(
    frame: np.ndarray,
    metrics: FontMetrics,
    font: GlyphFont,
    rng: RandomSource,
) -> np.ndarray:
    height, width = frame.shape[:2]

    # recomputed per frame; streams may change resolution
    text_width, text_height = grid_size(width, height, metrics)
    grid = generate_grid(text_width, text_height, rng)

    canvas = transform(frame)
    return composite(canvas, grid, frame, metrics, font)


def run_frames(
    frames: Iterable[Tuple[np.ndarray, float]],
    sink: FrameSink,
    metrics: FontMetrics,
    font: GlyphFont,
    rng: RandomSource,
    total: Optional[int] = None,
) -> int:
    """
    Processes (frame, timestamp) pairs in order and writes each result to sink
    with its original timestamp. Returns the number of frames written.

    Any error (decode, effect, encode) propagates on the spot. Frames already
    handed to the sink stay written.
    """
    t0 = time.time()
    written = 0

    with tqdm(total=total or None, unit="frame") as pbar:
        for image, timestamp in frames:
            canvas = process_frame(image, metrics, font, rng)
            sink.write(canvas, timestamp)
            written += 1
            pbar.update(1)

            if written % LOG_EVERY_FRAMES == 0:
                if total:
                    eta = format_eta(t0, written, total)
                    log(f"frames={written}/{total} t={timestamp:.3f}s eta={eta}")
                else:
                    log(f"frames={written} t={timestamp:.3f}s")

    return written
