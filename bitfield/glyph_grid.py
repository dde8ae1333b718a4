"""
Binary glyph grid.

The bit stream is reproducible: a RandomSource seeded with the same integer
always yields the same values, and generate_grid() always consumes one draw
per cell, row by row, left to right. Both the image and the video CLI build
grids this way, so a given seed renders the same first frame in either mode.

Seed 0 starts with these twelve bits:

    1 1 1 0 0 0 0 0 0 1 1 1

so a 3x2 grid from a fresh seed-0 source is [[1, 1, 1], [0, 0, 0]].
"""

from __future__ import annotations

import numpy as np


class RandomSource:
    """Seeded coin flipper over numpy's default generator (PCG64)."""

    def __init__(self, seed: int = 0) -> None:
        self.seed = int(seed)
        self._rng = np.random.default_rng(self.seed)
        self.draws = 0

    def coin(self) -> int:
        self.draws += 1
        return int(self._rng.integers(0, 1, endpoint=True))

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed}, draws={self.draws})"


def generate_grid(text_width: int, text_height: int, rng: RandomSource) -> np.ndarray:
    """
    Returns a (text_height, text_width) uint8 array of 0/1 values.

    Non-positive dimensions give an empty grid without touching rng.
    """
    rows = max(0, int(text_height))
    cols = max(0, int(text_width))

    grid = np.zeros((rows, cols), dtype=np.uint8)
    for row in range(rows):
        for col in range(cols):
            grid[row, col] = rng.coin()
    return grid
