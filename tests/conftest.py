"""
Shared fixtures for the bitfield tests.

Frames are synthetic numpy arrays; nothing here needs files on disk unless
a test asks for tmp_path.
"""

import cv2
import numpy as np
import pytest

from bitfield.fonts import FontMetrics, load_font


@pytest.fixture
def small_font():
    """Simplex face at 20 px with a 3 px stroke, so glyph cores are solid ink."""
    return load_font("simplex", 20, thickness=3)


@pytest.fixture
def metrics_9x20():
    return FontMetrics(char_width=9, char_height=20, baseline_offset=5)


@pytest.fixture
def gray_frame():
    """180x60 solid mid-grey BGR frame."""
    return np.full((60, 180, 3), 128, dtype=np.uint8)


@pytest.fixture
def avi_clip(tmp_path):
    """
    Writes a 5-frame 64x48 MJPG clip at 10 fps and returns its path.

    Frame i is filled with grey level 40 * i. Skips when the local OpenCV
    build cannot write MJPG.
    """
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write MJPG")
    for i in range(5):
        writer.write(np.full((48, 64, 3), 40 * i, dtype=np.uint8))
    writer.release()
    return path
