import numpy as np
import pytest

from bitfield.effect import transform
from bitfield.errors import DecodeError
from bitfield.fonts import FontMetrics
from bitfield.glyph_grid import RandomSource
from bitfield.pipeline import grid_size, process_frame, run_frames


class RecordingSink:
    def __init__(self):
        self.frames = []

    def write(self, canvas, timestamp):
        self.frames.append((canvas.copy(), timestamp))


class TestGridSize:
    def test_floor_division(self, metrics_9x20):
        assert grid_size(100, 45, metrics_9x20) == (11, 2)
        assert grid_size(95, 40, metrics_9x20) == (10, 2)

    def test_smaller_than_one_cell(self, metrics_9x20):
        assert grid_size(8, 19, metrics_9x20) == (0, 0)


class TestProcessFrame:
    def test_solid_gray_image(self, gray_frame, small_font):
        # 180x60 with 60x30 cells: 2 rows of 3 glyphs
        metrics = FontMetrics(char_width=60, char_height=30, baseline_offset=2)
        rng = RandomSource(0)

        canvas = process_frame(gray_frame, metrics, small_font, rng)

        assert canvas.shape == gray_frame.shape
        assert rng.draws == 6
        assert np.all(gray_frame == 128)

        # seed 0 lays out "1 1 1" over "0 0 0"
        grid = [[1, 1, 1], [0, 0, 0]]

        expected = transform(gray_frame)
        for row, line in enumerate(grid):
            for col, bit in enumerate(line):
                small_font.draw(expected, str(bit), (col * 60, 2 + row * 30), (128, 128, 128))
        np.testing.assert_array_equal(canvas, expected)

        # "1" and "0" cells really look different
        assert not np.array_equal(canvas[2:30, 0:60], canvas[32:60, 0:60])

        # background: darkened to 90, blur keeps a flat field flat
        assert abs(int(canvas[1, 40, 0]) - 90) <= 1
        assert abs(int(canvas[20, 45, 1]) - 90) <= 1

        # every cell carries undarkened ink
        for row in range(2):
            for col in range(3):
                cell = canvas[2 + row * 30:2 + (row + 1) * 30, col * 60:(col + 1) * 60]
                assert np.any(np.all(cell == 128, axis=-1))

    def test_same_seed_same_output(self, small_font, metrics_9x20):
        frame = np.random.default_rng(5).integers(0, 256, size=(60, 95, 3), dtype=np.uint8)
        a = process_frame(frame, metrics_9x20, small_font, RandomSource(0))
        b = process_frame(frame, metrics_9x20, small_font, RandomSource(0))
        np.testing.assert_array_equal(a, b)

    def test_non_multiple_dimensions(self, small_font, metrics_9x20):
        frame = np.full((47, 95, 3), 60, dtype=np.uint8)
        rng = RandomSource(0)
        canvas = process_frame(frame, metrics_9x20, small_font, rng)
        assert canvas.shape == frame.shape
        assert rng.draws == 10 * 2

    def test_one_pixel_frame(self, small_font, metrics_9x20):
        frame = np.full((1, 1, 3), 10, dtype=np.uint8)
        rng = RandomSource(0)
        canvas = process_frame(frame, metrics_9x20, small_font, rng)
        assert canvas.shape == (1, 1, 3)
        assert rng.draws == 0

    def test_zero_area_frame(self, small_font, metrics_9x20):
        frame = np.zeros((0, 0, 3), dtype=np.uint8)
        assert process_frame(frame, metrics_9x20, small_font, RandomSource(0)).shape == (0, 0, 3)


def synthetic_video(n=5, size=(40, 60)):
    h, w = size
    return [(np.full((h, w, 3), min(255, 25 * i), dtype=np.uint8), i / 30.0) for i in range(n)]


class TestRunFrames:
    def test_preserves_order_and_timestamps(self, small_font, metrics_9x20):
        frames = synthetic_video()
        sink = RecordingSink()

        written = run_frames(iter(frames), sink, metrics_9x20, small_font, RandomSource(0), total=5)

        assert written == 5
        assert [ts for _, ts in sink.frames] == [ts for _, ts in frames]

        replay = RandomSource(0)
        for (image, _), (canvas, _) in zip(frames, sink.frames):
            expected = process_frame(image, metrics_9x20, small_font, replay)
            np.testing.assert_array_equal(canvas, expected)

    def test_source_threads_across_frames(self, small_font, metrics_9x20):
        rng = RandomSource(0)
        run_frames(iter(synthetic_video(3)), RecordingSink(), metrics_9x20, small_font, rng)
        # 60 // 9 = 6 columns, 40 // 20 = 2 rows, per frame
        assert rng.draws == 3 * 12

    def test_decode_error_stops_the_run(self, small_font, metrics_9x20):
        def frames():
            for item in synthetic_video(2):
                yield item
            raise DecodeError("frame 2: corrupt packet")

        sink = RecordingSink()
        with pytest.raises(DecodeError, match="corrupt packet"):
            run_frames(frames(), sink, metrics_9x20, small_font, RandomSource(0))
        assert len(sink.frames) == 2

    def test_empty_stream(self, small_font, metrics_9x20):
        assert run_frames(iter([]), RecordingSink(), metrics_9x20, small_font, RandomSource(0)) == 0

    def test_logs_progress(self, small_font, metrics_9x20, capsys):
        run_frames(iter(synthetic_video(10)), RecordingSink(), metrics_9x20, small_font, RandomSource(0), total=10)
        out = capsys.readouterr().out
        assert "[bitfield] frames=10/10 t=0.300s eta=" in out
