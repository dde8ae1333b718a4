"""
Decode/encode collaborators for the bitfield CLIs.

Images go through cv2.imread/imwrite. Video is read with cv2.VideoCapture
as a lazy, one-shot stream of TimedFrame and written either with
cv2.VideoWriter (mp4v, constant fps) or as PNG frames that ffmpeg encodes
to H.264 with their original timestamps once the last frame is in.
"""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Iterator, NamedTuple, Optional

import cv2
import numpy as np

from .config import DEFAULT_CODEC, DEFAULT_FPS
from .console import log
from .errors import DecodeError, EncodeError, InputError


CODECS = ("mp4v", "h264")


def run_ffmpeg(cmd):
    log("▶ " + " ".join(str(x) for x in cmd))
    subprocess.run(cmd, check=True)


# ============================================================
# Images
# ============================================================

def read_image(path) -> np.ndarray:
    path = Path(path)
    if not path.is_file():
        raise InputError(f"no such file: {path}")
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise InputError(f"could not decode image: {path}")
    return image


def write_image(path, canvas: np.ndarray) -> None:
    try:
        ok = cv2.imwrite(str(path), canvas)
    except cv2.error as exc:
        raise EncodeError(f"could not write {path}: {exc}") from exc
    if not ok:
        raise EncodeError(f"could not write {path}")


# ============================================================
# Video in
# ============================================================

class TimedFrame(NamedTuple):
    image: np.ndarray
    timestamp: float


class VideoSource:
    """
    Video file opened for a single forward pass.

    frame_count is the number of frames the stream is expected to yield
    (0 when the container does not say). It is only used for progress.
    """

    def __init__(self, path, start: float = 0.0, duration: Optional[float] = None):
        self.path = str(path)
        if not Path(self.path).is_file():
            raise InputError(f"no such file: {self.path}")

        self._cap = cv2.VideoCapture(self.path)
        if not self._cap.isOpened():
            raise InputError(f"could not open input: {self.path}")

        self.fps = float(self._cap.get(cv2.CAP_PROP_FPS) or DEFAULT_FPS)
        self.width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        self.height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        total_frames_input = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)

        if self.width <= 0 or self.height <= 0:
            self.release()
            raise InputError(f"could not read video dimensions: {self.path}")

        self.start_frame = max(0, int(round(start * self.fps)))
        if duration is None:
            self._limit = None
            self.frame_count = max(0, total_frames_input - self.start_frame)
        else:
            self._limit = max(0, int(round(duration * self.fps)))
            self.frame_count = self._limit
            if total_frames_input > 0:
                self.frame_count = min(self._limit, max(0, total_frames_input - self.start_frame))

        if self.start_frame > 0:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, self.start_frame)

        self._started = False

    def frames(self) -> Iterator[TimedFrame]:
        """Lazy frames in decode order. The stream cannot be restarted."""
        if self._started:
            raise DecodeError(f"frame stream of {self.path} was already consumed")
        self._started = True
        return self._iter_frames()

    def _iter_frames(self) -> Iterator[TimedFrame]:
        index = 0
        while self._limit is None or index < self._limit:
            try:
                ok, frame = self._cap.read()
            except cv2.error as exc:
                raise DecodeError(f"frame {index} of {self.path}: {exc}") from exc
            if not ok or frame is None:
                return

            if frame.shape[:2] != (self.height, self.width):
                raise DecodeError(
                    f"frame {index} of {self.path} is {frame.shape[1]}x{frame.shape[0]}, "
                    f"stream is {self.width}x{self.height}"
                )

            yield TimedFrame(frame, self._timestamp(index))
            index += 1

    def _timestamp(self, index: int) -> float:
        msec = self._cap.get(cv2.CAP_PROP_POS_MSEC)
        if msec and msec > 0:
            return msec / 1000.0
        return (self.start_frame + index) / self.fps

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def __enter__(self) -> "VideoSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


# ============================================================
# Video out
# ============================================================

def build_concat_list(frame_paths, timestamps, fps: float) -> str:
    """
    ffmpeg concat script that holds each frame until the next one's timestamp.

    The last frame lasts 1/fps. Its entry is listed twice because the concat
    demuxer ignores the duration of the final file.
    """
    lines = []
    for i, (path, ts) in enumerate(zip(frame_paths, timestamps)):
        if i + 1 < len(timestamps):
            duration = max(0.0, timestamps[i + 1] - ts)
        else:
            duration = 1.0 / fps
        lines.append(f"file '{Path(path).resolve()}'")
        lines.append(f"duration {duration:.6f}")
    if frame_paths:
        lines.append(f"file '{Path(frame_paths[-1]).resolve()}'")
    return "\n".join(lines) + "\n"


class VideoSink:
    """
    Ordered frame writer.

    Frames must arrive with non-decreasing timestamps; anything else means
    the pipeline reordered frames and is rejected.

    codec="mp4v" writes straight through cv2.VideoWriter at a constant fps.
    codec="h264" keeps each frame as a PNG in a temp dir and on close() lets
    ffmpeg encode them through a concat list, so every frame keeps its own
    timestamp (variable frame rate survives).
    """

    def __init__(self, path, fps: float, width: int, height: int, codec: str = DEFAULT_CODEC):
        if codec not in CODECS:
            raise EncodeError(f"unknown codec {codec!r} (choose from {', '.join(CODECS)})")
        if codec == "h264" and not shutil.which("ffmpeg"):
            raise EncodeError("codec h264 needs ffmpeg on PATH")

        self.path = Path(path)
        self.codec = codec
        self.fps = float(fps) if fps and fps > 0 else DEFAULT_FPS
        self.width = int(width)
        self.height = int(height)
        self.frames_written = 0
        self._last_timestamp: Optional[float] = None
        self._closed = False

        self._writer = None
        self._frame_dir: Optional[Path] = None
        self._frame_paths = []
        self._timestamps = []

        if codec == "h264":
            self._frame_dir = Path(tempfile.mkdtemp(prefix="bitfield_frames_"))
            return

        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        self._writer = cv2.VideoWriter(str(self.path), fourcc, self.fps, (self.width, self.height))
        if not self._writer.isOpened():
            raise EncodeError(f"could not open writer for {self.path}")

    def write(self, canvas: np.ndarray, timestamp: float) -> None:
        if self._closed:
            raise EncodeError(f"writer for {self.path} is closed")
        if canvas.shape[:2] != (self.height, self.width):
            raise EncodeError(
                f"frame {self.frames_written} is {canvas.shape[1]}x{canvas.shape[0]}, "
                f"writer is {self.width}x{self.height}"
            )
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            raise EncodeError(
                f"frame {self.frames_written} out of order: t={timestamp:.3f}s "
                f"after t={self._last_timestamp:.3f}s"
            )

        if canvas.ndim == 2:
            canvas = cv2.cvtColor(canvas, cv2.COLOR_GRAY2BGR)

        if self._writer is not None:
            self._writer.write(canvas)
        else:
            frame_path = self._frame_dir / f"frame_{self.frames_written:06d}.png"
            write_image(frame_path, canvas)
            self._frame_paths.append(frame_path)
            self._timestamps.append(float(timestamp))

        self._last_timestamp = timestamp
        self.frames_written += 1

    def close(self, finish: bool = True) -> None:
        if self._closed:
            return
        self._closed = True

        if self._writer is not None:
            self._writer.release()
            self._writer = None
            return

        if self.frames_written == 0:
            shutil.rmtree(self._frame_dir, ignore_errors=True)
            if finish:
                raise EncodeError(f"no frames to encode into {self.path}")
            return
        if not finish:
            log(f"partial frames left in {self._frame_dir}")
            return

        list_path = self._frame_dir / "frames.txt"
        list_path.write_text(build_concat_list(self._frame_paths, self._timestamps, self.fps))

        cmd = [
            "ffmpeg", "-y",
            "-hide_banner", "-loglevel", "error",
            "-f", "concat",
            "-safe", "0",
            "-i", str(list_path),
            "-fps_mode", "vfr",
            "-vf", "pad=ceil(iw/2)*2:ceil(ih/2)*2",
            "-c:v", "libx264",
            "-pix_fmt", "yuv420p",
            "-an",
            str(self.path),
        ]
        try:
            run_ffmpeg(cmd)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise EncodeError(f"ffmpeg encode failed: {exc}") from exc
        shutil.rmtree(self._frame_dir, ignore_errors=True)

    def __enter__(self) -> "VideoSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(finish=exc_type is None)
