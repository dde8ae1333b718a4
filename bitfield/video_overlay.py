#!/usr/bin/env python3
"""
bitfield video overlay.

Applies the bitfield effect to every frame of a video, in decode order,
keeping each frame's timestamp. The 0/1 sequence continues across frames
from a single seeded source, so a run is reproducible end to end.

Audio is not carried over.

Usage:
    bitfield-video clip.mp4
    bitfield-video clip.mp4 --start 2.5 --duration 4 --codec h264
"""

import argparse
from pathlib import Path

from .config import (
    DEFAULT_CODEC,
    DEFAULT_FONT_FACE,
    DEFAULT_SEED,
    DEFAULT_VIDEO_GLYPH_HEIGHT,
    DEFAULT_VIDEO_INPUT,
    OverlayConfig,
)
from .console import die, log
from .errors import BitfieldError
from .fonts import HERSHEY_FACES, load_font
from .glyph_grid import RandomSource
from .media import CODECS, VideoSink, VideoSource
from .pipeline import run_frames


# ============================================================
# Output naming (same folder as input)
# ============================================================

def build_output_name(args) -> str:
    in_path = Path(args.input)
    dur_str = "full" if args.duration is None else f"{args.duration:.2f}"

    filename = (
        f"{in_path.stem}_bitfield"
        f"_st{args.start:.2f}"
        f"_dur{dur_str}"
        f"_h{args.glyph_height}"
        f"_s{args.seed}"
        f".mp4"
    )
    return str(in_path.parent / filename)


def run(args) -> int:
    cfg = OverlayConfig.from_args(args)
    out_path = args.output or build_output_name(args)

    font = load_font(cfg.font_face, cfg.glyph_height, cfg.thickness)
    metrics = font.metrics
    log(f"font={font!r}")
    log(f"cell={metrics.char_width}x{metrics.char_height} baseline={metrics.baseline_offset}")

    rng = RandomSource(cfg.seed)

    with VideoSource(args.input, start=args.start, duration=args.duration) as source:
        log(f"input={args.input}")
        log(f"fps={source.fps:.3f} size={source.width}x{source.height}")
        log(f"start={args.start:.3f}s -> start_frame={source.start_frame}")
        log(f"frames_to_process={source.frame_count or 'unknown'}")
        log(f"output={out_path} codec={args.codec}")

        with VideoSink(out_path, source.fps, source.width, source.height, codec=args.codec) as sink:
            written = run_frames(
                source.frames(), sink, metrics, font, rng,
                total=source.frame_count,
            )
            # raised inside the sink block so nothing gets encoded
            if written == 0:
                raise BitfieldError(f"no frames decoded from {args.input}", stage="decode")

    log(f"✅ done → {out_path} ({written} frames, {rng.draws} bits)")
    return written


# ============================================================
# CLI
# ============================================================

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="bitfield: binary glyph overlay for video")
    ap.add_argument("input", nargs="?", default=DEFAULT_VIDEO_INPUT)
    ap.add_argument("-o", "--output", default=None,
                    help="output video (default: derived from input name, same folder)")

    ap.add_argument("--start", type=float, default=0.0)
    ap.add_argument("--duration", type=float, default=None)

    ap.add_argument("--seed", type=int, default=DEFAULT_SEED,
                    help="seed for the 0/1 sequence (continues across frames)")
    ap.add_argument("--font", default=DEFAULT_FONT_FACE, choices=sorted(HERSHEY_FACES),
                    help="Hershey font face")
    ap.add_argument("--glyph-height", type=int, default=DEFAULT_VIDEO_GLYPH_HEIGHT,
                    help="target glyph height in pixels")
    ap.add_argument("--thickness", type=int, default=None,
                    help="stroke thickness (default: glyph height / 12)")

    ap.add_argument("--codec", default=DEFAULT_CODEC, choices=list(CODECS),
                    help="mp4v writes directly; h264 transcodes through ffmpeg (libx264, yuv420p)")
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    log("starting bitfield video")
    try:
        run(args)
    except BitfieldError as exc:
        die(str(exc))


if __name__ == "__main__":
    main()
