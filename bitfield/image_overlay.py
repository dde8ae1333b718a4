#!/usr/bin/env python3
"""
bitfield image overlay.

Darkens and blurs a still image, then covers it in a grid of 0/1 glyphs
inked with the colour of the source pixel under each cell.

Usage:
    bitfield-image photo.png
    bitfield-image photo.png -o out.png --seed 7 --glyph-height 96
"""

import argparse
from pathlib import Path

from .config import (
    DEFAULT_FONT_FACE,
    DEFAULT_IMAGE_GLYPH_HEIGHT,
    DEFAULT_IMAGE_INPUT,
    DEFAULT_SEED,
    OverlayConfig,
)
from .console import die, log
from .errors import BitfieldError
from .fonts import HERSHEY_FACES, load_font
from .glyph_grid import RandomSource
from .media import read_image, write_image
from .pipeline import process_frame


# ============================================================
# Output naming (same folder as input)
# ============================================================

def build_output_name(args) -> str:
    in_path = Path(args.input)
    suffix = in_path.suffix or ".png"
    filename = f"{in_path.stem}_bitfield_h{args.glyph_height}_s{args.seed}{suffix}"
    return str(in_path.parent / filename)


def run(args) -> str:
    cfg = OverlayConfig.from_args(args)
    out_path = args.output or build_output_name(args)

    font = load_font(cfg.font_face, cfg.glyph_height, cfg.thickness)
    metrics = font.metrics
    log(f"font={font!r}")
    log(f"cell={metrics.char_width}x{metrics.char_height} baseline={metrics.baseline_offset}")

    rng = RandomSource(cfg.seed)

    image = read_image(args.input)
    height, width = image.shape[:2]
    log(f"input={args.input} size={width}x{height}")

    canvas = process_frame(image, metrics, font, rng)
    write_image(out_path, canvas)

    log(f"✅ done → {out_path}")
    return out_path


# ============================================================
# CLI
# ============================================================

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="bitfield: binary glyph overlay for images")
    ap.add_argument("input", nargs="?", default=DEFAULT_IMAGE_INPUT)
    ap.add_argument("-o", "--output", default=None,
                    help="output image (default: <input>_bitfield_h<height>_s<seed> beside the input)")
    ap.add_argument("--seed", type=int, default=DEFAULT_SEED,
                    help="seed for the 0/1 sequence")
    ap.add_argument("--font", default=DEFAULT_FONT_FACE, choices=sorted(HERSHEY_FACES),
                    help="Hershey font face")
    ap.add_argument("--glyph-height", type=int, default=DEFAULT_IMAGE_GLYPH_HEIGHT,
                    help="target glyph height in pixels")
    ap.add_argument("--thickness", type=int, default=None,
                    help="stroke thickness (default: glyph height / 12)")
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    log("starting bitfield image")
    try:
        run(args)
    except BitfieldError as exc:
        die(str(exc))


if __name__ == "__main__":
    main()
