"""bitfield: darken, blur and cover images or video in a grid of 0/1 glyphs."""

from .compositor import composite
from .effect import blur, darken, transform
from .errors import BitfieldError, DecodeError, EncodeError, FontError, InputError
from .fonts import FontMetrics, GlyphFont, load_font
from .glyph_grid import RandomSource, generate_grid
from .pipeline import grid_size, process_frame, run_frames

__all__ = [
    "BitfieldError",
    "DecodeError",
    "EncodeError",
    "FontError",
    "FontMetrics",
    "GlyphFont",
    "InputError",
    "RandomSource",
    "blur",
    "composite",
    "darken",
    "generate_grid",
    "grid_size",
    "load_font",
    "process_frame",
    "run_frames",
    "transform",
]

__version__ = "0.1.0"
