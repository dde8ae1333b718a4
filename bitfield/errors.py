"""
Error types for bitfield runs.

Every error names the stage that failed so the CLIs can report it without
a traceback. Nothing here is retried: any of these aborts the run.
"""

from __future__ import annotations


class BitfieldError(RuntimeError):
    stage = "run"

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"{self.stage}: {super().__str__()}"


class InputError(BitfieldError):
    """Input file missing, unreadable or not a decodable image/video."""

    stage = "input"


class FontError(BitfieldError):
    """Unknown font face, degenerate metrics, or a glyph the font cannot draw."""

    stage = "font"


class DecodeError(BitfieldError):
    """A frame failed to decode mid-stream."""

    stage = "decode"


class EncodeError(BitfieldError):
    """Writer could not be opened, rejected a frame, or failed to finish."""

    stage = "encode"
