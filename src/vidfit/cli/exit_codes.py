"""Process exit codes returned by ``vidfit``.

Scripts wrapping the CLI can tell a bad input file apart from a broken
ffmpeg installation without parsing the error text.
"""

from __future__ import annotations

SUCCESS: int = 0

GENERAL_ERROR: int = 1
"""A VidfitError without a more specific code below."""

UNEXPECTED_ERROR: int = 2
"""A non-vidfit exception reached the error boundary (a bug)."""

INPUT_ERROR: int = 3
"""The input file is missing, could not be analyzed, or the clip is empty."""

ENCODER_ERROR: int = 4
"""ffmpeg is missing, failed to start, or the encode failed."""

KEYBOARD_INTERRUPT: int = 130
"""128 + SIGINT, as POSIX shells report it."""
