"""Resolution fitting and H.264 size heuristics.

Every function in this module is a **pure** computation — no I/O, no
side effects, fully deterministic.
"""

from __future__ import annotations

import math

from vidfit.core.models import Format, Resolution

DEFAULT_FPS: float = 30
"""Frame-rate ceiling used for ladder entries unless stated otherwise."""


def _round_even(value: float, limit: int) -> int:
    """Round *value* half-up to the nearest even integer not above *limit*."""
    even = math.floor(value / 2 + 0.5) * 2
    return even - 2 if even > limit else even


def create_resolution(
    source: Format,
    width: int,
    height: int,
    fps: float = DEFAULT_FPS,
) -> Resolution:
    """Fit the source video into a ``width`` × ``height`` box.

    The aspect ratio is preserved and the source is never upscaled:
    an odd source dimension that would round up is rounded down instead.
    Both output dimensions are divisible by 2, as ``yuv420p`` requires.
    """
    video = source.video
    scale = min(1.0, width / video.width, height / video.height)
    return Resolution(
        width=_round_even(video.width * scale, video.width),
        height=_round_even(video.height * scale, video.height),
        fps=fps,
        expected_width=width,
        expected_height=height,
    )


def estimate_h264_size(
    resolution: Resolution,
    crf: float,
    duration: float = 8,
) -> int:
    """Estimate the size of an H.264 stream in kilobytes.

    This can vary widely depending on the content, so it is only good
    for sanity checks and relative comparisons.  Sensible values for
    *crf* are 18 (good quality) to 28 (very low quality).

    With the default duration of 8 seconds the result reads directly
    as kb/s.
    """
    return math.floor(
        resolution.width
        * resolution.height
        * duration
        * math.log2(resolution.fps)
        / 20
        / crf**2
    )


def reduce_fps(source_fps: float, target_fps: float) -> float:
    """Return the highest rate ≤ *target_fps* reachable by dropping frames uniformly."""
    return source_fps / math.ceil(source_fps / target_fps)
