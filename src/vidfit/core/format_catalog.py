"""Candidate target formats for a probed source.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Video candidates are produced in three families, always in this order:

1. **File size** — fit the whole clip into 8, 16 or 50 MB.
2. **Animated image** — a low-frame-rate GIF.
3. **Resolution** — constant quality at a nominal resolution.

Each family may hand back the source stream itself (``original=True``)
when it already satisfies the family's constraints, so no re-encode is
needed.

Resolution ladders are immutable tuples in descending order.  Families
that walk a ladder smallest-first iterate a reversed view of it.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Sequence

from vidfit.core.models import AudioFormat, Format, Resolution, VideoFormat
from vidfit.core.resolution import create_resolution, estimate_h264_size, reduce_fps

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

H264_CODEC: str = "h264 (High)"
H264_COLOR: str = "yuv420p"
GIF_CODEC: str = "gif"
GIF_COLOR: str = "bgra"
GIF_FPS: float = 100 / 6
"""GIF frame delays are stored in hundredths of a second; 6/100 s per frame."""

SIZE_TARGETS_KB: tuple[int, ...] = (8000, 16000, 50000)
SIZE_SAFETY_MARGIN: float = 0.88
"""Undershoot for container overhead and average-bitrate variance."""

MIN_PLAUSIBLE_BITRATE: float = 100
WORST_CRF: int = 28
BEST_CRF: int = 18
RESOLUTION_TARGET_CRF: int = 21

MAX_COMPATIBLE_WIDTH: int = 1920
MAX_COMPATIBLE_HEIGHT: int = 1080
MAX_COMPATIBLE_FPS: float = 60
RESOLUTION_LEEWAY: float = 1.5

AUDIO_HIGH_REUSE_LIMIT: float = 260
AUDIO_LOW_BITRATE: float = 32
AUDIO_HIGH_BITRATE: float = 192


# ---------------------------------------------------------------------------
# Ladders
# ---------------------------------------------------------------------------

def drop_duplicate_widths(resolutions: Sequence[Resolution]) -> tuple[Resolution, ...]:
    """Drop every entry whose *next* entry resolves to the same width.

    Only adjacent entries are compared, so the result depends on the
    input order.  Small sources collapse several boxes onto the same
    actual size; the last (smallest nominal) one survives.
    """
    return tuple(
        res
        for index, res in enumerate(resolutions)
        if index + 1 >= len(resolutions) or resolutions[index + 1].width != res.width
    )


def rough_resolutions(source: Format) -> tuple[Resolution, ...]:
    """User-facing ladder: 16:9 small HD and 4:3 PAL."""
    return drop_duplicate_widths(
        (
            create_resolution(source, 1280, 720),
            create_resolution(source, 640, 480),
        )
    )


def fine_resolutions(source: Format) -> tuple[Resolution, ...]:
    """Ladder of sensible resolutions for automatic size targets."""
    return drop_duplicate_widths(
        (
            create_resolution(source, 1280, 720),
            create_resolution(source, 854, 480),
            create_resolution(source, 640, 360),
            create_resolution(source, 426, 240),
        )
    )


def gif_resolutions(source: Format) -> tuple[Resolution, ...]:
    return (create_resolution(source, 600, 600),)


# ---------------------------------------------------------------------------
# Video families
# ---------------------------------------------------------------------------

def _reuse_video(video: VideoFormat, preset: str) -> VideoFormat:
    """Clone the source stream, overriding only the candidate identity."""
    return dataclasses.replace(video, preset=preset, original=True)


def video_file_size_targets(
    source: Format,
    resolutions: Sequence[Resolution],
) -> list[VideoFormat]:
    """Candidates that keep the whole clip under 8, 16 and 50 MB.

    *resolutions* must be in descending order; the first entry whose
    worst-quality estimate fits the budget is used.
    """
    container, video = source.container, source.video
    audio_bitrate = source.audio.bitrate if source.audio is not None else 0
    options: list[VideoFormat] = []

    for total_size_target in SIZE_TARGETS_KB:
        preset = f"size_{total_size_target // 1000}mb"
        size_target = total_size_target * SIZE_SAFETY_MARGIN
        bitrate_target = size_target * 8 / container.duration - audio_bitrate

        resolution = next(
            (
                res
                for res in resolutions
                if size_target >= estimate_h264_size(res, WORST_CRF, container.duration)
            ),
            None,
        )
        if resolution is None or bitrate_target < MIN_PLAUSIBLE_BITRATE:
            worst = resolutions[-1]
            logger.debug(
                "%s: budget cannot be met (bitrate %.1f kb/s), falling back to %dx%d",
                preset,
                bitrate_target,
                worst.width,
                worst.height,
            )
            options.append(
                VideoFormat(
                    preset=preset,
                    implausible=True,
                    codec=H264_CODEC,
                    color=H264_COLOR,
                    width=worst.width,
                    height=worst.height,
                    rotation=0,
                    bitrate=math.floor(bitrate_target),
                    fps=reduce_fps(video.fps, worst.fps),
                )
            )
            continue

        # Never spend more bits than the best sensible quality needs.
        max_size = estimate_h264_size(resolution, BEST_CRF, container.duration)
        max_bitrate = max_size * 8 / container.duration
        if max_bitrate < bitrate_target:
            size_target = max_size
            bitrate_target = max_bitrate

        # Only the average source bitrate is known, so allow some leeway
        # by dividing by 6 instead of 8.
        original_suitable = (
            video.codec.startswith("h264")
            and video.color == H264_COLOR
            and video.width <= MAX_COMPATIBLE_WIDTH
            and video.height <= MAX_COMPATIBLE_HEIGHT
            and video.fps <= MAX_COMPATIBLE_FPS
            and video.bitrate is not None
            and video.bitrate * container.duration / 6 <= size_target
        )

        if original_suitable:
            logger.debug("%s: source stream already fits", preset)
            options.append(_reuse_video(video, preset))
        else:
            options.append(
                VideoFormat(
                    preset=preset,
                    codec=H264_CODEC,
                    color=H264_COLOR,
                    width=resolution.width,
                    height=resolution.height,
                    rotation=0,
                    bitrate=math.floor(bitrate_target),
                    fps=reduce_fps(video.fps, resolution.fps),
                )
            )

    return options


def video_gif_targets(
    source: Format,
    resolutions: Sequence[Resolution],
) -> list[VideoFormat]:
    """Animated-image candidates, smallest first.  Never reuses the source."""
    return [
        VideoFormat(
            preset=f"gif_{resolution.expected_height}p",
            codec=GIF_CODEC,
            color=GIF_COLOR,
            width=resolution.width,
            height=resolution.height,
            rotation=0,
            fps=GIF_FPS,
        )
        for resolution in reversed(resolutions)
    ]


def video_resolution_targets(
    source: Format,
    resolutions: Sequence[Resolution],
) -> list[VideoFormat]:
    """Constant-quality candidates per nominal resolution, smallest first."""
    container, video = source.container, source.video
    options: list[VideoFormat] = []

    for resolution in reversed(resolutions):
        preset = f"crf_{resolution.expected_height}p"
        # 50% leeway: the 1280x720 target also accepts a 1920x1080 source.
        original_suitable = (
            video.codec.startswith("h264")
            and video.color == H264_COLOR
            and video.width <= resolution.width * RESOLUTION_LEEWAY
            and video.height <= resolution.height * RESOLUTION_LEEWAY
            and video.fps <= MAX_COMPATIBLE_FPS
            and video.bitrate is not None
            and video.bitrate * container.duration / 8
            <= estimate_h264_size(resolution, BEST_CRF, container.duration)
        )

        if original_suitable:
            logger.debug("%s: source stream already fits", preset)
            options.append(_reuse_video(video, preset))
        else:
            options.append(
                VideoFormat(
                    preset=preset,
                    original=False,
                    codec=H264_CODEC,
                    color=H264_COLOR,
                    width=resolution.width,
                    height=resolution.height,
                    rotation=0,
                    crf=RESOLUTION_TARGET_CRF,
                    fps=reduce_fps(video.fps, resolution.fps),
                )
            )

    return options


# ---------------------------------------------------------------------------
# Public catalog
# ---------------------------------------------------------------------------

def get_video_formats(source: Format) -> list[VideoFormat]:
    """All video candidates: file size, then GIF, then resolution targets."""
    return [
        *video_file_size_targets(source, fine_resolutions(source)),
        *video_gif_targets(source, gif_resolutions(source)),
        *video_resolution_targets(source, rough_resolutions(source)),
    ]


def _snap_sample_rate(sample_rate: int) -> int:
    return 44100 if sample_rate == 44100 else 48000


def get_audio_formats(source: Format) -> list[AudioFormat]:
    """Audio candidates: disabled, low bitrate, high bitrate.

    Only the disabled entry is returned when the source has no audio.
    """
    options: list[AudioFormat] = [
        AudioFormat(
            preset="none",
            codec="none",
            sample_rate=0,
            channel_setup="none",
            bitrate=0,
        )
    ]

    audio = source.audio
    if audio is None or audio.codec == "none":
        return options

    sample_rate = _snap_sample_rate(audio.sample_rate)
    options.append(
        AudioFormat(
            preset="bitrate_low",
            codec="aac (HE-AACv2)",
            sample_rate=sample_rate,
            channel_setup="stereo",
            bitrate=AUDIO_LOW_BITRATE,
        )
    )

    original_suitable = (
        audio.codec.startswith("aac") and audio.bitrate < AUDIO_HIGH_REUSE_LIMIT
    )
    if original_suitable:
        options.append(dataclasses.replace(audio, preset="bitrate_high", original=True))
    else:
        options.append(
            AudioFormat(
                preset="bitrate_high",
                codec="aac (LC)",
                sample_rate=sample_rate,
                channel_setup="stereo",
                bitrate=AUDIO_HIGH_BITRATE,
            )
        )

    return options


def estimate_candidate_size(
    video: VideoFormat,
    audio: AudioFormat,
    duration: float,
) -> float | None:
    """Rough output size in kilobytes for presenting a candidate pair.

    Returns ``None`` when the video stream's size cannot be guessed
    (GIF, or a reused stream of unknown bitrate).
    """
    if video.codec == "none":
        video_kbit: float | None = 0
    elif video.crf is not None:
        video_kbit = 8 * estimate_h264_size(
            Resolution(
                width=video.width,
                height=video.height,
                fps=video.fps,
                expected_width=video.width,
                expected_height=video.height,
            ),
            video.crf,
            duration,
        )
    elif video.bitrate is not None and not video.codec.startswith(GIF_CODEC):
        video_kbit = video.bitrate * duration
    else:
        video_kbit = None

    if video_kbit is None:
        return None
    return (video_kbit + audio.bitrate * duration) / 8
