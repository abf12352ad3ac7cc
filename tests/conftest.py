"""Shared pytest fixtures and configuration for the vidfit test suite.

Guidelines
----------
* No real ffmpeg in any test — subprocess is mocked at the infra boundary.
* Core tests must be pure — no side effects.
* Tests must not depend on OS state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from vidfit.core.models import AudioFormat, ContainerInfo, Format, VideoFormat


# ---------------------------------------------------------------------------
# Probe output samples
# ---------------------------------------------------------------------------

CONTAINER_LINE = "  Duration: 00:02:00.00, start: 0.000000, bitrate: 4200 kb/s"

VIDEO_LINE = (
    "    Stream #0:0[0x1](und): Video: h264 (High) (avc1 / 0x31637661), "
    "yuv420p(tv, bt709, progressive), 1920x1080 [SAR 1:1 DAR 16:9], "
    "4000 kb/s, 30 fps, 30 tbr, 15360 tbn (default)"
)

AUDIO_LINE = (
    "    Stream #0:1[0x2](und): Audio: aac (LC) (mp4a / 0x6134706D), "
    "48000 Hz, stereo, fltp, 192 kb/s (default)"
)

PROBE_OUTPUT: list[str] = [
    "Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'input clip.mp4':",
    "  Metadata:",
    "    major_brand     : isom",
    CONTAINER_LINE,
    VIDEO_LINE,
    AUDIO_LINE,
    "At least one output file must be specified",
]


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_source(
    *,
    duration: float = 120,
    start: float = 0,
    audio: AudioFormat | None | bool = True,
    **video_overrides: object,
) -> Format:
    """Build a source format; defaults to 1080p30 H.264 with AAC stereo."""
    video_fields: dict[str, object] = {
        "codec": "h264 (High)",
        "color": "yuv420p",
        "width": 1920,
        "height": 1080,
        "bitrate": 4000,
        "fps": 30,
        "original": True,
    }
    video_fields.update(video_overrides)
    if audio is True:
        audio = AudioFormat(
            codec="aac (LC)",
            sample_rate=48000,
            channel_setup="stereo",
            bitrate=192,
            original=True,
        )
    elif audio is False:
        audio = None
    return Format(
        container=ContainerInfo(duration=duration, start=start),
        video=VideoFormat(**video_fields),  # type: ignore[arg-type]
        audio=audio,
    )


@pytest.fixture()
def hd_source() -> Format:
    return make_source()


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """Undo handler changes made by ``configure_logging`` inside a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
