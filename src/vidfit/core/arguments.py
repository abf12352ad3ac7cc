"""Translate a (source, target) format pair into ffmpeg arguments.

The produced list is passed verbatim as the encoder command line, so
the order of tokens is part of the contract:

``-hide_banner -y [-ss] [-t] -i <input> <video> <audio> -sn -dn -f mp4
-movflags +faststart <output>``

Guarantees
----------
* Pure mapping — no I/O, no ``print()``.
* Unsupported codecs and video targets without rate control are fatal
  and raise immediately; nothing is substituted.
"""

from __future__ import annotations

from vidfit.core.models import Format
from vidfit.exceptions import MissingRateControlError, UnsupportedCodecError
from vidfit.utils.text import format_number

VIDEO_ENCODER: str = "libx264"
AUDIO_ENCODER: str = "libfdk_aac"
OUTPUT_CONTAINER: str = "mp4"


# ---------------------------------------------------------------------------
# Trimming
# ---------------------------------------------------------------------------

def trim_arguments(source: Format, target: Format) -> list[str]:
    """Seek and duration limit for the target's clip window.

    Nothing is emitted when the target covers the source from its
    first timestamp to its end.
    """
    args: list[str] = []
    start = target.container.start
    duration = target.container.duration

    if start > source.container.start:
        args += ["-ss", format_number(start)]

    if duration < source.container.duration - start:
        args += ["-t", format_number(duration)]

    return args


# ---------------------------------------------------------------------------
# Streams
# ---------------------------------------------------------------------------

def video_arguments(source: Format, target: Format) -> list[str]:
    """Video stream options.

    Raises
    ------
    UnsupportedCodecError
        When the target codec is not H.264.
    MissingRateControlError
        When the target sets neither ``crf`` nor ``bitrate``.
    """
    video = target.video
    if video.codec == "none":
        return ["-vn"]

    args: list[str] = ["-pix_fmt:v", video.color, "-sws_flags", "bilinear"]

    if video.width != source.video.width or video.height != source.video.height:
        args += ["-s:v", f"{video.width}x{video.height}"]

    if source.video.fps > video.fps:
        args += ["-r:v", format_number(video.fps)]

    if not video.codec.startswith("h264"):
        raise UnsupportedCodecError(f"Unsupported video codec: {video.codec}")

    args += ["-c:v", VIDEO_ENCODER, "-preset:v", "fast", "-profile:v", "high"]

    if video.crf is not None:
        args += ["-crf:v", format_number(video.crf)]
    elif video.bitrate is not None:
        args += ["-b:v", f"{format_number(video.bitrate)}k"]
    else:
        raise MissingRateControlError(
            f"No video bitrate or crf specified for preset {video.preset!r}",
        )

    return args


def audio_profile(channel_setup: str, bitrate: float) -> str | None:
    """Pick the AAC encoder profile for a channel layout and bitrate.

    ``bitrate <= 72`` selects HE-AAC regardless of the layout, so mono
    and surround sources up to 72 kb/s are treated like low-rate stereo.
    """
    if channel_setup == "stereo" and bitrate <= 48:
        return "aac_he_v2"
    if (channel_setup == "mono" and bitrate <= 48) or bitrate <= 72:
        return "aac_he"
    return None


def audio_arguments(source: Format, target: Format) -> list[str]:
    """Audio stream options.

    Raises
    ------
    UnsupportedCodecError
        When the target codec is not AAC.
    """
    audio = target.audio
    if audio is None or audio.codec == "none":
        return ["-an"]

    args: list[str] = ["-ar", format_number(audio.sample_rate)]

    if not audio.codec.startswith("aac"):
        raise UnsupportedCodecError(f"Unsupported audio codec: {audio.codec}")

    args += [
        "-c:a", AUDIO_ENCODER,
        "-b:a", f"{format_number(audio.bitrate)}k",
        # Always downmix to stereo; mono output is untested.
        "-ac", "2",
        "-strict", "-2",
    ]

    profile = audio_profile(audio.channel_setup, audio.bitrate)
    if profile is not None:
        args += ["-profile:a", profile]

    return args


# ---------------------------------------------------------------------------
# Full command line
# ---------------------------------------------------------------------------

def build_arguments(
    source: Format,
    target: Format,
    input_name: str,
    output_name: str,
) -> list[str]:
    """Build the complete, ordered ffmpeg argument list.

    Parameters
    ----------
    source:
        The probed source format.
    target:
        The chosen target format, with the clip window in its container.
    input_name:
        Path of the source file as the encoder should see it.
    output_name:
        Path the encoder writes to.
    """
    return [
        "-hide_banner",
        "-y",
        *trim_arguments(source, target),
        "-i", input_name,
        *video_arguments(source, target),
        *audio_arguments(source, target),
        "-sn",  # no subtitles
        "-dn",  # no data streams
        "-f", OUTPUT_CONTAINER,
        # Moves the index to the front so playback can start while loading.
        "-movflags", "+faststart",
        output_name,
    ]
