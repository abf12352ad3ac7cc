"""Infrastructure layer — external system integration.

This layer wraps all interaction with the operating system and ffmpeg.
Every raw subprocess or OS exception must be caught here and re-raised
as a :class:`~vidfit.exceptions.VidfitError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from vidfit.infra.ffmpeg_detector import FfmpegStatus, detect_ffmpeg, require_ffmpeg
from vidfit.infra.ffmpeg_probe import FfmpegProbeProvider
from vidfit.infra.ffmpeg_worker import FfmpegEncoderWorker

__all__: list[str] = [
    "FfmpegEncoderWorker",
    "FfmpegProbeProvider",
    "FfmpegStatus",
    "detect_ffmpeg",
    "require_ffmpeg",
]
