"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No subprocess or network I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from vidfit.core.analysis import MetadataParser, parse_metadata
from vidfit.core.arguments import build_arguments
from vidfit.core.conversion_service import ConversionService
from vidfit.core.format_catalog import get_audio_formats, get_video_formats
from vidfit.core.models import (
    AudioFormat,
    CandidateSet,
    ContainerInfo,
    ConversionResult,
    Format,
    Resolution,
    VideoFormat,
)
from vidfit.core.protocols import EncoderWorker, ProbeProvider
from vidfit.core.resolution import create_resolution, estimate_h264_size

__all__: list[str] = [
    "AudioFormat",
    "CandidateSet",
    "ContainerInfo",
    "ConversionResult",
    "ConversionService",
    "EncoderWorker",
    "Format",
    "MetadataParser",
    "ProbeProvider",
    "Resolution",
    "VideoFormat",
    "build_arguments",
    "create_resolution",
    "estimate_h264_size",
    "get_audio_formats",
    "get_video_formats",
    "parse_metadata",
]
