"""Core conversion service — orchestrates probe, catalog and encode.

This is the central service class consumed by the CLI layer.  It
depends on a :class:`~vidfit.core.protocols.ProbeProvider` and an
:class:`~vidfit.core.protocols.EncoderWorker` injected at construction
time (dependency inversion), keeping the core free of any subprocess
imports.

Guarantees
----------
* Pure orchestration — no ``print()``, no direct filesystem writes.
* Only :class:`~vidfit.exceptions.VidfitError` subclasses escape.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from pathlib import Path

from vidfit.core.analysis import parse_metadata
from vidfit.core.arguments import build_arguments
from vidfit.core.format_catalog import get_audio_formats, get_video_formats
from vidfit.core.models import (
    AudioFormat,
    CandidateSet,
    ContainerInfo,
    ConversionResult,
    Format,
    VideoFormat,
)
from vidfit.core.protocols import EncoderWorker, ProbeProvider, ProgressCallback
from vidfit.exceptions import (
    ConversionFailedError,
    InputFileError,
    InvalidClipError,
    PresetNotFoundError,
    ProbeFailedError,
    VidfitError,
)

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"\.\w{2,4}$|$")


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def output_filename(name: str) -> str:
    """Replace a 2–4 character extension with ``.mp4``, or append it."""
    return _EXTENSION_RE.sub(".mp4", name, count=1)


def normalize_progress(ratio: float) -> float:
    """Pass through ratios in ``[0, 1]``; anything else reads as 0."""
    return ratio if 0 <= ratio <= 1 else 0.0


def clip_container(
    container: ContainerInfo,
    start: float | None = None,
    duration: float | None = None,
    *,
    limit: float | None = None,
) -> ContainerInfo:
    """Clamp a requested clip window into the source container.

    The duration is capped at *limit* (when given) and at the source
    duration; the start is then clamped so the whole window stays
    inside the source.

    Raises
    ------
    InvalidClipError
        If the clamped window is empty.
    """
    max_duration = min(limit, container.duration) if limit is not None else container.duration
    wanted = duration if duration is not None else max_duration
    clipped_duration = min(max(wanted, 0.0), max_duration)
    if clipped_duration <= 0:
        raise InvalidClipError(
            f"Clip duration must be positive (got {wanted:g}s).",
            hint="Pass a --duration greater than zero.",
        )

    wanted_start = start if start is not None else container.start
    latest_start = container.start + container.duration - clipped_duration
    clipped_start = min(max(wanted_start, container.start), latest_start)

    return ContainerInfo(duration=clipped_duration, start=clipped_start)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ConversionService:
    """Stateless service driving analysis, candidate listing and encoding.

    Parameters
    ----------
    probe:
        Any object satisfying the :class:`ProbeProvider` protocol.
    worker:
        Any object satisfying the :class:`EncoderWorker` protocol.
    """

    def __init__(self, probe: ProbeProvider, worker: EncoderWorker) -> None:
        self._probe: ProbeProvider = probe
        self._worker: EncoderWorker = worker

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self, path: Path) -> Format:
        """Probe *path* and return its source format.

        Raises
        ------
        InputFileError
            If *path* is not an existing file.
        ProbeFailedError
            If the probe backend fails.
        AnalysisIncompleteError
            If the probe output lacks a container or video stream.
        """
        self._validate_input(path)
        try:
            lines = self._probe.probe(path)
        except VidfitError:
            raise
        except Exception as exc:
            raise ProbeFailedError(f"Unexpected probe error: {exc}") from exc

        source = parse_metadata(lines)
        logger.info(
            "Analyzed %s: %.3fs, %dx%d %s",
            path.name,
            source.container.duration,
            source.video.width,
            source.video.height,
            source.video.codec,
        )
        return source

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    @staticmethod
    def list_formats(source: Format, clip: ContainerInfo | None = None) -> CandidateSet:
        """Generate candidates, sized for *clip* when one is given."""
        basis = source if clip is None else dataclasses.replace(source, container=clip)
        return CandidateSet(
            video=tuple(get_video_formats(basis)),
            audio=tuple(get_audio_formats(basis)),
        )

    @staticmethod
    def select(
        candidates: CandidateSet,
        video_preset: str,
        audio_preset: str,
    ) -> tuple[VideoFormat, AudioFormat]:
        """Look up a video and an audio candidate by preset.

        Raises
        ------
        PresetNotFoundError
            If either preset is not offered.
        """
        video = next((v for v in candidates.video if v.preset == video_preset), None)
        if video is None:
            raise PresetNotFoundError(
                f"Unknown video preset: {video_preset}",
                hint="Available: " + ", ".join(v.preset for v in candidates.video),
            )
        audio = next((a for a in candidates.audio if a.preset == audio_preset), None)
        if audio is None:
            raise PresetNotFoundError(
                f"Unknown audio preset: {audio_preset}",
                hint="Available: " + ", ".join(a.preset for a in candidates.audio),
            )
        return video, audio

    @staticmethod
    def compose_target(
        source: Format,
        video: VideoFormat,
        audio: AudioFormat,
        clip: ContainerInfo | None = None,
    ) -> Format:
        """Assemble the target format for a chosen candidate pair."""
        return Format(
            container=clip if clip is not None else source.container,
            video=video,
            audio=audio,
        )

    # ------------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------------

    def convert(
        self,
        path: Path,
        source: Format,
        target: Format,
        output: Path,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> ConversionResult:
        """Encode *path* into *target*.

        Argument synthesis errors (unsupported codec, missing rate
        control) are raised before the worker is started.

        Raises
        ------
        UnsupportedCodecError
        MissingRateControlError
        ConversionFailedError
            When the worker fails for any reason.
        """
        args = build_arguments(source, target, str(path), str(output))
        logger.debug("Encoder arguments: %s", args)

        def _on_progress(ratio: float) -> None:
            if progress_callback is not None:
                progress_callback(normalize_progress(ratio))

        try:
            payload = self._worker.run(
                args,
                output,
                duration=target.container.duration,
                progress_callback=_on_progress,
            )
        except VidfitError:
            raise
        except Exception as exc:
            raise ConversionFailedError(f"Unexpected encoder error: {exc}") from exc

        logger.info("Encoded %s (%d bytes)", path.name, len(payload))
        return ConversionResult(
            payload=payload,
            filename=output_filename(path.name),
            format=target,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_input(path: Path) -> None:
        """Raise :class:`InputFileError` unless *path* is an existing file."""
        if not path.is_file():
            raise InputFileError(
                f"Input file not found: {path}",
                hint="Pass the path of an existing video file.",
            )
