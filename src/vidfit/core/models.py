"""Domain models for vidfit.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O, zero dependencies on
external packages, and must remain pure across the entire lifecycle.

A *source* :class:`Format` is produced once by the metadata parser.
*Candidate* formats are produced by the catalog; many candidates share
one source and none of them is ever mutated.
"""

from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ContainerInfo:
    """Outer media wrapper timing."""

    duration: float
    """Duration in seconds."""

    start: float
    """Offset of the first presented timestamp, in seconds."""


# ---------------------------------------------------------------------------
# Streams
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class VideoFormat:
    """Video stream description — either a probed source or a target.

    Synthesized H.264 targets carry exactly one of :attr:`crf` and
    :attr:`bitrate`.  Targets that reuse the source stream are full
    copies of it with :attr:`original` set.
    """

    codec: str
    """Codec family with optional profile, e.g. ``"h264 (High)"``."""

    color: str
    """Pixel format tag, e.g. ``"yuv420p"``."""

    width: int

    height: int

    fps: float

    bitrate: float | None = None
    """kb/s, or ``None`` when unknown and not to be trusted."""

    rotation: int = 0
    """Degrees — 0, 90, 180 or 270."""

    crf: int | None = None

    original: bool = False
    """``True`` when this entry reuses the source stream verbatim."""

    implausible: bool = False
    """``True`` when the size estimator could not satisfy the budget."""

    preset: str = ""
    """Stable identifier of the candidate (``"size_16mb"``, ``"crf_720p"``)."""

    expected_size: float | None = None
    """Kilobytes implied by the probed bitrate over the whole duration."""


@dataclass(frozen=True, slots=True)
class AudioFormat:
    """Audio stream description — either a probed source or a target."""

    codec: str
    """Codec family with optional profile.  ``"none"`` disables audio."""

    sample_rate: int

    channel_setup: str
    """``"none"``, ``"mono"`` or ``"stereo"`` for targets; sources keep
    the probe's layout label verbatim (e.g. ``"5.1(side)"``)."""

    bitrate: float
    """kb/s."""

    original: bool = False

    preset: str = ""

    expected_size: float | None = None


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Format:
    """A complete media description: container plus its streams.

    ``audio`` is ``None`` on a source without an audio stream.  Targets
    always carry an audio entry (codec ``"none"`` when disabled).
    """

    container: ContainerInfo
    video: VideoFormat
    audio: AudioFormat | None = None


# ---------------------------------------------------------------------------
# Transient helpers
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Resolution:
    """Scaled encode dimensions plus the nominal box they were fitted into."""

    width: int
    """Actual encode width — always even."""

    height: int
    """Actual encode height — always even."""

    fps: float

    expected_width: int
    """Nominal box width, used for labelling."""

    expected_height: int
    """Nominal box height, used for labelling (``crf_720p``)."""


@dataclass(frozen=True, slots=True)
class CandidateSet:
    """Ordered video and audio candidates generated for one source."""

    video: tuple[VideoFormat, ...]
    audio: tuple[AudioFormat, ...]

    def __len__(self) -> int:
        return len(self.video) + len(self.audio)

    def __bool__(self) -> bool:
        return len(self) > 0


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Outcome of a successful encode."""

    payload: bytes
    """Encoded MP4 bytes."""

    filename: str
    """Suggested output file name (input stem with ``.mp4``)."""

    format: Format
    """The target format actually used."""
