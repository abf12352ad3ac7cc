"""Incremental parser for ffmpeg's stream announcement output.

Source metadata is read from the informational log that
``ffmpeg -i <file>`` prints before it complains about the missing
output, so no ffprobe binary is needed.  :class:`MetadataParser` is fed
that log one line at a time.

State machine
-------------
Each line is offered to three classifiers in a fixed order:

1. **container** — ``Duration: …, start: …, bitrate: … kb/s``
2. **video** — ``Stream #…: Video: …`` (only once a container is known)
3. **audio** — ``Stream #…: Audio: …`` (only once a container is known)

The first classifier that recognises the line produces a partial
update to the accumulator.  A later video or audio line overwrites an
earlier one.  Every line is retained for diagnostics.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import reduce

from vidfit.core.models import AudioFormat, ContainerInfo, Format, VideoFormat
from vidfit.exceptions import AnalysisIncompleteError

logger = logging.getLogger(__name__)


_CONTAINER_RE = re.compile(
    r"Duration: (?P<duration>\d+:\d+:\d+\.\d+), "
    r"start: (?P<start>[\d.]+), "
    r"bitrate: (?P<bitrate>[\d.]+) kb/s"
)

# A codec or pixel format may carry parenthesised details containing commas,
# e.g. ``yuv420p(tv, bt709, progressive)``.
_FIELD = r"[^,]+(?:[^,]*\([^)]*\))*"

_VIDEO_RE = re.compile(
    r"Stream #[^:,]+:[^:,]+: Video: "
    rf"(?P<codec>{_FIELD}), "
    rf"(?P<color>{_FIELD}), "
    r"(?P<width>\d+)x(?P<height>\d+)[^,]*"
    r"(?:, (?P<bitrate>[\d.]+) kb/s)?, "
    r"(?P<fps>[\d.]+) fps, "
    r"(?P<tbr>[\d.]+) tbr"
)

_AUDIO_RE = re.compile(
    r"Stream #[^:,]+:[^:,]+: Audio: "
    rf"(?P<codec>{_FIELD}), "
    r"(?P<sample_rate>\d+) Hz, "
    r"(?P<channel_setup>[^,]+), "
    r"[^,]+, "
    r"(?P<bitrate>[\d.]+) kb/s"
)


def parse_timestamp(value: str) -> float:
    """Convert ``HH:MM:SS.ff`` into seconds.

    Each colon-separated part is folded as ``acc * 60 + part``, so any
    number of parts is accepted.
    """
    return reduce(lambda acc, part: acc * 60 + part, map(float, value.split(":")))


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class _Partial:
    """Mutable accumulator filled while lines are fed."""

    container: ContainerInfo | None = None
    video: VideoFormat | None = None
    audio: AudioFormat | None = None


# ---------------------------------------------------------------------------
# Line classifiers
# ---------------------------------------------------------------------------

def _classify_container(line: str, partial: _Partial) -> dict[str, object] | None:
    match = _CONTAINER_RE.search(line)
    if match is None:
        return None
    return {
        "container": ContainerInfo(
            duration=parse_timestamp(match["duration"]),
            start=float(match["start"]),
        ),
    }


def _classify_video(line: str, partial: _Partial) -> dict[str, object] | None:
    if partial.container is None:
        return None
    match = _VIDEO_RE.search(line)
    if match is None:
        return None

    bitrate = float(match["bitrate"]) if match["bitrate"] is not None else None
    expected_size = (
        bitrate * partial.container.duration / 8 if bitrate is not None else None
    )
    return {
        "video": VideoFormat(
            codec=match["codec"],
            color=match["color"],
            width=int(match["width"]),
            height=int(match["height"]),
            bitrate=bitrate,
            # Decoders report the accurate rate in either field; the larger
            # one is safe for the ceiling divisions done downstream.
            fps=max(float(match["fps"]), float(match["tbr"])),
            original=True,
            expected_size=expected_size,
        ),
    }


def _classify_audio(line: str, partial: _Partial) -> dict[str, object] | None:
    if partial.container is None:
        return None
    match = _AUDIO_RE.search(line)
    if match is None:
        return None

    bitrate = float(match["bitrate"])
    return {
        "audio": AudioFormat(
            codec=match["codec"],
            sample_rate=int(match["sample_rate"]),
            channel_setup=match["channel_setup"],
            bitrate=bitrate,
            original=True,
            expected_size=bitrate * partial.container.duration / 8,
        ),
    }


_Classifier = Callable[[str, _Partial], "dict[str, object] | None"]

_CLASSIFIERS: tuple[_Classifier, ...] = (
    _classify_container,
    _classify_video,
    _classify_audio,
)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class MetadataParser:
    """Stateful line consumer producing the source :class:`Format`.

    Usage::

        parser = MetadataParser()
        for line in probe_output:
            parser.feed(line)
        source = parser.finalize()
    """

    def __init__(self) -> None:
        self._partial = _Partial()
        self._lines: list[str] = []

    @property
    def lines(self) -> tuple[str, ...]:
        """Every line fed so far, verbatim."""
        return tuple(self._lines)

    def feed(self, line: str) -> None:
        """Consume a single diagnostic line."""
        self._lines.append(line)
        for classify in _CLASSIFIERS:
            update = classify(line, self._partial)
            if update is not None:
                for field, value in update.items():
                    setattr(self._partial, field, value)
                logger.debug("Parsed %s from: %s", ", ".join(update), line.strip())
                return

    def feed_all(self, lines: Iterable[str]) -> MetadataParser:
        """Consume every line of *lines*; returns ``self`` for chaining."""
        for line in lines:
            self.feed(line)
        return self

    def finalize(self) -> Format:
        """Return the source format.

        Raises
        ------
        AnalysisIncompleteError
            When no container or no video stream was announced, or the
            container duration is zero.  The error carries every line
            that was fed.
        """
        partial = self._partial
        if partial.container is None or partial.video is None:
            missing = [
                name
                for name, value in (("container", partial.container), ("video", partial.video))
                if value is None
            ]
            raise AnalysisIncompleteError(
                f"Could not analyze video: no {' or '.join(missing)} information found.\n"
                + "\n".join(self._lines),
                lines=self._lines,
                hint="The file may be damaged or not contain a video stream.",
            )
        if partial.container.duration <= 0:
            raise AnalysisIncompleteError(
                "Could not analyze video: the container reports no duration.\n"
                + "\n".join(self._lines),
                lines=self._lines,
                hint="Single-frame or truncated files cannot be converted.",
            )
        return Format(
            container=partial.container,
            video=partial.video,
            audio=partial.audio,
        )


def parse_metadata(lines: Iterable[str]) -> Format:
    """Parse a complete probe log in one call."""
    return MetadataParser().feed_all(lines).finalize()
