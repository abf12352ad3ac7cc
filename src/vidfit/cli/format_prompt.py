"""Interactive candidate selection UI for the CLI layer.

This module is responsible for:

* Rendering Rich tables for the probed source and its candidates.
* Prompting the user to pick a video and an audio candidate via
  questionary arrow keys.
* Returning the selected presets.

All display-related logic lives here — no business logic, no encoding,
no metadata parsing.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from vidfit.cli.console import console
from vidfit.core.format_catalog import estimate_candidate_size
from vidfit.core.models import AudioFormat, CandidateSet, ContainerInfo, Format, VideoFormat
from vidfit.exceptions import EnvironmentError, PresetNotFoundError
from vidfit.utils.text import format_number


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for candidate rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms, no I/O)
# ---------------------------------------------------------------------------

def _format_size(kilobytes: float | None) -> str:
    """Render kilobytes as ``"12.3 MB"`` or ``"Unknown"``."""
    if kilobytes is None:
        return "Unknown"
    return f"{kilobytes / 1000:.1f} MB"


def _format_duration(seconds: float) -> str:
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m {rest:06.3f}s"


def _format_rate(video: VideoFormat) -> str:
    """Render the rate control of a video stream."""
    if video.crf is not None:
        return f"crf {video.crf}"
    if video.bitrate is not None:
        return f"{format_number(video.bitrate)} kb/s"
    return "—"


def _video_notes(video: VideoFormat) -> str:
    notes: list[str] = []
    if video.original:
        notes.append("original")
    if video.implausible:
        notes.append("implausible")
    return ", ".join(notes)


def _audio_description(audio: AudioFormat) -> str:
    if audio.codec == "none":
        return "no audio"
    description = (
        f"{audio.codec}, {audio.channel_setup}, "
        f"{audio.sample_rate} Hz, {format_number(audio.bitrate)} kb/s"
    )
    if audio.original:
        description += " (original)"
    return description


def _build_video_label(video: VideoFormat, size: float | None) -> str:
    """Single-line label shown in the questionary selector.

    Format: ``"size_16mb    640x360     30fps   746 kb/s    12.3 MB"``
    """
    resolution = f"{video.width}x{video.height}"
    fps = f"{video.fps:.4g}fps"
    label = (
        f"{video.preset:<12} {resolution:<11} {fps:>8}   "
        f"{_format_rate(video):<12} {_format_size(size)}"
    )
    notes = _video_notes(video)
    if notes:
        label += f"  [{notes}]"
    return label


# ---------------------------------------------------------------------------
# Rich table display
# ---------------------------------------------------------------------------

def display_source(name: str, source: Format) -> None:
    """Print a Rich table summarising the probed source."""
    table_class = _import_rich_table()
    video = source.video

    table = table_class(
        title=name,
        show_header=False,
        border_style="dim",
    )
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Duration", _format_duration(source.container.duration))
    table.add_row("Start", f"{source.container.start:.3f}s")
    table.add_row(
        "Video",
        f"{video.codec}, {video.color}, {video.width}x{video.height}, "
        f"{video.fps:.4g} fps, {_format_rate(video)}",
    )
    table.add_row(
        "Audio",
        _audio_description(source.audio) if source.audio is not None else "no audio",
    )

    console.print()
    console.print(table)
    console.print()


def display_candidates(candidates: CandidateSet, clip: ContainerInfo) -> None:
    """Print Rich tables listing the video and audio candidates."""
    table_class = _import_rich_table()
    reference_audio = candidates.audio[-1]

    video_table = table_class(
        title="Video Candidates",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    video_table.add_column("Preset", min_width=10)
    video_table.add_column("Codec")
    video_table.add_column("Resolution", justify="right")
    video_table.add_column("FPS", justify="right")
    video_table.add_column("Rate", justify="right")
    video_table.add_column("Est. Size", justify="right")
    video_table.add_column("Notes")

    for video in candidates.video:
        size = estimate_candidate_size(video, reference_audio, clip.duration)
        video_table.add_row(
            video.preset,
            video.codec,
            f"{video.width}x{video.height}",
            f"{video.fps:.4g}",
            _format_rate(video),
            _format_size(size),
            _video_notes(video),
        )

    audio_table = table_class(
        title="Audio Candidates",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    audio_table.add_column("Preset", min_width=10)
    audio_table.add_column("Description")
    for audio in candidates.audio:
        audio_table.add_row(audio.preset, _audio_description(audio))

    console.print(video_table)
    console.print()
    console.print(audio_table)
    console.print()


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

def _ask(questionary: Any, message: str, choices: Sequence[Any]) -> str:
    selected: str | None = questionary.select(
        message,
        choices=list(choices),
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()  # Returns None on Ctrl+C / Esc

    if selected is None:
        raise PresetNotFoundError(
            "No candidate selected.",
            hint="Use arrow keys to pick a candidate, then press Enter.",
        )
    return selected


def prompt_presets(
    candidates: CandidateSet,
    clip: ContainerInfo,
    *,
    video_preset: str | None = None,
    audio_preset: str | None = None,
) -> tuple[str, str]:
    """Prompt for whichever of the video and audio presets is missing.

    Returns
    -------
    tuple[str, str]
        The chosen ``(video_preset, audio_preset)``.

    Raises
    ------
    PresetNotFoundError
        If the user cancels a prompt (Esc / None return).
    """
    if video_preset is not None and audio_preset is not None:
        return video_preset, audio_preset

    questionary = _import_questionary()
    reference_audio = candidates.audio[-1]

    if video_preset is None:
        video_preset = _ask(
            questionary,
            "Select video format:",
            [
                questionary.Choice(
                    title=_build_video_label(
                        video,
                        estimate_candidate_size(video, reference_audio, clip.duration),
                    ),
                    value=video.preset,
                )
                for video in candidates.video
            ],
        )

    if audio_preset is None:
        audio_preset = _ask(
            questionary,
            "Select audio format:",
            [
                questionary.Choice(
                    title=f"{audio.preset:<14} {_audio_description(audio)}",
                    value=audio.preset,
                )
                for audio in candidates.audio
            ],
        )

    return video_preset, audio_preset
