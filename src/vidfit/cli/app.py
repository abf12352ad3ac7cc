"""CLI application entry point and command routing for vidfit.

This module is the **sole error boundary** for the entire application.
It catches :class:`~vidfit.exceptions.VidfitError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* ``print()`` is forbidden outside the CLI layer; Rich console is used
  exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from pathlib import Path

from vidfit.cli import exit_codes
from vidfit.cli.console import configure_logging, console
from vidfit.config import Settings, load_settings
from vidfit.exceptions import (
    AnalysisIncompleteError,
    ConversionFailedError,
    FfmpegNotFoundError,
    InputFileError,
    InvalidClipError,
    ProbeFailedError,
    VidfitError,
)
from vidfit.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    The CLI supports:
    * ``vidfit <file>``    — analyze, choose a candidate, convert
    * ``vidfit doctor``    — environment diagnostics
    * ``vidfit --version``
    """
    parser = argparse.ArgumentParser(
        prog="vidfit",
        description="Convert a video into a compatible, size-bounded MP4.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Video file to convert, or 'doctor' to run diagnostics.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Show the source and its candidates, then exit.",
    )
    parser.add_argument("--video", metavar="PRESET", help="Video preset, e.g. size_16mb.")
    parser.add_argument("--audio", metavar="PRESET", help="Audio preset, e.g. bitrate_high.")
    parser.add_argument("--start", type=float, metavar="SECONDS", help="Clip start.")
    parser.add_argument("--duration", type=float, metavar="SECONDS", help="Clip length.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="PATH",
        help="Output file (default: input name with .mp4 next to the input).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_convert(args: argparse.Namespace, settings: Settings) -> int:
    """Dispatch a single-file conversion.

    Flow:
    1. Locate ffmpeg and wire infra providers into the core service.
    2. Analyze the source and show it.
    3. Generate candidates for the clip window.
    4. Select presets from flags or interactively.
    5. Encode with Rich progress and write the result.
    """
    from vidfit.cli.format_prompt import display_candidates, display_source, prompt_presets
    from vidfit.cli.progress import RichProgressHook
    from vidfit.core.conversion_service import ConversionService, clip_container, output_filename
    from vidfit.infra.ffmpeg_detector import require_ffmpeg
    from vidfit.infra.ffmpeg_probe import FfmpegProbeProvider
    from vidfit.infra.ffmpeg_worker import FfmpegEncoderWorker

    path = Path(args.target)
    ffmpeg = require_ffmpeg(settings.ffmpeg_path)
    service = ConversionService(FfmpegProbeProvider(ffmpeg), FfmpegEncoderWorker(ffmpeg))

    source = service.analyze(path)
    display_source(path.name, source)

    clip = clip_container(source.container, args.start, args.duration)
    candidates = service.list_formats(source, clip)

    if args.list:
        display_candidates(candidates, clip)
        return exit_codes.SUCCESS

    if args.video is None or args.audio is None:
        display_candidates(candidates, clip)
    video_preset, audio_preset = prompt_presets(
        candidates,
        clip,
        video_preset=args.video,
        audio_preset=args.audio,
    )
    video, audio = service.select(candidates, video_preset, audio_preset)
    if video.implausible:
        console.print(
            f"[yellow]Warning:[/yellow] {video.preset} is unlikely to reach its "
            "size target; the result may be oversized or of very low quality."
        )
    target = service.compose_target(source, video, audio, clip)

    destination: Path = args.output or path.with_name(output_filename(path.name))
    if destination.resolve() == path.resolve():
        raise InputFileError(
            f"Refusing to overwrite the input file: {path}",
            hint="Choose a different --output path.",
        )

    console.print(
        f"\n[bold green]Converting…[/bold green]  video={video.preset} audio={audio.preset}\n"
    )
    with tempfile.TemporaryDirectory(prefix="vidfit-", dir=settings.work_dir) as work_dir:
        scratch = Path(work_dir) / output_filename(path.name)
        with RichProgressHook(path.name) as hook:
            result = service.convert(path, source, target, scratch, progress_callback=hook)
            hook.finish()

    destination.write_bytes(result.payload)
    logger.info("Wrote %s", destination)
    console.print(f"\n[bold green]Done.[/bold green]  {destination}")
    return exit_codes.SUCCESS


def _handle_doctor(settings: Settings) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from vidfit.cli.doctor import run_doctor

    return run_doctor(settings)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the vidfit CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging("debug" if args.verbose else settings.log_level)

    if args.target is None:
        parser.print_help()
        return exit_codes.SUCCESS

    target: str = args.target

    if target.lower() == "doctor":
        return _handle_doctor(settings)

    return _handle_convert(args, settings)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def _exit_code_for(exc: VidfitError) -> int:
    """Map a domain error to the process exit code."""
    if isinstance(exc, (InputFileError, InvalidClipError, AnalysisIncompleteError)):
        return exit_codes.INPUT_ERROR
    if isinstance(exc, (FfmpegNotFoundError, ProbeFailedError, ConversionFailedError)):
        return exit_codes.ENCODER_ERROR
    return exit_codes.GENERAL_ERROR


def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except AnalysisIncompleteError as exc:
        # The message embeds the whole probe log; show it only when asked.
        logger.debug("Probe output:\n%s", "\n".join(exc.lines))
        console.print(f"[bold red]Error:[/bold red] {str(exc).splitlines()[0]}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(_exit_code_for(exc))
    except VidfitError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(_exit_code_for(exc))
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
