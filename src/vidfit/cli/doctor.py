"""``vidfit doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment can probe and encode: a reachable
ffmpeg built with the two encoders the argument builder emits.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import importlib.metadata
import platform
import sys
from pathlib import Path

from vidfit.cli import exit_codes
from vidfit.cli.console import console
from vidfit.config import Settings, load_settings
from vidfit.core.arguments import AUDIO_ENCODER, VIDEO_ENCODER
from vidfit.exceptions import ProbeFailedError
from vidfit.infra.ffmpeg_detector import FDK_AAC_NOTE, FfmpegStatus, detect_ffmpeg
from vidfit.infra.ffmpeg_probe import FfmpegProbeProvider
from vidfit.version import __version__

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _package_check(distribution: str) -> Check:
    """Return a row for an optional UI dependency."""
    try:
        version = importlib.metadata.version(distribution)
    except importlib.metadata.PackageNotFoundError:
        return distribution, "NOT INSTALLED", "[yellow]WARN[/yellow]"
    return distribution, version, "[green]OK[/green]"


def _ffmpeg_check(status_obj: FfmpegStatus) -> Check:
    """Return (label, value, status) for the ffmpeg row."""
    if status_obj.found:
        return "ffmpeg", f"{status_obj.detail} ({status_obj.origin})", "[green]OK[/green]"
    return "ffmpeg", status_obj.detail, "[red]FAIL[/red]"


def _encoder_checks(ffmpeg: Path | None) -> list[Check]:
    """Return one row per required encoder."""
    required = (VIDEO_ENCODER, AUDIO_ENCODER)
    if ffmpeg is None:
        return [(name, "ffmpeg missing", "[red]FAIL[/red]") for name in required]
    try:
        available = FfmpegProbeProvider(ffmpeg).encoders()
    except ProbeFailedError as exc:
        return [(name, str(exc), "[red]FAIL[/red]") for name in required]
    return [
        (name, "available", "[green]OK[/green]")
        if name in available
        else (name, "not in this ffmpeg build", "[red]FAIL[/red]")
        for name in required
    ]


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nvidfit doctor", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<36} {'Status':<8}", file=sys.stderr)
    print("-" * 60, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<36} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def _print_rich_doctor_table(checks: list[Check]) -> bool:
    """Render doctor output with Rich; ``False`` when Rich is missing."""
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        return False

    table = Table(
        title="vidfit doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()
    return True


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(settings: Settings | None = None) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    settings = settings if settings is not None else load_settings()
    ffmpeg_status = detect_ffmpeg(settings.ffmpeg_path)
    encoder_checks = _encoder_checks(ffmpeg_status.path)

    checks: list[Check] = [
        ("vidfit", __version__, "[green]OK[/green]"),
        _python_version_check(),
        _package_check("rich"),
        _package_check("questionary"),
        _ffmpeg_check(ffmpeg_status),
        *encoder_checks,
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    if not _print_rich_doctor_table(checks):
        _print_plain_doctor_table(checks)

    if not ffmpeg_status.found:
        console.print(f"ffmpeg was not found ({ffmpeg_status.origin}).")
        console.print("Install using one of the following commands:\n")
        for cmd in ffmpeg_status.install_commands:
            console.print(f"  {cmd}")
        console.print()
    elif any(label == AUDIO_ENCODER and "FAIL" in status for label, _, status in encoder_checks):
        console.print(FDK_AAC_NOTE)
        console.print()

    if has_failure:
        console.print("Some checks failed.")
        return exit_codes.GENERAL_ERROR

    console.print("All checks passed.")
    return exit_codes.SUCCESS
