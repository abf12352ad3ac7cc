"""Infrastructure: locate the ffmpeg binary and explain how to get one.

Lookup order
------------
1. ``VIDFIT_FFMPEG`` (passed in as *override*).  When set, it is the
   only candidate; a broken override is reported, never bypassed.
2. ``ffmpeg`` on the system PATH.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.  Whether the
  binary carries the required encoders is checked by ``vidfit doctor``.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from vidfit.exceptions import FfmpegNotFoundError

OVERRIDE_VARIABLE: str = "VIDFIT_FFMPEG"

FDK_AAC_NOTE: str = (
    "Audio is encoded with libfdk_aac, which only ffmpeg builds configured "
    "with --enable-libfdk-aac --enable-nonfree include."
)

_INSTALL_COMMANDS: dict[str, tuple[str, ...]] = {
    "windows": (
        "winget install Gyan.FFmpeg",
        "choco install ffmpeg-full",
    ),
    "linux": (
        "sudo apt install ffmpeg",
        "sudo dnf install ffmpeg",
        "sudo pacman -S ffmpeg",
    ),
    "darwin": (
        "brew tap homebrew-ffmpeg/ffmpeg",
        "brew install homebrew-ffmpeg/ffmpeg/ffmpeg --with-fdk-aac",
    ),
}

_FALLBACK_COMMANDS: tuple[str, ...] = (
    "Download a build from https://ffmpeg.org/download.html",
)


@dataclass(frozen=True, slots=True)
class FfmpegStatus:
    """Outcome of an ffmpeg lookup.

    Attributes
    ----------
    found : bool
        Whether an executable was located.
    path : Path | None
        Resolved path of the binary, or ``None``.
    origin : str
        Where the lookup looked: :data:`OVERRIDE_VARIABLE` or ``"PATH"``.
    detail : str
        One-line, human-readable outcome for tables and hints.
    install_commands : tuple[str, ...]
        Suggestions for the current platform; empty when found.
    """

    found: bool
    path: Path | None
    origin: str
    detail: str
    install_commands: tuple[str, ...] = ()


def install_commands(system: str | None = None) -> tuple[str, ...]:
    """Return install suggestions for *system* (default: this machine)."""
    key = (system if system is not None else platform.system()).lower()
    return _INSTALL_COMMANDS.get(key, _FALLBACK_COMMANDS)


def detect_ffmpeg(override: Path | None = None) -> FfmpegStatus:
    """Look up ffmpeg without raising; the caller decides how to react."""
    if override is not None:
        origin, wanted = OVERRIDE_VARIABLE, str(override)
    else:
        origin, wanted = "PATH", "ffmpeg"

    located = shutil.which(wanted)
    if located is None:
        detail = (
            f"{override} is not executable"
            if override is not None
            else "not found on PATH"
        )
        return FfmpegStatus(
            found=False,
            path=None,
            origin=origin,
            detail=detail,
            install_commands=install_commands(),
        )

    resolved = Path(located).resolve()
    return FfmpegStatus(found=True, path=resolved, origin=origin, detail=str(resolved))


def require_ffmpeg(override: Path | None = None) -> Path:
    """Return the ffmpeg path or raise :class:`FfmpegNotFoundError`.

    Used by every code path that spawns ffmpeg (probe and encode).
    """
    status = detect_ffmpeg(override)
    if status.path is not None:
        return status.path

    if override is not None:
        message = f"{OVERRIDE_VARIABLE} points to {override}, which is not an executable."
        hint_lines = [f"Fix or unset {OVERRIDE_VARIABLE}."]
    else:
        message = "ffmpeg is not installed or not on PATH."
        hint_lines = []
    hint_lines.append("Install ffmpeg using one of:")
    hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
    hint_lines.append(FDK_AAC_NOTE)
    raise FfmpegNotFoundError(message, hint="\n".join(hint_lines))
