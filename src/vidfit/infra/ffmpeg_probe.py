"""ffmpeg-backed implementation of :class:`~vidfit.core.protocols.ProbeProvider`.

ffprobe is deliberately not used: ``ffmpeg -i <file>`` without an
output prints the same stream announcements to stderr and then exits
with an error about the missing output file.  That exit status is
expected and ignored — only a failure to start the process is an error.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from vidfit.exceptions import ProbeFailedError

logger = logging.getLogger(__name__)


class FfmpegProbeProvider:
    """Concrete :class:`ProbeProvider` running a local ffmpeg binary.

    This class satisfies the :class:`~vidfit.core.protocols.ProbeProvider`
    protocol structurally — no explicit inheritance required.
    """

    def __init__(self, ffmpeg: Path, *, timeout: float | None = 60) -> None:
        self._ffmpeg: Path = ffmpeg
        self._timeout: float | None = timeout

    def _build_command(self, path: Path) -> list[str]:
        return [str(self._ffmpeg), "-hide_banner", "-v", "info", "-i", str(path)]

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def probe(self, path: Path) -> list[str]:
        """Return ffmpeg's informational output for *path*, line by line.

        Raises
        ------
        ProbeFailedError
            When ffmpeg cannot be started or does not finish in time.
        """
        command = self._build_command(path)
        logger.debug("Probing: %s", command)

        try:
            completed = subprocess.run(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProbeFailedError(
                f"ffmpeg did not finish probing {path.name} within {self._timeout}s.",
            ) from exc
        except OSError as exc:
            raise ProbeFailedError(
                f"Could not start ffmpeg: {exc}",
                hint="Run 'vidfit doctor' to check the ffmpeg installation.",
            ) from exc

        return completed.stderr.splitlines()

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def encoders(self) -> frozenset[str]:
        """Return the names of the encoders this ffmpeg build provides.

        Raises
        ------
        ProbeFailedError
            When ffmpeg cannot be started.
        """
        try:
            completed = subprocess.run(
                [str(self._ffmpeg), "-hide_banner", "-encoders"],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise ProbeFailedError(f"Could not list ffmpeg encoders: {exc}") from exc
        return parse_encoder_list(completed.stdout.splitlines())


def parse_encoder_list(lines: list[str]) -> frozenset[str]:
    """Extract encoder names from ``ffmpeg -encoders`` output.

    Entries look like `` V....D libx264    libx264 H.264 …``; the legend
    above the ``------`` separator is skipped.
    """
    names: set[str] = set()
    in_table = False
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("------"):
            in_table = True
            continue
        parts = stripped.split()
        if in_table and len(parts) >= 2:
            names.add(parts[1])
    return frozenset(names)
