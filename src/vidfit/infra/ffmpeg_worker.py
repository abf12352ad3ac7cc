"""ffmpeg-backed implementation of :class:`~vidfit.core.protocols.EncoderWorker`.

This module is the **only** place in the codebase that spawns the
encoder.  Every failure is caught here and re-raised as
:class:`~vidfit.exceptions.ConversionFailedError`.

Progress
--------
ffmpeg reports ``time=HH:MM:SS.ff`` in its periodic stats line.  The
timestamp divided by the expected clip duration is forwarded to the
progress callback as a raw ratio; clamping is left to the caller.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections import deque
from collections.abc import Sequence
from pathlib import Path

from vidfit.core.analysis import parse_timestamp
from vidfit.core.protocols import ProgressCallback
from vidfit.exceptions import ConversionFailedError

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"time=\s*(?P<time>\d+:\d+:\d+(?:\.\d+)?)")

_STDERR_TAIL_LINES: int = 15


def progress_ratio(line: str, duration: float) -> float | None:
    """Extract the encode position from a stats *line* as a fraction of *duration*.

    Returns ``None`` when the line carries no timestamp or the duration
    is not positive.
    """
    if duration <= 0:
        return None
    match = _TIME_RE.search(line)
    if match is None:
        return None
    return parse_timestamp(match["time"]) / duration


class FfmpegEncoderWorker:
    """Concrete :class:`EncoderWorker` running a local ffmpeg binary.

    This class satisfies the :class:`~vidfit.core.protocols.EncoderWorker`
    protocol structurally — no explicit inheritance required.
    """

    def __init__(self, ffmpeg: Path) -> None:
        self._ffmpeg: Path = ffmpeg

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def run(
        self,
        args: Sequence[str],
        output: Path,
        *,
        duration: float,
        progress_callback: ProgressCallback | None = None,
    ) -> bytes:
        """Encode, then return and remove the file written to *output*.

        Raises
        ------
        ConversionFailedError
            When ffmpeg cannot be started, exits non-zero, or leaves no
            output behind.
        """
        command = [str(self._ffmpeg), *args]
        logger.debug("Encoding: %s", command)
        tail: deque[str] = deque(maxlen=_STDERR_TAIL_LINES)

        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ConversionFailedError(
                f"Could not start ffmpeg: {exc}",
                hint="Run 'vidfit doctor' to check the ffmpeg installation.",
            ) from exc

        try:
            if process.stderr is None:
                raise ConversionFailedError("ffmpeg started without a diagnostic stream.")
            # Universal newlines split the carriage-return stats updates too.
            for line in process.stderr:
                tail.append(line.rstrip())
                ratio = progress_ratio(line, duration)
                if ratio is not None and progress_callback is not None:
                    progress_callback(ratio)
            returncode = process.wait()
        finally:
            if process.poll() is None:
                process.kill()
                process.wait()

        try:
            if returncode != 0:
                raise ConversionFailedError(
                    f"ffmpeg exited with status {returncode}.",
                    hint="\n".join(tail) or None,
                )
            try:
                payload = output.read_bytes()
            except OSError as exc:
                raise ConversionFailedError(
                    f"ffmpeg produced no readable output: {exc}",
                ) from exc
        finally:
            output.unlink(missing_ok=True)

        if not payload:
            raise ConversionFailedError("ffmpeg produced an empty file.")
        return payload
