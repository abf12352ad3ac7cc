"""Custom exception hierarchy for vidfit.

All exceptions that cross layer boundaries must inherit from
:class:`VidfitError`.  Raw subprocess and OS exceptions must NEVER
propagate beyond the infrastructure layer — they must be caught and
re-raised as a typed subclass defined here.

Hierarchy
---------
VidfitError
├── InputFileError
├── AnalysisIncompleteError
├── ProbeFailedError
├── PresetNotFoundError
├── UnsupportedCodecError
├── MissingRateControlError
├── ConversionFailedError
├── FfmpegNotFoundError
└── EnvironmentError
    └── EnvironmentCheckError
"""

from __future__ import annotations

from collections.abc import Sequence


class VidfitError(Exception):
    """Base exception for all vidfit errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Input -----------------------------------------------------------------

class InputFileError(VidfitError):
    """Raised when the input path does not point to a readable file."""


class InvalidClipError(VidfitError):
    """Raised when the requested clip window selects no time at all."""


# --- Analysis --------------------------------------------------------------

class AnalysisIncompleteError(VidfitError):
    """Raised when the probe output never announced a container or video stream.

    The complete diagnostic output is kept on :attr:`lines` so the
    caller can show or log what the probe actually said.
    """

    def __init__(
        self,
        message: str,
        *,
        lines: Sequence[str] = (),
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.lines: tuple[str, ...] = tuple(lines)


class ProbeFailedError(VidfitError):
    """Raised when the probe process could not be started or read."""


# --- Format handling -------------------------------------------------------

class PresetNotFoundError(VidfitError):
    """Raised when a requested preset is not among the offered candidates."""


class UnsupportedCodecError(VidfitError):
    """Raised when a target codec is outside the supported set.

    This always indicates a catalog or caller bug, never a transient
    condition, so it is not retried.
    """


class MissingRateControlError(VidfitError):
    """Raised when a video target carries neither ``crf`` nor ``bitrate``."""


# --- Conversion ------------------------------------------------------------

class ConversionFailedError(VidfitError):
    """Raised when the encoder process fails or produces no output."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(VidfitError):
    """Raised when a required runtime dependency is not available."""


class FfmpegNotFoundError(VidfitError):
    """Raised when ffmpeg cannot be located."""


class EnvironmentCheckError(EnvironmentError):
    """Raised when a required environment precondition is not met."""
