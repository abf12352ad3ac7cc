"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

ProgressCallback = Callable[[float], None]
"""Receives the encode progress as a fraction in ``[0.0, 1.0]``."""


class ProbeProvider(Protocol):
    """Contract for metadata probe backends.

    Any object that implements :meth:`probe` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def probe(self, path: Path) -> list[str]:
        """Return the diagnostic log lines describing *path*.

        Implementations must map all backend-specific exceptions to
        :class:`~vidfit.exceptions.VidfitError` subclasses.

        Raises
        ------
        ProbeFailedError
            When the probe process cannot be run.
        """
        ...  # pragma: no cover


class EncoderWorker(Protocol):
    """Contract for encode backends.

    One call encodes one clip.  Cancellation, if any, is the worker's
    own responsibility.
    """

    def run(
        self,
        args: Sequence[str],
        output: Path,
        *,
        duration: float,
        progress_callback: ProgressCallback | None = None,
    ) -> bytes:
        """Run the encoder with *args* and return the bytes written to *output*.

        Parameters
        ----------
        args:
            Complete argument list, *output* included as the last token.
        output:
            The file the encoder writes.
        duration:
            Expected output duration in seconds, used to turn encoder
            timestamps into progress fractions.
        progress_callback:
            Optional callable invoked with raw progress ratios.  The
            worker does not clamp them.

        Raises
        ------
        ConversionFailedError
            When the encode fails for any reason.
        """
        ...  # pragma: no cover
