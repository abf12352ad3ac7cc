"""Rich progress bar fed with encode fractions.

:meth:`ConversionService.convert
<vidfit.core.conversion_service.ConversionService.convert>` reports
fractions already clamped to ``[0, 1]``; the bar only ever advances.
"""

from __future__ import annotations

from typing import Any

from vidfit.cli.console import get_rich_console
from vidfit.exceptions import EnvironmentError

_LABEL_LIMIT = 50


def _build_progress() -> Any:
    """Create a Rich ``Progress`` with percentage and timing columns."""
    try:
        from rich.progress import (
            BarColumn,
            Progress,
            SpinnerColumn,
            TaskProgressColumn,
            TextColumn,
            TimeElapsedColumn,
            TimeRemainingColumn,
        )
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc

    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=get_rich_console(),
    )


def _label(name: str) -> str:
    if len(name) <= _LABEL_LIMIT:
        return name
    return name[: _LABEL_LIMIT - 3] + "..."


class RichProgressHook:
    """Context-managed progress callback.

    Usage::

        with RichProgressHook("clip.mov") as hook:
            service.convert(path, source, target, output, progress_callback=hook)
            hook.finish()

    Calls made outside the ``with`` block are ignored.
    """

    def __init__(self, description: str = "Encoding") -> None:
        self._progress: Any = _build_progress()
        self._label: str = _label(description)
        self._task_id: Any = None
        self._position: float = 0.0

    @property
    def position(self) -> float:
        """Furthest fraction shown so far."""
        return self._position

    def __enter__(self) -> RichProgressHook:
        self._progress.start()
        self._task_id = self._progress.add_task(self._label, total=1.0)
        return self

    def __exit__(self, *_args: object) -> None:
        self._progress.stop()
        self._task_id = None

    def __call__(self, fraction: float) -> None:
        if self._task_id is None or fraction <= self._position:
            return
        self._position = min(fraction, 1.0)
        self._progress.update(self._task_id, completed=self._position)

    def finish(self) -> None:
        """Fill the bar once the encoder has exited successfully."""
        self(1.0)
