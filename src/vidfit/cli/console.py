"""CLI console and logging helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``, ``doctor``)
remain functional even when Rich is not installed.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from vidfit.exceptions import EnvironmentError

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects)


console = _ConsoleProxy()


def configure_logging(level: str) -> None:
	"""Install a single root handler at *level*.

	Uses ``rich.logging.RichHandler`` when Rich is importable, a plain
	stderr handler otherwise.  Calling it again replaces the handler.
	"""
	handler: logging.Handler
	try:
		from rich.logging import RichHandler
	except ModuleNotFoundError:
		handler = logging.StreamHandler(sys.stderr)
		handler.setFormatter(logging.Formatter(_LOG_FORMAT))
	else:
		handler = RichHandler(
			console=get_rich_console(),
			show_path=False,
			markup=False,
			rich_tracebacks=False,
		)
		handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

	root = logging.getLogger()
	for existing in list(root.handlers):
		root.removeHandler(existing)
	root.addHandler(handler)
	root.setLevel(level.upper())
