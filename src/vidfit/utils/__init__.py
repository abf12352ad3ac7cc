"""Shared utilities — constants, typing helpers, and cross-cutting concerns.

Rules
-----
* No business logic.
* No I/O.
* Importable by any layer.
"""

from vidfit.utils.text import format_number

__all__: list[str] = ["format_number"]
