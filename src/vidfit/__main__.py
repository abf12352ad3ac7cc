"""Allow ``python -m vidfit`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m vidfit`` behaves identically to the ``vidfit``
console script.
"""

from __future__ import annotations

from vidfit.cli.app import cli

if __name__ == "__main__":
    cli()
