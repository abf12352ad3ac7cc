"""Number rendering shared by argument synthesis and presentation."""

from __future__ import annotations


def format_number(value: float) -> str:
    """Render *value* the way ffmpeg expects it on a command line.

    Integral values lose their decimal point (``30.0`` → ``"30"``); all
    other floats use the shortest round-tripping representation
    (``100 / 6`` → ``"16.666666666666668"``).
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
