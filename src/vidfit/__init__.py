"""vidfit — fit any video into a compatible, size-bounded MP4.

Probes a source with ffmpeg, proposes a curated set of target encodings
and drives the encode through a strict layered architecture.
"""

from vidfit.version import __version__

__all__: list[str] = ["__version__"]
