"""tinypath configuration: process defaults and per-call option models.

Environment Variables:
    TP_BINMODE: Ambient binmode for calls that do not pass one (default: default)
    TP_FSYNC: fsync the temp file before the atomic rename in spew (default: true)
    TP_CHUNK_SIZE: Block size used by copy, digest and has_same_bytes (default: 65536)
    TP_TEMP_TEMPLATE: Default temp resource name template (default: tinypath-XXXXXXXX)
    TP_LOCK_SUFFIX: Suffix of the sidecar lock file taken by spew (default: .lock)
"""

from __future__ import annotations

from .defaults import IO, TEMP, IODefaults, TempDefaults
from .options import (
    Binmode,
    IterOptions,
    LinesOptions,
    ReadOptions,
    TempOptions,
    TreeOptions,
    WriteOptions,
    build_options,
)

__all__ = [
    "IO",
    "TEMP",
    "IODefaults",
    "TempDefaults",
    "Binmode",
    "ReadOptions",
    "LinesOptions",
    "WriteOptions",
    "IterOptions",
    "TreeOptions",
    "TempOptions",
    "build_options",
]
