"""tinypath process defaults.

No side effects on import. Values can be overridden via TP_* env vars.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env(name: str, default: str) -> str:
    if not name.startswith("TP_"):
        raise ValueError(f"Only TP_* env vars are allowed, got: {name}")
    return os.getenv(name, default)


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name, str(default))
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = _env(name, str(default))
    try:
        return int(raw)
    except Exception:
        return default


@dataclass(frozen=True)
class IODefaults:
    binmode: str = _env("TP_BINMODE", "default")  # default|raw|utf8
    fsync: bool = _env_bool("TP_FSYNC", True)
    chunk_size: int = max(1, _env_int("TP_CHUNK_SIZE", 64 * 1024))
    lock_suffix: str = _env("TP_LOCK_SUFFIX", ".lock")


@dataclass(frozen=True)
class TempDefaults:
    # trailing X's are replaced with random characters
    template: str = _env("TP_TEMP_TEMPLATE", "tinypath-XXXXXXXX")


IO = IODefaults()
TEMP = TempDefaults()
