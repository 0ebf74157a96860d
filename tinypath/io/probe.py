"""Existence, kind and metadata queries."""

from __future__ import annotations

import os
import stat as _stat

from ..core.value import PathValue
from ..errors import IoError, KindError


def exists(p: PathValue) -> bool:
    return os.path.exists(p)


def is_file(p: PathValue) -> bool:
    """True for anything that exists and is not a directory (devices and fifos included)."""
    try:
        st = os.stat(p)
    except OSError:
        return False
    return not _stat.S_ISDIR(st.st_mode)


def is_dir(p: PathValue) -> bool:
    return os.path.isdir(p)


def is_link(p: PathValue) -> bool:
    return os.path.islink(p)


def stat(p: PathValue) -> os.stat_result:
    try:
        return os.stat(p)
    except OSError as e:
        raise IoError.from_os_error("stat", p.raw, e) from e


def lstat(p: PathValue) -> os.stat_result:
    try:
        return os.lstat(p)
    except OSError as e:
        raise IoError.from_os_error("lstat", p.raw, e) from e


def size(p: PathValue) -> int:
    return stat(p).st_size


def require_file(p: PathValue, op: str) -> None:
    """Fail fast with ``KindError`` when a file operation targets a directory.

    Absence is left for the OS call to report, since some callers create files.
    """
    if os.path.isdir(p):
        raise KindError(op, p.raw, message="is a directory")


def require_dir(p: PathValue, op: str) -> None:
    """Fail fast unless ``p`` is an existing directory."""
    try:
        st = os.stat(p)
    except OSError as e:
        raise IoError.from_os_error(op, p.raw, e) from e
    if not _stat.S_ISDIR(st.st_mode):
        raise KindError(op, p.raw, message="not a directory")


__all__ = [
    "exists",
    "is_dir",
    "is_file",
    "is_link",
    "lstat",
    "require_dir",
    "require_file",
    "size",
    "stat",
]
