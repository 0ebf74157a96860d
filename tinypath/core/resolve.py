"""Path-to-path transformations that consult the host OS.

``absolute`` and ``relative`` only read the current working directory and work
lexically on strings. ``realpath`` touches the filesystem to resolve symlinks
and ``..``; it is not atomic with respect to concurrent mutation, so the
result names an existing object only as of the moment it was computed.
"""

from __future__ import annotations

import os
from typing import Optional

from ..errors import InvalidArgument, IoError
from .canonicalize import PathPart
from .value import PathValue, canonicalize, path


def _as_value(p: PathPart, like: PathValue) -> PathValue:
    if isinstance(p, PathValue):
        return p
    return canonicalize([p], windows=like.windows)


def volume_cwd(volume: str) -> str:
    """Return the working directory for ``volume`` (the process cwd when empty)."""
    if volume and os.name == "nt":
        return os.path.abspath(volume)
    return os.getcwd()


def absolute(p: PathValue, base: Optional[PathPart] = None) -> PathValue:
    """Return ``p`` made absolute against ``base`` (default: the current directory).

    Already-absolute paths are returned unchanged. ``..`` is not resolved.
    """
    if p.is_absolute():
        return p
    if base is None:
        base_value = canonicalize([volume_cwd(p.volume)], windows=p.windows)
    else:
        base_value = absolute(_as_value(base, p))
    rest = p.raw[len(p.volume):]
    if p.volume and p.volume != base_value.volume:
        # drive-relative path against another drive's cwd
        base_value = canonicalize([volume_cwd(p.volume)], windows=p.windows)
    return canonicalize([base_value, rest], windows=p.windows)


def realpath(p: PathValue) -> PathValue:
    """Resolve symlinks and ``.``/``..`` against the filesystem.

    Raises:
        NotFound: If any component does not exist
        IoError: On other resolution failures (e.g. symlink loops)
    """
    try:
        resolved = os.path.realpath(os.fspath(p), strict=True)
    except OSError as e:
        raise IoError.from_os_error("realpath", p.raw, e) from e
    return canonicalize([resolved], windows=p.windows)


def _segments(p: PathValue):
    body = p.raw[len(p.volume):].lstrip("/")
    return [s for s in body.split("/") if s]


def relative(p: PathValue, base: Optional[PathPart] = None) -> PathValue:
    """Return the path from ``base`` (default: cwd) to ``p``, computed lexically.

    Raises:
        InvalidArgument: If the two paths live on different volumes
    """
    target = absolute(p)
    origin = absolute(_as_value(base, p)) if base is not None else absolute(path("."))
    if target.volume.lower() != origin.volume.lower():
        raise InvalidArgument(
            f"cannot compute relative path across volumes: {origin.raw!r} -> {target.raw!r}"
        )
    t_segs = _segments(target)
    o_segs = _segments(origin)
    common = 0
    for a, b in zip(t_segs, o_segs):
        if a != b:
            break
        common += 1
    ups = [".."] * (len(o_segs) - common)
    rest = t_segs[common:]
    parts = ups + rest
    if not parts:
        return canonicalize(["."], windows=p.windows)
    # anchor a leading "~name" entry so it is not expanded
    return canonicalize([".", *parts], windows=p.windows)


def subsumes(p: PathValue, other: PathPart) -> bool:
    """Return True if ``other`` is ``p`` or lies lexically beneath it."""
    outer = absolute(p)
    inner = absolute(_as_value(other, p))
    if outer.volume.lower() != inner.volume.lower():
        return False
    if outer.is_rootdir():
        return True
    return inner.raw == outer.raw or inner.raw.startswith(outer.raw + "/")


__all__ = ["absolute", "realpath", "relative", "subsumes", "volume_cwd"]
