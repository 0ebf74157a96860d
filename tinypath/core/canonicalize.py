"""Pure path canonicalization for tinypath.

Turns raw, possibly platform-specific path input into the single internal
string form used by :class:`~tinypath.core.value.PathValue`. Apart from tilde
expansion and bare-drive expansion (which consult the host user database and
per-drive working directory) no filesystem I/O is performed.

Canonical form:
- forward slashes only, on every platform
- no empty segments and no ``.`` segments (a lone ``.`` denotes the cwd), except a
  leading ``./`` before a literal ``~name`` entry
- a trailing separator only on root paths (``/``, ``C:/``, ``//server/share/``)
- ``..`` segments are kept; only ``realpath`` resolves them
"""

from __future__ import annotations

import ntpath
import os
import re
from typing import Iterable, List, Tuple, Union

from ..errors import InvalidArgument

IS_WINDOWS = os.name == "nt"

PathPart = Union[str, "os.PathLike[str]"]

_BARE_DRIVE_RE = re.compile(r"^[A-Za-z]:$")
_TILDE_RE = re.compile(r"^~[^/]*")


def _coerce(segments: Iterable[PathPart]) -> List[str]:
    parts: List[str] = []
    for i, seg in enumerate(segments):
        if seg is None:
            raise InvalidArgument(f"path segment {i} is None")
        try:
            raw = os.fspath(seg)
        except TypeError:
            raise InvalidArgument(
                f"path segment {i} must be str or path-like, got {type(seg).__name__}"
            ) from None
        if isinstance(raw, bytes):
            raise InvalidArgument(f"path segment {i} must be str, not bytes")
        parts.append(raw)
    if not parts or not parts[0]:
        raise InvalidArgument("paths require a defined, positive-length first segment")
    return parts


def split_volume(raw: str, windows: bool = IS_WINDOWS) -> Tuple[str, str]:
    """Split ``raw`` (forward-slash form) into ``(volume, rest)``.

    Volumes are a drive letter plus colon (``C:``) or a UNC prefix
    (``//server/share``); hosts without volumes always return ``""``.
    """
    if not windows:
        return "", raw
    drive, rest = ntpath.splitdrive(raw)
    if not drive:
        return "", raw
    drive = drive.replace("\\", "/")
    if len(drive) == 2 and drive[1] == ":":
        drive = drive.upper()
    return drive, rest


def is_root_string(raw: str, windows: bool = IS_WINDOWS) -> bool:
    volume, rest = split_volume(raw, windows)
    return rest == "/"


def expand_tilde(raw: str) -> str:
    """Replace a leading ``~`` or ``~name`` with the matching home directory.

    Unresolvable names are left as typed; expansion failure is not an error.
    """
    m = _TILDE_RE.match(raw)
    if not m:
        return raw
    head = m.group(0)
    home = os.path.expanduser(head)
    if home == head:
        return raw
    return home.replace("\\", "/") + raw[len(head):]


def _clean(rest: str) -> str:
    absolute = rest.startswith("/")
    segs = [s for s in rest.split("/") if s and s != "."]
    if absolute:
        # "/.." is "/"
        while segs and segs[0] == "..":
            segs.pop(0)
        return "/" + "/".join(segs)
    if segs and segs[0].startswith("~"):
        # a literal "~name" entry keeps its "./" so it is never read as a home dir
        return "./" + "/".join(segs)
    return "/".join(segs)


def normalize(segments: Iterable[PathPart], *, windows: bool | None = None) -> str:
    """Return the canonical string for ``segments``.

    Args:
        segments: Path parts; the first must be a non-empty string or path-like
        windows: Apply volume-aware rules; defaults to the host convention

    Raises:
        InvalidArgument: If the first segment is missing or empty, or any
            segment is not a string/path-like
    """
    if windows is None:
        windows = IS_WINDOWS
    parts = _coerce(segments)
    joined = "/".join(parts)
    if windows:
        joined = joined.replace("\\", "/")
    joined = expand_tilde(joined)

    volume, rest = split_volume(joined, windows)
    if windows and IS_WINDOWS and not rest and _BARE_DRIVE_RE.match(volume):
        # each drive tracks its own working directory
        return normalize([os.path.abspath(volume)], windows=True)

    cleaned = _clean(rest)
    if volume.startswith("//") and not cleaned.startswith("/"):
        # a UNC share is always absolute
        cleaned = "/" + cleaned
    if not cleaned:
        return volume if volume else "."
    return volume + cleaned


__all__ = ["IS_WINDOWS", "expand_tilde", "is_root_string", "normalize", "split_volume"]
