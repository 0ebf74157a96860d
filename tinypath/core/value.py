from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Pattern, Tuple, Union

from .canonicalize import IS_WINDOWS, PathPart, is_root_string, normalize, split_volume

Suffix = Union[str, Pattern[str]]


@dataclass(frozen=True, slots=True, order=True)
class PathValue:
    """
    Immutable, normalized filesystem path.

    Build with :func:`path` (or :func:`canonicalize`); ``PathValue(raw)``
    canonicalizes ``raw`` too. Two values compare equal when their canonical
    strings do, however they were typed. Every transformation returns a new
    value. Filesystem operations are exposed as methods and delegate to the
    resolver, probe, I/O engine and iterator.
    """

    raw: str
    windows: bool = field(default=IS_WINDOWS, compare=False, repr=False)
    volume: str = field(default="", init=False, compare=False)

    def __post_init__(self) -> None:
        raw = normalize([self.raw], windows=self.windows)
        object.__setattr__(self, "raw", raw)
        object.__setattr__(self, "volume", split_volume(raw, self.windows)[0])

    def _new(self, *parts: PathPart) -> "PathValue":
        return canonicalize(parts, windows=self.windows)

    def __fspath__(self) -> str:
        return self.raw

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"path({self.raw!r})"

    def stringify(self) -> str:
        return self.raw

    def canonpath(self) -> str:
        """Return the path with host-native separators."""
        return self.raw.replace("/", "\\") if self.windows else self.raw

    # ---------- Derived accessors (no I/O) ----------
    def _splitpath(self) -> Tuple[str, str, str]:
        rest = self.raw[len(self.volume):]
        idx = rest.rfind("/")
        return self.volume, rest[: idx + 1], rest[idx + 1 :]

    def is_absolute(self) -> bool:
        return self.raw[len(self.volume):].startswith("/")

    def is_relative(self) -> bool:
        return not self.is_absolute()

    def is_rootdir(self) -> bool:
        return is_root_string(self.raw, self.windows)

    def basename(self, *suffixes: Suffix) -> str:
        """Return the last component, minus the first matching suffix.

        Suffixes are literal strings or compiled patterns (matched at the end).
        A suffix that would consume the whole name is not removed.
        """
        if self.is_rootdir():
            return ""
        name = self._splitpath()[2]
        for suffix in suffixes:
            if isinstance(suffix, str):
                if suffix and name.endswith(suffix) and len(name) > len(suffix):
                    return name[: -len(suffix)]
                continue
            m = re.search(f"(?:{suffix.pattern})$", name, suffix.flags)
            if m and m.start() > 0:
                return name[: m.start()]
        return name

    def dirname(self) -> str:
        """Return the directory part including its trailing separator (``"foo/"``)."""
        if self.is_rootdir():
            return self.raw
        volume, directory, _ = self._splitpath()
        return (volume + directory) or "."

    def parent(self, level: int = 1) -> "PathValue":
        """Return the ``level``-th parent.

        Parents are lexical: a path ending in ``.`` or ``..`` gains another
        ``..`` instead of losing a component, and the root is its own parent.
        """
        if level < 1:
            level = 1
        current = self
        for _ in range(level):
            current = current._parent_once()
        return current

    def _parent_once(self) -> "PathValue":
        if self.is_rootdir():
            return self
        volume, directory, name = self._splitpath()
        if name in (".", ".."):
            return self._new(self.raw + "/..")
        if not name:
            # bare volume such as "C:"
            return self
        return self._new((volume + directory) or ".")

    def components(self) -> Tuple[str, ...]:
        """Return the ordered segments; absolute paths start with their anchor.

        ``path(*p.components()) == p`` holds for every value.
        """
        volume, _, _ = self._splitpath()
        rest = self.raw[len(volume):]
        if self.is_absolute():
            anchor = volume + "/"
            body = rest[1:]
            return (anchor, *body.split("/")) if body else (anchor,)
        segs = rest.split("/") if rest else []
        if volume:
            # drive-relative ("C:foo") keeps the drive on its first segment
            if not segs:
                return (volume,)
            segs[0] = volume + segs[0]
        return tuple(segs)

    def child(self, *parts: PathPart) -> "PathValue":
        return self._new(self, *parts)

    def sibling(self, *parts: PathPart) -> "PathValue":
        return self._new(self.parent(), *parts)

    # ---------- Resolver ----------
    def absolute(self, base: Optional[PathPart] = None) -> "PathValue":
        from .resolve import absolute

        return absolute(self, base)

    def realpath(self) -> "PathValue":
        from .resolve import realpath

        return realpath(self)

    def relative(self, base: Optional[PathPart] = None) -> "PathValue":
        from .resolve import relative

        return relative(self, base)

    def subsumes(self, other: PathPart) -> bool:
        from .resolve import subsumes

        return subsumes(self, other)

    # ---------- Stat probe ----------
    def exists(self) -> bool:
        from ..io import probe

        return probe.exists(self)

    def is_file(self) -> bool:
        from ..io import probe

        return probe.is_file(self)

    def is_dir(self) -> bool:
        from ..io import probe

        return probe.is_dir(self)

    def is_link(self) -> bool:
        from ..io import probe

        return probe.is_link(self)

    def stat(self) -> os.stat_result:
        from ..io import probe

        return probe.stat(self)

    def lstat(self) -> os.stat_result:
        from ..io import probe

        return probe.lstat(self)

    def size(self) -> int:
        from ..io import probe

        return probe.size(self)

    # ---------- I/O engine ----------
    def slurp(self, options: Any = None, **kwargs: Any) -> Union[str, bytes]:
        from ..io import engine

        return engine.slurp(self, options, **kwargs)

    def slurp_raw(self) -> bytes:
        from ..io import engine

        return engine.slurp(self, binmode="raw")  # type: ignore[return-value]

    def slurp_utf8(self) -> str:
        from ..io import engine

        return engine.slurp(self, binmode="utf8")  # type: ignore[return-value]

    def lines(self, options: Any = None, **kwargs: Any) -> List[Any]:
        from ..io import engine

        return engine.lines(self, options, **kwargs)

    def lines_raw(self, **kwargs: Any) -> List[bytes]:
        from ..io import engine

        return engine.lines(self, binmode="raw", **kwargs)

    def lines_utf8(self, **kwargs: Any) -> List[str]:
        from ..io import engine

        return engine.lines(self, binmode="utf8", **kwargs)

    def spew(self, data: Any, options: Any = None, **kwargs: Any) -> bool:
        from ..io import engine

        return engine.spew(self, data, options, **kwargs)

    def spew_raw(self, data: Any) -> bool:
        from ..io import engine

        return engine.spew(self, data, binmode="raw")

    def spew_utf8(self, data: Any) -> bool:
        from ..io import engine

        return engine.spew(self, data, binmode="utf8")

    def append(self, data: Any, options: Any = None, **kwargs: Any) -> bool:
        from ..io import engine

        return engine.append(self, data, options, **kwargs)

    def append_raw(self, data: Any) -> bool:
        from ..io import engine

        return engine.append(self, data, binmode="raw")

    def append_utf8(self, data: Any) -> bool:
        from ..io import engine

        return engine.append(self, data, binmode="utf8")

    def touch(self, epoch: Optional[float] = None) -> "PathValue":
        from ..io import engine

        return engine.touch(self, epoch)

    def touchpath(self) -> "PathValue":
        from ..io import engine

        return engine.touchpath(self)

    def edit(self, fn: Callable[[Any], Any], options: Any = None, **kwargs: Any) -> bool:
        from ..io import engine

        return engine.edit(self, fn, options, **kwargs)

    def edit_lines(self, fn: Callable[[Any], Any], options: Any = None, **kwargs: Any) -> bool:
        from ..io import engine

        return engine.edit_lines(self, fn, options, **kwargs)

    def copy(self, dest: PathPart) -> "PathValue":
        from ..io import engine

        return engine.copy(self, dest)

    def move(self, dest: PathPart) -> "PathValue":
        from ..io import engine

        return engine.move(self, dest)

    def remove(self) -> bool:
        from ..io import engine

        return engine.remove(self)

    def digest(self, algorithm: str = "sha256") -> str:
        from ..io import engine

        return engine.digest(self, algorithm)

    def has_same_bytes(self, other: PathPart) -> bool:
        from ..io import engine

        return engine.has_same_bytes(self, other)

    def open_locked(self, mode: str = "r", options: Any = None, **kwargs: Any):
        from ..io import engine

        return engine.open_locked(self, mode, options, **kwargs)

    def mkpath(self, options: Any = None, **kwargs: Any) -> List["PathValue"]:
        from ..io import tree

        return tree.mkpath(self, options, **kwargs)

    def remove_tree(self, options: Any = None, **kwargs: Any) -> int:
        from ..io import tree

        return tree.remove_tree(self, options, **kwargs)

    # ---------- Directory iteration ----------
    def iterator(self, options: Any = None, **kwargs: Any) -> Iterator["PathValue"]:
        from ..walk import iterator

        return iterator.iterate(self, options, **kwargs)

    def children(self, pattern: Optional[Union[str, Pattern[str]]] = None) -> List["PathValue"]:
        from ..walk import iterator

        return iterator.children(self, pattern)

    def visit(
        self, callback: Callable[["PathValue", Dict[str, Any]], Any], options: Any = None, **kwargs: Any
    ) -> Dict[str, Any]:
        from ..walk import iterator

        return iterator.visit(self, callback, options, **kwargs)


def canonicalize(segments, *, windows: Optional[bool] = None) -> PathValue:
    """Canonicalize ``segments`` into a :class:`PathValue`.

    Raises:
        InvalidArgument: If the first segment is missing or empty
    """
    if windows is None:
        windows = IS_WINDOWS
    return PathValue(normalize(segments, windows=windows), windows)


def path(*parts: PathPart) -> PathValue:
    """Build a path from one or more components (``path("foo", "bar.txt")``)."""
    if len(parts) == 1 and isinstance(parts[0], PathValue):
        return parts[0]
    return canonicalize(parts)


def cwd() -> PathValue:
    return canonicalize([os.getcwd()])


def rootdir() -> PathValue:
    return canonicalize([os.path.abspath(os.sep)])


__all__ = ["PathValue", "canonicalize", "cwd", "path", "rootdir"]
