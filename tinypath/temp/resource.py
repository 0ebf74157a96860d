"""Scoped temporary files and directories.

A :class:`TempResource` owns exactly one temporary filesystem object and
deletes it exactly once: on ``release()`` or when the ``with`` block that
owns it exits, whichever comes first. The :class:`PathValue` it hands out is
a borrowed view; dropping that value never deletes anything.

    with tempdir() as work:
        work.child("out.txt").spew("done")
    # directory and contents are gone here
"""

from __future__ import annotations

import logging
import os
import re
import secrets
import tempfile as _tempfile
import threading
from typing import Any, Callable, Iterator, Optional

from ..config.options import TempOptions, build_options
from ..core.value import PathValue, cwd, path
from ..errors import InvalidArgument, IoError, ResourceReleased

logger = logging.getLogger(__name__)

_CLOEXEC = getattr(os, "O_CLOEXEC", 0)
# same alphabet as the stdlib tempfile name generator
_NAME_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789_"


class TempResource:
    """Owner of one temporary file or directory.

    Args:
        p: Absolute path of the already-created object
        kind: ``"file"`` or ``"dir"``
    """

    def __init__(self, p: PathValue, kind: str) -> None:
        if kind not in ("file", "dir"):
            raise ValueError(f"unknown temp resource kind: {kind}")
        self._path = p
        self._kind = kind
        self._lock = threading.Lock()
        self._released = False

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def released(self) -> bool:
        return self._released

    @property
    def path(self) -> PathValue:
        """The owned path; raises ``ResourceReleased`` once deleted."""
        if self._released:
            raise ResourceReleased(f"temp {self._kind} {self._path.raw!r} was already released")
        return self._path

    def __fspath__(self) -> str:
        return self.path.raw

    def __str__(self) -> str:
        return self.path.raw

    def __repr__(self) -> str:  # pragma: no cover - trivial
        state = "released" if self._released else "live"
        return f"TempResource({self._path.raw!r}, kind={self._kind!r}, {state})"

    def __enter__(self) -> PathValue:
        return self.path

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def release(self) -> bool:
        """Delete the object. Returns False if it was already released.

        Deleting an object that is already gone is not an error.
        """
        with self._lock:
            if self._released:
                return False
            self._released = True
        if self._kind == "dir":
            removed = self._path.remove_tree(safe=True)
        else:
            removed = int(self._path.remove())
        logger.debug(
            "Released temp resource",
            extra={"path": self._path.raw, "kind": self._kind, "removed": removed},
        )
        return True


def _base_dir(opts: TempOptions) -> PathValue:
    if opts.dir is not None:
        base = path(opts.dir)
    elif opts.tmpdir is False:
        base = cwd()
    else:
        base = path(_tempfile.gettempdir())
    return base.absolute()


def _candidate_names(template: str, suffix: str) -> Iterator[str]:
    m = re.search(r"X+$", template)
    if m is None:
        raise InvalidArgument(f"template must end in 'X' characters: {template!r}")
    stem, width = template[: m.start()], len(m.group(0))
    for _ in range(_tempfile.TMP_MAX):
        rand = "".join(secrets.choice(_NAME_CHARS) for _ in range(width))
        yield f"{stem}{rand}{suffix}"


def _create(op: str, kind: str, opts: TempOptions, make: Callable[[PathValue], None]) -> TempResource:
    base = _base_dir(opts)
    for name in _candidate_names(opts.template, opts.suffix):
        candidate = base.child(name)
        try:
            make(candidate)
        except FileExistsError:
            continue
        except OSError as e:
            raise IoError.from_os_error(op, candidate.raw, e) from e
        logger.debug("Created temp resource", extra={"path": candidate.raw, "kind": kind})
        return TempResource(candidate, kind)
    raise IoError(op, base.raw, message="no usable temporary name found")


def _make_file(p: PathValue) -> None:
    os.close(os.open(p, os.O_RDWR | os.O_CREAT | os.O_EXCL | _CLOEXEC, 0o600))


def _make_dir(p: PathValue) -> None:
    os.mkdir(p, 0o700)


def tempfile(options: Optional[Any] = None, **kwargs: Any) -> TempResource:
    """Create an empty temporary file (mode 0600) and return its owner.

    Options: ``template``/``TEMPLATE`` (trailing X's are randomized), ``suffix``,
    ``dir`` (parent directory) and ``tmpdir`` (``False`` with no ``dir`` means
    the current directory; otherwise the host temp directory, which honours
    ``TMPDIR``). The path is always absolute.
    """
    opts = build_options(TempOptions, options, kwargs)
    return _create("tempfile", "file", opts, _make_file)


def tempdir(options: Optional[Any] = None, **kwargs: Any) -> TempResource:
    """Create a temporary directory (mode 0700) and return its owner."""
    opts = build_options(TempOptions, options, kwargs)
    return _create("tempdir", "dir", opts, _make_dir)


__all__ = ["TempResource", "tempdir", "tempfile"]
