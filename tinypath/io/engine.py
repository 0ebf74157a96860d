"""Locked reads and locked/atomic writes.

Contract:
- slurp/lines: open read-only, take a shared advisory lock, read, close.
- spew: under an exclusive sidecar lock, write a fresh temp file in the target's
  own directory, fsync it, then ``os.replace`` it over the target. Any failure
  before the rename removes the temp file and leaves the target untouched, so
  readers see either the whole old file or the whole new one.
- append: open in append mode under an exclusive lock on the file itself;
  no atomicity beyond the lock.

Binmodes: ``default`` (host encoding, universal newlines), ``raw`` (bytes) and
``utf8`` (strict UTF-8, no newline translation).
"""

from __future__ import annotations

import hashlib
import itertools
import logging
import os
import secrets
import shutil
import stat as _stat
from collections import deque
from contextlib import contextmanager, suppress
from typing import IO, Any, Callable, Iterable, Iterator, List, Optional, Tuple, Union

from ..config import defaults
from ..config.options import Binmode, LinesOptions, ReadOptions, WriteOptions, build_options
from ..core.canonicalize import PathPart
from ..core.value import PathValue, canonicalize
from ..errors import EncodingError, InvalidArgument, IoError, KindError, TinyPathError
from . import probe
from .locking import lock_fd, sidecar_lock

logger = logging.getLogger(__name__)

_CLOEXEC = getattr(os, "O_CLOEXEC", 0)
_TEMP_ATTEMPTS = 100


def _as_path(p: PathPart, like: PathValue) -> PathValue:
    if isinstance(p, PathValue):
        return p
    return canonicalize([p], windows=like.windows)


@contextmanager
def _translate(op: str, p: PathValue) -> Iterator[None]:
    """Re-raise OS and codec failures as tinypath errors."""
    try:
        yield
    except TinyPathError:
        raise
    except UnicodeError as e:
        raise EncodingError.from_unicode_error(op, p.raw, e) from e
    except OSError as e:
        raise IoError.from_os_error(op, p.raw, e) from e


def _fdopen(fd: int, mode: str, binmode: Binmode) -> IO[Any]:
    if binmode.is_binary:
        return os.fdopen(fd, mode + "b", closefd=True)
    return os.fdopen(fd, mode, closefd=True, **binmode.open_kwargs())


@contextmanager
def _open_read(p: PathValue, binmode: Binmode, op: str) -> Iterator[IO[Any]]:
    probe.require_file(p, op)
    fd = os.open(p, os.O_RDONLY | _CLOEXEC)
    try:
        lock_fd(fd, exclusive=False, op=op, path=p.raw)
        fh = _fdopen(fd, "r", binmode)
    except BaseException:
        os.close(fd)
        raise
    with fh:
        yield fh


def _payload(data: Any, binmode: Binmode, op: str, p: PathValue) -> Union[str, bytes]:
    """Join ``data`` (a string/bytes or an iterable of them) into one payload."""
    if isinstance(data, (str, bytes, bytearray, memoryview)):
        items: Iterable[Any] = (data,)
    else:
        try:
            items = list(data)
        except TypeError:
            raise InvalidArgument(f"cannot {op} {type(data).__name__} to '{p.raw}'") from None
    if binmode.is_binary:
        chunks = []
        for item in items:
            if isinstance(item, str):
                raise InvalidArgument(f"{op} with binmode raw requires bytes, got str")
            chunks.append(bytes(item))
        return b"".join(chunks)
    texts = []
    for item in items:
        if not isinstance(item, str):
            raise InvalidArgument(
                f"{op} with binmode {binmode.value} requires str, got {type(item).__name__}"
            )
        texts.append(item)
    return "".join(texts)


def _chomp(line: Any) -> Any:
    if isinstance(line, bytes):
        if line.endswith(b"\r\n"):
            return line[:-2]
        return line[:-1] if line.endswith((b"\n", b"\r")) else line
    if line.endswith("\r\n"):
        return line[:-2]
    return line[:-1] if line.endswith(("\n", "\r")) else line


# ---------- Reads ----------
def slurp(p: PathValue, options: Any = None, **kwargs: Any) -> Union[str, bytes]:
    """Return the whole file; ``bytes`` for binmode raw, ``str`` otherwise.

    Raises:
        NotFound: If the file does not exist
        KindError: If ``p`` is a directory
        EncodingError: If the content does not decode
        IoError: On any other OS failure, including lock failure
    """
    opts = build_options(ReadOptions, options, kwargs)
    with _translate("slurp", p), _open_read(p, opts.binmode, "slurp") as fh:
        return fh.read()


def lines(p: PathValue, options: Any = None, **kwargs: Any) -> List[Any]:
    """Return the file's lines.

    With a positive ``count`` only the first ``count`` lines are read; a
    negative ``count`` keeps the last ``-count`` lines in a bounded buffer.
    ``chomp`` strips one trailing ``\\n``, ``\\r\\n`` or ``\\r`` per line.
    The number of lines is simply ``len(result)``.
    """
    opts = build_options(LinesOptions, options, kwargs)
    with _translate("lines", p), _open_read(p, opts.binmode, "lines") as fh:
        if opts.count is None:
            selected = list(fh)
        elif opts.count > 0:
            selected = list(itertools.islice(fh, opts.count))
        else:
            selected = list(deque(fh, maxlen=-opts.count))
    if opts.chomp:
        selected = [_chomp(line) for line in selected]
    return selected


# ---------- Writes ----------
def _resolve_write_target(p: PathValue) -> PathValue:
    # write through symlinks so the link itself survives the rename
    if os.path.islink(p):
        return canonicalize([os.path.realpath(p)], windows=p.windows)
    return p


def _create_sibling_temp(target: PathValue) -> Tuple[PathValue, int]:
    name = target.basename()
    for _ in range(_TEMP_ATTEMPTS):
        tmp = target.sibling(f".{name}.{secrets.token_hex(4)}.tmp")
        try:
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL | _CLOEXEC, 0o666)
        except FileExistsError:
            continue
        return tmp, fd
    raise IoError("spew", target.raw, message="could not create a unique temp file")


def _discard(tmp: PathValue) -> None:
    with suppress(OSError):
        os.unlink(tmp)


def _copy_mode(src: PathValue, dst: PathValue) -> None:
    try:
        st = os.stat(src)
    except FileNotFoundError:
        return
    os.chmod(dst, _stat.S_IMODE(st.st_mode))


def spew(p: PathValue, data: Any, options: Any = None, **kwargs: Any) -> bool:
    """Atomically replace the file's content with ``data``.

    Raises:
        InvalidArgument: If ``data`` does not match the binmode
        KindError: If the target is a directory
        EncodingError: If ``data`` cannot be encoded
        IoError: If any step fails; the original file is left untouched
    """
    opts = build_options(WriteOptions, options, kwargs)
    payload = _payload(data, opts.binmode, "spew", p)
    target = _resolve_write_target(p)
    probe.require_file(target, "spew")
    with _translate("spew", target), sidecar_lock(target, "spew"):
        tmp, fd = _create_sibling_temp(target)
        try:
            try:
                fh = _fdopen(fd, "w", opts.binmode)
            except BaseException:
                os.close(fd)
                raise
            with fh:
                fh.write(payload)
                fh.flush()
                if opts.fsync:
                    os.fsync(fh.fileno())
            _copy_mode(target, tmp)
            os.replace(tmp, target)
        except BaseException:
            _discard(tmp)
            raise
    logger.debug("spew committed", extra={"path": target.raw, "binmode": opts.binmode.value})
    return True


def append(p: PathValue, data: Any, options: Any = None, **kwargs: Any) -> bool:
    """Append ``data`` under an exclusive lock, creating the file if needed."""
    opts = build_options(WriteOptions, options, kwargs)
    payload = _payload(data, opts.binmode, "append", p)
    probe.require_file(p, "append")
    with _translate("append", p):
        fd = os.open(p, os.O_WRONLY | os.O_CREAT | os.O_APPEND | _CLOEXEC, 0o666)
        try:
            lock_fd(fd, exclusive=True, op="append", path=p.raw)
            fh = _fdopen(fd, "a", opts.binmode)
        except BaseException:
            os.close(fd)
            raise
        with fh:
            fh.write(payload)
            fh.flush()
            if opts.fsync:
                os.fsync(fh.fileno())
    return True


def touch(p: PathValue, epoch: Optional[float] = None) -> PathValue:
    """Create ``p`` empty if absent, else set its atime/mtime (to now or ``epoch``)."""
    with _translate("touch", p):
        created = False
        if not os.path.exists(p):
            os.close(os.open(p, os.O_WRONLY | os.O_CREAT | _CLOEXEC, 0o666))
            created = True
        if epoch is not None:
            os.utime(p, (epoch, epoch))
        elif not created:
            os.utime(p, None)
    return p


def touchpath(p: PathValue) -> PathValue:
    """``touch`` after creating any missing parent directories."""
    parent = p.parent()
    if not parent.is_dir():
        parent.mkpath()
    return touch(p)


def edit(p: PathValue, fn: Callable[[Any], Any], options: Any = None, **kwargs: Any) -> bool:
    """Replace the content with ``fn(content)``; the write is an atomic ``spew``."""
    opts = build_options(ReadOptions, options, kwargs)
    content = slurp(p, opts)
    return spew(p, fn(content), binmode=opts.binmode)


def edit_lines(p: PathValue, fn: Callable[[Any], Any], options: Any = None, **kwargs: Any) -> bool:
    """Replace each line with ``fn(line)`` (line terminators included)."""
    opts = build_options(ReadOptions, options, kwargs)
    original = lines(p, binmode=opts.binmode)
    return spew(p, [fn(line) for line in original], binmode=opts.binmode)


# ---------- Whole-file operations ----------
def copy(p: PathValue, dest: PathPart) -> PathValue:
    """Copy ``p`` to ``dest`` (into it, when ``dest`` is a directory); return the copy.

    Raises:
        InvalidArgument: If ``dest`` names the same file as ``p``
    """
    target = _as_path(dest, p)
    if target.is_dir():
        target = target.child(p.basename())
    with _translate("copy", p):
        if os.path.exists(target) and os.path.samefile(p, target):
            raise InvalidArgument(f"cannot copy '{p.raw}' onto itself ('{target.raw}')")
    with _translate("copy", p), _open_read(p, Binmode.RAW, "copy") as src:
        with _translate("copy", target), open(target, "wb") as dst:
            shutil.copyfileobj(src, dst, defaults.IO.chunk_size)
    return target


def move(p: PathValue, dest: PathPart) -> PathValue:
    """Rename ``p`` to ``dest`` (same filesystem only) and return ``dest``."""
    target = _as_path(dest, p)
    with _translate("move", p):
        os.replace(p, target)
    return target


def remove(p: PathValue) -> bool:
    """Unlink a file or symlink; return False if nothing was there.

    Raises:
        KindError: If ``p`` is a directory (use ``remove_tree``)
    """
    if os.path.isdir(p) and not os.path.islink(p):
        raise KindError("remove", p.raw, message="is a directory")
    try:
        os.unlink(p)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise IoError.from_os_error("remove", p.raw, e) from e
    return True


def _chunks(fh: IO[bytes]) -> Iterator[bytes]:
    size = defaults.IO.chunk_size
    return iter(lambda: fh.read(size), b"")


def digest(p: PathValue, algorithm: str = "sha256") -> str:
    """Return the hex digest of the file content."""
    try:
        h = hashlib.new(algorithm)
    except ValueError:
        raise InvalidArgument(f"unsupported digest algorithm: {algorithm}") from None
    with _translate("digest", p), _open_read(p, Binmode.RAW, "digest") as fh:
        for block in _chunks(fh):
            h.update(block)
    return h.hexdigest()


def has_same_bytes(p: PathValue, other: PathPart) -> bool:
    """True if the two files hold identical bytes.

    Raises:
        NotFound: If either file does not exist
    """
    q = _as_path(other, p)
    with _translate("has_same_bytes", p):
        if os.path.samefile(p, q):
            return True
    if probe.size(p) != probe.size(q):
        return False
    with _translate("has_same_bytes", p), _open_read(p, Binmode.RAW, "has_same_bytes") as a:
        with _open_read(q, Binmode.RAW, "has_same_bytes") as b:
            for left, right in zip(_chunks(a), _chunks(b)):
                if left != right:
                    return False
    return True


_OPEN_MODES = {
    # mode: (flags, fdopen mode, exclusive)
    "r": (os.O_RDONLY, "r", False),
    "r+": (os.O_RDWR, "r+", True),
    "w": (os.O_WRONLY | os.O_CREAT, "w", True),
    "a": (os.O_WRONLY | os.O_CREAT | os.O_APPEND, "a", True),
    "x": (os.O_WRONLY | os.O_CREAT | os.O_EXCL, "w", True),
}


@contextmanager
def open_locked(p: PathValue, mode: str = "r", options: Any = None, **kwargs: Any) -> Iterator[IO[Any]]:
    """Open ``p`` holding a shared (read) or exclusive (write) lock.

    ``"w"`` truncates only after the lock is held.
    """
    opts = build_options(ReadOptions, options, kwargs)
    try:
        flags, fmode, exclusive = _OPEN_MODES[mode]
    except KeyError:
        raise InvalidArgument(f"unsupported open mode: {mode!r}") from None
    probe.require_file(p, "open")
    with _translate("open", p):
        fd = os.open(p, flags | _CLOEXEC, 0o666)
        try:
            lock_fd(fd, exclusive=exclusive, op="open", path=p.raw)
            if mode == "w":
                os.ftruncate(fd, 0)
            fh = _fdopen(fd, fmode, opts.binmode)
        except BaseException:
            os.close(fd)
            raise
    with fh:
        yield fh


__all__ = [
    "append",
    "copy",
    "digest",
    "edit",
    "edit_lines",
    "has_same_bytes",
    "lines",
    "move",
    "open_locked",
    "remove",
    "slurp",
    "spew",
    "touch",
    "touchpath",
]
