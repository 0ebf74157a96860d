"""Advisory file locking (single host, cooperating processes only).

Locks are taken with ``flock`` where available and ``msvcrt.locking`` on
Windows. A lock is held until its descriptor is closed. Failure to obtain a
lock is raised as :class:`~tinypath.errors.IoError`; it is never ignored.
"""

from __future__ import annotations

import os
from contextlib import contextmanager, suppress
from typing import Iterator

from ..config import defaults
from ..core.value import PathValue
from ..errors import IoError

# fcntl is Unix-only
try:
    import fcntl

    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False
    import msvcrt


def _win_lock(fd: int, mode: int) -> None:
    # msvcrt locks byte ranges from the current position; always lock byte 0
    pos = os.lseek(fd, 0, os.SEEK_CUR)
    os.lseek(fd, 0, os.SEEK_SET)
    try:
        msvcrt.locking(fd, mode, 1)
    finally:
        os.lseek(fd, pos, os.SEEK_SET)


def lock_fd(fd: int, *, exclusive: bool, op: str, path: str) -> None:
    """Block until ``fd`` holds a shared or exclusive advisory lock.

    Windows has no shared byte-range locks, so shared requests are exclusive there.

    Raises:
        IoError: If the lock cannot be obtained
    """
    try:
        if HAS_FCNTL:
            fcntl.flock(fd, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
        else:
            _win_lock(fd, msvcrt.LK_LOCK)
    except OSError as e:
        raise IoError(f"{op} (lock)", path, e) from e


def lock_path_for(target: PathValue) -> PathValue:
    """Return the sidecar lock file guarding writes that replace ``target``."""
    return target.sibling(f".{target.basename()}{defaults.IO.lock_suffix}")


def _still_linked(fd: int, lock_file: PathValue) -> bool:
    # a writer that released the lock may have unlinked the file we opened
    try:
        st = os.stat(lock_file)
    except FileNotFoundError:
        return False
    fst = os.fstat(fd)
    return (st.st_dev, st.st_ino) == (fst.st_dev, fst.st_ino)


@contextmanager
def sidecar_lock(target: PathValue, op: str) -> Iterator[PathValue]:
    """Hold an exclusive lock on ``target``'s sidecar lock file.

    Writers that rename over ``target`` cannot lock ``target`` itself (the
    rename swaps the inode under the lock), so they serialize on a sibling
    file instead. The sidecar exists only while a writer holds it: the holder
    unlinks it on release, and a waiter that wakes up on an unlinked inode
    opens the path again.
    """
    lock_file = lock_path_for(target)
    while True:
        try:
            fd = os.open(lock_file, os.O_RDWR | os.O_CREAT | getattr(os, "O_CLOEXEC", 0), 0o666)
        except OSError as e:
            raise IoError.from_os_error(f"{op} (lock)", lock_file.raw, e) from e
        try:
            lock_fd(fd, exclusive=True, op=op, path=target.raw)
            if _still_linked(fd, lock_file):
                break
        except BaseException:
            os.close(fd)
            raise
        os.close(fd)
    try:
        yield lock_file
    finally:
        _release(fd, lock_file)


def _release(fd: int, lock_file: PathValue) -> None:
    if HAS_FCNTL:
        # unlinked while locked; waiters holding this inode retry on the new path
        try:
            os.unlink(lock_file)
        finally:
            os.close(fd)
        return
    # Windows refuses to unlink a file another writer has open; that writer removes it later
    os.close(fd)
    with suppress(FileNotFoundError, PermissionError):
        os.unlink(lock_file)


__all__ = ["HAS_FCNTL", "lock_fd", "lock_path_for", "sidecar_lock"]
