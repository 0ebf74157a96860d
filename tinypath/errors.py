"""Exception types raised by tinypath.

Every failure is raised to the caller; nothing in the package prints or logs
an error. OS-level failures are wrapped in :class:`IoError` (or one of its
subclasses) carrying the operation name, the path, and the original
``OSError`` so callers can still inspect ``errno``.
"""

from __future__ import annotations

import errno as _errno
from typing import List, Optional, Tuple


class TinyPathError(Exception):
    """Base class for all tinypath errors."""


class InvalidArgument(TinyPathError, ValueError):
    """Raised when constructor input or call options are malformed."""


class IoError(TinyPathError, OSError):
    """Raised when an underlying OS call fails.

    Attributes:
        op: Operation that failed (e.g. ``"slurp"``, ``"spew"``)
        path: Path string the operation was applied to
        err: Original exception, also chained as ``__cause__``
    """

    def __init__(self, op: str, path: str, err: Optional[BaseException] = None, message: str = ""):
        self.op = op
        self.path = path
        self.err = err
        detail = message or (getattr(err, "strerror", None) or str(err) if err else "unknown error")
        code = getattr(err, "errno", None)
        super().__init__(code, f"Error {op} on '{path}': {detail}")

    def __str__(self) -> str:
        return self.strerror or ""

    @classmethod
    def from_os_error(cls, op: str, path: str, err: OSError) -> "IoError":
        """Pick the most specific subclass for ``err``."""
        if isinstance(err, FileNotFoundError) or err.errno == _errno.ENOENT:
            return NotFound(op, path, err)
        if isinstance(err, (IsADirectoryError, NotADirectoryError)):
            return KindError(op, path, err)
        return IoError(op, path, err)


class NotFound(IoError):
    """Raised when a path must exist but does not."""


class EncodingError(IoError):
    """Raised when file content cannot be decoded or encoded."""

    @classmethod
    def from_unicode_error(cls, op: str, path: str, err: UnicodeError) -> "EncodingError":
        return cls(op, path, err, message=str(err))


class KindError(IoError):
    """Raised when an operation is applied to the wrong kind of object."""


class TreeError(IoError):
    """Aggregate failure of a tree operation run in safe mode.

    ``failures`` lists every ``(path, error)`` pair that could not be
    processed; ``done`` counts the entries that were.
    """

    def __init__(self, op: str, path: str, failures: List[Tuple[str, OSError]], done: int = 0):
        self.failures = list(failures)
        self.done = done
        first = self.failures[0][1] if self.failures else None
        message = f"{len(self.failures)} entr{'y' if len(self.failures) == 1 else 'ies'} failed"
        super().__init__(op, path, first, message=message)


class ResourceReleased(TinyPathError, RuntimeError):
    """Raised when a temp resource is used after it was released."""


__all__ = [
    "TinyPathError",
    "InvalidArgument",
    "IoError",
    "NotFound",
    "EncodingError",
    "KindError",
    "TreeError",
    "ResourceReleased",
]
