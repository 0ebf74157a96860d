"""tinypath: immutable path values with locked, atomic file I/O.

Example:
    >>> from tinypath import path
    >>> p = path("foo", "bar.txt")
    >>> p.basename(), p.dirname(), p.parent().raw
    ('bar.txt', 'foo/', 'foo')
"""

from __future__ import annotations

import logging

from .config import Binmode, IterOptions, LinesOptions, ReadOptions, TempOptions, TreeOptions, WriteOptions
from .core import PathValue, canonicalize, cwd, path, rootdir
from .errors import (
    EncodingError,
    InvalidArgument,
    IoError,
    KindError,
    NotFound,
    ResourceReleased,
    TinyPathError,
    TreeError,
)
from .temp import TempResource, tempdir, tempfile

# silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "Binmode",
    "EncodingError",
    "InvalidArgument",
    "IoError",
    "IterOptions",
    "KindError",
    "LinesOptions",
    "NotFound",
    "PathValue",
    "ReadOptions",
    "ResourceReleased",
    "TempOptions",
    "TempResource",
    "TinyPathError",
    "TreeError",
    "TreeOptions",
    "WriteOptions",
    "canonicalize",
    "cwd",
    "path",
    "rootdir",
    "tempdir",
    "tempfile",
]
