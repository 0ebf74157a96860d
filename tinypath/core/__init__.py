"""Path values: canonicalization, the immutable value type and the resolver."""

from .canonicalize import IS_WINDOWS, expand_tilde, normalize, split_volume
from .value import PathValue, canonicalize, cwd, path, rootdir
from .resolve import absolute, realpath, relative, subsumes

__all__ = [
    "IS_WINDOWS",
    "PathValue",
    "absolute",
    "canonicalize",
    "cwd",
    "expand_tilde",
    "normalize",
    "path",
    "realpath",
    "relative",
    "rootdir",
    "split_volume",
    "subsumes",
]
