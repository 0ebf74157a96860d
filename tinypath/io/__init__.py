"""Filesystem access: stat probe, locked/atomic I/O engine and tree operations."""

from .engine import (
    append,
    copy,
    digest,
    edit,
    edit_lines,
    has_same_bytes,
    lines,
    move,
    open_locked,
    remove,
    slurp,
    spew,
    touch,
    touchpath,
)
from .probe import exists, is_dir, is_file, is_link, lstat, size, stat
from .tree import mkpath, remove_tree

__all__ = [
    "append",
    "copy",
    "digest",
    "edit",
    "edit_lines",
    "exists",
    "has_same_bytes",
    "is_dir",
    "is_file",
    "is_link",
    "lines",
    "lstat",
    "mkpath",
    "move",
    "open_locked",
    "remove",
    "remove_tree",
    "size",
    "slurp",
    "spew",
    "stat",
    "touch",
    "touchpath",
]
