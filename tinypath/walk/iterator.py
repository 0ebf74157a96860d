"""Lazy directory enumeration.

``iterate`` walks breadth-first: every entry of a directory is produced
before any entry of its subdirectories. ``.`` and ``..`` are never produced.
With ``follow_symlinks`` a cyclic link structure makes the walk infinite; no
cycle detection is done. An iterator cannot be rewound; call again instead.
"""

from __future__ import annotations

import os
import re
from collections import deque
from typing import Any, Callable, Deque, Dict, Generator, List, Optional, Pattern, Union

from ..config.options import IterOptions, build_options
from ..core.value import PathValue
from ..errors import IoError
from ..io import probe

_SKIP = (".", "..")


def _walk(root: PathValue, opts: IterOptions) -> Generator[PathValue, None, None]:
    pending: Deque[PathValue] = deque([root])
    while pending:
        current = pending.popleft()
        try:
            listing = os.scandir(current)
        except OSError as e:
            raise IoError.from_os_error("iterator", current.raw, e) from e
        with listing:
            for entry in listing:
                if entry.name in _SKIP:
                    continue
                child = current.child(entry.name)
                if opts.recurse and entry.is_dir(follow_symlinks=opts.follow_symlinks):
                    pending.append(child)
                yield child


def iterate(p: PathValue, options: Any = None, **kwargs: Any) -> Generator[PathValue, None, None]:
    """Return a lazy iterator over the entries beneath directory ``p``.

    Raises:
        NotFound: If ``p`` does not exist
        KindError: If ``p`` is not a directory
    """
    opts = build_options(IterOptions, options, kwargs)
    probe.require_dir(p, "iterator")
    return _walk(p, opts)


def children(p: PathValue, pattern: Optional[Union[str, Pattern[str]]] = None) -> List[PathValue]:
    """Return the direct entries of ``p`` sorted by name.

    ``pattern`` is a regular expression searched in each entry's basename.
    """
    probe.require_dir(p, "children")
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    try:
        with os.scandir(p) as listing:
            names = sorted(e.name for e in listing if e.name not in _SKIP)
    except OSError as e:
        raise IoError.from_os_error("children", p.raw, e) from e
    if regex is not None:
        names = [n for n in names if regex.search(n)]
    return [p.child(n) for n in names]


def visit(
    p: PathValue,
    callback: Callable[[PathValue, Dict[str, Any]], Any],
    options: Any = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Call ``callback(path, state)`` for each entry; return the shared ``state``.

    A callback returning exactly ``False`` ends the walk early.
    """
    state: Dict[str, Any] = {}
    walker = iterate(p, options, **kwargs)
    try:
        for entry in walker:
            if callback(entry, state) is False:
                break
    finally:
        walker.close()
    return state


__all__ = ["children", "iterate", "visit"]
