"""Directory tree creation and removal.

With ``safe=True`` (the default) every entry is attempted: successes are
kept and the failures are raised together as one ``TreeError`` at the end.
With ``safe=False`` the first failure is raised immediately.
"""

from __future__ import annotations

import errno
import logging
import os
from typing import Any, Callable, List, Tuple

from ..config.options import TreeOptions, build_options
from ..core.value import PathValue
from ..errors import IoError, KindError, TreeError

logger = logging.getLogger(__name__)

_Fail = Callable[[PathValue, OSError], None]


def _collector(op: str, safe: bool) -> Tuple[List[Tuple[str, OSError]], _Fail]:
    failures: List[Tuple[str, OSError]] = []

    def fail(p: PathValue, err: OSError) -> None:
        if not safe:
            raise IoError.from_os_error(op, p.raw, err) from err
        failures.append((p.raw, err))

    return failures, fail


def mkpath(p: PathValue, options: Any = None, **kwargs: Any) -> List[PathValue]:
    """Create ``p`` and any missing parents; return the directories created.

    Raises:
        KindError: If ``p`` or one of its ancestors exists but is not a directory
        TreeError: Safe mode, if any directory could not be created
        IoError: Unsafe mode, on the first failure
    """
    opts = build_options(TreeOptions, options, kwargs)
    missing: List[PathValue] = []
    cur = p
    while not os.path.exists(cur):
        missing.append(cur)
        up = cur.parent()
        if up == cur:
            break
        cur = up
    if os.path.exists(cur) and not os.path.isdir(cur):
        raise KindError("mkpath", cur.raw, message="not a directory")

    failures, fail = _collector("mkpath", opts.safe)
    created: List[PathValue] = []
    for d in reversed(missing):
        try:
            os.mkdir(d, opts.mode)
        except FileExistsError:
            if os.path.isdir(d):
                continue
            fail(d, FileExistsError(errno.EEXIST, "File exists", d.raw))
            break
        except OSError as e:
            fail(d, e)
            # nothing beneath a failed directory can be created
            break
        created.append(d)
    if failures:
        raise TreeError("mkpath", p.raw, failures, done=len(created))
    return created


def _remove_entries(root: PathValue, fail: _Fail) -> int:
    try:
        with os.scandir(root) as it:
            entries = [(e.name, e.is_dir(follow_symlinks=False)) for e in it]
    except OSError as e:
        fail(root, e)
        return 0
    removed = 0
    for name, is_dir in entries:
        entry = root.child(name)
        if is_dir:
            removed += _remove_entries(entry, fail)
            try:
                os.rmdir(entry)
                removed += 1
            except OSError as e:
                fail(entry, e)
            continue
        try:
            os.unlink(entry)
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            fail(entry, e)
    return removed


def remove_tree(p: PathValue, options: Any = None, **kwargs: Any) -> int:
    """Remove ``p`` and everything beneath it without following symlinks.

    Returns the number of entries removed (0 when ``p`` does not exist).

    Raises:
        TreeError: Safe mode, if any entry could not be removed
        IoError: Unsafe mode, on the first failure
    """
    opts = build_options(TreeOptions, options, kwargs)
    if not os.path.lexists(p):
        return 0
    failures, fail = _collector("remove_tree", opts.safe)
    removed = 0
    if os.path.isdir(p) and not os.path.islink(p):
        removed += _remove_entries(p, fail)
        try:
            os.rmdir(p)
            removed += 1
        except OSError as e:
            fail(p, e)
    else:
        try:
            os.unlink(p)
            removed += 1
        except OSError as e:
            fail(p, e)
    if failures:
        raise TreeError("remove_tree", p.raw, failures, done=removed)
    logger.debug("remove_tree finished", extra={"path": p.raw, "removed": removed})
    return removed


__all__ = ["mkpath", "remove_tree"]
