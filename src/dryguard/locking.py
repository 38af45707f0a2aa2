"""Named mutual-exclusion groups and scoped working-directory changes.

The current directory is process-wide state. Every harness invocation that
changes it joins the :data:`DIRECTORY_MUTATION` group, so two such
invocations in the same process never overlap.
"""
from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

DIRECTORY_MUTATION = "directory-mutation"

_groups: dict[str, threading.RLock] = {}
_groups_guard = threading.Lock()


def group_lock(name: str) -> threading.RLock:
    """Return the process-wide lock backing the group called *name*."""
    with _groups_guard:
        lock = _groups.get(name)
        if lock is None:
            lock = _groups[name] = threading.RLock()
        return lock


@contextmanager
def exclusive(name: str) -> Iterator[None]:
    """Hold the group *name* for the duration of a ``with`` block.

    The lock is re-entrant, so a holder may join the same group again.
    """
    lock = group_lock(name)
    lock.acquire()
    try:
        yield
    finally:
        lock.release()


@contextmanager
def working_directory(path: str | Path, group: str = DIRECTORY_MUTATION) -> Iterator[Path]:
    """Switch the process to *path* and restore the previous directory on exit.

    The group *group* is held for the whole block.
    """
    with exclusive(group):
        previous = os.getcwd()
        target = Path(path)
        os.chdir(target)
        logger.debug("Changed directory %s -> %s", previous, target)
        try:
            yield target
        finally:
            os.chdir(previous)
            logger.debug("Restored directory %s", previous)
