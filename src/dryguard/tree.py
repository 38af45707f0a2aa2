"""Recursive enumeration of a directory tree.

:func:`walk_tree` yields one :class:`TreeEntry` for every file and every
directory beneath a root, empty directories included. Entries are produced
in sorted order with each directory preceding its contents, so repeated
walks over an unchanged tree yield identical sequences.

Symbolic links are never followed. Links and special files (sockets,
FIFOs, devices) are handled according to the ``special_entries`` policy:
``"error"`` raises :class:`~dryguard.errors.UnsupportedEntryError`,
``"skip"`` leaves them out.
"""
from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from dryguard.errors import TreeError, UnsupportedEntryError

logger = logging.getLogger(__name__)


class EntryKind(Enum):
    """Kind of a tree entry."""

    FILE = auto()
    DIRECTORY = auto()


@dataclass(frozen=True)
class TreeEntry:
    """A single file or directory found under a root.

    Parameters
    ----------
    relative_path:
        Root-relative path with ``/`` separators and original casing.
    kind:
        Whether the entry is a regular file or a directory.
    absolute_path:
        Location of the entry on disk.
    """

    relative_path: str
    kind: EntryKind
    absolute_path: Path

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


def _special_type(mode: int) -> str:
    if stat.S_ISLNK(mode):
        return "symlink"
    if stat.S_ISSOCK(mode):
        return "socket"
    if stat.S_ISFIFO(mode):
        return "fifo"
    if stat.S_ISCHR(mode) or stat.S_ISBLK(mode):
        return "device"
    return "unknown"


def walk_tree(root: str | Path, *, special_entries: str = "error") -> Iterator[TreeEntry]:
    """Yield every file and directory under *root*.

    Parameters
    ----------
    root:
        Directory to enumerate. The root itself is not yielded.
    special_entries:
        ``"error"`` or ``"skip"``; see the module docstring.

    Raises
    ------
    TreeError
        If *root* is not an existing directory or a subdirectory cannot
        be listed.
    UnsupportedEntryError
        If a symbolic link or special file is found under the ``"error"``
        policy.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise TreeError("Not a directory", root_path)
    yield from _walk(root_path, "", special_entries)


def _walk(directory: Path, prefix: str, special_entries: str) -> Iterator[TreeEntry]:
    try:
        with os.scandir(directory) as it:
            dir_entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise TreeError(f"Cannot list directory ({exc.strerror})", directory) from exc

    for dir_entry in dir_entries:
        relative = f"{prefix}{dir_entry.name}"
        try:
            mode = dir_entry.stat(follow_symlinks=False).st_mode
        except OSError as exc:
            raise TreeError(f"Cannot stat entry ({exc.strerror})", dir_entry.path) from exc
        if stat.S_ISDIR(mode):
            yield TreeEntry(relative, EntryKind.DIRECTORY, Path(dir_entry.path))
            yield from _walk(Path(dir_entry.path), f"{relative}/", special_entries)
        elif stat.S_ISREG(mode):
            yield TreeEntry(relative, EntryKind.FILE, Path(dir_entry.path))
        else:
            entry_type = _special_type(mode)
            if special_entries == "skip":
                logger.debug("Skipping %s entry %s", entry_type, dir_entry.path)
                continue
            raise UnsupportedEntryError(dir_entry.path, entry_type)
