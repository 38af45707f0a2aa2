"""Mapping between absolute paths and root-relative identifiers."""
from __future__ import annotations

import os
from pathlib import Path


def to_relative(root: str | Path, path: str | Path) -> str:
    """Return *path* relative to *root* using ``/`` separators.

    A relative *path* is interpreted against *root* first.
    """
    root_path = Path(root)
    target = Path(path)
    if not target.is_absolute():
        target = root_path / target
    return Path(os.path.relpath(target, root_path)).as_posix()


def to_absolute(root: str | Path, relative: str | Path) -> Path:
    """Resolve *relative* against *root*.

    Absolute input is returned unchanged. ``.`` and ``..`` segments are
    collapsed without touching the filesystem.
    """
    target = Path(relative)
    if target.is_absolute():
        return Path(os.path.normpath(target))
    return Path(os.path.normpath(Path(root) / target))


def normalize_key(relative: str) -> str:
    """Return the canonical comparison key for a relative path.

    Separators become ``/`` and the path is lower-cased, so entries that
    differ only in casing collapse to the same key.
    """
    return relative.replace("\\", "/").lower()
