"""Shared test fixtures for dryguard.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. The ``working_root``, ``capturing_reporter``
and ``harness_factory`` fixtures come from the ``dryguard.pytest_plugin``
entry point.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

TreeSpec = Mapping[str, "str | bytes | None"]


def build_tree(root: Path, spec: TreeSpec) -> Path:
    """Create files and directories under *root* from *spec*.

    Keys ending in ``/`` (or mapped to ``None``) become directories, all
    other keys become files holding the given text or bytes.
    """
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in spec.items():
        target = root / relative.rstrip("/")
        if relative.endswith("/") or content is None:
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture()
def make_tree(tmp_path: Path) -> Callable[[str, TreeSpec], Path]:
    """Return a helper creating a named tree under ``tmp_path``."""

    def _make(name: str, spec: TreeSpec) -> Path:
        return build_tree(tmp_path / name, spec)

    return _make


@pytest.fixture()
def sample_tree(make_tree: Callable[[str, TreeSpec], Path]) -> Path:
    """A tree with ``a.txt`` holding "hello" and an empty directory ``b/``."""
    return make_tree("sample", {"a.txt": "hello", "b/": None})


@pytest.fixture()
def snapshot_dir(tmp_path: Path) -> Path:
    """Parent directory for snapshots, kept inside ``tmp_path``."""
    path = tmp_path / "snapshots"
    path.mkdir()
    return path
