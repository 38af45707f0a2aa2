"""Drift between two digest maps.

A *digest map* maps a normalised relative path to the digest of the entry
at that path. Comparing the map of a snapshot with the map of the current
tree yields one :class:`DriftItem` per path that was added, removed or
changed, collected in a :class:`DriftReport`.

Usage
-----
::

    from dryguard.diff import DriftReport, compare_digest_maps

    items = compare_digest_maps(before, after)
    report = DriftReport(left_root="snap", right_root="work", items=items)
    if report.has_drift:
        print(report.summary())
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto

import yaml

DigestMap = dict[str, bytes]


class DriftKind(Enum):
    """How a path differs between the expected and actual tree."""

    ADDED = auto()
    REMOVED = auto()
    CHANGED = auto()


_MARKERS = {
    DriftKind.ADDED: "[+]",
    DriftKind.REMOVED: "[-]",
    DriftKind.CHANGED: "[~]",
}


def _hex(digest: bytes | None) -> str | None:
    if digest is None:
        return None
    return digest.hex() if digest else "<directory>"


@dataclass(frozen=True)
class DriftItem:
    """A single drifted path.

    Parameters
    ----------
    path:
        Normalised relative path of the entry.
    kind:
        The :class:`DriftKind` describing the difference.
    old_digest:
        Digest in the expected tree (``None`` for additions).
    new_digest:
        Digest in the actual tree (``None`` for removals).
    """

    path: str
    kind: DriftKind
    old_digest: bytes | None = None
    new_digest: bytes | None = None

    def __str__(self) -> str:
        return f"{_MARKERS[self.kind]} {self.path}"

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "kind": self.kind.name,
            "old_digest": _hex(self.old_digest),
            "new_digest": _hex(self.new_digest),
        }


@dataclass
class DriftReport:
    """Structured result of comparing two trees.

    Parameters
    ----------
    left_root:
        The expected tree, normally the snapshot.
    right_root:
        The actual tree, normally the working root.
    items:
        Every drifted path, sorted by path.
    """

    left_root: str
    right_root: str
    items: list[DriftItem] = field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        """Return ``True`` when any path differs."""
        return bool(self.items)

    @property
    def added(self) -> list[str]:
        return [item.path for item in self.by_kind(DriftKind.ADDED)]

    @property
    def removed(self) -> list[str]:
        return [item.path for item in self.by_kind(DriftKind.REMOVED)]

    @property
    def changed(self) -> list[str]:
        return [item.path for item in self.by_kind(DriftKind.CHANGED)]

    def by_kind(self, kind: DriftKind) -> list[DriftItem]:
        """Return all items of the given :class:`DriftKind`."""
        return [item for item in self.items if item.kind is kind]

    def summary(self) -> str:
        """Return a multi-line human-readable summary of the drift."""
        if not self.has_drift:
            return f"No drift between '{self.left_root}' and '{self.right_root}'."
        lines = [
            f"Drift: '{self.left_root}' → '{self.right_root}'",
            f"  {len(self.items)} path(s): "
            f"{len(self.added)} added, "
            f"{len(self.removed)} removed, "
            f"{len(self.changed)} changed",
            "",
        ]
        for item in self.items:
            lines.append(f"  {item}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Serialise the report to a plain dictionary."""
        return {
            "left_root": self.left_root,
            "right_root": self.right_root,
            "total": len(self.items),
            "added": self.added,
            "removed": self.removed,
            "changed": self.changed,
            "items": [item.to_dict() for item in self.items],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False)


def compare_digest_maps(
    expected: Mapping[str, bytes], actual: Mapping[str, bytes]
) -> list[DriftItem]:
    """Return the drift from *expected* to *actual*, sorted by path.

    Keys missing from *actual* are removals, keys only in *actual* are
    additions, and keys in both with different digests are changes.
    """
    items: list[DriftItem] = []
    for path in sorted(set(expected) | set(actual)):
        if path not in actual:
            items.append(DriftItem(path, DriftKind.REMOVED, old_digest=expected[path]))
        elif path not in expected:
            items.append(DriftItem(path, DriftKind.ADDED, new_digest=actual[path]))
        elif expected[path] != actual[path]:
            items.append(
                DriftItem(
                    path,
                    DriftKind.CHANGED,
                    old_digest=expected[path],
                    new_digest=actual[path],
                )
            )
    return items
