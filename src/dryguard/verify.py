"""Content-addressed comparison of two directory trees.

Both trees are enumerated independently and reduced to digest maps keyed
by lower-cased relative path. Files are hashed, directories receive
:data:`~dryguard.hashing.EMPTY_DIGEST`. The trees match only when both
maps hold exactly the same keys with the same digests.

Verification never writes to either tree.
"""
from __future__ import annotations

import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from dryguard.config import HarnessConfig
from dryguard.diff import DigestMap, DriftReport, compare_digest_maps
from dryguard.errors import DriftError
from dryguard.hashing import digest_entry
from dryguard.paths import normalize_key
from dryguard.snapshot import SnapshotStore
from dryguard.tree import TreeEntry, walk_tree

logger = logging.getLogger(__name__)


def build_digest_map(root: str | Path, config: HarnessConfig | None = None) -> DigestMap:
    """Return the digest map of the tree under *root*.

    With ``config.workers > 1`` files are hashed on a thread pool; the map
    is only assembled after every digest has been computed.

    Entries whose relative paths differ only in casing share one key. Their
    digest is folded from every member's original path and digest, so the
    group compares equal only when it is unchanged.

    Raises
    ------
    FileUnavailableError
        If a file vanishes while being hashed.
    """
    config = config or HarnessConfig()
    entries = list(walk_tree(root, special_entries=config.special_entries))

    def _digest(entry: TreeEntry) -> bytes:
        return digest_entry(
            entry, algorithm=config.hash_algorithm, chunk_size=config.chunk_size
        )

    if config.workers > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            digests = list(pool.map(_digest, entries))
    else:
        digests = [_digest(entry) for entry in entries]

    groups: dict[str, list[tuple[str, bytes]]] = {}
    for entry, digest in zip(entries, digests):
        groups.setdefault(normalize_key(entry.relative_path), []).append(
            (entry.relative_path, digest)
        )

    result: DigestMap = {}
    for key, members in groups.items():
        if len(members) == 1:
            result[key] = members[0][1]
        else:
            logger.debug("Folding %d case-colliding entries under key %r", len(members), key)
            result[key] = _fold_members(members, config.hash_algorithm)
    logger.debug("Digested %d entries under %s", len(result), root)
    return result


def _fold_members(members: list[tuple[str, bytes]], algorithm: str) -> bytes:
    hasher = hashlib.new(algorithm)
    for relative_path, digest in sorted(members):
        name = relative_path.encode("utf-8")
        hasher.update(len(name).to_bytes(4, "big") + name)
        hasher.update(len(digest).to_bytes(4, "big") + digest)
    return hasher.digest()


def diff_trees(
    left: str | Path, right: str | Path, config: HarnessConfig | None = None
) -> DriftReport:
    """Compare the tree at *left* (expected) with the tree at *right* (actual)."""
    expected = build_digest_map(left, config)
    actual = build_digest_map(right, config)
    return DriftReport(
        left_root=str(left),
        right_root=str(right),
        items=compare_digest_maps(expected, actual),
    )


def verify(
    left: str | Path, right: str | Path, config: HarnessConfig | None = None
) -> None:
    """Assert that *right* is identical to *left*.

    Raises
    ------
    DriftError
        If any path was added, removed or changed.
    """
    report = diff_trees(left, right, config)
    if report.has_drift:
        logger.info("Drift detected between %s and %s", left, right)
        raise DriftError(report)


def verify_snapshot(
    snapshot_root: str | Path,
    working_root: str | Path,
    store: SnapshotStore,
    config: HarnessConfig | None = None,
) -> None:
    """Verify *working_root* against *snapshot_root*, then release the snapshot.

    The snapshot is released whatever the outcome. A cleanup failure is
    raised as :class:`~dryguard.errors.CleanupFailureError` only when
    verification itself succeeded; otherwise the verification error wins
    and the cleanup failure is logged.
    """
    try:
        verify(snapshot_root, working_root, config)
    except BaseException:
        store.release_quietly(snapshot_root)
        raise
    store.release(snapshot_root)
