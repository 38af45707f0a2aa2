"""Physical copies of a directory tree in isolated temporary storage.

Usage
-----
::

    from dryguard.snapshot import SnapshotStore

    store = SnapshotStore()
    with store.snapshot(working_root) as snapshot_root:
        run_dry_command()
        verify(snapshot_root, working_root)
    # snapshot_root no longer exists here
"""
from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dryguard.errors import CleanupFailureError, TreeError
from dryguard.tree import walk_tree

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Captures directory trees into fresh temporary directories.

    Every call to :meth:`capture` allocates a new, uniquely named directory
    under *temp_root*; a location is never handed out twice. The caller
    owns the returned path until it passes it to :meth:`release`.

    Parameters
    ----------
    temp_root:
        Parent directory for snapshots. ``None`` uses the system
        temporary directory.
    prefix:
        Name prefix of each snapshot directory.
    special_entries:
        Policy for symbolic links and special files, forwarded to
        :func:`~dryguard.tree.walk_tree`.
    """

    def __init__(
        self,
        temp_root: str | Path | None = None,
        *,
        prefix: str = "dryguard-snapshot-",
        special_entries: str = "error",
    ) -> None:
        self._temp_root = str(temp_root) if temp_root is not None else None
        self._prefix = prefix
        self._special_entries = special_entries

    def capture(self, root: str | Path) -> Path:
        """Copy the tree under *root* into a new snapshot directory.

        Directories are recreated empty and files are copied byte for
        byte. If copying fails the partial snapshot is removed before the
        error propagates.

        Returns
        -------
        Path
            The snapshot location.
        """
        root_path = Path(root)
        # Enumerate before allocating so a bad root leaves nothing behind.
        entries = list(walk_tree(root_path, special_entries=self._special_entries))
        snapshot_root = Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._temp_root))
        try:
            for entry in entries:
                target = snapshot_root / entry.relative_path
                if entry.is_directory:
                    target.mkdir(parents=True, exist_ok=True)
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copyfile(entry.absolute_path, target)
        except OSError as exc:
            self.release_quietly(snapshot_root)
            raise TreeError(f"Cannot copy tree into snapshot ({exc})", root_path) from exc
        except BaseException:
            self.release_quietly(snapshot_root)
            raise
        logger.debug(
            "Captured %d entries from %s into %s", len(entries), root_path, snapshot_root
        )
        return snapshot_root

    def release(self, snapshot_root: str | Path | None) -> None:
        """Delete a snapshot directory.

        Releasing ``None`` or a location that no longer exists is a no-op,
        so this may be called any number of times.

        Raises
        ------
        CleanupFailureError
            If the directory exists but cannot be deleted.
        """
        if snapshot_root is None:
            return
        path = Path(snapshot_root)
        if not path.exists():
            return
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise CleanupFailureError(path, exc) from exc
        logger.debug("Released snapshot %s", path)

    @contextmanager
    def snapshot(self, root: str | Path) -> Iterator[Path]:
        """Capture *root* for the duration of a ``with`` block.

        The snapshot is released on every exit path. When the block raised,
        a failure to release is logged and the original error propagates.
        """
        snapshot_root = self.capture(root)
        try:
            yield snapshot_root
        except BaseException:
            self.release_quietly(snapshot_root)
            raise
        self.release(snapshot_root)

    def release_quietly(self, snapshot_root: str | Path | None) -> None:
        """Release *snapshot_root*, logging instead of raising on failure.

        Used on error paths where an earlier exception must not be masked.
        """
        try:
            self.release(snapshot_root)
        except CleanupFailureError:
            logger.exception("Snapshot cleanup failed while handling an earlier error")
