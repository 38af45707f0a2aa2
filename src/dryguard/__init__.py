"""dryguard — prove that a command's dry run leaves the filesystem untouched.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import dryguard

    # Compare two trees by content
    report = dryguard.diff_trees("before/", "after/")
    print(report.summary())

    # Snapshot a tree, let something run, and assert nothing changed
    store = dryguard.SnapshotStore()
    with store.snapshot("project/") as snapshot_root:
        run_something_in_dry_run_mode()
        dryguard.verify(snapshot_root, "project/")

    # Drive a command through the full harness
    with dryguard.RunHarness(dryguard.ClickCommand(cli)) as harness:
        harness.run_and_assert(["clean"], dry_run=True)

    dryguard.__version__
    '0.1.0'
"""
from __future__ import annotations

__version__: str = "0.1.0"

from dryguard.commands import (
    CallableCommand,
    CapturingReporter,
    ClickCommand,
    Command,
    SubprocessCommand,
    run_command,
)
from dryguard.config import HarnessConfig, load_config
from dryguard.diff import DriftItem, DriftKind, DriftReport, compare_digest_maps
from dryguard.errors import (
    CleanupFailureError,
    ConfigError,
    DriftError,
    DryguardError,
    FileUnavailableError,
    TreeError,
    UnexpectedExitCodeError,
    UnsupportedEntryError,
)
from dryguard.harness import HarnessState, RunHarness
from dryguard.hashing import EMPTY_DIGEST, digest_entry, hash_file
from dryguard.locking import DIRECTORY_MUTATION, exclusive, working_directory
from dryguard.paths import normalize_key, to_absolute, to_relative
from dryguard.snapshot import SnapshotStore
from dryguard.tree import EntryKind, TreeEntry, walk_tree
from dryguard.verify import build_digest_map, diff_trees, verify, verify_snapshot

__all__ = [
    "__version__",
    "CallableCommand",
    "CapturingReporter",
    "CleanupFailureError",
    "ClickCommand",
    "Command",
    "ConfigError",
    "DIRECTORY_MUTATION",
    "DriftError",
    "DriftItem",
    "DriftKind",
    "DriftReport",
    "DryguardError",
    "EMPTY_DIGEST",
    "EntryKind",
    "FileUnavailableError",
    "HarnessConfig",
    "HarnessState",
    "RunHarness",
    "SnapshotStore",
    "SubprocessCommand",
    "TreeEntry",
    "TreeError",
    "UnexpectedExitCodeError",
    "UnsupportedEntryError",
    "build_digest_map",
    "compare_digest_maps",
    "diff_trees",
    "digest_entry",
    "exclusive",
    "hash_file",
    "load_config",
    "normalize_key",
    "run_command",
    "to_absolute",
    "to_relative",
    "verify",
    "verify_snapshot",
    "walk_tree",
    "working_directory",
]
