"""Run a command against a working root and prove its dry run changes nothing.

Usage
-----
::

    from dryguard import RunHarness, ClickCommand

    with RunHarness(ClickCommand(cli)) as harness:
        (harness.working_root / "a.txt").write_text("hello")

        def check() -> None:
            assert (harness.working_root / "a.txt").read_text() == "HELLO"

        # Runs ``upcase a.txt``, then ``check``.
        harness.run_and_assert(["upcase", "a.txt"], dry_run=False, check=check)
        # Runs ``upcase a.txt --dry-run`` and verifies the tree is untouched.
        harness.run_and_assert(["upcase", "a.txt"], dry_run=True, check=check)

State machine
-------------
A plain run moves ``IDLE → EXECUTING → IDLE``. A dry-run check moves
``IDLE → SNAPSHOTTING → EXECUTING → VERIFYING → RELEASING → IDLE``;
``RELEASING`` is entered on every exit from ``VERIFYING``. After
:meth:`RunHarness.close` the harness is ``CLOSED``.
"""
from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Callable, Iterable
from enum import Enum, auto
from pathlib import Path
from types import TracebackType

from dryguard.commands import CapturingReporter, Command, run_command
from dryguard.config import HarnessConfig
from dryguard.errors import CleanupFailureError, DryguardError, UnexpectedExitCodeError
from dryguard.locking import working_directory
from dryguard.paths import to_absolute, to_relative
from dryguard.snapshot import SnapshotStore
from dryguard.verify import verify

logger = logging.getLogger(__name__)


class HarnessState(Enum):
    """Lifecycle states of a :class:`RunHarness`."""

    IDLE = auto()
    SNAPSHOTTING = auto()
    EXECUTING = auto()
    VERIFYING = auto()
    RELEASING = auto()
    CLOSED = auto()


class RunHarness:
    """Executes a command in a working root and verifies dry runs.

    Parameters
    ----------
    command:
        The command under test.
    working_root:
        Directory the command runs in. When omitted a fresh unique
        directory is created, owned by the harness and deleted by
        :meth:`close`. A supplied directory is never deleted.
    config:
        Harness settings; defaults to :class:`HarnessConfig`.
    store:
        Snapshot store; defaults to one built from *config*.
    reporter:
        Output sink handed to the command. Defaults to a new
        :class:`CapturingReporter`.
    """

    def __init__(
        self,
        command: Command,
        *,
        working_root: str | Path | None = None,
        config: HarnessConfig | None = None,
        store: SnapshotStore | None = None,
        reporter: CapturingReporter | None = None,
    ) -> None:
        self.command = command
        self.config = config or HarnessConfig()
        self.store = store or SnapshotStore(
            self.config.temp_dir,
            prefix=self.config.snapshot_prefix,
            special_entries=self.config.special_entries,
        )
        self.reporter = reporter or CapturingReporter()
        if working_root is None:
            self.working_root = Path(
                tempfile.mkdtemp(prefix="dryguard-work-", dir=self.config.temp_dir)
            )
            self._owns_working_root = True
        else:
            self.working_root = Path(working_root).absolute()
            self.working_root.mkdir(parents=True, exist_ok=True)
            self._owns_working_root = False
        self._snapshot_root: Path | None = None
        self._state = HarnessState.IDLE

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> HarnessState:
        return self._state

    @property
    def snapshot_root(self) -> Path | None:
        """Location of the current snapshot, or ``None``."""
        return self._snapshot_root

    def _transition(self, state: HarnessState) -> None:
        logger.debug("Harness %s: %s -> %s", self.working_root, self._state.name, state.name)
        self._state = state

    def _ensure_open(self) -> None:
        if self._state is HarnessState.CLOSED:
            raise DryguardError("RunHarness has been closed")

    # ------------------------------------------------------------------
    # Running commands
    # ------------------------------------------------------------------

    def run_and_assert(
        self,
        args: Iterable[str],
        dry_run: bool,
        check: Callable[[], None] | None = None,
    ) -> None:
        """Run *args* and either verify the dry run or call *check*.

        With *dry_run* the working root is snapshotted, the command runs
        with the dry-run token appended and the tree is verified against
        the snapshot; *check* is not called. Otherwise the command runs
        as given and *check* is called afterwards.
        """
        cmd = list(args)
        if dry_run:
            self.create_snapshot()
            try:
                self.run_and_assert_success(*cmd, self.config.dry_run_token)
            except BaseException:
                self._release_after_failure()
                raise
            self.verify_snapshot()
            return

        self.run_and_assert_success(*cmd)
        if check is not None:
            check()

    def run_and_assert_success(self, *args: str) -> None:
        """Run the command inside the working root; it must exit successfully.

        Raises
        ------
        UnexpectedExitCodeError
            If the exit status is not ``config.success_exit_code``.
        """
        self._ensure_open()
        previous = self._state
        self._transition(HarnessState.EXECUTING)
        try:
            with working_directory(self.working_root):
                exit_code = run_command(self.command, args, self.reporter)
        finally:
            self._transition(previous)
        if exit_code != self.config.success_exit_code:
            raise UnexpectedExitCodeError(
                [arg for arg in args if arg], self.config.success_exit_code, exit_code
            )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def create_snapshot(self) -> Path:
        """Snapshot the working root, replacing any earlier snapshot."""
        self._ensure_open()
        self.delete_snapshot()
        self._transition(HarnessState.SNAPSHOTTING)
        try:
            self._snapshot_root = self.store.capture(self.working_root)
        finally:
            self._transition(HarnessState.IDLE)
        return self._snapshot_root

    def verify_snapshot(self) -> None:
        """Verify the working root against the snapshot, then release it.

        Does nothing when no snapshot exists. The snapshot is released
        whether or not verification succeeds.

        Raises
        ------
        DriftError
            If the working root differs from the snapshot.
        """
        if self._snapshot_root is None:
            return
        self._transition(HarnessState.VERIFYING)
        try:
            verify(self._snapshot_root, self.working_root, self.config)
        except BaseException:
            self._release_after_failure()
            raise
        self.delete_snapshot()

    def delete_snapshot(self) -> None:
        """Release the current snapshot. Safe to call repeatedly."""
        if self._snapshot_root is None:
            return
        previous = self._state
        self._transition(HarnessState.RELEASING)
        try:
            self.store.release(self._snapshot_root)
            self._snapshot_root = None
        finally:
            self._transition(
                HarnessState.IDLE if previous is HarnessState.VERIFYING else previous
            )

    def _release_after_failure(self) -> None:
        try:
            self.delete_snapshot()
        except CleanupFailureError:
            logger.exception("Snapshot cleanup failed while handling an earlier error")

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def full_path(self, path: str | Path) -> Path:
        """Resolve *path* against the working root."""
        return to_absolute(self.working_root, path)

    def relative_path(self, path: str | Path) -> str:
        """Express *path* relative to the working root."""
        return to_relative(self.working_root, path)

    def dry_run_option(self, dry_run: bool) -> str:
        """Return the dry-run token, or ``""`` which is dropped from the command line."""
        return self.config.dry_run_token if dry_run else ""

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the reporter and release every resource the harness owns."""
        if self._state is HarnessState.CLOSED:
            return
        self.reporter.close()
        try:
            self.delete_snapshot()
        finally:
            self._transition(HarnessState.CLOSED)
            if self._owns_working_root:
                try:
                    shutil.rmtree(self.working_root)
                except FileNotFoundError:
                    pass
                except OSError as exc:
                    raise CleanupFailureError(self.working_root, exc) from exc

    def __enter__(self) -> RunHarness:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.close()
            return
        try:
            self.close()
        except CleanupFailureError:
            logger.exception("Harness cleanup failed while handling an earlier error")

    def __repr__(self) -> str:
        return (
            f"RunHarness(command={self.command!r}, "
            f"working_root={str(self.working_root)!r}, state={self._state.name})"
        )
