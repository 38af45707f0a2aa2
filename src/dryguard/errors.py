"""Error types raised by dryguard.

Every error derives from :class:`DryguardError` and carries structured
attributes so tests can assert on the offending path, exit code or drift
report rather than on message text.
"""
from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dryguard.diff import DriftReport


class DryguardError(Exception):
    """Base class for all dryguard errors."""


class ConfigError(DryguardError, ValueError):
    """Raised when a configuration value is missing or invalid."""


class TreeError(DryguardError):
    """Raised when a directory tree cannot be enumerated."""

    def __init__(self, message: str, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")


class UnsupportedEntryError(TreeError):
    """Raised for symbolic links and special files under the ``error`` policy."""

    def __init__(self, path: str | Path, entry_type: str) -> None:
        self.entry_type = entry_type
        super().__init__(f"Unsupported {entry_type} entry", path)


class FileUnavailableError(DryguardError):
    """A file vanished or became unreadable between enumeration and hashing."""

    def __init__(self, path: str | Path, cause: OSError | None = None) -> None:
        self.path = str(path)
        self.cause = cause
        detail = f" ({cause.strerror})" if cause is not None and cause.strerror else ""
        super().__init__(f"File is no longer available: {self.path}{detail}")


class DriftError(DryguardError, AssertionError):
    """The tree after a dry run differs from the snapshot taken before it.

    Parameters
    ----------
    report:
        The :class:`~dryguard.diff.DriftReport` listing every added,
        removed and changed path.
    """

    def __init__(self, report: "DriftReport") -> None:
        self.report = report
        super().__init__(report.summary())

    @property
    def paths(self) -> list[str]:
        """All drifted paths in sorted order."""
        return [item.path for item in self.report.items]


class UnexpectedExitCodeError(DryguardError, AssertionError):
    """The command under test returned something other than the success code."""

    def __init__(self, args: Sequence[str], expected: int, actual: int) -> None:
        self.command_args = tuple(args)
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Command {list(self.command_args)!r} exited with {actual}, expected {expected}"
        )


class CleanupFailureError(DryguardError):
    """A snapshot or working directory could not be deleted."""

    def __init__(self, path: str | Path, cause: OSError | None = None) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Failed to delete {self.path}: {cause}")


__all__ = [
    "CleanupFailureError",
    "ConfigError",
    "DriftError",
    "DryguardError",
    "FileUnavailableError",
    "TreeError",
    "UnexpectedExitCodeError",
    "UnsupportedEntryError",
]
