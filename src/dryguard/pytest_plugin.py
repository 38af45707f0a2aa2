"""pytest integration for dryguard.

Loaded automatically through the ``pytest11`` entry point. Provides:

* ``working_root`` — a fresh, uniquely named directory per test.
* ``capturing_reporter`` — a :class:`~dryguard.commands.CapturingReporter`.
* ``harness_factory`` — builds :class:`~dryguard.harness.RunHarness`
  instances bound to ``working_root`` and closes them at teardown.

Example
-------
::

    import pytest

    @pytest.mark.directory_mutation
    @pytest.mark.parametrize("dry_run", [False, True])
    def test_clean(harness_factory, dry_run):
        harness = harness_factory(ClickCommand(cli))
        harness.full_path("build").mkdir()
        harness.run_and_assert(
            ["clean"],
            dry_run,
            check=lambda: assert_removed(harness.full_path("build")),
        )
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any

import pytest

from dryguard.commands import CapturingReporter, Command
from dryguard.config import load_config
from dryguard.errors import CleanupFailureError
from dryguard.harness import RunHarness
from dryguard.locking import DIRECTORY_MUTATION

logger = logging.getLogger(__name__)


def close_harnesses(harnesses: Iterable[RunHarness]) -> None:
    """Close every harness, then raise the first cleanup failure, if any."""
    failures: list[CleanupFailureError] = []
    for harness in harnesses:
        try:
            harness.close()
        except CleanupFailureError as exc:
            logger.warning("Failed to close %r: %s", harness, exc)
            failures.append(exc)
    if failures:
        raise failures[0]


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"directory_mutation: test changes the process working directory and joins "
        f"the {DIRECTORY_MUTATION!r} mutual-exclusion group",
    )


@pytest.fixture()
def working_root(tmp_path: Path) -> Path:
    """Return an empty directory owned by the current test."""
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture()
def capturing_reporter() -> Iterator[CapturingReporter]:
    reporter = CapturingReporter()
    yield reporter
    reporter.close()


@pytest.fixture()
def harness_factory(
    working_root: Path, capturing_reporter: CapturingReporter
) -> Iterator[Callable[..., RunHarness]]:
    """Return a factory building harnesses over ``working_root``.

    Keyword arguments are forwarded to :class:`RunHarness`. The harness
    configuration defaults to :func:`~dryguard.config.load_config`.
    """
    created: list[RunHarness] = []

    def _make(command: Command, **kwargs: Any) -> RunHarness:
        kwargs.setdefault("config", load_config())
        kwargs.setdefault("reporter", capturing_reporter)
        harness = RunHarness(command, working_root=working_root, **kwargs)
        created.append(harness)
        return harness

    yield _make
    close_harnesses(created)
