"""The boundary between the harness and the command under test.

A :class:`Command` receives an argument list and a reporter and returns an
integer exit status, either directly or as an awaitable. Three adapters
cover the common cases:

* :class:`CallableCommand` wraps a plain or ``async`` function.
* :class:`ClickCommand` runs a click command or group in-process.
* :class:`SubprocessCommand` runs an external program in the current
  directory.

The command writes its diagnostic output through the reporter it is given.
:class:`CapturingReporter` records that output so tests can assert on it.
"""
from __future__ import annotations

import asyncio
import inspect
import io
import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Union

import click
from click.testing import CliRunner
from rich.console import Console

logger = logging.getLogger(__name__)

ExitCode = Union[int, Awaitable[int]]


class CapturingReporter:
    """Output sink that records everything the command under test reports.

    Messages are rendered through a recording :class:`rich.console.Console`
    and mirrored to the ``dryguard.reporter`` logger, so they show up in
    pytest's captured log output as well.

    Parameters
    ----------
    width:
        Console width used for rich renderables. Plain text is recorded
        verbatim: long lines are not wrapped and emoji codes stay as typed.
    """

    def __init__(self, width: int = 120) -> None:
        self._buffer = io.StringIO()
        self._console = Console(
            file=self._buffer,
            record=True,
            width=width,
            color_system=None,
            force_terminal=False,
            emoji=False,
            soft_wrap=True,
        )
        self._log = logging.getLogger("dryguard.reporter")
        self._closed = False

    @property
    def console(self) -> Console:
        return self._console

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, text: str) -> None:
        """Record raw output, typically a captured stdout stream."""
        if not text:
            return
        self._console.print(text, end="", markup=False, highlight=False)
        for line in text.splitlines():
            self._log.debug("%s", line)

    def _emit(self, level: int, prefix: str, message: str) -> None:
        self._console.print(f"{prefix}{message}", markup=False, highlight=False)
        self._log.log(level, "%s", message)

    def info(self, message: str) -> None:
        self._emit(logging.INFO, "", message)

    def warning(self, message: str) -> None:
        self._emit(logging.WARNING, "warning: ", message)

    def error(self, message: str) -> None:
        self._emit(logging.ERROR, "error: ", message)

    @property
    def text(self) -> str:
        """Everything recorded so far as plain text."""
        return self._console.export_text(clear=False)

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()

    def close(self) -> None:
        self._closed = True


class Command(ABC):
    """Something the harness can invoke with an argument list."""

    @abstractmethod
    def execute(self, args: Sequence[str], reporter: CapturingReporter) -> ExitCode:
        """Run with *args* and return the exit status, or an awaitable of it."""


class CallableCommand(Command):
    """Adapts ``func(args, reporter) -> int`` or an ``async`` equivalent."""

    def __init__(self, func: Callable[[list[str], CapturingReporter], Any]) -> None:
        self._func = func

    def execute(self, args: Sequence[str], reporter: CapturingReporter) -> ExitCode:
        return self._func(list(args), reporter)

    def __repr__(self) -> str:
        return f"CallableCommand({getattr(self._func, '__qualname__', self._func)!r})"


class ClickCommand(Command):
    """Runs a click command in-process and reports its output.

    Exceptions raised by the command propagate unchanged; ``SystemExit``
    and click usage errors become the exit status.
    """

    def __init__(self, cli: click.Command, *, prog_name: str | None = None) -> None:
        self._cli = cli
        self._prog_name = prog_name
        self._runner = CliRunner()

    def execute(self, args: Sequence[str], reporter: CapturingReporter) -> ExitCode:
        result = self._runner.invoke(
            self._cli,
            list(args),
            prog_name=self._prog_name,
            catch_exceptions=False,
        )
        reporter.write(result.output)
        return result.exit_code

    def __repr__(self) -> str:
        return f"ClickCommand({self._cli.name!r})"


class SubprocessCommand(Command):
    """Runs ``argv_prefix + args`` as a child process in the current directory."""

    def __init__(self, argv_prefix: Sequence[str]) -> None:
        if not argv_prefix:
            raise ValueError("SubprocessCommand needs at least a program name")
        self._argv_prefix = list(argv_prefix)

    def execute(self, args: Sequence[str], reporter: CapturingReporter) -> ExitCode:
        argv = [*self._argv_prefix, *args]
        logger.debug("Running %s", argv)
        completed = subprocess.run(argv, capture_output=True, text=True, check=False)
        reporter.write(completed.stdout)
        for line in completed.stderr.splitlines():
            reporter.error(line)
        return completed.returncode

    def __repr__(self) -> str:
        return f"SubprocessCommand({self._argv_prefix!r})"


async def _await_exit_code(awaitable: Awaitable[int]) -> int:
    return await awaitable


def run_command(
    command: Command, args: Sequence[str], reporter: CapturingReporter
) -> int:
    """Invoke *command* with *args* and wait for its exit status.

    Empty-string arguments are dropped before invocation. An awaitable
    result is driven to completion with :func:`asyncio.run`, so this must
    not be called from inside a running event loop.
    """
    filtered = [arg for arg in args if arg]
    result = command.execute(filtered, reporter)
    if inspect.isawaitable(result):
        result = asyncio.run(_await_exit_code(result))
    if not isinstance(result, int):
        raise TypeError(f"{command!r} returned {result!r}, expected an integer exit code")
    return result
