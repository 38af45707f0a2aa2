"""Unit tests for dryguard.commands — adapters, reporter and run_command."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import pytest

from dryguard.commands import (
    CallableCommand,
    CapturingReporter,
    ClickCommand,
    SubprocessCommand,
    run_command,
)


@click.group()
def demo_cli() -> None:
    """Tiny click app used as a command under test."""


@demo_cli.command()
@click.argument("name")
@click.option("--dry-run", is_flag=True)
def greet(name: str, dry_run: bool) -> None:
    suffix = " (dry run)" if dry_run else ""
    click.echo(f"hello {name}{suffix}")


@demo_cli.command()
def fail() -> None:
    raise click.ClickException("nope")


# ===========================================================================
# CapturingReporter
# ===========================================================================


class TestCapturingReporter:
    def test_records_messages(self) -> None:
        reporter = CapturingReporter()
        reporter.info("starting")
        reporter.warning("careful")
        reporter.error("broken")
        assert reporter.lines == ["starting", "warning: careful", "error: broken"]

    def test_write_keeps_raw_text(self) -> None:
        reporter = CapturingReporter()
        reporter.write("one\ntwo\n")
        reporter.write("")
        assert reporter.lines == ["one", "two"]

    def test_long_lines_are_not_wrapped(self) -> None:
        reporter = CapturingReporter()
        line = "x" * 200 + " :smile:"
        reporter.write(line + "\n")
        reporter.info(line)
        assert reporter.lines == [line, line]

    def test_markup_is_not_interpreted(self) -> None:
        reporter = CapturingReporter()
        reporter.info("[bold]literal[/bold]")
        assert reporter.text.strip() == "[bold]literal[/bold]"

    def test_mirrors_to_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="dryguard.reporter")
        CapturingReporter().warning("careful")
        assert any(r.name == "dryguard.reporter" and r.message == "careful" for r in caplog.records)

    def test_close(self) -> None:
        reporter = CapturingReporter()
        assert not reporter.closed
        reporter.close()
        assert reporter.closed


# ===========================================================================
# run_command
# ===========================================================================


class TestRunCommand:
    def test_plain_callable(self) -> None:
        seen: list[list[str]] = []

        def func(args: list[str], reporter: CapturingReporter) -> int:
            seen.append(args)
            reporter.info("ran")
            return 3

        reporter = CapturingReporter()
        assert run_command(CallableCommand(func), ["a", "b"], reporter) == 3
        assert seen == [["a", "b"]]
        assert reporter.lines == ["ran"]

    def test_async_callable_is_awaited(self) -> None:
        async def func(args: list[str], reporter: CapturingReporter) -> int:
            return len(args)

        assert run_command(CallableCommand(func), ["x", "y"], CapturingReporter()) == 2

    def test_empty_arguments_are_dropped(self) -> None:
        seen: list[list[str]] = []

        def func(args: list[str], reporter: CapturingReporter) -> int:
            seen.append(args)
            return 0

        run_command(CallableCommand(func), ["build", "", "--fast", ""], CapturingReporter())
        assert seen == [["build", "--fast"]]

    def test_non_integer_result(self) -> None:
        command = CallableCommand(lambda args, reporter: "ok")
        with pytest.raises(TypeError):
            run_command(command, [], CapturingReporter())


# ===========================================================================
# ClickCommand
# ===========================================================================


class TestClickCommand:
    def test_output_reaches_reporter(self) -> None:
        reporter = CapturingReporter()
        assert run_command(ClickCommand(demo_cli), ["greet", "bob"], reporter) == 0
        assert reporter.lines == ["hello bob"]

    def test_dry_run_flag_is_passed_through(self) -> None:
        reporter = CapturingReporter()
        run_command(ClickCommand(demo_cli), ["greet", "bob", "--dry-run"], reporter)
        assert reporter.lines == ["hello bob (dry run)"]

    def test_failure_exit_code(self) -> None:
        reporter = CapturingReporter()
        assert run_command(ClickCommand(demo_cli), ["fail"], reporter) == 1
        assert "nope" in reporter.text

    def test_usage_error_exit_code(self) -> None:
        assert run_command(ClickCommand(demo_cli), ["missing"], CapturingReporter()) == 2


# ===========================================================================
# SubprocessCommand
# ===========================================================================


class TestSubprocessCommand:
    def test_runs_in_current_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        command = SubprocessCommand([sys.executable, "-c"])
        reporter = CapturingReporter()
        code = run_command(command, ["import os; print(os.getcwd())"], reporter)
        assert code == 0
        assert Path(reporter.lines[0]).resolve() == tmp_path.resolve()

    def test_exit_code_and_stderr(self) -> None:
        command = SubprocessCommand([sys.executable, "-c"])
        reporter = CapturingReporter()
        code = run_command(
            command, ["import sys; sys.stderr.write('bad\\n'); sys.exit(4)"], reporter
        )
        assert code == 4
        assert reporter.lines == ["error: bad"]

    def test_requires_program(self) -> None:
        with pytest.raises(ValueError):
            SubprocessCommand([])
