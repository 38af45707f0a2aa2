"""CLI entry point for dryguard.

Invoked as::

    dryguard [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m dryguard.cli.main

Commands
--------
digest      Print the digest of every entry under a directory
diff        Compare two directory trees
snapshot    Copy a directory tree to a fresh snapshot location
check       Run a program in dry-run mode and verify it changed nothing
version     Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

import dryguard

console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}", highlight=False)
    sys.exit(1)


def _print_report(report: "dryguard.DriftReport") -> None:
    console.print(f"[bold]Drift:[/bold] {report.left_root} → {report.right_root}\n")
    for item in report.items:
        line = str(item)
        color = {"[+]": "green", "[-]": "red"}.get(line[:3], "yellow")
        console.print(f"[{color}]{escape(line)}[/{color}]", highlight=False)
    console.print(f"\n[bold]{len(report.items)}[/bold] drifted path(s)")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="dryguard")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file (defaults to $DRYGUARD_CONFIG).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Snapshot directory trees and prove dry runs leave them untouched."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
    try:
        ctx.obj = dryguard.load_config(config_path)
    except dryguard.ConfigError as exc:
        _fail(str(exc))


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]dryguard[/bold]", f"v{dryguard.__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# digest command
# ---------------------------------------------------------------------------


@cli.command(name="digest")
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    default="table",
    help="Output format",
)
@click.pass_obj
def digest_command(config: dryguard.HarnessConfig, root: str, output_format: str) -> None:
    """Print the digest of every entry under ROOT.

    Directories are listed with an empty digest.
    """
    try:
        digests = dryguard.build_digest_map(root, config)
    except dryguard.DryguardError as exc:
        _fail(str(exc))
        return

    as_hex = {path: digest.hex() for path, digest in sorted(digests.items())}
    if output_format == "json":
        click.echo(json.dumps(as_hex, indent=2))
        return
    if output_format == "yaml":
        click.echo(yaml.safe_dump(as_hex, sort_keys=False), nl=False)
        return

    table = Table(title=f"Digests: {root} ({config.hash_algorithm})")
    table.add_column("Path")
    table.add_column("Digest", overflow="fold")
    for path, hex_digest in as_hex.items():
        table.add_row(path, hex_digest or "[dim]<directory>[/dim]")
    console.print(table)


# ---------------------------------------------------------------------------
# diff command
# ---------------------------------------------------------------------------


@cli.command(name="diff")
@click.argument("left", type=click.Path(exists=True, file_okay=False))
@click.argument("right", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json", "yaml"], case_sensitive=False),
    default="text",
    help="Output format",
)
@click.pass_obj
def diff_command(
    config: dryguard.HarnessConfig, left: str, right: str, output_format: str
) -> None:
    """Compare the tree at LEFT (expected) with the tree at RIGHT (actual).

    Exits with status 1 when the trees differ.
    """
    try:
        report = dryguard.diff_trees(left, right, config)
    except dryguard.DryguardError as exc:
        _fail(str(exc))
        return

    if output_format == "json":
        click.echo(report.to_json())
    elif output_format == "yaml":
        click.echo(report.to_yaml(), nl=False)
    elif not report.has_drift:
        console.print("[green]No drift between the two trees.[/green]")
    else:
        _print_report(report)

    if report.has_drift:
        sys.exit(1)


# ---------------------------------------------------------------------------
# snapshot command
# ---------------------------------------------------------------------------


@cli.command(name="snapshot")
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.pass_obj
def snapshot_command(config: dryguard.HarnessConfig, root: str) -> None:
    """Copy ROOT to a fresh snapshot directory and print its location.

    The snapshot is left in place; delete it when done.
    """
    store = dryguard.SnapshotStore(
        config.temp_dir,
        prefix=config.snapshot_prefix,
        special_entries=config.special_entries,
    )
    try:
        snapshot_root = store.capture(root)
    except dryguard.DryguardError as exc:
        _fail(str(exc))
        return
    click.echo(str(snapshot_root))


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@cli.command(name="check", context_settings={"ignore_unknown_options": True})
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.argument("program", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option(
    "--dry-run-token",
    default=None,
    help="Argument appended to PROGRAM to request a dry run (default from config).",
)
@click.pass_obj
def check_command(
    config: dryguard.HarnessConfig,
    root: str,
    program: tuple[str, ...],
    dry_run_token: str | None,
) -> None:
    """Run PROGRAM in ROOT with the dry-run token and verify ROOT is unchanged.

    \b
        dryguard check ./project -- make clean
        dryguard check ./project --dry-run-token -n -- rsync -a src/ dst/
    """
    if dry_run_token:
        config = dryguard.HarnessConfig.from_mapping(
            {**config.to_dict(), "dry_run_token": dry_run_token}
        )
    command = dryguard.SubprocessCommand(program)
    harness = dryguard.RunHarness(command, working_root=Path(root), config=config)
    try:
        harness.run_and_assert([], dry_run=True)
    except dryguard.DriftError as exc:
        _print_report(exc.report)
        sys.exit(1)
    except dryguard.DryguardError as exc:
        for line in harness.reporter.lines:
            err_console.print(line, markup=False, highlight=False)
        _fail(str(exc))
    finally:
        harness.close()
    console.print(
        f"[green]OK[/green] {' '.join(program)} {config.dry_run_token} left {root} unchanged",
        highlight=False,
    )


if __name__ == "__main__":
    cli()
