#!/usr/bin/env python3
"""Example: Quickstart — dryguard

Minimal working example: build a directory tree, run a command in dry-run
mode against it, and show that a leaky dry run is caught.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install dryguard
"""
from __future__ import annotations

from pathlib import Path

import dryguard


def honest(args: list[str], reporter: dryguard.CapturingReporter) -> int:
    if "--dry-run" in args:
        reporter.info("would write out.txt")
    else:
        Path("out.txt").write_text("built", encoding="utf-8")
    return 0


def leaky(args: list[str], reporter: dryguard.CapturingReporter) -> int:
    Path("c.txt").write_text("oops", encoding="utf-8")
    return 0


def main() -> None:
    print(f"dryguard version: {dryguard.__version__}")

    # Step 1: A harness owns a temporary working root until closed
    with dryguard.RunHarness(dryguard.CallableCommand(honest)) as harness:
        harness.full_path("a.txt").write_text("hello", encoding="utf-8")
        harness.full_path("b").mkdir()

        # Step 2: Dry run leaves the tree alone
        harness.run_and_assert(["build"], dry_run=True)
        print(f"Dry run output: {harness.reporter.lines}")

        # Step 3: Real run, checked by the caller
        harness.run_and_assert(
            ["build"],
            dry_run=False,
            check=lambda: print(f"out.txt exists: {harness.full_path('out.txt').exists()}"),
        )

    # Step 4: A dry run with a side effect raises DriftError
    with dryguard.RunHarness(dryguard.CallableCommand(leaky)) as harness:
        harness.full_path("a.txt").write_text("hello", encoding="utf-8")
        try:
            harness.run_and_assert([], dry_run=True)
        except dryguard.DriftError as exc:
            print("\nCaught drift:")
            print(exc.report.summary())


if __name__ == "__main__":
    main()
