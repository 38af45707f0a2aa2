"""Tests for the dryguard click CLI."""
from __future__ import annotations

import json
import shutil
import sys
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from dryguard import __version__
from dryguard.cli.main import cli


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


class TestVersion:
    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestDigest:
    def test_json(self, runner: CliRunner, sample_tree: Path) -> None:
        result = runner.invoke(cli, ["digest", str(sample_tree), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["b"] == ""
        assert len(data["a.txt"]) == 64

    def test_yaml(self, runner: CliRunner, sample_tree: Path) -> None:
        result = runner.invoke(cli, ["digest", str(sample_tree), "--format", "yaml"])
        assert result.exit_code == 0
        assert sorted(yaml.safe_load(result.output)) == ["a.txt", "b"]

    def test_table(self, runner: CliRunner, sample_tree: Path) -> None:
        result = runner.invoke(cli, ["digest", str(sample_tree)])
        assert result.exit_code == 0
        assert "a.txt" in result.output


class TestDiff:
    def test_no_drift(self, runner: CliRunner, sample_tree: Path, tmp_path: Path) -> None:
        copy = tmp_path / "copy"
        shutil.copytree(sample_tree, copy)
        result = runner.invoke(cli, ["diff", str(sample_tree), str(copy)])
        assert result.exit_code == 0
        assert "No drift" in result.output

    def test_drift_exits_one(self, runner: CliRunner, sample_tree: Path, tmp_path: Path) -> None:
        copy = tmp_path / "copy"
        shutil.copytree(sample_tree, copy)
        (copy / "c.txt").write_text("new")
        result = runner.invoke(cli, ["diff", str(sample_tree), str(copy)])
        assert result.exit_code == 1
        assert "[+] c.txt" in result.output

    def test_drift_json(self, runner: CliRunner, sample_tree: Path, tmp_path: Path) -> None:
        copy = tmp_path / "copy"
        shutil.copytree(sample_tree, copy)
        (copy / "a.txt").write_text("changed")
        result = runner.invoke(cli, ["diff", str(sample_tree), str(copy), "--format", "json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["changed"] == ["a.txt"]


class TestSnapshot:
    def test_prints_location(
        self, runner: CliRunner, sample_tree: Path, tmp_path: Path
    ) -> None:
        config = tmp_path / "dryguard.yaml"
        config.write_text(f"temp_dir: {json.dumps(str(tmp_path))}\n", encoding="utf-8")
        result = runner.invoke(cli, ["--config", str(config), "snapshot", str(sample_tree)])
        assert result.exit_code == 0
        location = Path(result.output.strip())
        assert location.parent == tmp_path
        assert (location / "a.txt").read_text() == "hello"


class TestCheck:
    def test_no_op_program_passes(self, runner: CliRunner, sample_tree: Path) -> None:
        result = runner.invoke(
            cli, ["check", str(sample_tree), "--", sys.executable, "-c", "pass"]
        )
        assert result.exit_code == 0, result.output
        assert "OK" in result.output

    def test_writing_program_fails(self, runner: CliRunner, sample_tree: Path) -> None:
        script = "open('c.txt', 'w').write('x')"
        result = runner.invoke(
            cli, ["check", str(sample_tree), "--", sys.executable, "-c", script]
        )
        assert result.exit_code == 1
        assert "[+] c.txt" in result.output

    def test_token_reaches_program(self, runner: CliRunner, sample_tree: Path) -> None:
        # The program fails unless it receives the custom token.
        script = "import sys; sys.exit(0 if sys.argv[-1] == '--whatif' else 3)"
        result = runner.invoke(
            cli,
            [
                "check",
                str(sample_tree),
                "--dry-run-token",
                "--whatif",
                "--",
                sys.executable,
                "-c",
                script,
            ],
        )
        assert result.exit_code == 0, result.output

    def test_failing_program(self, runner: CliRunner, sample_tree: Path) -> None:
        result = runner.invoke(
            cli, ["check", str(sample_tree), "--", sys.executable, "-c", "raise SystemExit(5)"]
        )
        assert result.exit_code == 1


class TestConfigOption:
    def test_invalid_config(self, runner: CliRunner, tmp_path: Path, sample_tree: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("workers: 0\n", encoding="utf-8")
        result = runner.invoke(cli, ["--config", str(config), "digest", str(sample_tree)])
        assert result.exit_code == 1

    def test_verbose_flag_accepted(self, runner: CliRunner, sample_tree: Path) -> None:
        result = runner.invoke(cli, ["--verbose", "digest", str(sample_tree), "--format", "json"])
        assert result.exit_code == 0
