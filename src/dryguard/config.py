"""Harness configuration.

Usage
-----
::

    from dryguard.config import HarnessConfig, load_config

    config = HarnessConfig(dry_run_token="-n")
    config = load_config("dryguard.yaml")

A YAML configuration file holds a flat mapping whose keys match the
:class:`HarnessConfig` field names::

    dry_run_token: --dry-run
    hash_algorithm: sha256
    workers: 4
    special_entries: skip
"""
from __future__ import annotations

import hashlib
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from dryguard.errors import ConfigError

#: Environment variable naming a YAML config file for :func:`load_config`.
CONFIG_ENV_VAR = "DRYGUARD_CONFIG"

SPECIAL_ENTRY_POLICIES: frozenset[str] = frozenset({"error", "skip"})


@dataclass(frozen=True)
class HarnessConfig:
    """Settings shared by the harness, the verifier and the CLI.

    Parameters
    ----------
    dry_run_token:
        Argument appended to the command line to request a dry run. Must
        match what the command under test understands.
    success_exit_code:
        Exit status a successful command invocation returns.
    hash_algorithm:
        Any algorithm name accepted by :func:`hashlib.new`.
    chunk_size:
        Bytes read per iteration while streaming a file into the digest.
    workers:
        Number of threads used to hash files. ``1`` hashes sequentially.
    temp_dir:
        Parent directory for snapshots and harness-owned working roots.
        ``None`` uses the system temporary directory.
    special_entries:
        What to do with symbolic links, sockets, FIFOs and devices:
        ``"error"`` raises, ``"skip"`` leaves them out of the comparison.
    snapshot_prefix:
        Name prefix of every snapshot directory.
    """

    dry_run_token: str = "--dry-run"
    success_exit_code: int = 0
    hash_algorithm: str = "sha256"
    chunk_size: int = 65536
    workers: int = 1
    temp_dir: str | None = None
    special_entries: str = "error"
    snapshot_prefix: str = "dryguard-snapshot-"

    def __post_init__(self) -> None:
        if not self.dry_run_token:
            raise ConfigError("dry_run_token must be a non-empty string")
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        if self.special_entries not in SPECIAL_ENTRY_POLICIES:
            raise ConfigError(
                f"special_entries must be one of {sorted(SPECIAL_ENTRY_POLICIES)}, "
                f"got {self.special_entries!r}"
            )
        if self.hash_algorithm not in hashlib.algorithms_available:
            raise ConfigError(f"Unknown hash algorithm {self.hash_algorithm!r}")
        if hashlib.new(self.hash_algorithm).digest_size == 0:
            raise ConfigError(
                f"Hash algorithm {self.hash_algorithm!r} has no fixed digest size"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HarnessConfig:
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")
        try:
            return cls(**dict(data))
        except TypeError as exc:
            raise ConfigError(str(exc)) from exc

    @classmethod
    def from_yaml(cls, path: str | Path) -> HarnessConfig:
        """Load a config from a YAML file holding a flat mapping."""
        config_path = Path(path)
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        return cls.from_mapping(data)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(path: str | Path | None = None) -> HarnessConfig:
    """Return the config at *path*, else at ``$DRYGUARD_CONFIG``, else defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return HarnessConfig()
    return HarnessConfig.from_yaml(path)
