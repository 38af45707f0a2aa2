"""Unit tests for dryguard.config."""
from __future__ import annotations

from pathlib import Path

import pytest

from dryguard.config import CONFIG_ENV_VAR, HarnessConfig, load_config
from dryguard.errors import ConfigError


class TestHarnessConfig:
    def test_defaults(self) -> None:
        config = HarnessConfig()
        assert config.dry_run_token == "--dry-run"
        assert config.success_exit_code == 0
        assert config.hash_algorithm == "sha256"
        assert config.workers == 1
        assert config.special_entries == "error"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"dry_run_token": ""},
            {"chunk_size": 0},
            {"workers": 0},
            {"special_entries": "follow"},
            {"hash_algorithm": "rot13"},
            {"hash_algorithm": "shake_128"},
            {"hash_algorithm": "shake_256"},
        ],
    )
    def test_invalid_values(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ConfigError):
            HarnessConfig(**kwargs)  # type: ignore[arg-type]

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            HarnessConfig(workers=-1)

    def test_from_mapping(self) -> None:
        config = HarnessConfig.from_mapping({"dry_run_token": "-n", "workers": 2})
        assert config.dry_run_token == "-n"
        assert config.workers == 2

    def test_from_mapping_rejects_unknown_keys(self) -> None:
        with pytest.raises(ConfigError, match="dry_run"):
            HarnessConfig.from_mapping({"dry_run": "-n"})

    def test_to_dict_round_trip(self) -> None:
        config = HarnessConfig(dry_run_token="-n", special_entries="skip")
        assert HarnessConfig.from_mapping(config.to_dict()) == config


class TestYamlLoading:
    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "dryguard.yaml"
        path.write_text("dry_run_token: --whatif\nspecial_entries: skip\n", encoding="utf-8")
        config = HarnessConfig.from_yaml(path)
        assert config.dry_run_token == "--whatif"
        assert config.special_entries == "skip"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert HarnessConfig.from_yaml(path) == HarnessConfig()

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            HarnessConfig.from_yaml(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            HarnessConfig.from_yaml(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            HarnessConfig.from_yaml(tmp_path / "missing.yaml")


class TestLoadConfig:
    def test_defaults_without_path_or_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert load_config() == HarnessConfig()

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "env.yaml"
        path.write_text("workers: 3\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().workers == 3

    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_path = tmp_path / "env.yaml"
        env_path.write_text("workers: 3\n", encoding="utf-8")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("workers: 5\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_path))
        assert load_config(explicit).workers == 5
