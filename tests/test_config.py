"""Tests for env-compare.toml loading."""

from pathlib import Path

import pytest

from env_compare.config import Check, load_compare_config

CONFIG = """
[environments.production]
id = "A1"
snapshot = "exports/production.json"
description = "Live"

[environments.staging]
id = "B2"

[environments.qa]
id = "C3"
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "env-compare.toml"
    path.write_text(text)
    return path


class TestLoadCompareConfig:
    """Verify load_compare_config()."""

    def test_defaults_first_environment_is_source(self, tmp_path: Path) -> None:
        """Without [run], the first environment is the source and the rest targets."""
        config = load_compare_config(_write(tmp_path, CONFIG))

        assert list(config.environments) == ["production", "staging", "qa"]
        assert config.run.source == "production"
        assert config.run.targets == ["staging", "qa"]
        assert config.run.checks == [Check.SCHEMA, Check.API_KEYS]
        assert config.run.silent is False
        assert config.run.sync is False
        assert config.run.monitor is False

    def test_snapshot_resolved_relative_to_config(self, tmp_path: Path) -> None:
        """Snapshot paths are relative to the config file."""
        config = load_compare_config(_write(tmp_path, CONFIG))
        assert config.environments["production"].snapshot == str(
            (tmp_path / "exports" / "production.json").resolve()
        )
        assert config.environments["staging"].snapshot is None

    def test_run_table(self, tmp_path: Path) -> None:
        """[run] options are parsed."""
        text = CONFIG + """
[run]
source = "staging"
targets = ["qa"]
checks = ["api-keys"]
columns_to_ignore = ["tmp"]
silent = true
sync = true
monitor = true
"""
        config = load_compare_config(_write(tmp_path, text))

        assert config.run.source == "staging"
        assert config.run.targets == ["qa"]
        assert config.run.checks == [Check.API_KEYS]
        assert config.run.columns_to_ignore == ["tmp"]
        assert config.run.silent and config.run.sync and config.run.monitor

    def test_default_path_is_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a path, ./env-compare.toml is read."""
        _write(tmp_path, CONFIG)
        monkeypatch.chdir(tmp_path)
        assert load_compare_config().run.source == "production"

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config not found"):
            load_compare_config(tmp_path / "nope.toml")

    def test_no_environments(self, tmp_path: Path) -> None:
        """A config without environments is invalid."""
        with pytest.raises(ValueError, match="No environments"):
            load_compare_config(_write(tmp_path, "[run]\nsilent = true\n"))

    def test_unknown_target(self, tmp_path: Path) -> None:
        """Naming an undefined environment lists the available ones."""
        text = CONFIG + '\n[run]\nsource = "production"\ntargets = ["prod2"]\n'
        with pytest.raises(ValueError, match="Available: production, staging, qa"):
            load_compare_config(_write(tmp_path, text))

    def test_invalid_check(self, tmp_path: Path) -> None:
        """Unknown checks are rejected."""
        text = CONFIG + '\n[run]\nchecks = ["roles"]\n'
        with pytest.raises(ValueError, match="Invalid config"):
            load_compare_config(_write(tmp_path, text))

    def test_environment_without_id(self, tmp_path: Path) -> None:
        """Every environment needs an id."""
        with pytest.raises(ValueError, match="Invalid config"):
            load_compare_config(_write(tmp_path, "[environments.production]\ndescription = 'x'\n"))
