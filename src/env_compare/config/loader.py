"""Run configuration loading from env-compare.toml."""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from env_compare.config.models import CompareConfig, EnvironmentProfile, RunOptions

DEFAULT_CONFIG_FILE = "env-compare.toml"


def load_compare_config(config_path: Path | None = None) -> CompareConfig:
    """Load run configuration from a TOML file.

    Snapshot paths are resolved relative to the config file.  When the
    ``[run]`` table names no source, the first environment is the source
    and the others are targets.

    Args:
        config_path: Path to env-compare.toml (default: ./env-compare.toml)

    Returns:
        CompareConfig with all environments and run options

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        raise FileNotFoundError(
            f"Config not found: {config_path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with an [environments.<name>] table per environment."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    environments: dict[str, EnvironmentProfile] = {}
    try:
        for name, env_data in data.get("environments", {}).items():
            profile = EnvironmentProfile(**env_data)
            if profile.snapshot:
                profile.snapshot = str((config_path.parent / profile.snapshot).resolve())
            environments[name] = profile

        run = RunOptions(**data.get("run", {}))
    except (TypeError, ValidationError) as e:
        raise ValueError(f"Invalid config in {config_path.name}: {e}") from e

    if not environments:
        raise ValueError(f"No environments defined in {config_path.name}")

    if run.source is None:
        names = list(environments)
        run.source = names[0]
        run.targets = run.targets or names[1:]

    for name in [run.source, *run.targets]:
        if name not in environments:
            available = ", ".join(environments)
            raise ValueError(
                f"Environment '{name}' not defined in {config_path.name}. "
                f"Available: {available}"
            )

    return CompareConfig(environments=environments, run=run)
