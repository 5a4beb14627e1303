"""Configuration management: environments, TOML loading, and run options.

Usage:
    >>> from env_compare.config import load_compare_config, CompareConfig, RunOptions
"""

from env_compare.config.loader import load_compare_config
from env_compare.config.models import Check, CompareConfig, EnvironmentProfile, RunOptions

__all__ = ["load_compare_config", "Check", "CompareConfig", "EnvironmentProfile", "RunOptions"]
