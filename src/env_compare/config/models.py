"""Pydantic models for run configuration."""

from enum import Enum

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class Check(str, Enum):
    """Comparisons a run can perform."""

    SCHEMA = "schema"
    API_KEYS = "api-keys"


class EnvironmentProfile(BaseModel):
    """Environment entry from env-compare.toml."""

    id: str
    snapshot: str | None = None  # JSON export path, relative to the config file
    description: str = ""


class RunOptions(BaseModel):
    """The ``[run]`` table: what to compare and how to sync."""

    source: str | None = None
    targets: list[str] = Field(default_factory=list)
    checks: list[Check] = Field(default_factory=lambda: [Check.SCHEMA, Check.API_KEYS])
    columns_to_ignore: list[str] = Field(default_factory=list)
    silent: bool = False  # never prompt; apply every change
    sync: bool = False
    monitor: bool = False  # differences are a failure


class CompareConfig(BaseModel):
    """Complete configuration from env-compare.toml."""

    environments: dict[str, EnvironmentProfile]
    run: RunOptions = Field(default_factory=RunOptions)
