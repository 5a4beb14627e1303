"""env-compare: compare and sync schemas across application environments.

Compares table schemas and custom API keys of a source environment and one
or more target environments, reports differences as rich tables, and can
reconcile each target's schema with the source.

Usage:
    from env_compare import run_checks, RunOptions, SnapshotConsoleClient
    from env_compare import compare_tables, sync_schema
    from env_compare import load_compare_config
"""

__version__ = "0.1.0"

# Clients
from env_compare.adapters.base import ConsoleClient, MutationError
from env_compare.adapters.snapshot import SnapshotConsoleClient

# Config
from env_compare.config.loader import load_compare_config
from env_compare.config.models import Check, CompareConfig, EnvironmentProfile, RunOptions

# Schema
from env_compare.schema.comparator import compare_tables
from env_compare.schema.models import Environment
from env_compare.schema.sync import SyncResult, sync_schema

# API keys
from env_compare.api_keys import compare_api_keys

# Pipeline
from env_compare.runner import DifferencesDetectedError, RunResult, run_checks

__all__ = [
    # Clients
    "ConsoleClient",
    "MutationError",
    "SnapshotConsoleClient",
    # Config
    "load_compare_config",
    "Check",
    "CompareConfig",
    "EnvironmentProfile",
    "RunOptions",
    # Schema
    "compare_tables",
    "Environment",
    "SyncResult",
    "sync_schema",
    # API keys
    "compare_api_keys",
    # Pipeline
    "DifferencesDetectedError",
    "RunResult",
    "run_checks",
]
