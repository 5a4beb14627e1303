"""Comparison pipeline.

Fetches every environment, runs the requested comparisons, optionally
syncs the schema, and signals differences in monitor mode.

Usage:
    from env_compare.runner import run_checks, DifferencesDetectedError
    from env_compare.config.models import RunOptions

    options = RunOptions(sync=True, monitor=True)
    try:
        result = await run_checks(client, ["A1B2", "C3D4"], options)
    except DifferencesDetectedError as e:
        print("drift detected", e.result.sync_result)
"""

import logging
from collections.abc import Sequence

from pydantic import BaseModel

from env_compare.adapters.base import ConsoleClient
from env_compare.api_keys import compare_api_keys
from env_compare.config.models import Check, RunOptions
from env_compare.schema.comparator import compare_tables
from env_compare.schema.models import Environment
from env_compare.schema.sync import ConfirmFn, SyncResult, sync_schema

logger = logging.getLogger(__name__)


class DifferencesDetectedError(Exception):
    """Raised in monitor mode when the environments differ.

    The run itself completed; ``result`` holds what it found and did.
    """

    def __init__(self, result: "RunResult") -> None:
        super().__init__("Differences detected")
        self.result = result


class RunResult(BaseModel):
    """Result of run_checks().

    Example:
        >>> result = RunResult(environments=["prod", "staging"])
        >>> result.has_differences
        False
    """

    environments: list[str]
    schema_differences: bool = False
    api_key_differences: bool = False
    sync_result: SyncResult | None = None

    @property
    def has_differences(self) -> bool:
        return self.schema_differences or self.api_key_differences


async def fetch_environments(
    client: ConsoleClient,
    environment_ids: Sequence[str],
) -> list[Environment]:
    """Fetch environments one after the other, in the given order."""
    environments: list[Environment] = []
    for environment_id in environment_ids:
        logger.info("Fetching environment %s", environment_id)
        environments.append(await client.fetch_environment(environment_id))
    return environments


async def run_checks(
    client: ConsoleClient,
    environment_ids: Sequence[str],
    options: RunOptions | None = None,
    confirm: ConfirmFn | None = None,
) -> RunResult:
    """Compare environments and optionally sync the source schema to targets.

    Args:
        client: Console client.
        environment_ids: Source id first, then target ids.
        options: Checks, sync/silent/monitor flags and ignored columns.
        confirm: Prompt callback forwarded to ``sync_schema``.

    Returns:
        ``RunResult`` describing differences and the sync outcome.

    Raises:
        DifferencesDetectedError: In monitor mode, when differences exist.
        ValueError: If two environments share a name.
        Exception: Any other failure, after it is logged.
    """
    options = options or RunOptions()

    try:
        environments = await fetch_environments(client, environment_ids)
        result = RunResult(environments=[env.name for env in environments])

        # Comparison maps are keyed by environment name
        duplicates = sorted({name for name in result.environments if result.environments.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate environment name(s): {', '.join(duplicates)}")

        if len(environments) < 2:
            logger.info("Nothing to compare: %d environment(s)", len(environments))
            return result

        if Check.SCHEMA in options.checks:
            result.schema_differences = compare_tables(environments, options.columns_to_ignore)

        if Check.API_KEYS in options.checks:
            result.api_key_differences = compare_api_keys(environments)

        if result.has_differences and options.sync and Check.SCHEMA in options.checks:
            result.sync_result = await sync_schema(
                client,
                environments,
                silent=options.silent,
                confirm=confirm,
                columns_to_ignore=options.columns_to_ignore,
            )
    except Exception:
        logger.exception("Comparison run failed")
        raise

    if result.has_differences and options.monitor:
        raise DifferencesDetectedError(result)

    return result
