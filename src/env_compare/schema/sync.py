"""Schema reconciliation: align target environments with the source.

Sync is one-directional: the first environment is the source, every other
environment is a target reconciled independently, one after the other.

Steps:

1. **Tables** (``sync_tables``): remove tables the source lacks (asks for
   confirmation), then add tables the target lacks (no confirmation).
2. **Re-fetch** every environment, since the table set just changed.
3. **Columns** (``sync_columns``): add, update (asks) or remove (asks)
   columns and relations, in dependency order.
4. **Cleanup** through the client.

Every mutation is awaited before the next one starts.  A failed mutation is
logged and recorded in ``SyncResult.errors``; the run continues with the
next item.  There is no rollback.

Usage:
    from env_compare.schema.sync import sync_schema

    result = await sync_schema(client, [source, staging, qa], silent=False)
    print(result.format_summary())
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any

from pydantic import BaseModel, Field
from rich.prompt import Confirm

from env_compare.adapters.base import ConsoleClient, error_message
from env_compare.schema.models import Column, ColumnSignature, Environment, Relation
from env_compare.schema.relations import (
    ColumnIndex,
    relation_with_identification_id,
    resolve_identification_names,
)
from env_compare.schema.signatures import build_tables_map

logger = logging.getLogger(__name__)

# Environment-managed tables, never added or removed
SYSTEM_TABLES = frozenset({"DeviceRegistration", "Loggers"})

USERS_TABLE = "Users"

ConfirmFn = Callable[[str], bool]


class ConfirmationError(RuntimeError):
    """The confirmation prompt itself failed (e.g. no TTY for ``Confirm.ask``)."""


class SyncResult(BaseModel):
    """Result of a schema sync run.

    Attributes:
        success: True if no mutation failed.
        source: Source environment name.
        targets: Target environment names.
        tables_added: Tables created in targets.
        tables_removed: Tables deleted from targets.
        columns_added: Columns and relations created.
        columns_updated: Column definitions updated.
        columns_removed: Columns and relations deleted.
        rows_backfilled: Bulk updates issued before required-column updates.
        skipped: Operations declined at the confirmation prompt.
        errors: ``"<item>: <message>"`` for every failed mutation.
    """

    success: bool = False
    source: str = ""
    targets: list[str] = Field(default_factory=list)
    tables_added: int = 0
    tables_removed: int = 0
    columns_added: int = 0
    columns_updated: int = 0
    columns_removed: int = 0
    rows_backfilled: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)

    def format_summary(self) -> str:
        """Format the result as a short human-readable summary."""
        lines = [
            f"Schema sync {self.source} -> {', '.join(self.targets)}",
            f"  Tables added: {self.tables_added}, removed: {self.tables_removed}",
            f"  Columns added: {self.columns_added}, updated: {self.columns_updated}, "
            f"removed: {self.columns_removed}",
        ]
        if self.rows_backfilled:
            lines.append(f"  Bulk updates: {self.rows_backfilled}")
        if self.skipped:
            lines.append(f"  Skipped: {self.skipped}")
        if self.errors:
            lines.append(f"  Errors ({len(self.errors)}):")
            for error in self.errors:
                lines.append(f"    - {error}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def remove_table_message(env_name: str, table_name: str) -> str:
    return f"Are you sure you want to delete the table [bold]{env_name}.{table_name}[/bold]?"


def update_column_message(
    env_name: str,
    table_name: str,
    column_name: str,
    source: ColumnSignature,
    target: ColumnSignature,
) -> str:
    return (
        f"Are you sure you want to update the column [bold]{env_name}.{table_name}.{column_name}[/bold]: "
        f'"{target.signature}" => "{source.signature}"?'
    )


def remove_column_message(env_name: str, table_name: str, column_name: str) -> str:
    return f"Are you sure you want to delete the column [bold]{env_name}.{table_name}.{column_name}[/bold]?"


def _confirmed(message: str, silent: bool, confirm: ConfirmFn) -> bool:
    if silent:
        logger.info("%s (silent)", message)
        return True
    try:
        return bool(confirm(message))
    except Exception as e:
        raise ConfirmationError(f"Confirmation prompt failed: {e!r}") from e


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _attempt(result: SyncResult, item: str, call: Awaitable[Any]) -> bool:
    """Await one mutation, recording a failure instead of raising.

    Raises:
        RuntimeError: If the client does not support mutations.
    """
    try:
        await call
    except NotImplementedError:
        raise RuntimeError("Schema mutations not supported for this client type")
    except Exception as e:
        message = error_message(e)
        logger.error("Error: %s - %s", item, message)
        result.errors.append(f"{item}: {message}")
        return False
    return True


def _table_names(environment: Environment) -> list[str]:
    return [name for name in environment.table_names if name not in SYSTEM_TABLES]


def column_payload(
    definition: Column | Relation,
    target_index: ColumnIndex,
    column_id: str | int | None = None,
) -> dict[str, Any]:
    """Build the mutation payload for *definition* bound for a target.

    Relation identification metadata is translated into the target's id
    space, and ``columnId`` is replaced with *column_id* (the target's own
    id) or dropped.
    """
    if isinstance(definition, Relation):
        definition = relation_with_identification_id(definition, target_index)

    payload = definition.to_payload()
    payload.pop("columnId", None)
    if column_id is not None:
        payload["columnId"] = column_id
    return payload


def order_columns(
    table_name: str,
    columns_map: dict[str, dict[str, ColumnSignature]],
    source_name: str,
) -> list[str]:
    """Order column names for processing.

    Columns the source lacks come first, then plain columns, then columns
    with an ``expression`` (they may depend on the others); the sort is
    stable.  In ``Users`` the source's identity column always goes first.

    Example:
        order_columns("Users", columns_map, "production")
        # ['email', 'name', 'fullName']
    """

    def rank(column_name: str) -> int:
        signature = columns_map[column_name].get(source_name)
        if signature is None:
            return 0
        return 2 if signature.expression else 1

    column_names = sorted(columns_map, key=rank)

    if table_name == USERS_TABLE:
        for column_name in column_names:
            signature = columns_map[column_name].get(source_name)
            if signature is not None and signature.identity:
                column_names.remove(column_name)
                column_names.insert(0, column_name)
                break

    return column_names


# ---------------------------------------------------------------------------
# Table sync
# ---------------------------------------------------------------------------


async def sync_tables(
    client: ConsoleClient,
    environments: Sequence[Environment],
    silent: bool = False,
    confirm: ConfirmFn | None = None,
    result: SyncResult | None = None,
) -> list[Environment]:
    """Add and remove tables so every target has the source's table set.

    Args:
        client: Console client.
        environments: Source first, then targets.
        silent: Skip confirmation prompts.
        confirm: Prompt callback; defaults to ``rich.prompt.Confirm.ask``.
        result: Result collecting counters and errors.

    Returns:
        The environments with each target's table list reflecting
        successful removals.
    """
    confirm = confirm or Confirm.ask
    result = result if result is not None else SyncResult()

    source, *targets = environments
    source_names = _table_names(source)
    updated: list[Environment] = [source]

    for target in targets:
        target_names = _table_names(target)
        for_remove = [name for name in target_names if name not in source_names]
        for_add = [name for name in source_names if name not in target_names]

        for table_name in for_remove:
            if not _confirmed(remove_table_message(target.name, table_name), silent, confirm):
                result.skipped += 1
                continue
            if await _attempt(result, table_name, client.remove_table(target.id, table_name)):
                result.tables_removed += 1
                target = target.model_copy(
                    update={"tables": [t for t in target.tables if t.name != table_name]}
                )

        for table_name in for_add:
            if await _attempt(result, table_name, client.add_table(target.id, table_name)):
                result.tables_added += 1

        updated.append(target)

    return updated


# ---------------------------------------------------------------------------
# Column sync
# ---------------------------------------------------------------------------


async def sync_column(
    client: ConsoleClient,
    target: Environment,
    target_index: ColumnIndex,
    table_name: str,
    column_name: str,
    source_column: ColumnSignature | None,
    target_column: ColumnSignature | None,
    silent: bool,
    confirm: ConfirmFn,
    result: SyncResult,
) -> None:
    """Bring one target column in line with the source column.

    Raises whatever the client raises; the caller records the failure.
    """
    if source_column is not None and target_column is None:
        payload = column_payload(source_column.definition, target_index)
        await client.add_column(target.id, table_name, payload)
        result.columns_added += 1

    elif source_column is None and target_column is not None:
        message = remove_column_message(target.name, table_name, column_name)
        if not _confirmed(message, silent, confirm):
            result.skipped += 1
            return
        await client.remove_column(target.id, table_name, target_column.definition.to_payload())
        result.columns_removed += 1

    elif (
        source_column is not None
        and target_column is not None
        and source_column.signature != target_column.signature
    ):
        message = update_column_message(target.name, table_name, column_name, source_column, target_column)
        if not _confirmed(message, silent, confirm):
            result.skipped += 1
            return

        definition = source_column.definition
        default_value = getattr(definition, "default_value", None)
        if definition.required and default_value is not None:
            # Existing nulls would reject the NOT NULL update
            await client.bulk_update(
                target.id, table_name, f"{column_name} is null", {column_name: default_value}
            )
            result.rows_backfilled += 1

        payload = column_payload(definition, target_index, target_column.definition.column_id)
        await client.update_column(target.id, table_name, payload)
        result.columns_updated += 1


async def sync_columns(
    client: ConsoleClient,
    environments: Sequence[Environment],
    silent: bool = False,
    confirm: ConfirmFn | None = None,
    columns_to_ignore: Iterable[str] = (),
    result: SyncResult | None = None,
) -> SyncResult:
    """Add, update and remove columns so every target matches the source.

    Canonical maps are rebuilt from *environments*, which must reflect the
    current table set (re-fetch after ``sync_tables``).  Tables a target
    does not have (or the source does not have) are left to table sync.

    Args:
        client: Console client.
        environments: Freshly fetched environments, source first.
        silent: Skip confirmation prompts.
        confirm: Prompt callback; defaults to ``rich.prompt.Confirm.ask``.
        columns_to_ignore: Extra column names excluded from sync.
        result: Result collecting counters and errors.

    Returns:
        The ``SyncResult`` passed in (or a new one).
    """
    confirm = confirm or Confirm.ask
    result = result if result is not None else SyncResult()

    normalized = [resolve_identification_names(env) for env in environments]
    tables_map = build_tables_map(normalized, columns_to_ignore)
    source, *targets = normalized
    target_indexes = {target.name: ColumnIndex.from_environment(target) for target in targets}
    source_tables = set(source.table_names)
    target_tables = {target.name: set(target.table_names) for target in targets}

    for table_name in sorted(tables_map):
        if table_name in SYSTEM_TABLES:
            continue

        columns_map = tables_map[table_name]

        for column_name in order_columns(table_name, columns_map, source.name):
            source_column = columns_map[column_name].get(source.name)

            for target in targets:
                if table_name not in source_tables or table_name not in target_tables[target.name]:
                    logger.debug("Skipping %s.%s: table not in both environments", target.name, table_name)
                    continue

                target_column = columns_map[column_name].get(target.name)
                try:
                    await sync_column(
                        client,
                        target,
                        target_indexes[target.name],
                        table_name,
                        column_name,
                        source_column,
                        target_column,
                        silent,
                        confirm,
                        result,
                    )
                except NotImplementedError:
                    raise RuntimeError("Schema mutations not supported for this client type")
                except ConfirmationError:
                    raise
                except Exception as e:
                    message = error_message(e)
                    logger.error("Error: %s.%s - %s", table_name, column_name, message)
                    result.errors.append(f"{table_name}.{column_name}: {message}")

    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def sync_schema(
    client: ConsoleClient,
    environments: Sequence[Environment],
    silent: bool = False,
    confirm: ConfirmFn | None = None,
    columns_to_ignore: Iterable[str] = (),
) -> SyncResult:
    """Reconcile every target environment's schema with the source.

    Args:
        client: Console client implementing the mutation API.
        environments: Source first, then one or more targets.
        silent: Unattended mode; every prompt is answered yes.
        confirm: Prompt callback; defaults to ``rich.prompt.Confirm.ask``.
        columns_to_ignore: Extra column names excluded from sync.

    Returns:
        ``SyncResult`` with counters and per-item errors.

    Raises:
        ValueError: If fewer than two environments are given.
        RuntimeError: If the client does not support mutations.
        ConfirmationError: If the confirmation prompt fails.

    Example:
        >>> result = await sync_schema(client, [production, staging], silent=True)
        >>> result.success
        True
    """
    if len(environments) < 2:
        raise ValueError("Schema sync needs a source and at least one target environment")

    confirm = confirm or Confirm.ask
    columns_to_ignore = list(columns_to_ignore)
    result = SyncResult(
        source=environments[0].name,
        targets=[env.name for env in environments[1:]],
    )

    logger.info("Schema sync %s -> %s", result.source, ", ".join(result.targets))

    await sync_tables(client, environments, silent=silent, confirm=confirm, result=result)

    # The working copies from sync_tables only reflect removals; re-fetch instead
    logger.info("Re-fetching %d environments after table sync", len(environments))
    refreshed = [await client.fetch_environment(env.id) for env in environments]

    await sync_columns(
        client,
        refreshed,
        silent=silent,
        confirm=confirm,
        columns_to_ignore=columns_to_ignore,
        result=result,
    )

    await client.cleanup([env.id for env in refreshed[1:]])

    result.success = not result.errors
    return result
