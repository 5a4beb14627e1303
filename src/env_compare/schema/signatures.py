"""Canonical column signatures.

Turns one table's columns, relations and geo relations into an ordered map
of ``ColumnSignature`` objects whose ``signature`` strings can be compared
byte-for-byte across environments.

Pure logic -- no I/O, no console API calls.

Usage:
    from env_compare.schema.signatures import build_column_signatures, build_tables_map

    signatures = build_column_signatures(table)
    signatures["title"].signature
    # 'STRING, UQ, NN'

    tables_map = build_tables_map([source, target])
    tables_map["Book"]["title"]["production"].signature
"""

from collections.abc import Iterable, Sequence
from typing import Any

from env_compare.schema.models import Column, ColumnSignature, Environment, Relation, Table

# Environment-managed columns, never compared or synced
SYSTEM_COLUMNS = frozenset({"created", "updated", "ownerId", "objectId", "blUserLocale"})

# Data types that carry a size option
STRING_TYPES = frozenset({"STRING"})

TablesMap = dict[str, dict[str, dict[str, ColumnSignature]]]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def relation_type_alias(relationship_type: str | None) -> str:
    """Short cardinality label used in relation signatures."""
    return "1:1" if relationship_type == "ONE_TO_ONE" else "1:N"


def column_options(column: Column) -> list[str]:
    """Build the ordered option list for a plain column.

    Order is fixed: type, UQ, NN, IDX, REGEXP, DEFAULT, SIZE.

    Example:
        >>> column_options(Column(name="t", data_type="STRING", unique=True, data_size=50))
        ['STRING', 'UQ', 'SIZE:50']
    """
    options = [column.data_type]

    if column.unique:
        options.append("UQ")
    if column.required:
        options.append("NN")
    if column.indexed:
        options.append("IDX")
    if column.custom_regex:
        options.append(f"REGEXP:{column.custom_regex}")
    if column.default_value is not None:
        options.append(f"DEFAULT:{_format_value(column.default_value)}")
    if column.data_type in STRING_TYPES and column.data_size is not None:
        options.append(f"SIZE:{column.data_size}")

    return options


def relation_options(relation: Relation) -> list[str]:
    """Build the ordered option list for a relation.

    The identification column is included by *name* only; environment-local
    ids must be resolved to names beforehand (see ``schema.relations``).

    Example:
        >>> relation_options(Relation(name="author", to_table_name="Person",
        ...                           relationship_type="ONE_TO_ONE", required=True))
        ['Person(1:1)', 'NN']
    """
    options = [f"{relation.to_table_name}({relation_type_alias(relation.relationship_type)})"]

    if relation.unique:
        options.append("UQ")
    if relation.required:
        options.append("NN")
    if relation.identification_column_name:
        options.append(relation.identification_column_name)

    return options


def build_column_signatures(
    table: Table,
    ignored_columns: Iterable[str] = (),
) -> dict[str, ColumnSignature]:
    """Build the signature map for one table.

    Keys are column names in insertion order: own columns first, then
    relations, then geo relations.  System columns and *ignored_columns*
    are skipped.

    Args:
        table: Table definition from an environment export.
        ignored_columns: Extra column names to exclude.

    Returns:
        Dict mapping column name to ``ColumnSignature``.
    """
    skipped = SYSTEM_COLUMNS | set(ignored_columns)
    result: dict[str, ColumnSignature] = {}

    for column in table.columns:
        if column.name in skipped:
            continue
        result[column.name] = ColumnSignature(
            name=column.name,
            options=column_options(column),
            definition=column,
        )

    for relation in [*table.relations, *table.geo_relations]:
        if relation.name in skipped:
            continue
        result[relation.name] = ColumnSignature(
            name=relation.name,
            options=relation_options(relation),
            definition=relation,
        )

    return result


def build_tables_map(
    environments: Sequence[Environment],
    ignored_columns: Iterable[str] = (),
) -> TablesMap:
    """Fold every environment's signatures into one lookup structure.

    Returns:
        ``{table_name: {column_name: {environment_name: ColumnSignature}}}``
    """
    ignored = set(ignored_columns)
    tables_map: TablesMap = {}

    for environment in environments:
        for table in environment.tables:
            columns_map = tables_map.setdefault(table.name, {})
            for column_name, signature in build_column_signatures(table, ignored).items():
                columns_map.setdefault(column_name, {})[environment.name] = signature

    return tables_map
