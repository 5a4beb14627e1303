"""Schema comparison across environments.

Compares canonical column signatures of every table in every environment.
``detect_differences`` is pure logic -- no I/O, no console API calls.

Usage:
    from env_compare.schema.comparator import compare_tables, detect_differences
    from env_compare.schema.signatures import build_tables_map

    tables_map = build_tables_map(environments)
    differences = detect_differences(environments, tables_map)
    for table_diff in differences:
        print(table_diff.table, table_diff.column_names)

    # Full pipeline: resolve ids, compare, render a report
    has_differences = compare_tables(environments, columns_to_ignore=["tmp"])
"""

from collections.abc import Callable, Iterable, Sequence

from env_compare.reporting import print_schema_differences
from env_compare.schema.models import ColumnDifference, ColumnSignature, Environment, TableDifference
from env_compare.schema.relations import resolve_identification_names
from env_compare.schema.signatures import TablesMap, build_tables_map


def column_signatures(
    environments: Sequence[Environment],
    column_map: dict[str, ColumnSignature],
) -> dict[str, str]:
    """Signature string per environment name, ``""`` where the column is absent."""
    return {
        env.name: column_map[env.name].signature if env.name in column_map else ""
        for env in environments
    }


def detect_differences(
    environments: Sequence[Environment],
    tables_map: TablesMap,
) -> list[TableDifference]:
    """Find columns whose signature is not identical in all environments.

    A column absent from an environment counts as the empty signature, so
    a column present in one environment only is always a difference.

    Args:
        environments: Environments in report order (source first).
        tables_map: Result of ``build_tables_map(environments)``.

    Returns:
        ``TableDifference`` list sorted by table name.  Columns keep their
        canonical-map order.  Tables without differences are omitted.

    Examples:
        >>> from env_compare.schema.models import Column, Table
        >>> a = Environment(id="1", name="a", tables=[
        ...     Table(name="Book", columns=[Column(name="title", data_type="STRING")])])
        >>> b = Environment(id="2", name="b", tables=[Table(name="Book")])
        >>> diffs = detect_differences([a, b], build_tables_map([a, b]))
        >>> diffs[0].columns[0].signatures
        {'a': 'STRING', 'b': ''}
    """
    differences: list[TableDifference] = []

    for table_name in sorted(tables_map):
        columns_map = tables_map[table_name]
        table_diff = TableDifference(table=table_name)

        for column_name, column_map in columns_map.items():
            signatures = column_signatures(environments, column_map)
            if len(set(signatures.values())) > 1:
                table_diff.columns.append(
                    ColumnDifference(column=column_name, signatures=signatures)
                )

        if table_diff.columns:
            differences.append(table_diff)

    return differences


def compare_tables(
    environments: Sequence[Environment],
    columns_to_ignore: Iterable[str] = (),
    report: Callable[[Sequence[Environment], list[TableDifference]], None] | None = None,
) -> bool:
    """Compare table schemas of all environments and report differences.

    Identification column ids are resolved to names per environment before
    signatures are built, so environment-local ids never leak into the
    comparison.

    Args:
        environments: Source first, then targets.
        columns_to_ignore: Extra column names excluded from comparison.
        report: Sink receiving the ordered differences.  Defaults to the
            rich table renderer.

    Returns:
        ``True`` if any difference was found.
    """
    normalized = [resolve_identification_names(env) for env in environments]
    tables_map = build_tables_map(normalized, columns_to_ignore)
    differences = detect_differences(normalized, tables_map)

    if not differences:
        return False

    (report or print_schema_differences)(normalized, differences)
    return True
