"""Rich table rendering of comparison results.

One row per table (or API key), one column per environment, in the order
the environments were given (source first).
"""

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from env_compare.schema.models import Environment, TableDifference

console = Console()


def build_schema_table(
    environments: Sequence[Environment],
    differences: list[TableDifference],
) -> Table:
    """Build the schema difference table.

    Each row lists a table's differing columns one per line, and each
    environment's signatures aligned with them (blank where absent).
    """
    table = Table(title="Table schema", show_header=True, header_style="bold")
    table.add_column("Table", style="dim")
    table.add_column("Column")
    for env in environments:
        table.add_column(env.name)

    for table_diff in differences:
        table.add_row(
            table_diff.table,
            "\n".join(table_diff.column_names),
            *(
                "\n".join(diff.signatures.get(env.name, "") for diff in table_diff.columns)
                for env in environments
            ),
        )

    return table


def build_api_keys_table(
    environments: Sequence[Environment],
    api_keys: dict[str, dict[str, str]],
) -> Table:
    """Build the custom API key table (``Yes``/``No`` per environment)."""
    table = Table(title="Custom API Keys", show_header=True, header_style="bold")
    table.add_column("API Key", style="dim")
    for env in environments:
        table.add_column(env.name)

    for api_key in sorted(api_keys):
        keys_by_env = api_keys[api_key]
        table.add_row(api_key, *("Yes" if env.name in keys_by_env else "No" for env in environments))

    return table


def print_schema_differences(
    environments: Sequence[Environment],
    differences: list[TableDifference],
) -> None:
    console.print()
    console.print(build_schema_table(environments, differences))


def print_api_key_differences(
    environments: Sequence[Environment],
    api_keys: dict[str, dict[str, str]],
) -> None:
    console.print()
    console.print(build_api_keys_table(environments, api_keys))
