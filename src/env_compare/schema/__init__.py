"""Schema signatures, comparison, and reconciliation.

Provides canonical column signatures (``build_column_signatures``,
``build_tables_map``), relation identification resolution
(``resolve_identification_names``, ``resolve_identification_ids``),
difference detection (``detect_differences``, ``compare_tables``), and
source -> target schema sync (``sync_schema``).

Usage:
    from env_compare.schema import compare_tables, sync_schema
    from env_compare.schema import build_tables_map, detect_differences
"""

from env_compare.schema.models import (
    Column,
    ColumnDifference,
    ColumnSignature,
    Environment,
    Relation,
    RelationMetaInfo,
    Table,
    TableDifference,
)
from env_compare.schema.signatures import (
    SYSTEM_COLUMNS,
    build_column_signatures,
    build_tables_map,
)
from env_compare.schema.relations import (
    ColumnIndex,
    resolve_identification_ids,
    resolve_identification_names,
)
from env_compare.schema.comparator import compare_tables, detect_differences
from env_compare.schema.sync import (
    SYSTEM_TABLES,
    SyncResult,
    order_columns,
    sync_columns,
    sync_schema,
    ConfirmationError,
    sync_tables,
)

__all__ = [
    "Column",
    "ColumnDifference",
    "ColumnSignature",
    "Environment",
    "Relation",
    "RelationMetaInfo",
    "Table",
    "TableDifference",
    "SYSTEM_COLUMNS",
    "build_column_signatures",
    "build_tables_map",
    "ColumnIndex",
    "resolve_identification_ids",
    "resolve_identification_names",
    "compare_tables",
    "detect_differences",
    "SYSTEM_TABLES",
    "SyncResult",
    "order_columns",
    "sync_columns",
    "sync_schema",
    "sync_tables",
    "ConfirmationError",
]
