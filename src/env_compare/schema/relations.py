"""Relation identification column resolution across environments.

A relation may designate a column of its target table as the
"identification column".  Environment exports reference that column by
its environment-local ``columnId``; human-authored definitions reference
it by name.  Ids from one environment are never valid in another, so:

- before comparing, every environment is normalized to *names* with
  ``resolve_identification_names()`` (ID -> Name, same environment);
- before a relation is sent to a target's mutation API, the name is
  re-resolved to the *target's* id with ``relation_with_identification_id()``
  or ``resolve_identification_ids()`` (Name -> ID, target environment).

Both directions are best-effort: a miss leaves the relation without that
piece of metadata and is not an error.

All functions return new model instances; caller-owned environments are
never mutated.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from env_compare.schema.models import Column, Environment, Relation, Table

logger = logging.getLogger(__name__)


@dataclass
class ColumnIndex:
    """Per-environment column lookup.

    Attributes:
        environment: Environment name (for log messages).
        by_table: ``{table_name: {column_name: Column}}``.
        by_id: ``{str(column_id): (table_name, Column)}``.
    """

    environment: str
    by_table: dict[str, dict[str, Column]] = field(default_factory=dict)
    by_id: dict[str, tuple[str, Column]] = field(default_factory=dict)

    @classmethod
    def from_environment(cls, environment: Environment) -> "ColumnIndex":
        index = cls(environment=environment.name)
        for table in environment.tables:
            columns = index.by_table.setdefault(table.name, {})
            for column in table.columns:
                columns[column.name] = column
                if column.column_id is not None:
                    index.by_id[str(column.column_id)] = (table.name, column)
        return index

    def column(self, table_name: str, column_name: str) -> Column | None:
        return self.by_table.get(table_name, {}).get(column_name)

    def column_name_for_id(self, column_id: str | int) -> str | None:
        entry = self.by_id.get(str(column_id))
        return entry[1].name if entry else None


# ------------------------------------------------------------------
# Single relation
# ------------------------------------------------------------------


def relation_with_identification_name(relation: Relation, index: ColumnIndex) -> Relation:
    """Attach the identification column name resolved from *index*.

    *index* must belong to the environment the relation was exported from.
    """
    column_id = relation.identification_column_id
    if column_id is None or relation.identification_column_name:
        return relation

    column_name = index.column_name_for_id(column_id)
    if column_name is None:
        logger.debug(
            "No column with id %s in %s for relation %s",
            column_id, index.environment, relation.name,
        )
        return relation

    meta_info = relation.meta_info.model_copy(
        update={"relation_identification_column_name": column_name}
    )
    return relation.model_copy(update={"meta_info": meta_info})


def relation_with_identification_id(relation: Relation, target_index: ColumnIndex) -> Relation:
    """Re-resolve the identification column into the target's id space.

    The name is looked up in ``target_index`` under the relation's target
    table.  On a hit the relation carries the target's ``columnId`` and no
    name; on a miss any id (which belongs to another environment) is
    dropped and the name is kept.

    Example:
        relation = relation_with_identification_id(source_relation, ColumnIndex.from_environment(target))
        relation.identification_column_id
        # '7C1F...' (target-local id)
    """
    if relation.meta_info is None:
        return relation

    column_name = relation.identification_column_name
    column = target_index.column(relation.to_table_name, column_name) if column_name else None

    if column is None or column.column_id is None:
        if column_name:
            logger.debug(
                "Identification column %s.%s not found in %s",
                relation.to_table_name, column_name, target_index.environment,
            )
        meta_info = relation.meta_info.model_copy(
            update={"relation_identification_column_id": None}
        )
    else:
        meta_info = relation.meta_info.model_copy(
            update={
                "relation_identification_column_id": column.column_id,
                "relation_identification_column_name": None,
            }
        )

    return relation.model_copy(update={"meta_info": meta_info})


# ------------------------------------------------------------------
# Whole environment
# ------------------------------------------------------------------


def _map_relations(environment: Environment, transform: Callable[[Relation], Relation]) -> Environment:
    tables: list[Table] = []
    for table in environment.tables:
        tables.append(
            table.model_copy(
                update={
                    "relations": [transform(r) for r in table.relations],
                    "geo_relations": [transform(r) for r in table.geo_relations],
                }
            )
        )
    return environment.model_copy(update={"tables": tables})


def resolve_identification_names(environment: Environment) -> Environment:
    """ID -> Name: normalize identification metadata to column names.

    Args:
        environment: Environment export carrying environment-local ids.

    Returns:
        A copy whose relations also carry the identification column name
        wherever the id resolves inside the same environment.
    """
    index = ColumnIndex.from_environment(environment)
    return _map_relations(environment, lambda r: relation_with_identification_name(r, index))


def resolve_identification_ids(source: Environment, target: Environment) -> Environment:
    """Name -> ID: translate *source* relations into *target*'s id space.

    Args:
        source: Environment whose relations carry identification names.
        target: Environment the resulting definitions are bound for.

    Returns:
        A copy of *source* whose identification metadata uses *target*'s
        column ids where the name resolves.
    """
    target_index = ColumnIndex.from_environment(target)
    return _map_relations(source, lambda r: relation_with_identification_id(r, target_index))
