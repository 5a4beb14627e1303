"""Pydantic models for environment schemas and comparison results.

This module contains schema-domain models:
- Export models: Column, Relation, RelationMetaInfo, Table, Environment
- Comparison models: ColumnSignature, ColumnDifference, TableDifference

Environment exports use camelCase keys (``dataType``, ``toTableName``,
``metaInfo``...).  Every export model accepts both the camelCase alias and
the snake_case field name, and keeps unknown keys so a definition can be
sent back to the console API unchanged.

Configuration models (EnvironmentProfile, RunOptions, CompareConfig) live
in env_compare.config.models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExportModel(BaseModel):
    """Base for models parsed from environment exports."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the camelCase shape the console API expects.

        Null fields are kept: a null ``defaultValue`` or ``metaInfo`` tells the
        console API to clear the target's value.
        """
        return self.model_dump(by_alias=True)


# ============================================================================
# Export Models
# ============================================================================


class Column(ExportModel):
    """A table column as exported by an environment.

    ``column_id`` is assigned by the owning environment and is only
    meaningful inside it.

    Example:
        >>> col = Column.model_validate({"name": "title", "dataType": "STRING"})
        >>> col.data_type
        'STRING'
    """

    name: str
    data_type: str
    unique: bool = False
    required: bool = False
    indexed: bool = False
    custom_regex: str | None = None
    default_value: Any = None
    data_size: int | None = None
    column_id: str | int | None = None
    expression: str | None = None
    identity: bool = False


class RelationMetaInfo(ExportModel):
    """Relation identification metadata.

    Human-authored definitions carry the column *name*; environment-native
    exports carry the column *id*.
    """

    relation_identification_column_id: str | int | None = None
    relation_identification_column_name: str | None = None


class Relation(ExportModel):
    """A relation (or geo relation) column pointing at another table."""

    name: str
    to_table_name: str
    relationship_type: str = "ONE_TO_MANY"
    unique: bool = False
    required: bool = False
    auto_load: bool = False
    column_id: str | int | None = None
    meta_info: RelationMetaInfo | None = None

    @property
    def identification_column_id(self) -> str | int | None:
        return self.meta_info.relation_identification_column_id if self.meta_info else None

    @property
    def identification_column_name(self) -> str | None:
        return self.meta_info.relation_identification_column_name if self.meta_info else None


class Table(ExportModel):
    """A data table with its columns and relations."""

    name: str
    columns: list[Column] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)
    geo_relations: list[Relation] = Field(default_factory=list)


class Environment(ExportModel):
    """One deployed application environment.

    ``roles`` and ``permissions`` are carried as exported (role records and
    permission sets); they are not compared or synced.

    Example:
        >>> env = Environment(id="A1", name="prod", tables=[Table(name="Book")])
        >>> env.table_names
        ['Book']
    """

    id: str
    name: str
    tables: list[Table] = Field(default_factory=list)
    api_keys: list[str] = Field(default_factory=list)
    roles: list[dict[str, Any]] = Field(default_factory=list)
    permissions: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def table_names(self) -> list[str]:
        return [table.name for table in self.tables]


# ============================================================================
# Comparison Models
# ============================================================================


class ColumnSignature(BaseModel):
    """Canonical, comparable form of a column or relation.

    Two columns are equal iff their ``signature`` strings are equal.

    Example:
        >>> sig = ColumnSignature(
        ...     name="title",
        ...     options=["STRING", "NN"],
        ...     definition=Column(name="title", data_type="STRING", required=True),
        ... )
        >>> sig.signature
        'STRING, NN'
    """

    name: str
    options: list[str] = Field(default_factory=list)
    definition: Column | Relation

    @property
    def signature(self) -> str:
        return ", ".join(self.options)

    @property
    def is_relation(self) -> bool:
        return isinstance(self.definition, Relation)

    @property
    def expression(self) -> str | None:
        return getattr(self.definition, "expression", None)

    @property
    def identity(self) -> bool:
        return bool(getattr(self.definition, "identity", False))


class ColumnDifference(BaseModel):
    """A column whose signature differs between environments.

    ``signatures`` maps environment name to signature string; an empty
    string means the column is absent in that environment.
    """

    column: str
    signatures: dict[str, str] = Field(default_factory=dict)


class TableDifference(BaseModel):
    """All differing columns of one table."""

    table: str
    columns: list[ColumnDifference] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        return [diff.column for diff in self.columns]
