"""Tests for canonical column signatures.

Verifies option order, system-column exclusion, relation signatures, and
the aggregated tables map.
"""

import ast
from pathlib import Path

from env_compare.schema.models import Column, Environment, Relation, RelationMetaInfo, Table
from env_compare.schema.signatures import (
    SYSTEM_COLUMNS,
    build_column_signatures,
    build_tables_map,
    column_options,
    relation_options,
    relation_type_alias,
)

SIGNATURES_PY = Path(__file__).parent.parent / "src" / "env_compare" / "schema" / "signatures.py"


def _book_table() -> Table:
    return Table(
        name="Book",
        columns=[
            Column(name="objectId", data_type="STRING_ID"),
            Column(name="title", data_type="STRING", required=True, data_size=200),
            Column(name="created", data_type="DATETIME"),
            Column(name="pages", data_type="INT", indexed=True),
        ],
        relations=[
            Relation(name="author", to_table_name="Person", relationship_type="ONE_TO_ONE"),
        ],
        geo_relations=[
            Relation(name="shop", to_table_name="Shop", relationship_type="ONE_TO_MANY"),
        ],
    )


# ------------------------------------------------------------------
# Column options
# ------------------------------------------------------------------


class TestColumnOptions:
    """Verify column option building."""

    def test_full_option_order(self) -> None:
        """Options come in type, UQ, NN, IDX, REGEXP, DEFAULT, SIZE order."""
        column = Column(
            name="code",
            data_type="STRING",
            unique=True,
            required=True,
            indexed=True,
            custom_regex="^[A-Z]+$",
            default_value="AA",
            data_size=10,
        )
        assert column_options(column) == [
            "STRING", "UQ", "NN", "IDX", "REGEXP:^[A-Z]+$", "DEFAULT:AA", "SIZE:10",
        ]

    def test_type_only(self) -> None:
        """A column without flags has just its type."""
        assert column_options(Column(name="n", data_type="INT")) == ["INT"]

    def test_size_only_for_string_types(self) -> None:
        """SIZE is omitted for non-string types."""
        column = Column(name="n", data_type="INT", data_size=10)
        assert column_options(column) == ["INT"]

    def test_string_without_size(self) -> None:
        """STRING without data_size has no SIZE option."""
        assert column_options(Column(name="s", data_type="STRING")) == ["STRING"]

    def test_false_default_is_included(self) -> None:
        """A False default is not null and renders lowercase."""
        column = Column(name="flag", data_type="BOOLEAN", default_value=False)
        assert column_options(column) == ["BOOLEAN", "DEFAULT:false"]

    def test_zero_default_is_included(self) -> None:
        """A zero default is not null."""
        column = Column(name="count", data_type="INT", default_value=0)
        assert column_options(column) == ["INT", "DEFAULT:0"]

    def test_empty_regex_is_omitted(self) -> None:
        """An empty custom regex adds no option."""
        column = Column(name="s", data_type="TEXT", custom_regex="")
        assert column_options(column) == ["TEXT"]

    def test_deterministic(self) -> None:
        """Identical input gives byte-identical signatures."""
        raw = {"name": "email", "dataType": "STRING", "unique": True, "dataSize": 100}
        first = build_column_signatures(Table(name="T", columns=[Column.model_validate(raw)]))
        second = build_column_signatures(Table(name="T", columns=[Column.model_validate(raw)]))
        assert first["email"].signature == second["email"].signature == "STRING, UQ, SIZE:100"


# ------------------------------------------------------------------
# Relation options
# ------------------------------------------------------------------


class TestRelationOptions:
    """Verify relation option building."""

    def test_type_alias(self) -> None:
        """ONE_TO_ONE is 1:1, everything else 1:N."""
        assert relation_type_alias("ONE_TO_ONE") == "1:1"
        assert relation_type_alias("ONE_TO_MANY") == "1:N"
        assert relation_type_alias(None) == "1:N"

    def test_flags_and_identification_name(self) -> None:
        """Relation options: target(cardinality), UQ, NN, identification name."""
        relation = Relation(
            name="author",
            to_table_name="Person",
            relationship_type="ONE_TO_ONE",
            unique=True,
            required=True,
            meta_info=RelationMetaInfo(relation_identification_column_name="email"),
        )
        assert relation_options(relation) == ["Person(1:1)", "UQ", "NN", "email"]

    def test_identification_id_alone_is_not_in_signature(self) -> None:
        """An unresolved environment-local id never reaches the signature."""
        relation = Relation(
            name="author",
            to_table_name="Person",
            meta_info=RelationMetaInfo(relation_identification_column_id="C-1"),
        )
        assert relation_options(relation) == ["Person(1:N)"]

    def test_auto_load_not_in_signature(self) -> None:
        """autoLoad does not change the signature."""
        a = Relation(name="r", to_table_name="T", auto_load=True)
        b = Relation(name="r", to_table_name="T", auto_load=False)
        assert relation_options(a) == relation_options(b)


# ------------------------------------------------------------------
# Table signature map
# ------------------------------------------------------------------


class TestBuildColumnSignatures:
    """Verify build_column_signatures()."""

    def test_system_columns_excluded(self) -> None:
        """System columns never appear, whatever their definition."""
        table = Table(
            name="T",
            columns=[Column(name=name, data_type="STRING", unique=True) for name in SYSTEM_COLUMNS]
            + [Column(name="title", data_type="STRING")],
        )
        signatures = build_column_signatures(table)
        assert list(signatures) == ["title"]

    def test_ignored_columns_excluded(self) -> None:
        """Caller-provided ignored columns are skipped."""
        signatures = build_column_signatures(_book_table(), ignored_columns=["pages"])
        assert "pages" not in signatures
        assert "title" in signatures

    def test_insertion_order(self) -> None:
        """Own columns first, then relations, then geo relations."""
        signatures = build_column_signatures(_book_table())
        assert list(signatures) == ["title", "pages", "author", "shop"]

    def test_signature_strings(self) -> None:
        """Signature strings join options with ', '."""
        signatures = build_column_signatures(_book_table())
        assert signatures["title"].signature == "STRING, NN, SIZE:200"
        assert signatures["pages"].signature == "INT, IDX"
        assert signatures["author"].signature == "Person(1:1)"
        assert signatures["shop"].signature == "Shop(1:N)"

    def test_definition_kept(self) -> None:
        """Each signature keeps the definition it came from."""
        signatures = build_column_signatures(_book_table())
        assert isinstance(signatures["title"].definition, Column)
        assert signatures["author"].is_relation is True
        assert signatures["title"].is_relation is False

    def test_does_not_mutate_table(self) -> None:
        """Building signatures leaves the input table untouched."""
        table = _book_table()
        before = table.model_dump()
        build_column_signatures(table)
        assert table.model_dump() == before

    def test_empty_table(self) -> None:
        """A table without columns gives an empty map."""
        assert build_column_signatures(Table(name="Empty")) == {}


# ------------------------------------------------------------------
# Tables map
# ------------------------------------------------------------------


class TestBuildTablesMap:
    """Verify build_tables_map()."""

    def test_keyed_by_table_column_environment(self) -> None:
        """Lookup is tables_map[table][column][environment]."""
        prod = Environment(id="1", name="prod", tables=[_book_table()])
        dev = Environment(id="2", name="dev", tables=[Table(name="Book", columns=[
            Column(name="title", data_type="TEXT"),
        ])])
        tables_map = build_tables_map([prod, dev])

        assert tables_map["Book"]["title"]["prod"].signature == "STRING, NN, SIZE:200"
        assert tables_map["Book"]["title"]["dev"].signature == "TEXT"
        assert "dev" not in tables_map["Book"]["pages"]

    def test_tables_from_all_environments(self) -> None:
        """Tables present in any environment are included."""
        prod = Environment(id="1", name="prod", tables=[Table(name="A")])
        dev = Environment(id="2", name="dev", tables=[Table(name="B")])
        tables_map = build_tables_map([prod, dev])
        assert set(tables_map) == {"A", "B"}

    def test_ignored_columns(self) -> None:
        """ignored_columns applies to every environment."""
        prod = Environment(id="1", name="prod", tables=[_book_table()])
        tables_map = build_tables_map([prod], ignored_columns=["title"])
        assert "title" not in tables_map["Book"]


class TestPureModule:
    """signatures.py is pure logic."""

    def test_no_io_imports(self) -> None:
        """No client, reporting, or file-system imports."""
        tree = ast.parse(SIGNATURES_PY.read_text())
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom) and node.module:
                assert "adapters" not in node.module
                assert "reporting" not in node.module
            if isinstance(node, ast.Import):
                for alias in node.names:
                    assert alias.name not in ("os", "json", "pathlib")
