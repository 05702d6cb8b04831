"""Tests for relationship inference strategies."""

import logging

from entityforge.core.types import RelationshipKind, SqlType
from entityforge.relationships.inference import (
    OverrideRelationshipStrategy,
    SuffixRelationshipStrategy,
    infer_relationships,
)
from entityforge.schema.models import Column, ForeignKey, RawTable


def _table_with_fks(*fks: ForeignKey):
    columns = [Column(name="id", sql_type=SqlType.BIGINT)]
    for name in dict.fromkeys(fk.column_name for fk in fks):
        columns.append(Column(name=name, sql_type=SqlType.BIGINT))
    raw = RawTable(name="books", columns=tuple(columns), primary_key_columns=("id",))
    return raw.with_foreign_keys(fks)


class TestSuffixStrategy:
    """Tests for the default naming heuristic."""

    def test_id_suffix(self):
        """author_id -> MANY_TO_ONE 'author'."""
        fk = ForeignKey(column_name="author_id", referenced_table="authors")
        inferred = SuffixRelationshipStrategy().infer(fk)
        assert inferred.kind == RelationshipKind.MANY_TO_ONE
        assert inferred.field_name == "author"
        assert inferred.foreign_key is fk

    def test_without_suffix(self):
        """Other FK columns are ONE_TO_ONE."""
        fk = ForeignKey(column_name="cover", referenced_table="images")
        assert SuffixRelationshipStrategy().kind_for(fk) == RelationshipKind.ONE_TO_ONE


class TestOverrideStrategy:
    """Tests for caller-supplied overrides."""

    def test_qualified_override_wins(self):
        """'table.column' overrides beat bare column overrides."""
        table = _table_with_fks(ForeignKey(column_name="isbn_id", referenced_table="isbns"))
        strategy = OverrideRelationshipStrategy(
            {"books.isbn_id": "one_to_one", "isbn_id": RelationshipKind.MANY_TO_ONE}
        )
        relationships = infer_relationships(table, strategy)
        assert relationships["isbn_id"].kind == RelationshipKind.ONE_TO_ONE
        assert relationships["isbn_id"].field_name == "isbn"

    def test_bare_column_override(self):
        """A bare column key applies to any table."""
        fk = ForeignKey(column_name="cover", referenced_table="images")
        strategy = OverrideRelationshipStrategy({"cover": "many_to_one"})
        assert strategy.kind_for(fk) == RelationshipKind.MANY_TO_ONE

    def test_fallback(self):
        """Columns without an override use the fallback strategy."""
        fk = ForeignKey(column_name="author_id", referenced_table="authors")
        strategy = OverrideRelationshipStrategy({"cover": "one_to_one"})
        assert strategy.kind_for(fk) == RelationshipKind.MANY_TO_ONE


class TestInferRelationships:
    """Tests for per-table inference."""

    def test_one_per_fk_column(self, books_table):
        """Each FK column yields one relationship."""
        relationships = infer_relationships(books_table)
        assert list(relationships) == ["author_id"]
        assert relationships["author_id"].kind == RelationshipKind.MANY_TO_ONE

    def test_duplicate_fk_first_wins(self, caplog):
        """Duplicate FKs on a column keep the first and log a warning."""
        table = _table_with_fks(
            ForeignKey(column_name="author_id", referenced_table="authors"),
            ForeignKey(column_name="author_id", referenced_table="people"),
        )
        with caplog.at_level(logging.WARNING, logger="entityforge.relationships.inference"):
            relationships = infer_relationships(table)

        assert relationships["author_id"].foreign_key.referenced_table == "authors"
        assert "Duplicate foreign key on books.author_id" in caplog.text
