"""Tests for the passive schema model and the two-pass table builder."""

import pytest
from pydantic import ValidationError

from entityforge.core.types import ReferentialAction, RelationshipKind, SqlType
from entityforge.exceptions import InvalidMetadataError
from entityforge.schema.models import Column, ForeignKey, RawTable, resolve_foreign_keys


class TestColumn:
    """Tests for Column."""

    def test_language_type_mapped(self):
        """The language type is derived from the SQL type code."""
        assert Column(name="price", sql_type=SqlType.DECIMAL).language_type == "java.math.BigDecimal"
        assert Column(name="data", sql_type=31337).language_type == "Object"

    def test_explicit_language_type_kept(self):
        """An explicit language type overrides the mapping."""
        col = Column(name="id", sql_type=SqlType.OTHER, language_type="java.util.UUID")
        assert col.language_type == "java.util.UUID"

    def test_accessor_names(self):
        """Field and accessor names come from the column name."""
        col = Column(name="first_name", sql_type=SqlType.VARCHAR)
        assert col.field_name == "firstName"
        assert col.getter_name == "getFirstName"
        assert col.setter_name == "setFirstName"

    def test_immutable(self):
        """Columns cannot be changed after construction."""
        col = Column(name="email", sql_type=SqlType.VARCHAR)
        with pytest.raises(ValidationError):
            col.name = "mail"


class TestForeignKey:
    """Tests for ForeignKey derivations."""

    def test_author_id_is_many_to_one(self):
        """author_id -> authors.id is MANY_TO_ONE named 'author'."""
        fk = ForeignKey(column_name="author_id", referenced_table="authors", referenced_column="id")
        assert fk.relationship_kind == RelationshipKind.MANY_TO_ONE
        assert fk.relationship_field_name == "author"

    def test_no_suffix_is_one_to_one(self):
        """Columns without an _id suffix default to ONE_TO_ONE."""
        fk = ForeignKey(column_name="profile", referenced_table="profiles")
        assert fk.relationship_kind == RelationshipKind.ONE_TO_ONE
        assert fk.relationship_field_name == "profile"

    def test_suffix_is_case_insensitive(self):
        """AUTHOR_ID is treated like author_id."""
        fk = ForeignKey(column_name="Main_Author_ID", referenced_table="authors")
        assert fk.relationship_kind == RelationshipKind.MANY_TO_ONE
        assert fk.relationship_field_name == "mainAuthor"

    def test_rules(self):
        """Rule codes are exposed as referential actions; unknown codes fall back."""
        fk = ForeignKey(column_name="a_id", referenced_table="a", delete_rule=0, update_rule=99)
        assert fk.on_delete == ReferentialAction.CASCADE
        assert fk.on_update == ReferentialAction.NO_ACTION


class TestTable:
    """Tests for RawTable/Table."""

    def test_primary_key_must_exist(self):
        """Unknown primary key names are rejected at construction."""
        with pytest.raises(InvalidMetadataError) as exc_info:
            RawTable(
                name="users",
                columns=(Column(name="id", sql_type=SqlType.BIGINT),),
                primary_key_columns=("uuid",),
            )
        assert exc_info.value.attribute == "primary_key_columns"
        assert "uuid" in exc_info.value.message

    def test_entity_name(self, users_table):
        """users -> User."""
        assert users_table.entity_name == "User"

    def test_column_partitions(self, books_table):
        """Primary key, non-key and FK columns are derived from the column list."""
        assert [c.name for c in books_table.primary_key_column_objects()] == ["id"]
        assert books_table.primary_key_column().name == "id"
        assert [c.name for c in books_table.non_primary_key_columns()] == [
            "title",
            "price",
            "author_id",
        ]
        assert [c.name for c in books_table.foreign_key_columns()] == ["author_id"]
        assert books_table.foreign_key_for("author_id").referenced_table == "authors"
        assert books_table.foreign_key_for("title") is None

    def test_resolve_foreign_keys(self):
        """The second pass attaches FKs and keeps input order."""
        raw = [
            RawTable(name="a", columns=(Column(name="id", sql_type=4),), primary_key_columns=("id",)),
            RawTable(
                name="b",
                columns=(Column(name="id", sql_type=4), Column(name="a_id", sql_type=4)),
                primary_key_columns=("id",),
            ),
        ]
        tables = resolve_foreign_keys(raw, {"b": [ForeignKey(column_name="a_id", referenced_table="a")]})
        assert [t.name for t in tables] == ["a", "b"]
        assert tables[0].foreign_keys == ()
        assert tables[1].foreign_keys[0].column_name == "a_id"

    def test_resolve_rejects_unknown_fk_column(self):
        """FKs must constrain a column of their table."""
        raw = [RawTable(name="b", columns=(Column(name="id", sql_type=4),), primary_key_columns=("id",))]
        with pytest.raises(InvalidMetadataError):
            resolve_foreign_keys(raw, {"b": [ForeignKey(column_name="a_id", referenced_table="a")]})

    def test_foreign_keys_fixed_after_resolution(self, books_table):
        """Resolved tables are immutable."""
        with pytest.raises(ValidationError):
            books_table.foreign_keys = ()
