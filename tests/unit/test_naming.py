"""Tests for naming conversions and SQL type mapping."""

import string

import pytest

from entityforge.core.types import SqlType
from entityforge.mapping.naming import (
    entity_name_for_table,
    pluralize,
    resource_path,
    singularize,
    strip_id_suffix,
    table_name_for_entity,
    to_camel_case,
    to_pascal_case,
    to_snake_case,
)
from entityforge.mapping.sql_types import (
    map_sql_type,
    to_kotlin_type,
    to_sql_id_type,
    to_sql_type,
)


class TestCaseConversion:
    """Tests for camel/Pascal/snake conversion."""

    def test_camel_case(self):
        """Lowercase first segment, Pascal-case the rest."""
        assert to_camel_case("first_name") == "firstName"
        assert to_camel_case("email") == "email"
        assert to_camel_case("Created_at") == "createdAt"
        assert to_camel_case("order-line item") == "orderLineItem"

    def test_pascal_case(self):
        """Every segment is capitalized."""
        assert to_pascal_case("order_items") == "OrderItems"
        assert to_pascal_case("users") == "Users"

    def test_snake_case(self):
        """Camel boundaries become underscores."""
        assert to_snake_case("firstName") == "first_name"
        assert to_snake_case("BlogPost") == "blog_post"
        assert to_snake_case("already_snake") == "already_snake"

    def test_total_on_printable_ascii(self):
        """Conversions never raise on printable ASCII."""
        for ch in string.printable:
            for value in (ch, f"a{ch}b", f"{ch}{ch}"):
                to_camel_case(value)
                to_pascal_case(value)
                to_snake_case(value)
                singularize(value)
                pluralize(value)
                strip_id_suffix(value)

    def test_empty_input(self):
        """Empty and separator-only names produce empty identifiers."""
        assert to_camel_case("") == ""
        assert to_camel_case("___") == ""
        assert to_pascal_case("") == ""


class TestPluralization:
    """Tests for the naive singular/plural suffix rule."""

    @pytest.mark.parametrize("plural", ["users", "orders", "books", "authors"])
    def test_regular_plurals_round_trip(self, plural):
        """Stripping then appending 's' restores regular plurals."""
        assert pluralize(singularize(plural)) == plural

    def test_double_s_is_kept(self):
        """Names ending in 'ss' are not singularized."""
        assert singularize("address") == "address"
        assert singularize("class") == "class"

    def test_pluralize_does_not_double_s(self):
        """An existing trailing 's' is not duplicated."""
        assert pluralize("status") == "status"
        assert pluralize("user") == "users"

    def test_irregular_plurals_are_lossy(self):
        """Irregular plurals are not restored by the naive rule."""
        assert singularize("categories") == "categorie"
        assert pluralize(singularize("categories")) == "categories"
        assert singularize("children") == "children"
        assert pluralize("category") == "categorys"


class TestEntityNames:
    """Tests for table <-> entity name derivation."""

    def test_entity_name_for_table(self):
        """Tables become singular PascalCase class names."""
        assert entity_name_for_table("users") == "User"
        assert entity_name_for_table("blog_posts") == "BlogPost"
        assert entity_name_for_table("address") == "Address"

    def test_table_name_for_entity(self):
        """Class names default to snake_case table names."""
        assert table_name_for_entity("BlogPost") == "blog_post"

    def test_strip_id_suffix(self):
        """Only a trailing _id (any case) is removed."""
        assert strip_id_suffix("author_id") == "author"
        assert strip_id_suffix("AUTHOR_ID") == "AUTHOR"
        assert strip_id_suffix("identity") == "identity"
        assert strip_id_suffix("_id") == "_id"

    def test_resource_path(self):
        """REST paths are pluralized and dash-separated."""
        assert resource_path("User") == "users"
        assert resource_path("BlogPost") == "blog-posts"


class TestSqlTypeMapping:
    """Tests for JDBC code -> language type and language type -> DDL."""

    def test_common_codes(self):
        """Common JDBC codes map to Java types."""
        assert map_sql_type(SqlType.VARCHAR) == "String"
        assert map_sql_type(SqlType.INTEGER) == "Integer"
        assert map_sql_type(SqlType.BIGINT) == "Long"
        assert map_sql_type(SqlType.BOOLEAN) == "Boolean"
        assert map_sql_type(SqlType.DECIMAL) == "java.math.BigDecimal"
        assert map_sql_type(SqlType.TIMESTAMP) == "java.time.LocalDateTime"

    def test_unknown_code_falls_back(self):
        """Unknown codes map to Object rather than raising."""
        assert map_sql_type(424242) == "Object"
        assert map_sql_type(-999, "weird") == "Object"

    def test_other_uses_type_name(self):
        """OTHER columns are refined by vendor type name."""
        assert map_sql_type(SqlType.OTHER, "uuid") == "java.util.UUID"
        assert map_sql_type(SqlType.OTHER, "JSONB") == "String"
        assert map_sql_type(SqlType.OTHER, "geometry") == "Object"

    def test_kotlin_types(self):
        """Java names translate to Kotlin names."""
        assert to_kotlin_type("Integer") == "Int"
        assert to_kotlin_type("java.lang.Integer") == "Int"
        assert to_kotlin_type("String") == "String"
        assert to_kotlin_type("Object") == "Any"

    def test_sql_types(self):
        """Language types map to DDL types."""
        assert to_sql_type("String") == "VARCHAR(255)"
        assert to_sql_type("String", 80) == "VARCHAR(80)"
        assert to_sql_type("Int") == "INT"
        assert to_sql_type("Integer") == "INT"
        assert to_sql_type("java.math.BigDecimal") == "DECIMAL(19,2)"
        assert to_sql_type("java.time.LocalDate") == "DATE"
        assert to_sql_type("Mystery") == "VARCHAR(255)"

    @pytest.mark.parametrize(
        ("code", "ddl"),
        [
            (SqlType.BLOB, "BLOB"),
            (SqlType.CLOB, "CLOB"),
            (SqlType.ARRAY, "ARRAY"),
            (SqlType.LONGVARBINARY, "BLOB"),
            (SqlType.TIMESTAMP_WITH_TIMEZONE, "TIMESTAMP WITH TIME ZONE"),
            (SqlType.BOOLEAN, "BOOLEAN"),
            (SqlType.TIME, "TIME"),
        ],
    )
    def test_introspected_types_map_back(self, code, ddl):
        """Every language type introspection produces has a DDL type of its own."""
        assert to_sql_type(map_sql_type(code)) == ddl

    def test_small_types(self):
        """Byte and character types keep their width."""
        assert to_sql_type("Byte") == "TINYINT"
        assert to_sql_type("Character") == "CHAR(1)"
        assert to_sql_type("Char") == "CHAR(1)"

    def test_sql_id_types(self):
        """Identifier types default to BIGINT."""
        assert to_sql_id_type("Long") == "BIGINT"
        assert to_sql_id_type("java.util.UUID") == "UUID"
        assert to_sql_id_type("Mystery") == "BIGINT"
