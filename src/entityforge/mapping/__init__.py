"""Naming and type mapping for entityforge."""

from entityforge.mapping.naming import (
    entity_name_for_table,
    pluralize,
    singularize,
    strip_id_suffix,
    to_camel_case,
    to_pascal_case,
    to_snake_case,
)
from entityforge.mapping.sql_types import map_sql_type, to_kotlin_type, to_sql_type

__all__ = [
    "entity_name_for_table",
    "map_sql_type",
    "pluralize",
    "singularize",
    "strip_id_suffix",
    "to_camel_case",
    "to_kotlin_type",
    "to_pascal_case",
    "to_snake_case",
    "to_sql_type",
]
