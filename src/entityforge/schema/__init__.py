"""Schema model and introspection for entityforge."""

from entityforge.schema.introspection import SchemaSource, SqlAlchemySchemaSource, introspect
from entityforge.schema.models import Column, ForeignKey, RawTable, Table, resolve_foreign_keys

__all__ = [
    "Column",
    "ForeignKey",
    "RawTable",
    "Table",
    "resolve_foreign_keys",
    "SchemaSource",
    "SqlAlchemySchemaSource",
    "introspect",
]
