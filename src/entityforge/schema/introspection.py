"""Reverse path: enumerate a live schema into Table objects.

The core depends only on the narrow SchemaSource contract. The bundled
SqlAlchemySchemaSource implements it over a SQLAlchemy Inspector so any
SQLAlchemy-supported database can be read.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import types as sa_types

from entityforge.core.types import ReferentialAction, SqlType
from entityforge.exceptions import EntityForgeError, SchemaIntrospectionError
from entityforge.schema.models import Column, ForeignKey, RawTable, Table, resolve_foreign_keys

if TYPE_CHECKING:
    from sqlalchemy.engine import Inspector

logger = logging.getLogger(__name__)


class SchemaSource(Protocol):
    """Narrow contract the core calls to read a live schema."""

    def list_tables(self) -> list[str]: ...

    def list_columns(self, table: str) -> list[Column]: ...

    def list_primary_keys(self, table: str) -> list[str]: ...

    def list_foreign_keys(self, table: str) -> list[ForeignKey]: ...

    def table_comment(self, table: str) -> str: ...


# Ordered most-specific first: BigInteger/SmallInteger subclass Integer,
# Text subclasses String, DateTime is checked before Date.
_SQLALCHEMY_TYPE_CODES: list[tuple[type[Any], SqlType]] = [
    (sa_types.Boolean, SqlType.BOOLEAN),
    (sa_types.BigInteger, SqlType.BIGINT),
    (sa_types.SmallInteger, SqlType.SMALLINT),
    (sa_types.Integer, SqlType.INTEGER),
    (sa_types.Float, SqlType.DOUBLE),
    (sa_types.Numeric, SqlType.DECIMAL),
    (sa_types.DateTime, SqlType.TIMESTAMP),
    (sa_types.Date, SqlType.DATE),
    (sa_types.Time, SqlType.TIME),
    (sa_types.Uuid, SqlType.OTHER),
    (sa_types.JSON, SqlType.OTHER),
    (sa_types.Text, SqlType.LONGVARCHAR),
    (sa_types.String, SqlType.VARCHAR),
    (sa_types.LargeBinary, SqlType.LONGVARBINARY),
    (sa_types.ARRAY, SqlType.ARRAY),
]

_RULE_CODES = {
    "CASCADE": ReferentialAction.CASCADE,
    "RESTRICT": ReferentialAction.RESTRICT,
    "SET NULL": ReferentialAction.SET_NULL,
    "NO ACTION": ReferentialAction.NO_ACTION,
    "SET DEFAULT": ReferentialAction.SET_DEFAULT,
}


def sql_type_code(column_type: Any) -> SqlType:
    """Map a SQLAlchemy type instance to a JDBC type code."""
    for sa_type, code in _SQLALCHEMY_TYPE_CODES:
        if isinstance(column_type, sa_type):
            if code == SqlType.TIMESTAMP and getattr(column_type, "timezone", False):
                return SqlType.TIMESTAMP_WITH_TIMEZONE
            return code
    return SqlType.OTHER


def _type_name(column_type: Any) -> str:
    if isinstance(column_type, sa_types.Uuid):
        return "uuid"
    if isinstance(column_type, sa_types.JSON):
        return "json"
    try:
        return str(column_type.compile()).split("(")[0]
    except Exception:
        return type(column_type).__name__.upper()


def _rule_code(rule: str | None) -> int:
    if not rule:
        return ReferentialAction.NO_ACTION
    return _RULE_CODES.get(rule.upper(), ReferentialAction.NO_ACTION)


class SqlAlchemySchemaSource:
    """SchemaSource backed by a SQLAlchemy Inspector."""

    def __init__(self, inspector: Inspector, schema: str | None = None) -> None:
        """Initialize the source.

        Args:
            inspector: Inspector bound to an open engine
            schema: Database schema to read (None for the default)
        """
        self._inspector = inspector
        self._schema = schema

    def list_tables(self) -> list[str]:
        return list(self._inspector.get_table_names(schema=self._schema))

    def table_comment(self, table: str) -> str:
        try:
            comment = self._inspector.get_table_comment(table, schema=self._schema)
        except NotImplementedError:
            return ""
        return comment.get("text") or ""

    def list_columns(self, table: str) -> list[Column]:
        pk = set(self.list_primary_keys(table))
        columns = []
        for info in self._inspector.get_columns(table, schema=self._schema):
            col_type = info["type"]
            code = sql_type_code(col_type)
            size = getattr(col_type, "length", None) or getattr(col_type, "precision", None) or 0
            scale = getattr(col_type, "scale", None) or 0
            autoincrement = info.get("autoincrement")
            columns.append(
                Column(
                    name=info["name"],
                    sql_type=code,
                    sql_type_name=_type_name(col_type),
                    size=int(size),
                    decimal_digits=int(scale),
                    nullable=bool(info.get("nullable", True)),
                    default_value=info.get("default"),
                    # "auto" means the backend decides; single integer PKs are auto-incremented
                    auto_increment=autoincrement is True
                    or (
                        autoincrement == "auto"
                        and info["name"] in pk
                        and len(pk) == 1
                        and code in (SqlType.INTEGER, SqlType.BIGINT)
                    ),
                    comment=info.get("comment") or "",
                )
            )
        return columns

    def list_primary_keys(self, table: str) -> list[str]:
        constraint = self._inspector.get_pk_constraint(table, schema=self._schema)
        return list(constraint.get("constrained_columns") or [])

    def list_foreign_keys(self, table: str) -> list[ForeignKey]:
        foreign_keys = []
        for info in self._inspector.get_foreign_keys(table, schema=self._schema):
            options = info.get("options") or {}
            pairs = zip(info["constrained_columns"], info["referred_columns"], strict=False)
            for column_name, referred in pairs:
                foreign_keys.append(
                    ForeignKey(
                        name=info.get("name"),
                        column_name=column_name,
                        referenced_table=info["referred_table"],
                        referenced_column=referred,
                        update_rule=_rule_code(options.get("onupdate")),
                        delete_rule=_rule_code(options.get("ondelete")),
                    )
                )
        return foreign_keys


def introspect(source: SchemaSource, include: Iterable[str] | None = None) -> list[Table]:
    """Read tables, columns, primary keys and foreign keys from a schema source.

    The first pass builds RawTables; the second resolves foreign keys once
    every table is known.

    Args:
        source: Schema source to read
        include: Table names to keep (all tables when None)

    Returns:
        Resolved tables in source order

    Raises:
        SchemaIntrospectionError: If the source fails; names the offending table
    """
    try:
        names = source.list_tables()
    except EntityForgeError:
        raise
    except Exception as e:
        raise SchemaIntrospectionError(None, str(e)) from e

    if include is not None:
        wanted = set(include)
        missing = wanted.difference(names)
        if missing:
            raise SchemaIntrospectionError(
                sorted(missing)[0], "table does not exist in the database"
            )
        names = [n for n in names if n in wanted]

    raw_tables: list[RawTable] = []
    for name in names:
        try:
            raw_tables.append(
                RawTable(
                    name=name,
                    comment=source.table_comment(name),
                    columns=tuple(source.list_columns(name)),
                    primary_key_columns=tuple(source.list_primary_keys(name)),
                )
            )
        except EntityForgeError:
            raise
        except Exception as e:
            raise SchemaIntrospectionError(name, str(e)) from e

    foreign_keys: dict[str, list[ForeignKey]] = {}
    for raw in raw_tables:
        try:
            foreign_keys[raw.name] = source.list_foreign_keys(raw.name)
        except EntityForgeError:
            raise
        except Exception as e:
            raise SchemaIntrospectionError(raw.name, str(e)) from e

    tables = resolve_foreign_keys(raw_tables, foreign_keys)
    logger.info(f"Introspected {len(tables)} tables")
    return tables
