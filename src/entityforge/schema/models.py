"""Passive schema model: tables, columns and foreign keys.

These are value objects as introspected from a live database or hand-built in
code. Foreign keys are discovered after tables, so construction is two-staged:
a RawTable (columns and primary key only) is resolved into an immutable Table
once its foreign keys are known.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from entityforge.core.types import ReferentialAction, RelationshipKind
from entityforge.exceptions import InvalidMetadataError
from entityforge.mapping.naming import (
    capitalize_first,
    entity_name_for_table,
    strip_id_suffix,
    to_camel_case,
)
from entityforge.mapping.sql_types import map_sql_type

logger = logging.getLogger(__name__)


class Column(BaseModel):
    """A database column."""

    name: str
    sql_type: int
    sql_type_name: str = ""
    size: int = 0
    decimal_digits: int = 0
    nullable: bool = True
    default_value: str | None = None
    auto_increment: bool = False
    comment: str = ""
    language_type: str = ""

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _fill_language_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("language_type"):
            data = dict(data)
            data["language_type"] = map_sql_type(
                data.get("sql_type", 0),
                data.get("sql_type_name") or "",
                data.get("size") or 0,
                data.get("decimal_digits") or 0,
            )
        return data

    @property
    def field_name(self) -> str:
        """Field identifier derived from the column name (snake_case -> camelCase)."""
        return to_camel_case(self.name)

    @property
    def getter_name(self) -> str:
        return f"get{capitalize_first(self.field_name)}"

    @property
    def setter_name(self) -> str:
        return f"set{capitalize_first(self.field_name)}"


class ForeignKey(BaseModel):
    """A foreign key constraint on a single column."""

    column_name: str
    referenced_table: str
    referenced_column: str = "id"
    update_rule: int = ReferentialAction.NO_ACTION
    delete_rule: int = ReferentialAction.NO_ACTION
    name: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def relationship_kind(self) -> RelationshipKind:
        """Relationship kind according to the default naming heuristic.

        This is a guess from the column name alone; use a RelationshipStrategy
        when certainty matters.
        """
        from entityforge.relationships.inference import SuffixRelationshipStrategy

        return SuffixRelationshipStrategy().kind_for(self)

    @property
    def relationship_field_name(self) -> str:
        """Relationship field name: '_id' suffix stripped, camelCased."""
        return to_camel_case(strip_id_suffix(self.column_name))

    @property
    def on_update(self) -> ReferentialAction:
        return _action(self.update_rule)

    @property
    def on_delete(self) -> ReferentialAction:
        return _action(self.delete_rule)


def _action(code: int) -> ReferentialAction:
    try:
        return ReferentialAction(code)
    except ValueError:
        return ReferentialAction.NO_ACTION


class _TableBase(BaseModel):
    name: str
    comment: str = ""
    columns: tuple[Column, ...] = ()
    primary_key_columns: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_primary_keys(self) -> _TableBase:
        known = {c.name for c in self.columns}
        for pk in self.primary_key_columns:
            if pk not in known:
                raise InvalidMetadataError(
                    "primary_key_columns",
                    self.name,
                    f"Primary key column '{pk}' is not among the table's columns.",
                )
        return self

    @property
    def entity_name(self) -> str:
        """Entity class name: snake_case -> PascalCase, naively singularized."""
        return entity_name_for_table(self.name)

    def column(self, name: str) -> Column | None:
        """Look up a column by name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def primary_key_column_objects(self) -> list[Column]:
        """Primary key columns, in column order."""
        return [c for c in self.columns if c.name in self.primary_key_columns]

    def primary_key_column(self) -> Column | None:
        """First primary key column (usually the id), if any."""
        pks = self.primary_key_column_objects()
        return pks[0] if pks else None

    def non_primary_key_columns(self) -> list[Column]:
        return [c for c in self.columns if c.name not in self.primary_key_columns]


class RawTable(_TableBase):
    """First-pass table: columns and primary key, foreign keys not yet known."""

    def with_foreign_keys(self, foreign_keys: Iterable[ForeignKey]) -> Table:
        """Resolve this table into an immutable Table."""
        return Table(
            name=self.name,
            comment=self.comment,
            columns=self.columns,
            primary_key_columns=self.primary_key_columns,
            foreign_keys=tuple(foreign_keys),
        )


class Table(_TableBase):
    """A fully resolved table including its foreign keys."""

    foreign_keys: tuple[ForeignKey, ...] = ()

    def foreign_key_columns(self) -> list[Column]:
        """Columns that carry a foreign key, in column order."""
        fk_columns = {fk.column_name for fk in self.foreign_keys}
        return [c for c in self.columns if c.name in fk_columns]

    def foreign_key_for(self, column_name: str) -> ForeignKey | None:
        """First foreign key constraining the column, if any."""
        for fk in self.foreign_keys:
            if fk.column_name == column_name:
                return fk
        return None


def resolve_foreign_keys(
    raw_tables: Iterable[RawTable],
    foreign_keys_by_table: Mapping[str, Iterable[ForeignKey]],
) -> list[Table]:
    """Second discovery pass: attach foreign keys to first-pass tables.

    Args:
        raw_tables: Tables with columns and primary keys
        foreign_keys_by_table: Foreign keys keyed by owning table name

    Returns:
        Resolved tables in input order
    """
    tables = []
    for raw in raw_tables:
        fks = list(foreign_keys_by_table.get(raw.name, ()))
        unknown = [fk.column_name for fk in fks if raw.column(fk.column_name) is None]
        if unknown:
            raise InvalidMetadataError(
                "foreign_keys",
                raw.name,
                f"Foreign key columns not found on table: {', '.join(unknown)}",
            )
        tables.append(raw.with_foreign_keys(fks))
    logger.debug(f"Resolved foreign keys for {len(tables)} tables")
    return tables
