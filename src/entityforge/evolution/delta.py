"""Structural diff between two entity metadata snapshots.

The diff is keyed on column name. A column that disappears and a similarly
named one that appears are modeled as drop + add; renames of columns are never
inferred. Operations come out in a fixed order so rendering is deterministic:

1. RenameTable (when the table name changed)
2. DropForeignKey (old field order)
3. DropColumn (old field order)
4. AddColumn (new field order)
5. AlterColumn (new field order)
6. AddForeignKey (new field order)
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, ClassVar

from entityforge.mapping.sql_types import simple_type_name, to_kotlin_type
from entityforge.metadata.models import EntityField, EntityMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenameTable:
    old_name: str
    new_name: str

    kind: ClassVar[str] = "rename_table"
    destructive: ClassVar[bool] = False

    def describe(self) -> str:
        return f"rename table {self.old_name} to {self.new_name}"


@dataclass(frozen=True)
class AddColumn:
    name: str
    type: str
    nullable: bool = True
    default: str | None = None

    kind: ClassVar[str] = "add_column"
    destructive: ClassVar[bool] = False

    def describe(self) -> str:
        null = "" if self.nullable else " not null"
        return f"add column {self.name} {self.type}{null}"


@dataclass(frozen=True)
class DropColumn:
    name: str

    kind: ClassVar[str] = "drop_column"
    destructive: ClassVar[bool] = True

    def describe(self) -> str:
        return f"drop column {self.name}"


@dataclass(frozen=True)
class AlterColumn:
    """Type and/or nullability change of an existing column.

    The old values are carried so renderers can emit only what changed.
    """

    name: str
    new_type: str
    new_nullable: bool
    old_type: str | None = None
    old_nullable: bool | None = None

    kind: ClassVar[str] = "alter_column"
    destructive: ClassVar[bool] = False

    @property
    def type_changed(self) -> bool:
        return self.old_type is None or self.old_type != self.new_type

    @property
    def nullability_changed(self) -> bool:
        return self.old_nullable is not None and self.old_nullable != self.new_nullable

    def describe(self) -> str:
        null = "null" if self.new_nullable else "not null"
        return f"alter column {self.name} {self.new_type} {null}"


@dataclass(frozen=True)
class AddForeignKey:
    column: str
    referenced_table: str
    referenced_column: str = "id"
    constraint_name: str = ""

    kind: ClassVar[str] = "add_foreign_key"
    destructive: ClassVar[bool] = False

    def describe(self) -> str:
        return f"add foreign key {self.column} -> {self.referenced_table}.{self.referenced_column}"


@dataclass(frozen=True)
class DropForeignKey:
    column: str
    constraint_name: str = ""

    kind: ClassVar[str] = "drop_foreign_key"
    destructive: ClassVar[bool] = True

    def describe(self) -> str:
        return f"drop foreign key {self.constraint_name or self.column}"


Operation = RenameTable | AddColumn | DropColumn | AlterColumn | AddForeignKey | DropForeignKey


@dataclass(frozen=True)
class SchemaDelta:
    """Ordered schema operations that move a table from one snapshot to the next.

    Operations after a RenameTable address the table by its new name.
    """

    table_name: str
    operations: tuple[Operation, ...] = ()
    class_name: str = ""
    old_table_name: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.operations

    @property
    def is_destructive(self) -> bool:
        """True when any operation drops a column or constraint."""
        return any(op.destructive for op in self.operations)

    def summary(self) -> list[str]:
        """One human-readable line per operation, in order."""
        return [op.describe() for op in self.operations]

    def description(self) -> str:
        """Short description used to name the migration file."""
        if self.is_empty:
            return f"no changes {self.table_name}"
        if len(self.operations) == 1:
            return f"{self.operations[0].describe()} in {self.table_name}"
        return f"update {self.table_name}"

    def to_dict(self) -> dict[str, Any]:
        """Return delta as JSON-serializable dict."""
        return {
            "table_name": self.table_name,
            "old_table_name": self.old_table_name,
            "class_name": self.class_name,
            "destructive": self.is_destructive,
            "operations": [{"op": op.kind, **asdict(op)} for op in self.operations],
        }


def foreign_key_constraint_name(table_name: str, column: str) -> str:
    """Conventional FK constraint name: fk_{table}_{column}."""
    return f"fk_{table_name}_{column}"


@dataclass(frozen=True)
class _ColumnState:
    """What the schema sees of one column-backed field."""

    column: str
    sql_type: str
    language_type: str
    nullable: bool
    default: str | None
    references: tuple[str, str] | None = None


def _column_states(metadata: EntityMetadata) -> dict[str, _ColumnState]:
    states: dict[str, _ColumnState] = {}
    for f in metadata.column_fields():
        if f.column in states:
            logger.warning(
                f"Entity {metadata.class_name}: fields map to the same column '{f.column}', "
                "keeping the first"
            )
            continue
        states[f.column] = _state_of(f)
    return states


def _state_of(f: EntityField) -> _ColumnState:
    references = None
    if f.owns_foreign_key:
        references = (f.foreign_key_table or "", f.foreign_key_column or "id")
    # Kotlin names, so Integer and Int compare equal
    language_type = (f.column_type or "Long") if f.owns_foreign_key else f.type
    return _ColumnState(
        column=f.column,
        sql_type=f.sql_type,
        language_type=to_kotlin_type(simple_type_name(language_type)),
        nullable=False if f.is_id else f.nullable,
        default=f.default,
        references=references,
    )


def diff(old: EntityMetadata, new: EntityMetadata) -> SchemaDelta | None:
    """Compute the schema delta from one snapshot to another.

    Args:
        old: Previous metadata snapshot
        new: Current metadata snapshot

    Returns:
        The ordered delta, or None when both snapshots are structurally equal

    Raises:
        InvalidMetadataError: If either snapshot has no table name
    """
    old.require("table_name")
    new.require("table_name")
    old_columns = _column_states(old)
    new_columns = _column_states(new)
    old_table = old.table_name
    new_table = new.table_name

    renames: list[Operation] = []
    if new_table != old_table:
        renames.append(RenameTable(old_table, new_table))

    drop_fks: list[Operation] = []
    drops: list[Operation] = []
    for name, state in old_columns.items():
        current = new_columns.get(name)
        if state.references and (current is None or current.references != state.references):
            drop_fks.append(DropForeignKey(name, foreign_key_constraint_name(old_table, name)))
        if current is None:
            drops.append(DropColumn(name))

    adds: list[Operation] = []
    alters: list[Operation] = []
    add_fks: list[Operation] = []
    for name, state in new_columns.items():
        previous = old_columns.get(name)
        if previous is None:
            adds.append(AddColumn(name, state.sql_type, state.nullable, state.default))
        elif (
            previous.sql_type != state.sql_type
            or previous.language_type != state.language_type
            or previous.nullable != state.nullable
        ):
            alters.append(
                AlterColumn(
                    name,
                    state.sql_type,
                    state.nullable,
                    old_type=previous.sql_type,
                    old_nullable=previous.nullable,
                )
            )
        if state.references and (previous is None or previous.references != state.references):
            table, column = state.references
            add_fks.append(
                AddForeignKey(name, table, column, foreign_key_constraint_name(new_table, name))
            )

    operations = (*renames, *drop_fks, *drops, *adds, *alters, *add_fks)
    if not operations:
        logger.debug(f"No schema changes for {new.class_name or new_table}")
        return None

    delta = SchemaDelta(
        table_name=new_table,
        operations=operations,
        class_name=new.class_name or old.class_name,
        old_table_name=old_table if renames else None,
    )
    logger.info(f"Computed {len(operations)} schema operations for table {new_table}")
    return delta
