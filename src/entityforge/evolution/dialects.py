"""Migration dialects: render a SchemaDelta as a Flyway or Liquibase script.

Each dialect is a renderer class registered with the @dialect decorator.
Rendering is deterministic: the only time-dependent input is the version
token, which the caller supplies (see generate_version / VersionClock).
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from xml.sax.saxutils import quoteattr

from entityforge.core.types import MigrationDialect
from entityforge.evolution.delta import (
    AddColumn,
    AddForeignKey,
    AlterColumn,
    DropColumn,
    DropForeignKey,
    Operation,
    RenameTable,
    SchemaDelta,
    foreign_key_constraint_name,
)
from entityforge.exceptions import InvalidMetadataError, UnsupportedDialectError
from entityforge.metadata.models import EntityMetadata

logger = logging.getLogger(__name__)

RESOURCES_ROOT = "src/main/resources"
CHANGELOG_AUTHOR = "entityforge"

# Dialect registry: name -> renderer class
DIALECTS: dict[str, type[DialectRenderer]] = {}


def dialect(name: MigrationDialect) -> Callable[[type[DialectRenderer]], type[DialectRenderer]]:
    """Decorator to register a dialect renderer."""

    def decorator(cls: type[DialectRenderer]) -> type[DialectRenderer]:
        cls.name = name
        DIALECTS[name.value] = cls
        return cls

    return decorator


def supported_dialects() -> list[str]:
    return list(DIALECTS)


def get_renderer(name: MigrationDialect | str) -> DialectRenderer:
    """Instantiate the renderer registered for a dialect.

    Raises:
        UnsupportedDialectError: If no renderer is registered under the name
    """
    key = name.value if isinstance(name, MigrationDialect) else str(name).lower()
    renderer_cls = DIALECTS.get(key)
    if renderer_cls is None:
        raise UnsupportedDialectError(str(name), supported_dialects())
    return renderer_cls()


def slugify(description: str) -> str:
    """Lowercase, underscore-separated form of a description ("Add col" -> "add_col")."""
    slug = re.sub(r"[^a-z0-9]+", "_", description.lower()).strip("_")
    return slug or "migration"


@dataclass(frozen=True)
class MigrationScript:
    """A rendered migration, ready to be written to `path`."""

    dialect: MigrationDialect
    version: str
    description: str
    content: str
    table_name: str = ""
    destructive: bool = False

    @property
    def directory(self) -> str:
        return get_renderer(self.dialect).directory

    @property
    def file_name(self) -> str:
        return get_renderer(self.dialect).file_name(self.version, self.description, self.table_name)

    @property
    def path(self) -> str:
        return f"{self.directory}/{self.file_name}"

    def to_dict(self) -> dict[str, object]:
        return {
            "dialect": self.dialect.value,
            "version": self.version,
            "description": self.description,
            "table_name": self.table_name,
            "destructive": self.destructive,
            "path": self.path,
            "content": self.content,
        }


class DialectRenderer(ABC):
    """Translates schema operations into one migration tool's syntax."""

    name: MigrationDialect
    directory: str
    version_format: str

    def version(self, now: datetime) -> str:
        return now.strftime(self.version_format)

    @abstractmethod
    def file_name(self, version: str, description: str, table_name: str) -> str:
        """File name of a script within the dialect's directory."""

    @abstractmethod
    def render_delta(self, delta: SchemaDelta, version: str, description: str) -> str:
        """Script content for an ordered delta."""

    @abstractmethod
    def render_create_table(self, metadata: EntityMetadata, version: str) -> str:
        """Script content creating an entity's table from scratch."""


@dialect(MigrationDialect.FLYWAY)
class FlywayRenderer(DialectRenderer):
    """Versioned, timestamp-ordered plain SQL."""

    directory = f"{RESOURCES_ROOT}/db/migration"
    version_format = "V%Y%m%d%H%M%S"

    def file_name(self, version: str, description: str, table_name: str) -> str:
        return f"{version}__{slugify(description)}.sql"

    def render_delta(self, delta: SchemaDelta, version: str, description: str) -> str:
        lines = [f"-- {version}: {description}", f"-- Table: {delta.table_name}", ""]
        if delta.is_empty:
            lines.append("-- No schema changes")
        for op in delta.operations:
            lines.append(self._statement(delta.table_name, op))
        return "\n".join(lines) + "\n"

    @staticmethod
    def _statement(table: str, op: Operation) -> str:
        if isinstance(op, RenameTable):
            return f"ALTER TABLE {op.old_name} RENAME TO {op.new_name};"
        if isinstance(op, DropForeignKey):
            return f"ALTER TABLE {table} DROP CONSTRAINT {op.constraint_name};"
        if isinstance(op, DropColumn):
            return f"ALTER TABLE {table} DROP COLUMN {op.name};"
        if isinstance(op, AddColumn):
            default = f" DEFAULT {op.default}" if op.default is not None else ""
            null = "" if op.nullable else " NOT NULL"
            return f"ALTER TABLE {table} ADD COLUMN {op.name} {op.type}{default}{null};"
        if isinstance(op, AlterColumn):
            null = "" if op.new_nullable else " NOT NULL"
            return f"ALTER TABLE {table} MODIFY COLUMN {op.name} {op.new_type}{null};"
        if isinstance(op, AddForeignKey):
            return (
                f"ALTER TABLE {table} ADD CONSTRAINT {op.constraint_name} "
                f"FOREIGN KEY ({op.column}) REFERENCES {op.referenced_table} ({op.referenced_column});"
            )
        raise TypeError(f"Unknown schema operation: {op!r}")

    def render_create_table(self, metadata: EntityMetadata, version: str) -> str:
        table = metadata.table_name
        definitions = []
        constraints = []
        indexes = []
        for f in metadata.column_fields():
            if f.is_id:
                identity = " AUTO_INCREMENT" if f.auto_increment else ""
                definitions.append(f"    {f.column} {f.sql_type} PRIMARY KEY{identity}")
                continue
            default = f" DEFAULT {f.default}" if f.default is not None else ""
            null = "" if f.nullable else " NOT NULL"
            definitions.append(f"    {f.column} {f.sql_type}{default}{null}")
            if f.owns_foreign_key:
                constraints.append(
                    f"    CONSTRAINT {foreign_key_constraint_name(table, f.column)} "
                    f"FOREIGN KEY ({f.column}) REFERENCES {f.foreign_key_table} ({f.foreign_key_column})"
                )
                indexes.append(f"CREATE INDEX idx_{table}_{f.name} ON {table} ({f.column});")

        lines = [f"-- {version}: create table for {metadata.class_name}", f"CREATE TABLE {table} ("]
        lines.append(",\n".join(definitions + constraints))
        lines.append(");")
        if indexes:
            lines.append("")
            lines.extend(indexes)
        return "\n".join(lines) + "\n"


@dialect(MigrationDialect.LIQUIBASE)
class LiquibaseRenderer(DialectRenderer):
    """Changeset-based XML changelog."""

    directory = f"{RESOURCES_ROOT}/db/changelog"
    version_format = "%Y%m%d-%H%M%S"

    HEADER = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<databaseChangeLog\n"
        '    xmlns="http://www.liquibase.org/xml/ns/dbchangelog"\n'
        '    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"\n'
        '    xsi:schemaLocation="http://www.liquibase.org/xml/ns/dbchangelog\n'
        '                        http://www.liquibase.org/xml/ns/dbchangelog/dbchangelog-4.0.xsd">\n'
    )

    def file_name(self, version: str, description: str, table_name: str) -> str:
        return f"{version}_{table_name or slugify(description)}_migration.xml"

    def _wrap(self, version: str, description: str, body: list[str]) -> str:
        lines = [
            self.HEADER,
            f"    <changeSet id={quoteattr(version)} author={quoteattr(CHANGELOG_AUTHOR)}>",
            f"        <comment>{_text(description)}</comment>",
            *body,
            "    </changeSet>",
            "",
            "</databaseChangeLog>",
        ]
        return "\n".join(lines) + "\n"

    def render_delta(self, delta: SchemaDelta, version: str, description: str) -> str:
        body: list[str] = []
        for op in delta.operations:
            body.extend(self._change(delta.table_name, op))
        return self._wrap(version, description, body)

    @staticmethod
    def _change(table: str, op: Operation) -> list[str]:
        t = quoteattr(table)
        if isinstance(op, RenameTable):
            return [
                f"        <renameTable oldTableName={quoteattr(op.old_name)} "
                f"newTableName={quoteattr(op.new_name)}/>"
            ]
        if isinstance(op, DropForeignKey):
            return [
                f"        <dropForeignKeyConstraint baseTableName={t} "
                f"constraintName={quoteattr(op.constraint_name)}/>"
            ]
        if isinstance(op, DropColumn):
            return [f"        <dropColumn tableName={t} columnName={quoteattr(op.name)}/>"]
        if isinstance(op, AddColumn):
            default = f" defaultValueComputed={quoteattr(op.default)}" if op.default is not None else ""
            column = f"            <column name={quoteattr(op.name)} type={quoteattr(op.type)}{default}"
            if op.nullable:
                body = [f"{column}/>"]
            else:
                body = [f"{column}>", '                <constraints nullable="false"/>', "            </column>"]
            return [f"        <addColumn tableName={t}>", *body, "        </addColumn>"]
        if isinstance(op, AlterColumn):
            name = quoteattr(op.name)
            null_changed = op.nullability_changed or (op.old_nullable is None and not op.new_nullable)
            changes = []
            # A language-type change with the same DDL type still restates the type
            if op.type_changed or not null_changed:
                changes.append(
                    f"        <modifyDataType tableName={t} columnName={name} "
                    f"newDataType={quoteattr(op.new_type)}/>"
                )
            if null_changed:
                tag = "dropNotNullConstraint" if op.new_nullable else "addNotNullConstraint"
                changes.append(
                    f"        <{tag} tableName={t} columnName={name} "
                    f"columnDataType={quoteattr(op.new_type)}/>"
                )
            return changes
        if isinstance(op, AddForeignKey):
            return [
                f"        <addForeignKeyConstraint baseTableName={t} "
                f"baseColumnNames={quoteattr(op.column)} "
                f"constraintName={quoteattr(op.constraint_name)} "
                f"referencedTableName={quoteattr(op.referenced_table)} "
                f"referencedColumnNames={quoteattr(op.referenced_column)}/>"
            ]
        raise TypeError(f"Unknown schema operation: {op!r}")

    def render_create_table(self, metadata: EntityMetadata, version: str) -> str:
        table = metadata.table_name
        body = [f"        <createTable tableName={quoteattr(table)}>"]
        indexes: list[str] = []
        for f in metadata.column_fields():
            attrs = f"name={quoteattr(f.column)} type={quoteattr(f.sql_type)}"
            if f.is_id and f.auto_increment:
                attrs += ' autoIncrement="true"'
            if f.default is not None and not f.is_id:
                attrs += f" defaultValueComputed={quoteattr(f.default)}"

            constraint = []
            if f.is_id:
                constraint.append('primaryKey="true" nullable="false"')
            elif not f.nullable:
                constraint.append('nullable="false"')
            if f.owns_foreign_key and not f.is_id:
                constraint.append(
                    f"foreignKeyName={quoteattr(foreign_key_constraint_name(table, f.column))} "
                    f"references={quoteattr(f'{f.foreign_key_table}({f.foreign_key_column})')}"
                )
                indexes.extend(
                    [
                        f"        <createIndex indexName={quoteattr(f'idx_{table}_{f.name}')} "
                        f"tableName={quoteattr(table)}>",
                        f"            <column name={quoteattr(f.column)}/>",
                        "        </createIndex>",
                    ]
                )

            if constraint:
                body.append(f"            <column {attrs}>")
                body.append(f"                <constraints {' '.join(constraint)}/>")
                body.append("            </column>")
            else:
                body.append(f"            <column {attrs}/>")
        body.append("        </createTable>")
        body.extend(indexes)
        return self._wrap(version, f"create table for {metadata.class_name}", body)


def _text(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def generate_version(dialect: MigrationDialect | str, now: datetime | None = None) -> str:
    """Version token for a dialect at the given instant (UTC now by default).

    Flyway: V{yyyyMMddHHmmss}; Liquibase: {yyyyMMdd-HHmmss}
    """
    return get_renderer(dialect).version(now or datetime.now(UTC))


class VersionClock:
    """Issues strictly increasing version tokens for one dialect.

    Two requests within the same second get tokens one second apart rather
    than colliding.
    """

    def __init__(
        self,
        dialect: MigrationDialect | str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._renderer = get_renderer(dialect)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._last: datetime | None = None

    def next_version(self) -> str:
        now = self._clock().replace(microsecond=0)
        if self._last is not None and now <= self._last:
            now = self._last + timedelta(seconds=1)
        self._last = now
        return self._renderer.version(now)


def render(
    delta: SchemaDelta,
    dialect: MigrationDialect | str,
    version: str,
    description: str | None = None,
) -> MigrationScript:
    """Render a schema delta as a migration script.

    Args:
        delta: Ordered delta from diff(); an empty delta renders a valid no-op script
        dialect: Target dialect
        version: Version token (see generate_version)
        description: Human-readable description; derived from the delta when omitted

    Returns:
        The rendered MigrationScript

    Raises:
        InvalidMetadataError: If the delta names no table
        UnsupportedDialectError: If the dialect has no registered renderer
    """
    renderer = get_renderer(dialect)
    if not delta.table_name:
        raise InvalidMetadataError("table_name", delta.class_name or None)
    description = description or delta.description()
    content = renderer.render_delta(delta, version, description)
    script = MigrationScript(
        dialect=renderer.name,
        version=version,
        description=description,
        content=content,
        table_name=delta.table_name,
        destructive=delta.is_destructive,
    )
    if script.destructive:
        drops = [op.describe() for op in delta.operations if op.destructive]
        logger.warning(f"Migration {script.file_name} is destructive: {', '.join(drops)}")
    logger.info(
        f"Rendered {renderer.name.value} migration {script.file_name} "
        f"({len(delta.operations)} operations)"
    )
    return script


def render_create_table(
    metadata: EntityMetadata, dialect: MigrationDialect | str, version: str
) -> MigrationScript:
    """Render the initial migration creating an entity's table.

    Raises:
        InvalidMetadataError: If the table name or identifier field is missing
        UnsupportedDialectError: If the dialect has no registered renderer
    """
    renderer = get_renderer(dialect)
    metadata.require("table_name", "id_field")
    description = f"create {metadata.table_name} table"
    script = MigrationScript(
        dialect=renderer.name,
        version=version,
        description=description,
        content=renderer.render_create_table(metadata, version),
        table_name=metadata.table_name,
    )
    logger.info(f"Rendered {renderer.name.value} create-table migration {script.file_name}")
    return script
