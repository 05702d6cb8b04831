"""Entity metadata assembly from an introspected schema or a parsed class."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from entityforge.core.types import Layer, PackageConfig, RelationshipKind, SqlType
from entityforge.exceptions import InvalidMetadataError, NamingAmbiguityError
from entityforge.mapping.naming import entity_name_for_table, table_name_for_entity
from entityforge.metadata.models import ClassDescription, EntityField, EntityMetadata
from entityforge.metadata.packages import DEFAULT_BASE_PACKAGE, base_package_of
from entityforge.relationships.inference import (
    RelationshipStrategy,
    SuffixRelationshipStrategy,
    infer_relationships,
)
from entityforge.schema.models import Column, Table

logger = logging.getLogger(__name__)

# Unbounded text columns keep their DDL type instead of the String default
TEXT_DEFINITION = "TEXT"


class MetadataBuilder:
    """Builds EntityMetadata snapshots.

    The builder holds only configuration; every build call returns a fresh,
    independent snapshot, and building the same input twice yields equal
    metadata.
    """

    def __init__(
        self,
        base_package: str | None = None,
        packages: PackageConfig | Mapping[Layer, str] | None = None,
        strategy: RelationshipStrategy | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            base_package: Project base package; any layer suffix is stripped
            packages: Per-layer package overrides
            strategy: Relationship inference strategy (suffix heuristic by default)
        """
        if isinstance(packages, PackageConfig):
            base_package = base_package or packages.base_package
            overrides = packages.overrides()
        else:
            overrides = dict(packages or {})
        self._base_package = base_package_of(base_package) if base_package else ""
        self._overrides = overrides
        self._strategy = strategy or SuffixRelationshipStrategy()

    def _base_for(self, source_package: str = "") -> str:
        if self._base_package:
            return self._base_package
        if source_package:
            return base_package_of(source_package)
        return DEFAULT_BASE_PACKAGE

    def build_from_schema(self, table: Table, all_tables: Iterable[Table] = ()) -> EntityMetadata:
        """Build metadata for one table; every column becomes exactly one field.

        Args:
            table: Resolved table
            all_tables: Every table of the request, used to name relationship targets

        Returns:
            Entity metadata snapshot

        Raises:
            InvalidMetadataError: If the table has no primary key
        """
        pk_column = table.primary_key_column()
        if pk_column is None:
            raise InvalidMetadataError(
                "primary_key_columns", table.name, "Tables without a primary key cannot be mapped."
            )

        entity_names = {t.name: t.entity_name for t in all_tables}
        relationships = infer_relationships(table, self._strategy)

        fields = []
        for column in table.columns:
            inferred = relationships.get(column.name)
            is_id = column.name == pk_column.name
            if inferred is None or is_id:
                fields.append(self._column_field(column, is_id))
                continue

            fk = inferred.foreign_key
            target = entity_names.get(fk.referenced_table) or entity_name_for_table(
                fk.referenced_table
            )
            fields.append(
                EntityField(
                    name=inferred.field_name,
                    type=target,
                    nullable=column.nullable,
                    column_name=column.name,
                    relationship=inferred.kind,
                    target_entity=target,
                    column_type=column.language_type,
                    referenced_table=fk.referenced_table,
                    referenced_column=fk.referenced_column,
                    comment=column.comment,
                )
            )

        base = self._base_for()
        metadata = EntityMetadata(
            class_name=table.entity_name,
            package_name=self._overrides.get(Layer.ENTITY) or f"{base}{Layer.ENTITY.suffix}",
            table_name=table.name,
            id_type=pk_column.language_type,
            fields=tuple(fields),
            base_package=base,
            packages=dict(self._overrides),
            comment=table.comment,
        )
        logger.debug(
            f"Built metadata for table {table.name} -> {metadata.class_name} "
            f"({len(fields)} fields, {len(relationships)} relationships)"
        )
        return metadata

    def build_all(self, tables: Iterable[Table]) -> list[EntityMetadata]:
        """Build metadata for every table of a request.

        Raises:
            NamingAmbiguityError: If two tables derive the same class name
        """
        tables = list(tables)
        by_class: dict[str, list[str]] = {}
        for table in tables:
            by_class.setdefault(table.entity_name, []).append(table.name)
        for class_name, names in by_class.items():
            if len(names) > 1:
                raise NamingAmbiguityError(class_name, names)

        result = [self.build_from_schema(table, tables) for table in tables]
        logger.info(f"Built metadata for {len(result)} entities")
        return result

    def build_from_source(self, description: ClassDescription) -> EntityMetadata:
        """Build metadata from a hand-authored entity description.

        Raises:
            InvalidMetadataError: If the class name or identifier field is missing
        """
        if not description.class_name:
            raise InvalidMetadataError("class_name")

        id_fields = [f for f in description.fields if f.is_id]
        if not id_fields:
            raise InvalidMetadataError(
                "id_field", description.class_name, "Mark one field with is_id."
            )

        fields = []
        for desc in description.fields:
            target = desc.target_entity
            if desc.relationship != RelationshipKind.NONE and target is None:
                target = desc.type
            fields.append(
                EntityField(
                    name=desc.name,
                    type=desc.type,
                    nullable=False if desc.is_id else desc.nullable,
                    column_name=desc.column_name,
                    relationship=desc.relationship,
                    target_entity=target,
                    is_id=desc.is_id,
                    auto_increment=desc.auto_increment,
                    length=desc.length,
                    default=desc.default,
                    column_definition=desc.column_definition,
                )
            )

        base = self._base_for(description.package_name)
        return EntityMetadata(
            class_name=description.class_name,
            package_name=description.package_name or f"{base}{Layer.ENTITY.suffix}",
            table_name=description.table_name or table_name_for_entity(description.class_name),
            id_type=id_fields[0].type,
            fields=tuple(fields),
            base_package=base,
            packages=dict(self._overrides),
            comment=description.comment,
        )

    @staticmethod
    def _column_field(column: Column, is_id: bool) -> EntityField:
        return EntityField(
            name=column.field_name,
            type=column.language_type,
            nullable=False if is_id else column.nullable,
            column_name=column.name,
            is_id=is_id,
            auto_increment=column.auto_increment,
            default=column.default_value,
            length=column.size if column.language_type == "String" and column.size > 0 else None,
            column_definition=TEXT_DEFINITION if column.sql_type == SqlType.LONGVARCHAR else None,
            comment=column.comment,
        )


def build_from_schema(
    table: Table, all_tables: Iterable[Table] = (), base_package: str | None = None
) -> EntityMetadata:
    """Convenience wrapper around MetadataBuilder.build_from_schema."""
    return MetadataBuilder(base_package).build_from_schema(table, all_tables)


def build_from_source(description: ClassDescription, base_package: str | None = None) -> EntityMetadata:
    """Convenience wrapper around MetadataBuilder.build_from_source."""
    return MetadataBuilder(base_package).build_from_source(description)
