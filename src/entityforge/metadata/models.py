"""Entity metadata: the canonical, generator-facing description of an entity.

Metadata is an immutable snapshot. It serializes to JSON so a prior snapshot
can be stored next to the project and diffed against a fresh one later.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from entityforge.core.types import Layer, RelationshipKind
from entityforge.exceptions import InvalidMetadataError
from entityforge.mapping.naming import decapitalize, table_name_for_entity, to_snake_case
from entityforge.mapping.sql_types import simple_type_name, to_sql_id_type, to_sql_type
from entityforge.metadata.packages import DEFAULT_BASE_PACKAGE, apply_layer_suffix, base_package_of

OWNING_KINDS = (RelationshipKind.MANY_TO_ONE, RelationshipKind.ONE_TO_ONE)
COLLECTION_KINDS = (RelationshipKind.ONE_TO_MANY, RelationshipKind.MANY_TO_MANY)


class EntityField(BaseModel):
    """A field of an entity class."""

    name: str
    type: str
    nullable: bool = True
    column_name: str | None = None
    relationship: RelationshipKind = RelationshipKind.NONE
    target_entity: str | None = None
    is_id: bool = False
    auto_increment: bool = False
    default: str | None = None
    length: int | None = None
    column_type: str | None = Field(
        default=None, description="Language type of the FK column behind a relationship field"
    )
    column_definition: str | None = Field(
        default=None, description="Explicit DDL type, e.g. TEXT, overriding the mapped type"
    )
    referenced_table: str | None = None
    referenced_column: str | None = None
    comment: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def simple_type_name(self) -> str:
        return simple_type_name(self.type)

    @property
    def is_relationship(self) -> bool:
        return self.relationship != RelationshipKind.NONE

    @property
    def is_collection(self) -> bool:
        return self.relationship in COLLECTION_KINDS

    @property
    def owns_foreign_key(self) -> bool:
        """True when this side of the relationship holds the FK column."""
        return self.relationship in OWNING_KINDS

    @property
    def owns_column(self) -> bool:
        """True when the field maps to a column of the entity's own table."""
        return not self.is_collection

    @property
    def target_simple_name(self) -> str | None:
        if self.target_entity is None:
            return None
        return simple_type_name(self.target_entity)

    @property
    def column(self) -> str:
        """Column name: explicit, else '<name>_id' for FK owners, else snake_case."""
        if self.column_name:
            return self.column_name
        if self.owns_foreign_key:
            return f"{to_snake_case(self.name)}_id"
        return to_snake_case(self.name)

    @property
    def foreign_key_table(self) -> str | None:
        """Table referenced by the FK column, if this field owns one."""
        if not self.owns_foreign_key:
            return None
        if self.referenced_table:
            return self.referenced_table
        target = self.target_simple_name or self.simple_type_name
        return table_name_for_entity(target)

    @property
    def foreign_key_column(self) -> str | None:
        if not self.owns_foreign_key:
            return None
        return self.referenced_column or "id"

    @property
    def sql_type(self) -> str:
        """DDL type of the column this field maps to."""
        if self.column_definition:
            return self.column_definition
        if self.owns_foreign_key:
            return to_sql_id_type(self.column_type or "Long")
        if self.is_id:
            return to_sql_id_type(self.type)
        return to_sql_type(self.type, self.length)


class EntityMetadata(BaseModel):
    """Immutable description of one entity and its persistence mapping."""

    class_name: str = ""
    package_name: str = ""
    table_name: str = ""
    id_type: str = ""
    fields: tuple[EntityField, ...] = ()
    base_package: str = ""
    packages: dict[Layer, str] = Field(default_factory=dict)
    comment: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def qualified_class_name(self) -> str:
        package = self.package_for(Layer.ENTITY)
        return f"{package}.{self.class_name}" if package else self.class_name

    @property
    def entity_name_lower(self) -> str:
        return decapitalize(self.class_name)

    @property
    def dto_name(self) -> str:
        return f"{self.class_name}DTO"

    @property
    def repository_name(self) -> str:
        return f"{self.class_name}Repository"

    @property
    def service_name(self) -> str:
        return f"{self.class_name}Service"

    @property
    def service_impl_name(self) -> str:
        return f"{self.class_name}ServiceImpl"

    @property
    def controller_name(self) -> str:
        return f"{self.class_name}Controller"

    @property
    def mapper_name(self) -> str:
        return f"{self.class_name}Mapper"

    @property
    def id_field(self) -> EntityField | None:
        """First identifier field, if any."""
        for f in self.fields:
            if f.is_id:
                return f
        return None

    @property
    def resolved_base_package(self) -> str:
        """Base package with no layer suffix, falling back to the source package."""
        candidate = self.base_package or self.package_name
        return base_package_of(candidate) if candidate else DEFAULT_BASE_PACKAGE

    def package_for(self, layer: Layer) -> str:
        """Package of a layer: explicit override, else '<base>.<layer>'."""
        override = self.packages.get(layer)
        if override:
            return override
        return apply_layer_suffix(self.resolved_base_package, layer)

    def column_fields(self) -> list[EntityField]:
        """Fields backed by a column of this entity's table, in declaration order."""
        return [f for f in self.fields if f.owns_column]

    def field(self, name: str) -> EntityField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def require(self, *attributes: str) -> None:
        """Raise InvalidMetadataError for the first missing attribute.

        Besides plain attributes, "id_field" checks for an identifier field.
        """
        for attribute in attributes:
            if attribute == "id_field":
                missing = self.id_field is None
            else:
                missing = not getattr(self, attribute)
            if missing:
                raise InvalidMetadataError(attribute, self.class_name or None)


class FieldDescription(BaseModel):
    """Forward-path input: one field of a hand-authored entity."""

    name: str
    type: str
    nullable: bool = True
    column_name: str | None = None
    relationship: RelationshipKind = RelationshipKind.NONE
    target_entity: str | None = None
    is_id: bool = False
    auto_increment: bool = False
    length: int | None = None
    default: str | None = None
    column_definition: str | None = None

    model_config = ConfigDict(extra="forbid")


class ClassDescription(BaseModel):
    """Forward-path input: a parsed, already-validated entity class."""

    class_name: str
    package_name: str = ""
    table_name: str | None = None
    fields: list[FieldDescription] = Field(default_factory=list)
    comment: str = ""

    model_config = ConfigDict(extra="forbid")
