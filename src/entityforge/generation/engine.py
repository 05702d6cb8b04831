"""Code generation engine: entity metadata + feature switches -> source files.

The engine is pure with respect to I/O on the output side: it returns a map
of relative path to content and leaves writing to the caller. Rendering is
all-or-nothing; if any template fails, nothing is returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from entityforge.core.types import Feature, FeatureConfig, Layer, SourceLanguage
from entityforge.exceptions import TemplateNotFoundError
from entityforge.generation.registry import ENTITY, FEATURE_DEPENDENCIES, TemplateSpec, templates_for
from entityforge.mapping.naming import capitalize_first, resource_path
from entityforge.mapping.sql_types import simple_type_name, to_kotlin_type
from entityforge.metadata.models import EntityField, EntityMetadata
from entityforge.metadata.packages import package_to_path

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

GRAPHQL_SCALARS = {
    "String": "String",
    "Integer": "Int",
    "Int": "Int",
    "Short": "Int",
    "Long": "Int",
    "Float": "Float",
    "Double": "Float",
    "BigDecimal": "Float",
    "Boolean": "Boolean",
    "UUID": "ID",
}


@dataclass(frozen=True)
class GeneratedFile:
    """One rendered artifact; entity classes carry no feature."""

    path: str
    content: str
    feature: Feature | None
    template: str
    layer: Layer | None


class CodeGenerator:
    """Renders layered source files from entity metadata via Jinja2 templates."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        """Initialize the generator.

        Args:
            template_dir: Template root; defaults to the bundled templates
        """
        self._template_dir = Path(template_dir) if template_dir else TEMPLATE_DIR
        self._env = Environment(
            loader=FileSystemLoader(str(self._template_dir)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
        )

    def generate(self, metadata: EntityMetadata, features: FeatureConfig) -> dict[str, str]:
        """Render every enabled feature.

        Args:
            metadata: Entity metadata snapshot
            features: Feature switches and language

        Returns:
            Relative path -> file content; empty when no feature is enabled

        Raises:
            InvalidMetadataError: If a required metadata attribute is missing
            TemplateNotFoundError: If a feature has no template for the language
        """
        return {f.path: f.content for f in self.render(metadata, features)}

    def render(self, metadata: EntityMetadata, features: FeatureConfig) -> list[GeneratedFile]:
        """Render every enabled feature, keeping feature/template provenance."""
        enabled = features.enabled_features()
        if not enabled:
            return []

        metadata.require("class_name", "table_name", "id_type", "id_field")
        language = features.language

        # Resolve every template identity before rendering anything
        plan: list[tuple[Feature, TemplateSpec]] = []
        for feature in enabled:
            specs = templates_for(feature, language)
            if specs is None:
                raise TemplateNotFoundError(feature.value, language.value)
            plan.extend((feature, spec) for spec in specs)

        model = build_view_model(metadata, features)
        files = []
        for feature, spec in plan:
            template_id = spec.template_id(language)
            try:
                template = self._env.get_template(template_id)
            except TemplateNotFound as e:
                raise TemplateNotFoundError(feature.value, language.value, template_id) from e

            context = dict(model)
            context["package"] = self.package_for(metadata, spec)
            context["file_class_name"] = self.class_name_for(metadata, spec)
            files.append(
                GeneratedFile(
                    path=self.target_path(metadata, spec, language),
                    content=template.render(context),
                    feature=feature,
                    template=template_id,
                    layer=spec.layer,
                )
            )

        logger.info(
            f"Rendered {len(files)} files for {metadata.class_name} "
            f"({', '.join(f.value for f in enabled)}; {language.value})"
        )
        return files

    def render_entity(
        self, metadata: EntityMetadata, language: SourceLanguage = SourceLanguage.JAVA
    ) -> GeneratedFile:
        """Render the JPA entity class mapped to the metadata's table.

        Args:
            metadata: Entity metadata snapshot, usually built from an introspected table
            language: Source language of the entity class

        Returns:
            The entity class, placed in the entity layer package

        Raises:
            InvalidMetadataError: If a required metadata attribute is missing
            TemplateNotFoundError: If the entity template cannot be loaded
        """
        metadata.require("class_name", "table_name", "id_type", "id_field")
        template_id = ENTITY.template_id(language)
        try:
            template = self._env.get_template(template_id)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(Layer.ENTITY.value, language.value, template_id) from e

        context = build_view_model(metadata, FeatureConfig(language=language))
        context["package"] = self.package_for(metadata, ENTITY)
        context["file_class_name"] = self.class_name_for(metadata, ENTITY)
        generated = GeneratedFile(
            path=self.target_path(metadata, ENTITY, language),
            content=template.render(context),
            feature=None,
            template=template_id,
            layer=Layer.ENTITY,
        )
        logger.info(f"Rendered entity {metadata.class_name} for table {metadata.table_name}")
        return generated

    @staticmethod
    def package_for(metadata: EntityMetadata, spec: TemplateSpec) -> str:
        if spec.layer is None:
            return ""
        package = metadata.package_for(spec.layer)
        return f"{package}.{spec.subpackage}" if spec.subpackage else package

    @staticmethod
    def class_name_for(metadata: EntityMetadata, spec: TemplateSpec) -> str:
        if spec.resource:
            return metadata.entity_name_lower
        return f"{metadata.class_name}{spec.suffix}" if spec.per_entity else spec.suffix

    def target_path(
        self, metadata: EntityMetadata, spec: TemplateSpec, language: SourceLanguage
    ) -> str:
        """Relative target path of a template's output.

        Classes: src/{main|test}/{language}/{package path}/{Class}{Suffix}.{ext}
        Resources: src/main/resources/graphql/{entity}{suffix}
        """
        if spec.resource:
            return f"src/main/resources/graphql/{metadata.entity_name_lower}{spec.suffix}"
        root = "test" if spec.test else "main"
        package_dir = package_to_path(self.package_for(metadata, spec))
        file_name = f"{self.class_name_for(metadata, spec)}.{language.extension}"
        return f"src/{root}/{language.value}/{package_dir}/{file_name}"


def suggest_dependencies(features: FeatureConfig) -> list[str]:
    """Build dependencies required by the enabled features, deduplicated in order."""
    seen: dict[str, None] = {}
    for feature in features.enabled_features():
        for dependency in FEATURE_DEPENDENCIES.get(feature, ()):
            seen.setdefault(dependency, None)
    return list(seen)


def _language_type(type_name: str, language: SourceLanguage) -> str:
    simple = simple_type_name(type_name) if type_name != "byte[]" else type_name
    if language is SourceLanguage.KOTLIN:
        return to_kotlin_type(simple)
    return simple


def _column_attributes(field: EntityField) -> str:
    """Arguments of the field's @Column annotation."""
    attributes = [f'name = "{field.column}"']
    if not field.nullable and not field.is_id:
        attributes.append("nullable = false")
    if field.length and field.simple_type_name == "String":
        attributes.append(f"length = {field.length}")
    if field.column_definition:
        attributes.append(f'columnDefinition = "{field.column_definition}"')
    return ", ".join(attributes)


def _join_column_attributes(field: EntityField) -> str:
    attributes = [
        f'name = "{field.column}"',
        f'referencedColumnName = "{field.foreign_key_column}"',
    ]
    if not field.nullable:
        attributes.append("nullable = false")
    return ", ".join(attributes)


def _entity_type(field: EntityField, language: SourceLanguage) -> str:
    if not field.is_collection:
        return _language_type(field.type, language)
    element = field.target_simple_name or field.simple_type_name
    return f"MutableList<{element}>" if language is SourceLanguage.KOTLIN else f"List<{element}>"


def _field_view(field: EntityField, id_type: str, language: SourceLanguage) -> dict[str, Any]:
    owning = field.owns_foreign_key
    fk_type = _language_type(field.column_type or id_type, language) if owning else None
    return {
        "name": field.name,
        "capitalized": capitalize_first(field.name),
        "type": _language_type(field.type, language),
        "nullable": field.nullable,
        "column": field.column,
        "length": field.length,
        "is_id": field.is_id,
        "auto_increment": field.auto_increment,
        "relationship": field.relationship.value,
        "annotation": field.relationship.annotation if field.is_relationship else None,
        "is_relationship": field.is_relationship,
        "is_collection": field.is_collection,
        "owns_foreign_key": owning,
        "target": field.target_simple_name,
        # DTOs flatten owning relationships to the target's id
        "dto_name": f"{field.name}Id" if owning else field.name,
        "dto_type": fk_type if owning else _language_type(field.type, language),
        "graphql_type": "ID" if field.is_id else GRAPHQL_SCALARS.get(field.simple_type_name, "String"),
        "entity_type": _entity_type(field, language),
        "column_attributes": _column_attributes(field),
        "join_column_attributes": _join_column_attributes(field) if owning else None,
        "column_definition": field.column_definition,
        "comment": field.comment,
    }


def build_view_model(metadata: EntityMetadata, features: FeatureConfig) -> dict[str, Any]:
    """Template context derived purely from metadata and feature switches."""
    language = features.language
    id_field = metadata.id_field
    fields = [_field_view(f, metadata.id_type, language) for f in metadata.fields]
    imports = sorted(
        {
            f.type
            for f in metadata.fields
            if f.type.startswith("java.") and not f.is_relationship
        }
        | ({metadata.id_type} if metadata.id_type.startswith("java.") else set())
    )
    query_fields = [
        view
        for view, f in zip(fields, metadata.fields, strict=True)
        if not f.is_id and not f.is_relationship
    ]
    service_package = metadata.package_for(Layer.SERVICE)
    return {
        "class_name": metadata.class_name,
        "entity_var": metadata.entity_name_lower,
        "table_name": metadata.table_name,
        "table_comment": metadata.comment,
        "id_type": _language_type(metadata.id_type, language),
        "id_name": id_field.name if id_field else "id",
        "fields": fields,
        "dto_fields": [v for v in fields if not v["is_collection"]],
        "query_fields": query_fields,
        "relationships": [v for v in fields if v["is_relationship"]],
        "imports": imports,
        "resource_path": resource_path(metadata.class_name),
        "base_package": metadata.resolved_base_package,
        "entity_package": metadata.package_for(Layer.ENTITY),
        "dto_package": metadata.package_for(Layer.DTO),
        "repository_package": metadata.package_for(Layer.REPOSITORY),
        "service_package": service_package,
        "service_impl_package": f"{service_package}.impl",
        "controller_package": metadata.package_for(Layer.CONTROLLER),
        "mapper_package": metadata.package_for(Layer.MAPPER),
        "config_package": metadata.package_for(Layer.CONFIG),
        "dto_name": metadata.dto_name,
        "repository_name": metadata.repository_name,
        "service_name": metadata.service_name,
        "service_impl_name": metadata.service_impl_name,
        "controller_name": metadata.controller_name,
        "mapper_name": metadata.mapper_name,
        "swagger": features.swagger or features.openapi,
        "security": features.security,
    }
