"""Entity metadata model and assembly for entityforge."""

from entityforge.metadata.builder import MetadataBuilder, build_from_schema, build_from_source
from entityforge.metadata.models import (
    ClassDescription,
    EntityField,
    EntityMetadata,
    FieldDescription,
)
from entityforge.metadata.packages import apply_layer_suffix, base_package_of, layer_packages

__all__ = [
    "ClassDescription",
    "EntityField",
    "EntityMetadata",
    "FieldDescription",
    "MetadataBuilder",
    "apply_layer_suffix",
    "base_package_of",
    "build_from_schema",
    "build_from_source",
    "layer_packages",
]
