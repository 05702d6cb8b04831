"""Core components for entityforge."""

from entityforge.core.connection import DatabaseConnection
from entityforge.core.types import (
    Feature,
    FeatureConfig,
    Layer,
    MigrationDialect,
    PackageConfig,
    ReferentialAction,
    RelationshipKind,
    SourceLanguage,
    SqlType,
)

__all__ = [
    "DatabaseConnection",
    "Feature",
    "FeatureConfig",
    "Layer",
    "MigrationDialect",
    "PackageConfig",
    "ReferentialAction",
    "RelationshipKind",
    "SourceLanguage",
    "SqlType",
]
