"""entityforge - Entity metadata, layered code generation and schema migrations.

Turns an introspected relational schema (or a hand-authored entity
description) into normalized entity metadata, stamps out Spring-style layered
source files from it, and renders Flyway or Liquibase migrations between two
metadata snapshots.

Example:
    from entityforge import (
        CodeGenerator, DatabaseConnection, FeatureConfig, MetadataBuilder,
        SqlAlchemySchemaSource, diff, introspect, render,
    )

    with DatabaseConnection("sqlite:///./app.db") as conn:
        tables = introspect(SqlAlchemySchemaSource(conn.inspector()))

    entities = MetadataBuilder("com.example.shop").build_all(tables)

    # Generate controller + service layers
    files = CodeGenerator().generate(entities[0], FeatureConfig.only("controller", "service"))

    # Migrate between two snapshots
    delta = diff(old_snapshot, entities[0])
    if delta is not None:
        script = render(delta, "flyway", "V20260101120000")
"""

from entityforge.core import (
    DatabaseConnection,
    Feature,
    FeatureConfig,
    Layer,
    MigrationDialect,
    PackageConfig,
    RelationshipKind,
    SourceLanguage,
)
from entityforge.evolution import (
    MigrationScript,
    SchemaDelta,
    VersionClock,
    detect_dialect,
    diff,
    generate_version,
    render,
    render_create_table,
)
from entityforge.exceptions import (
    ConnectionError,
    EntityForgeError,
    InvalidMetadataError,
    NamingAmbiguityError,
    SchemaIntrospectionError,
    TemplateNotFoundError,
    UnsupportedDialectError,
)
from entityforge.generation import CodeGenerator, GeneratedFile, suggest_dependencies
from entityforge.metadata import (
    ClassDescription,
    EntityField,
    EntityMetadata,
    FieldDescription,
    MetadataBuilder,
)
from entityforge.relationships import (
    OverrideRelationshipStrategy,
    RelationshipStrategy,
    SuffixRelationshipStrategy,
)
from entityforge.schema import (
    Column,
    ForeignKey,
    RawTable,
    SqlAlchemySchemaSource,
    Table,
    introspect,
    resolve_foreign_keys,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "DatabaseConnection",
    "Feature",
    "FeatureConfig",
    "Layer",
    "MigrationDialect",
    "PackageConfig",
    "RelationshipKind",
    "SourceLanguage",
    # Schema
    "Column",
    "ForeignKey",
    "RawTable",
    "SqlAlchemySchemaSource",
    "Table",
    "introspect",
    "resolve_foreign_keys",
    # Relationships
    "OverrideRelationshipStrategy",
    "RelationshipStrategy",
    "SuffixRelationshipStrategy",
    # Metadata
    "ClassDescription",
    "EntityField",
    "EntityMetadata",
    "FieldDescription",
    "MetadataBuilder",
    # Generation
    "CodeGenerator",
    "GeneratedFile",
    "suggest_dependencies",
    # Evolution
    "MigrationScript",
    "SchemaDelta",
    "VersionClock",
    "detect_dialect",
    "diff",
    "generate_version",
    "render",
    "render_create_table",
    # Exceptions
    "ConnectionError",
    "EntityForgeError",
    "InvalidMetadataError",
    "NamingAmbiguityError",
    "SchemaIntrospectionError",
    "TemplateNotFoundError",
    "UnsupportedDialectError",
    # Version
    "__version__",
]
