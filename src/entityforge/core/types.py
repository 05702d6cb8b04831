"""Core types and configuration models for entityforge.

All types are designed to be JSON-serializable so metadata snapshots and
generation requests can be stored and replayed.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict, Field

PACKAGE_PATTERN = r"^[a-z_][a-z0-9_]*(\.[a-z_][a-z0-9_]*)*$"


class RelationshipKind(StrEnum):
    """Relationship kinds between entities."""

    NONE = "none"
    ONE_TO_ONE = "one_to_one"  # e.g., User -> Profile
    ONE_TO_MANY = "one_to_many"  # e.g., Author -> Books
    MANY_TO_ONE = "many_to_one"  # e.g., Book -> Author
    MANY_TO_MANY = "many_to_many"  # e.g., Book <-> Tag

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid relationship kind values."""
        return [k.value for k in cls]

    @property
    def annotation(self) -> str:
        """JPA annotation name (ManyToOne, OneToMany, ...)."""
        return "".join(part.capitalize() for part in self.value.split("_"))


class Layer(StrEnum):
    """Generated-artifact categories, each with its own package suffix."""

    ENTITY = "entity"
    DTO = "dto"
    REPOSITORY = "repository"
    SERVICE = "service"
    CONTROLLER = "controller"
    MAPPER = "mapper"
    CONFIG = "config"

    @property
    def suffix(self) -> str:
        """Package suffix appended to the base package (e.g. '.dto')."""
        return f".{self.value}"


class SourceLanguage(StrEnum):
    """Source-language variants for generated code."""

    JAVA = "java"
    KOTLIN = "kotlin"

    @property
    def extension(self) -> str:
        """File extension without the dot."""
        return "java" if self is SourceLanguage.JAVA else "kt"


class MigrationDialect(StrEnum):
    """Supported migration-tool dialects."""

    FLYWAY = "flyway"  # Versioned, timestamp-ordered plain SQL
    LIQUIBASE = "liquibase"  # Changeset-based XML changelog

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid dialect values."""
        return [d.value for d in cls]


class Feature(StrEnum):
    """Generation features that can be switched on in a FeatureConfig."""

    CONTROLLER = "controller"
    SERVICE = "service"
    REPOSITORY = "repository"
    DTO = "dto"
    MAPPER = "mapper"
    TESTS = "tests"
    SWAGGER = "swagger"
    OPENAPI = "openapi"
    SECURITY = "security"
    GRAPHQL = "graphql"
    CUSTOM_QUERY_METHODS = "custom_query_methods"


class SqlType(IntEnum):
    """JDBC java.sql.Types codes reported by schema introspection."""

    BIT = -7
    TINYINT = -6
    BIGINT = -5
    LONGVARBINARY = -4
    VARBINARY = -3
    BINARY = -2
    LONGVARCHAR = -1
    NULL = 0
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    TIMESTAMP_WITH_TIMEZONE = 2014


class ReferentialAction(IntEnum):
    """JDBC imported-key rule codes for ON UPDATE / ON DELETE."""

    CASCADE = 0
    RESTRICT = 1
    SET_NULL = 2
    NO_ACTION = 3
    SET_DEFAULT = 4

    @property
    def sql(self) -> str:
        """SQL clause text (e.g. 'SET NULL')."""
        return self.name.replace("_", " ")


class FeatureConfig(BaseModel):
    """Which artifacts a generation request produces.

    Every switch defaults to off. Unknown keys are rejected at construction,
    so a typo never silently disables a feature.
    """

    controller: bool = False
    service: bool = False
    repository: bool = False
    dto: bool = False
    mapper: bool = False
    tests: bool = False
    swagger: bool = False
    openapi: bool = False
    security: bool = False
    graphql: bool = False
    custom_query_methods: bool = Field(default=False, alias="customQueryMethods")
    language: SourceLanguage = SourceLanguage.JAVA

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    @classmethod
    def only(cls, *features: Feature | str, language: SourceLanguage = SourceLanguage.JAVA) -> FeatureConfig:
        """Build a config with exactly the given features enabled."""
        return cls(**{Feature(f).value: True for f in features}, language=language)

    @classmethod
    def everything(cls, language: SourceLanguage = SourceLanguage.JAVA) -> FeatureConfig:
        """Build a config with every feature enabled."""
        return cls.only(*Feature, language=language)

    def is_enabled(self, feature: Feature | str) -> bool:
        """Check whether a feature is switched on."""
        return bool(getattr(self, Feature(feature).value))

    def enabled_features(self) -> list[Feature]:
        """Enabled features in declaration order."""
        return [f for f in Feature if self.is_enabled(f)]


class PackageConfig(BaseModel):
    """Per-layer package overrides, validated upstream as dotted lowercase names."""

    base_package: str | None = Field(default=None, pattern=PACKAGE_PATTERN)
    entity: str | None = Field(default=None, pattern=PACKAGE_PATTERN)
    dto: str | None = Field(default=None, pattern=PACKAGE_PATTERN)
    repository: str | None = Field(default=None, pattern=PACKAGE_PATTERN)
    service: str | None = Field(default=None, pattern=PACKAGE_PATTERN)
    controller: str | None = Field(default=None, pattern=PACKAGE_PATTERN)
    mapper: str | None = Field(default=None, pattern=PACKAGE_PATTERN)

    model_config = ConfigDict(extra="forbid", frozen=True)

    def overrides(self) -> dict[Layer, str]:
        """Explicit layer overrides only."""
        result: dict[Layer, str] = {}
        for layer in Layer:
            value = getattr(self, layer.value, None)
            if value:
                result[layer] = value
        return result
