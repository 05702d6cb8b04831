"""Schema evolution: metadata diffs rendered as Flyway or Liquibase migrations."""

from entityforge.evolution.delta import (
    AddColumn,
    AddForeignKey,
    AlterColumn,
    DropColumn,
    DropForeignKey,
    RenameTable,
    SchemaDelta,
    diff,
)
from entityforge.evolution.detection import detect_dialect
from entityforge.evolution.dialects import (
    DIALECTS,
    MigrationScript,
    VersionClock,
    generate_version,
    render,
    render_create_table,
    slugify,
)

__all__ = [
    "AddColumn",
    "AddForeignKey",
    "AlterColumn",
    "DIALECTS",
    "DropColumn",
    "DropForeignKey",
    "MigrationScript",
    "RenameTable",
    "SchemaDelta",
    "VersionClock",
    "detect_dialect",
    "diff",
    "generate_version",
    "render",
    "render_create_table",
    "slugify",
]
