"""Best-effort detection of the migration tool a project already uses."""

from __future__ import annotations

import logging
from pathlib import Path

from entityforge.core.types import MigrationDialect
from entityforge.evolution.dialects import DIALECTS

logger = logging.getLogger(__name__)

BUILD_FILES = ("build.gradle.kts", "build.gradle", "pom.xml")


def detect_dialect(project_root: str | Path) -> MigrationDialect:
    """Guess the migration dialect of a project.

    Signals, in order:
    1. An existing Liquibase changelog directory
    2. An existing Flyway migration directory
    3. A build file mentioning liquibase or flyway
    4. Otherwise the first registered dialect (flyway)

    The result is advisory; callers may always pass a dialect explicitly.
    """
    root = Path(project_root)
    for name in (MigrationDialect.LIQUIBASE, MigrationDialect.FLYWAY):
        directory = root / DIALECTS[name.value].directory
        if directory.is_dir():
            logger.debug(f"Detected {name.value} from {directory}")
            return name

    for build_file in BUILD_FILES:
        path = root / build_file
        if not path.is_file():
            continue
        text = path.read_text(encoding="utf-8", errors="replace").lower()
        if "liquibase" in text:
            logger.debug(f"Detected liquibase from {path}")
            return MigrationDialect.LIQUIBASE
        if "flyway" in text:
            logger.debug(f"Detected flyway from {path}")
            return MigrationDialect.FLYWAY

    return MigrationDialect(next(iter(DIALECTS)))
