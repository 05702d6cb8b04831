"""Custom exceptions for entityforge.

All exceptions carry an actionable message plus a JSON-serializable context:
- Naming and type-mapping functions never raise
- Failures surface at assembly (metadata) or rendering (code, migrations) boundaries
"""

from __future__ import annotations

from typing import Any


class EntityForgeError(Exception):
    """Base exception for all entityforge errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConnectionError(EntityForgeError):
    """Failed to connect to the database being introspected."""

    pass


class InvalidMetadataError(EntityForgeError):
    """A required metadata attribute is missing or inconsistent."""

    def __init__(self, attribute: str, subject: str | None = None, detail: str | None = None) -> None:
        where = f" on '{subject}'" if subject else ""
        message = f"Missing or invalid metadata attribute '{attribute}'{where}."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message, {"attribute": attribute, "subject": subject})
        self.attribute = attribute
        self.subject = subject


class TemplateNotFoundError(EntityForgeError):
    """No template is registered for the requested feature/language pair."""

    def __init__(self, feature: str, language: str, template: str | None = None) -> None:
        if template:
            message = (
                f"Template '{template}' for feature '{feature}' ({language}) could not be loaded."
            )
        else:
            message = (
                f"No template registered for feature '{feature}' in language '{language}'. "
                "Disable the feature or switch the language."
            )
        super().__init__(
            message, {"feature": feature, "language": language, "template": template}
        )
        self.feature = feature
        self.language = language
        self.template = template


class UnsupportedDialectError(EntityForgeError):
    """Migration requested for a dialect without a registered renderer."""

    def __init__(self, dialect: str, supported: list[str] | None = None) -> None:
        available = supported or []
        message = f"Unsupported migration dialect '{dialect}'."
        if available:
            message = f"{message} Supported dialects: {', '.join(available)}"
        super().__init__(message, {"dialect": dialect, "supported": available})
        self.dialect = dialect
        self.supported = available


class SchemaIntrospectionError(EntityForgeError):
    """The schema source failed while enumerating a table."""

    def __init__(self, table_name: str | None, reason: str) -> None:
        if table_name:
            message = f"Failed to introspect table '{table_name}': {reason}"
        else:
            message = f"Failed to list tables: {reason}"
        super().__init__(message, {"table_name": table_name, "reason": reason})
        self.table_name = table_name
        self.reason = reason


class NamingAmbiguityError(EntityForgeError):
    """Two or more tables derive the same entity class name."""

    def __init__(self, class_name: str, tables: list[str]) -> None:
        message = (
            f"Tables {', '.join(repr(t) for t in tables)} all map to entity class "
            f"'{class_name}'. Exclude one of them or rename the generated class."
        )
        super().__init__(message, {"class_name": class_name, "tables": tables})
        self.class_name = class_name
        self.tables = tables
