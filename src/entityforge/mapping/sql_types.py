"""SQL type <-> language type mapping.

Introspection reports JDBC type codes; entity metadata carries Java type names
(the primary language); Kotlin names and DDL types are derived from those.
Unknown inputs map to a generic fallback rather than raising.
"""

from __future__ import annotations

from entityforge.core.types import SqlType

FALLBACK_LANGUAGE_TYPE = "Object"
FALLBACK_SQL_TYPE = "VARCHAR(255)"

# JDBC type code -> Java type name
SQL_TO_JAVA: dict[int, str] = {
    SqlType.CHAR: "String",
    SqlType.VARCHAR: "String",
    SqlType.LONGVARCHAR: "String",
    SqlType.BIT: "Boolean",
    SqlType.BOOLEAN: "Boolean",
    SqlType.TINYINT: "Short",
    SqlType.SMALLINT: "Short",
    SqlType.INTEGER: "Integer",
    SqlType.BIGINT: "Long",
    SqlType.FLOAT: "Float",
    SqlType.REAL: "Float",
    SqlType.DOUBLE: "Double",
    SqlType.DECIMAL: "java.math.BigDecimal",
    SqlType.NUMERIC: "java.math.BigDecimal",
    SqlType.DATE: "java.time.LocalDate",
    SqlType.TIME: "java.time.LocalTime",
    SqlType.TIMESTAMP: "java.time.LocalDateTime",
    SqlType.TIMESTAMP_WITH_TIMEZONE: "java.time.OffsetDateTime",
    SqlType.BINARY: "byte[]",
    SqlType.VARBINARY: "byte[]",
    SqlType.LONGVARBINARY: "byte[]",
    SqlType.BLOB: "java.sql.Blob",
    SqlType.CLOB: "java.sql.Clob",
    SqlType.ARRAY: "java.sql.Array",
}

JAVA_TO_KOTLIN: dict[str, str] = {
    "Integer": "Int",
    "int": "Int",
    "long": "Long",
    "short": "Short",
    "byte": "Byte",
    "float": "Float",
    "double": "Double",
    "boolean": "Boolean",
    "char": "Char",
    "Character": "Char",
    "byte[]": "ByteArray",
    "Object": "Any",
}

# Simple language type name -> DDL type
LANGUAGE_TO_SQL: dict[str, str] = {
    "String": "VARCHAR(255)",
    "Integer": "INT",
    "Int": "INT",
    "int": "INT",
    "Short": "SMALLINT",
    "short": "SMALLINT",
    "Long": "BIGINT",
    "long": "BIGINT",
    "Double": "DOUBLE",
    "double": "DOUBLE",
    "Float": "FLOAT",
    "float": "FLOAT",
    "Boolean": "BOOLEAN",
    "boolean": "BOOLEAN",
    "LocalDateTime": "TIMESTAMP",
    "LocalDate": "DATE",
    "LocalTime": "TIME",
    "Instant": "TIMESTAMP",
    "Byte": "TINYINT",
    "byte": "TINYINT",
    "Character": "CHAR(1)",
    "Char": "CHAR(1)",
    "char": "CHAR(1)",
    "OffsetDateTime": "TIMESTAMP WITH TIME ZONE",
    "ZonedDateTime": "TIMESTAMP WITH TIME ZONE",
    "BigDecimal": "DECIMAL(19,2)",
    "UUID": "UUID",
    "byte[]": "BLOB",
    "ByteArray": "BLOB",
    "Blob": "BLOB",
    "Clob": "CLOB",
    "Array": "ARRAY",
}


def simple_type_name(type_name: str) -> str:
    """Strip package qualifiers and Kotlin nullability ("java.time.LocalDate?" -> "LocalDate")."""
    return type_name.rstrip("?").rsplit(".", 1)[-1]


def map_sql_type(code: int, type_name: str = "", size: int = 0, decimal_digits: int = 0) -> str:
    """Map a JDBC type code to a Java type name.

    Args:
        code: java.sql.Types code
        type_name: Vendor type name, consulted for OTHER (uuid, json, jsonb)
        size: Declared column size
        decimal_digits: Declared scale

    Returns:
        Java type name; "Object" for unrecognised codes
    """
    if code == SqlType.OTHER:
        lowered = type_name.lower()
        if lowered == "uuid":
            return "java.util.UUID"
        if lowered in ("json", "jsonb"):
            return "String"
        return FALLBACK_LANGUAGE_TYPE
    return SQL_TO_JAVA.get(code, FALLBACK_LANGUAGE_TYPE)


def to_kotlin_type(java_type: str) -> str:
    """Translate a Java type name into its Kotlin counterpart."""
    if java_type in JAVA_TO_KOTLIN:
        return JAVA_TO_KOTLIN[java_type]
    if java_type.startswith("java.lang."):
        return to_kotlin_type(java_type[len("java.lang.") :])
    return java_type


def to_sql_type(language_type: str, length: int | None = None) -> str:
    """Map a language type to a DDL column type.

    Args:
        language_type: Java or Kotlin type name, optionally package-qualified
        length: Declared length, applied to string columns

    Returns:
        DDL type; VARCHAR(255) for unrecognised types
    """
    simple = simple_type_name(language_type)
    if simple == "String" and length:
        return f"VARCHAR({length})"
    return LANGUAGE_TO_SQL.get(simple, FALLBACK_SQL_TYPE)


def to_sql_id_type(id_type: str) -> str:
    """DDL type for an identifier column; unknown id types default to BIGINT."""
    simple = simple_type_name(id_type)
    return LANGUAGE_TO_SQL.get(simple, "BIGINT")
