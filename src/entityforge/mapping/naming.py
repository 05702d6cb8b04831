"""Relational name <-> code identifier conversion.

Every function here is total: any printable ASCII input yields a result,
never an exception.

Pluralization is a naive suffix rule. It round-trips regular plurals
("users" <-> "user") and is lossy for irregular ones: "categories"
singularizes to "categorie" and "children" stays "children".
"""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[_\-\s]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

ID_SUFFIX = "_id"


def split_words(name: str) -> list[str]:
    """Split an identifier on word separators (underscore, dash, whitespace)."""
    return [part for part in _SEPARATORS.split(name) if part]


def capitalize_first(value: str) -> str:
    """Uppercase the first character, leaving the rest untouched."""
    return value[:1].upper() + value[1:]


def decapitalize(value: str) -> str:
    """Lowercase the first character, leaving the rest untouched."""
    return value[:1].lower() + value[1:]


def to_camel_case(name: str) -> str:
    """Convert a relational name to a field identifier.

    Examples:
        >>> to_camel_case("first_name")
        'firstName'
        >>> to_camel_case("email")
        'email'
    """
    parts = split_words(name)
    if not parts:
        return ""
    return parts[0].lower() + "".join(capitalize_first(p) for p in parts[1:])


def to_pascal_case(name: str) -> str:
    """Convert a relational name to a class/type identifier ("order_items" -> "OrderItems")."""
    return "".join(capitalize_first(p) for p in split_words(name))


def to_snake_case(name: str) -> str:
    """Convert a code identifier to a relational name ("firstName" -> "first_name")."""
    spaced = _CAMEL_BOUNDARY.sub("_", name)
    return "_".join(p.lower() for p in split_words(spaced))


def singularize(name: str) -> str:
    """Strip a trailing 's' unless the name ends with 'ss'."""
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def pluralize(name: str) -> str:
    """Append 's' unless the name already ends with 's'."""
    if name.endswith("s"):
        return name
    return f"{name}s"


def has_id_suffix(column_name: str) -> bool:
    """Check for an '_id'-style suffix (case-insensitive)."""
    return len(column_name) > len(ID_SUFFIX) and column_name.lower().endswith(ID_SUFFIX)


def strip_id_suffix(column_name: str) -> str:
    """Remove a trailing '_id' suffix if present ("author_id" -> "author")."""
    if has_id_suffix(column_name):
        return column_name[: -len(ID_SUFFIX)]
    return column_name


def entity_name_for_table(table_name: str) -> str:
    """Derive an entity class name from a table name ("blog_posts" -> "BlogPost")."""
    return singularize(to_pascal_case(table_name))


def table_name_for_entity(class_name: str) -> str:
    """Derive a default table name from an entity class name ("BlogPost" -> "blog_post")."""
    return to_snake_case(class_name)


def resource_path(class_name: str) -> str:
    """REST collection path segment for an entity ("BlogPost" -> "blog-posts")."""
    return pluralize(to_snake_case(class_name)).replace("_", "-")
