"""Layer package conventions.

Each layer lives in `<base>.<layer>`. Suffixes are never stacked: deriving a
layer package from a package that already carries a layer suffix first strips
it, so `apply_layer_suffix` is idempotent and `pkg.mapper.mapper` cannot occur.
"""

from __future__ import annotations

from collections.abc import Mapping

from entityforge.core.types import Layer

DEFAULT_BASE_PACKAGE = "com.example"

# Longest first so ".service.impl" is stripped before ".service"
KNOWN_SUFFIXES: tuple[str, ...] = (
    ".service.impl",
    ".domain",
    *(layer.suffix for layer in Layer),
)


def base_package_of(package: str) -> str:
    """Strip every trailing layer suffix ("com.acme.mapper.mapper" -> "com.acme")."""
    stripped = package.strip(".")
    changed = True
    while changed:
        changed = False
        for suffix in KNOWN_SUFFIXES:
            if stripped.endswith(suffix) and len(stripped) > len(suffix):
                stripped = stripped[: -len(suffix)]
                changed = True
                break
    return stripped


def apply_layer_suffix(package: str, layer: Layer) -> str:
    """Package for a layer, derived from any package of the same project.

    Examples:
        >>> apply_layer_suffix("com.acme", Layer.DTO)
        'com.acme.dto'
        >>> apply_layer_suffix("com.acme.dto", Layer.DTO)
        'com.acme.dto'
        >>> apply_layer_suffix("com.acme.entity", Layer.MAPPER)
        'com.acme.mapper'
    """
    base = base_package_of(package) or DEFAULT_BASE_PACKAGE
    return f"{base}{layer.suffix}"


def layer_packages(base_package: str, overrides: Mapping[Layer, str] | None = None) -> dict[Layer, str]:
    """Resolve every layer's package from a base package plus explicit overrides."""
    overrides = overrides or {}
    return {
        layer: overrides.get(layer) or apply_layer_suffix(base_package, layer) for layer in Layer
    }


def package_to_path(package: str) -> str:
    """Convert a dotted package to a relative directory path."""
    return package.replace(".", "/")
