"""Code generation for entityforge."""

from entityforge.generation.engine import (
    CodeGenerator,
    GeneratedFile,
    build_view_model,
    suggest_dependencies,
)
from entityforge.generation.registry import TEMPLATES, TemplateSpec, templates_for

__all__ = [
    "CodeGenerator",
    "GeneratedFile",
    "TEMPLATES",
    "TemplateSpec",
    "build_view_model",
    "suggest_dependencies",
    "templates_for",
]
