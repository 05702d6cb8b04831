"""Input parsing utilities for CLI commands."""

import json
from pathlib import Path
from typing import Any

from entityforge.core.types import Feature, FeatureConfig, SourceLanguage
from entityforge.generation.registry import templates_for
from entityforge.metadata.models import EntityMetadata


def read_json_file(path: str) -> Any:
    """Read a JSON document from file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with file_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def read_metadata_file(path: str) -> list[EntityMetadata]:
    """Read metadata snapshots from a file holding one object or a list of them."""
    data = read_json_file(path)
    items = data if isinstance(data, list) else [data]
    return [EntityMetadata.model_validate(item) for item in items]


def write_metadata_file(path: Path, entities: list[EntityMetadata]) -> None:
    """Write metadata snapshots as a JSON list."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [entity.model_dump(mode="json") for entity in entities]
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def parse_features(features: list[str] | None, language: str = "java") -> FeatureConfig:
    """Build a FeatureConfig from repeated --feature values.

    "all" (or no value at all) enables every feature the language has templates for.

    Raises:
        ValueError: If a feature name is unknown
    """
    lang = SourceLanguage(language.lower())
    names = [n.strip().lower().replace("-", "_") for n in features or []]
    if not names or "all" in names:
        return FeatureConfig.only(*(f for f in Feature if templates_for(f, lang)), language=lang)

    known = {f.value for f in Feature}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(
            f"Unknown feature(s): {', '.join(unknown)}. "
            f"Supported: {', '.join(f.value for f in Feature)}, all"
        )
    return FeatureConfig.only(*names, language=lang)


def write_files(root: Path, files: dict[str, str]) -> list[Path]:
    """Write rendered files under root, creating directories as needed."""
    written = []
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        written.append(target)
    return written
