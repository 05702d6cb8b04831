"""Relationship-kind inference from foreign-key shape.

Inference is a named, swappable strategy. The default looks only at the
column name, so it cannot tell a unique FK (one-to-one) from a plain one
(many-to-one) reliably. Callers needing certainty wrap it in an
OverrideRelationshipStrategy.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from entityforge.core.types import RelationshipKind
from entityforge.mapping.naming import has_id_suffix, strip_id_suffix, to_camel_case

if TYPE_CHECKING:
    from entityforge.schema.models import ForeignKey, Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InferredRelationship:
    """Outcome of inference for one foreign key."""

    foreign_key: ForeignKey
    kind: RelationshipKind
    field_name: str


class RelationshipStrategy(ABC):
    """Decides the relationship kind and field name for a foreign key."""

    @abstractmethod
    def kind_for(self, foreign_key: ForeignKey, table: Table | None = None) -> RelationshipKind:
        """Relationship kind for a foreign key on the given table."""

    def field_name_for(self, foreign_key: ForeignKey, table: Table | None = None) -> str:
        """Suggested field name: '_id' suffix stripped, camelCased."""
        return to_camel_case(strip_id_suffix(foreign_key.column_name))

    def infer(self, foreign_key: ForeignKey, table: Table | None = None) -> InferredRelationship:
        return InferredRelationship(
            foreign_key=foreign_key,
            kind=self.kind_for(foreign_key, table),
            field_name=self.field_name_for(foreign_key, table),
        )


class SuffixRelationshipStrategy(RelationshipStrategy):
    """Default heuristic: '<name>_id' columns are MANY_TO_ONE, anything else ONE_TO_ONE."""

    def kind_for(self, foreign_key: ForeignKey, table: Table | None = None) -> RelationshipKind:
        if has_id_suffix(foreign_key.column_name):
            return RelationshipKind.MANY_TO_ONE
        return RelationshipKind.ONE_TO_ONE


class OverrideRelationshipStrategy(RelationshipStrategy):
    """Explicit per-column kinds, falling back to another strategy.

    Overrides are keyed by "table.column" or by bare column name; the
    qualified key wins.
    """

    def __init__(
        self,
        overrides: Mapping[str, RelationshipKind | str],
        fallback: RelationshipStrategy | None = None,
    ) -> None:
        self._overrides = {key: RelationshipKind(kind) for key, kind in overrides.items()}
        self._fallback = fallback or SuffixRelationshipStrategy()

    def kind_for(self, foreign_key: ForeignKey, table: Table | None = None) -> RelationshipKind:
        if table is not None:
            qualified = f"{table.name}.{foreign_key.column_name}"
            if qualified in self._overrides:
                return self._overrides[qualified]
        if foreign_key.column_name in self._overrides:
            return self._overrides[foreign_key.column_name]
        return self._fallback.kind_for(foreign_key, table)

    def field_name_for(self, foreign_key: ForeignKey, table: Table | None = None) -> str:
        return self._fallback.field_name_for(foreign_key, table)


def infer_relationships(
    table: Table, strategy: RelationshipStrategy | None = None
) -> dict[str, InferredRelationship]:
    """Infer one relationship per foreign-key column of a table.

    Duplicate foreign keys on the same column are a data-quality defect: the
    first one wins and the rest are logged and dropped.

    Args:
        table: Resolved table
        strategy: Inference strategy (suffix heuristic by default)

    Returns:
        Inferred relationships keyed by constrained column name, in FK order
    """
    strategy = strategy or SuffixRelationshipStrategy()
    result: dict[str, InferredRelationship] = {}
    for fk in table.foreign_keys:
        if fk.column_name in result:
            kept = result[fk.column_name].foreign_key
            logger.warning(
                f"Duplicate foreign key on {table.name}.{fk.column_name}: keeping reference to "
                f"{kept.referenced_table}.{kept.referenced_column}, ignoring "
                f"{fk.referenced_table}.{fk.referenced_column}"
            )
            continue
        result[fk.column_name] = strategy.infer(fk, table)
    return result
