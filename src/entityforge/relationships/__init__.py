"""Relationship inference for entityforge."""

from entityforge.relationships.inference import (
    InferredRelationship,
    OverrideRelationshipStrategy,
    RelationshipStrategy,
    SuffixRelationshipStrategy,
    infer_relationships,
)

__all__ = [
    "InferredRelationship",
    "OverrideRelationshipStrategy",
    "RelationshipStrategy",
    "SuffixRelationshipStrategy",
    "infer_relationships",
]
