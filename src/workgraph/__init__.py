"""Typed relationship graph over workspaces, projects, workstreams and tasks."""

from workgraph.errors import (
    DuplicateError,
    NotFoundError,
    RelationshipError,
    RelationshipErrorType,
    StoreError,
    UnknownError,
    ValidationError,
)
from workgraph.models import (
    EntityRef,
    EntityType,
    Path,
    PathFindingOptions,
    RelatedTasks,
    Relationship,
    RelationshipType,
    TraversalOptions,
    TraversalResult,
)
from workgraph.relationships import RelationshipManager
from workgraph.store import Store
from workgraph.traversal import GraphTraversal

__all__ = [
    "DuplicateError",
    "EntityRef",
    "EntityType",
    "GraphTraversal",
    "NotFoundError",
    "Path",
    "PathFindingOptions",
    "RelatedTasks",
    "Relationship",
    "RelationshipError",
    "RelationshipErrorType",
    "RelationshipManager",
    "RelationshipType",
    "Store",
    "StoreError",
    "TraversalOptions",
    "TraversalResult",
    "UnknownError",
    "ValidationError",
]
