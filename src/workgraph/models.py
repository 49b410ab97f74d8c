"""Data models for the relationship graph."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntityType(str, Enum):
    """Types of entities that can participate in relationships."""

    WORKSPACE = "workspace"
    PROJECT = "project"
    WORKSTREAM = "workstream"
    TASK = "task"


class RelationshipType(str, Enum):
    """Types of relationships between entities."""

    # Containment and membership
    WORKSPACE_CONTAINS_PROJECT = "workspace_contains_project"
    PROJECT_BELONGS_TO_WORKSPACE = "project_belongs_to_workspace"
    PROJECT_CONTAINS_WORKSTREAM = "project_contains_workstream"
    PROJECT_CONTAINS_TASK = "project_contains_task"
    WORKSTREAM_BELONGS_TO_PROJECT = "workstream_belongs_to_project"
    WORKSTREAM_CONTAINS_TASK = "workstream_contains_task"
    TASK_BELONGS_TO_PROJECT = "task_belongs_to_project"
    TASK_BELONGS_TO_WORKSTREAM = "task_belongs_to_workstream"

    # Dependencies between tasks
    TASK_BLOCKS = "task_blocks"
    TASK_BLOCKED_BY = "task_blocked_by"
    TASK_RELATED_TO = "task_related_to"


@dataclass(frozen=True)
class EntityRef:
    """Reference to an entity by type and ID."""

    type: EntityType
    id: str

    def __str__(self) -> str:
        return f"{self.type.value}:{self.id}"


@dataclass
class Relationship:
    """Represents a typed, directed edge between two entities."""

    id: str
    source: EntityRef
    relationship_type: RelationshipType
    target: EntityRef
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Relationship":
        """Build a relationship from a flat ``relationships`` table row."""
        return cls(
            id=str(row["id"]),
            source=EntityRef(EntityType(row["source_type"]), str(row["source_id"])),
            relationship_type=RelationshipType(row["relationship_type"]),
            target=EntityRef(EntityType(row["target_type"]), str(row["target_id"])),
            metadata=dict(row.get("metadata") or {}),
            created_at=str(row.get("created_at") or ""),
        )

    def to_row(self) -> dict[str, Any]:
        """Flatten the relationship into a ``relationships`` table row."""
        return {
            "id": self.id,
            "source_type": self.source.type.value,
            "source_id": self.source.id,
            "relationship_type": self.relationship_type.value,
            "target_type": self.target.type.value,
            "target_id": self.target.id,
            "metadata": dict(self.metadata),
            "created_at": self.created_at,
        }

    def other_end(self, entity: EntityRef) -> EntityRef:
        """Return the endpoint opposite to ``entity``."""
        return self.target if self.source == entity else self.source


@dataclass
class TraversalResult:
    """An entity reached by a traversal, with the path that led to it."""

    entity: EntityRef
    depth: int
    path: list[Relationship] = field(default_factory=list)
    entity_data: dict[str, Any] | None = None


@dataclass
class Path:
    """An ordered chain of relationships connecting two entities."""

    relationships: list[Relationship] = field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.relationships)


@dataclass
class TraversalOptions:
    """Options for upward and downward traversal.

    ``relationship_types`` of None selects the default edge set of the
    traversal direction. ``target_entity_types`` restricts which discovered
    entity types are kept in the output.
    """

    max_depth: int = 10
    include_entity_data: bool = False
    relationship_types: list[RelationshipType] | None = None
    target_entity_types: list[EntityType] | None = None


@dataclass
class PathFindingOptions:
    """Options for path finding between two entities."""

    max_depth: int = 5
    max_paths: int = 10
    relationship_types: list[RelationshipType] | None = None


@dataclass
class RelatedTasks:
    """Tasks connected to a task by dependency edges, bucketed by meaning."""

    blocking_tasks: list[dict[str, Any]] = field(default_factory=list)
    blocked_by_tasks: list[dict[str, Any]] = field(default_factory=list)
    related_tasks: list[dict[str, Any]] = field(default_factory=list)
