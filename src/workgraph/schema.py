"""Relationship schema: legal entity type pairs, inverses and table names.

Every lookup is an exhaustive ``match`` over the enum. Adding a member to
``RelationshipType`` or ``EntityType`` without extending these functions makes
them raise, which the schema completeness tests catch.
"""

from workgraph.models import EntityType, RelationshipType

RELATIONSHIPS_TABLE = "relationships"

# Edges followed from an entity towards the things that own it.
UPWARD_RELATIONSHIP_TYPES: tuple[RelationshipType, ...] = (
    RelationshipType.TASK_BELONGS_TO_PROJECT,
    RelationshipType.TASK_BELONGS_TO_WORKSTREAM,
    RelationshipType.WORKSTREAM_BELONGS_TO_PROJECT,
    RelationshipType.PROJECT_BELONGS_TO_WORKSPACE,
)

# Edges followed from an entity towards the things it contains.
CONTAINMENT_RELATIONSHIP_TYPES: tuple[RelationshipType, ...] = (
    RelationshipType.WORKSPACE_CONTAINS_PROJECT,
    RelationshipType.PROJECT_CONTAINS_WORKSTREAM,
    RelationshipType.PROJECT_CONTAINS_TASK,
    RelationshipType.WORKSTREAM_CONTAINS_TASK,
)

DEPENDENCY_RELATIONSHIP_TYPES: tuple[RelationshipType, ...] = (
    RelationshipType.TASK_BLOCKS,
    RelationshipType.TASK_BLOCKED_BY,
    RelationshipType.TASK_RELATED_TO,
)


def allowed_pairs(relationship_type: RelationshipType) -> frozenset[tuple[EntityType, EntityType]]:
    """Return the (source type, target type) pairs legal for a relationship type."""
    match relationship_type:
        case RelationshipType.WORKSPACE_CONTAINS_PROJECT:
            return frozenset({(EntityType.WORKSPACE, EntityType.PROJECT)})
        case RelationshipType.PROJECT_BELONGS_TO_WORKSPACE:
            return frozenset({(EntityType.PROJECT, EntityType.WORKSPACE)})
        case RelationshipType.PROJECT_CONTAINS_WORKSTREAM:
            return frozenset({(EntityType.PROJECT, EntityType.WORKSTREAM)})
        case RelationshipType.PROJECT_CONTAINS_TASK:
            return frozenset({(EntityType.PROJECT, EntityType.TASK)})
        case RelationshipType.WORKSTREAM_BELONGS_TO_PROJECT:
            return frozenset({(EntityType.WORKSTREAM, EntityType.PROJECT)})
        case RelationshipType.WORKSTREAM_CONTAINS_TASK:
            return frozenset({(EntityType.WORKSTREAM, EntityType.TASK)})
        case RelationshipType.TASK_BELONGS_TO_PROJECT:
            return frozenset({(EntityType.TASK, EntityType.PROJECT)})
        case RelationshipType.TASK_BELONGS_TO_WORKSTREAM:
            return frozenset({(EntityType.TASK, EntityType.WORKSTREAM)})
        case RelationshipType.TASK_BLOCKS | RelationshipType.TASK_BLOCKED_BY | RelationshipType.TASK_RELATED_TO:
            return frozenset({(EntityType.TASK, EntityType.TASK)})
        case _:
            raise ValueError(f"No entity type pairs defined for relationship type: {relationship_type}")


def inverse_of(relationship_type: RelationshipType) -> RelationshipType | None:
    """Return the relationship type that must exist as the reverse edge, if any.

    Symmetric types map to themselves.
    """
    match relationship_type:
        case RelationshipType.WORKSPACE_CONTAINS_PROJECT:
            return RelationshipType.PROJECT_BELONGS_TO_WORKSPACE
        case RelationshipType.PROJECT_BELONGS_TO_WORKSPACE:
            return RelationshipType.WORKSPACE_CONTAINS_PROJECT
        case RelationshipType.PROJECT_CONTAINS_WORKSTREAM:
            return RelationshipType.WORKSTREAM_BELONGS_TO_PROJECT
        case RelationshipType.WORKSTREAM_BELONGS_TO_PROJECT:
            return RelationshipType.PROJECT_CONTAINS_WORKSTREAM
        case RelationshipType.PROJECT_CONTAINS_TASK:
            return RelationshipType.TASK_BELONGS_TO_PROJECT
        case RelationshipType.TASK_BELONGS_TO_PROJECT:
            return RelationshipType.PROJECT_CONTAINS_TASK
        case RelationshipType.WORKSTREAM_CONTAINS_TASK:
            return RelationshipType.TASK_BELONGS_TO_WORKSTREAM
        case RelationshipType.TASK_BELONGS_TO_WORKSTREAM:
            return RelationshipType.WORKSTREAM_CONTAINS_TASK
        case RelationshipType.TASK_BLOCKS:
            return RelationshipType.TASK_BLOCKED_BY
        case RelationshipType.TASK_BLOCKED_BY:
            return RelationshipType.TASK_BLOCKS
        case RelationshipType.TASK_RELATED_TO:
            return RelationshipType.TASK_RELATED_TO
        case _:
            raise ValueError(f"No inverse defined for relationship type: {relationship_type}")


def is_allowed(relationship_type: RelationshipType, source_type: EntityType, target_type: EntityType) -> bool:
    """Check a (source type, relationship type, target type) triple against the table."""
    return (source_type, target_type) in allowed_pairs(relationship_type)


def table_for(entity_type: EntityType) -> str:
    """Return the store table holding entities of the given type."""
    match entity_type:
        case EntityType.WORKSPACE:
            return "workspaces"
        case EntityType.PROJECT:
            return "projects"
        case EntityType.WORKSTREAM:
            return "workstreams"
        case EntityType.TASK:
            return "tasks"
        case _:
            raise ValueError(f"Unknown entity type: {entity_type}")
