"""Tests for the relationship manager."""

from typing import Any

import pytest

from workgraph.errors import (
    DuplicateError,
    NotFoundError,
    RelationshipErrorType,
    StoreError,
    UnknownError,
    ValidationError,
)
from workgraph.models import EntityRef, EntityType, RelationshipType
from workgraph.relationships import RelationshipManager
from workgraph.schema import RELATIONSHIPS_TABLE, allowed_pairs, inverse_of
from workgraph.stores import MemoryStore

T = EntityType.TASK


class FailingQueryStore(MemoryStore):
    """Memory store whose queries always fail."""

    def query(self, table: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        raise ConnectionError("store unreachable")


class FailingSecondInsertStore(MemoryStore):
    """Memory store that fails every insert after the first one."""

    def __init__(self) -> None:
        super().__init__()
        self.inserts = 0

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        self.inserts += 1
        if self.inserts > 1:
            raise ConnectionError("insert failed")
        return super().insert(table, row)


class FailingSecondDeleteStore(MemoryStore):
    """Memory store that fails every delete after the first one."""

    deletes = 0

    def delete(self, table: str, row_id: str) -> None:
        self.deletes += 1
        if self.deletes > 1:
            raise ConnectionError("delete failed")
        super().delete(table, row_id)


def _rows(store: MemoryStore, source: EntityRef, relationship_type: RelationshipType, target: EntityRef) -> list:
    return store.query(
        RELATIONSHIPS_TABLE,
        {
            "source_type": source.type.value,
            "source_id": source.id,
            "relationship_type": relationship_type.value,
            "target_type": target.type.value,
            "target_id": target.id,
        },
    )


def test_create_relationship(empty_store: MemoryStore) -> None:
    """Test creating a relationship returns the stored edge."""
    manager = RelationshipManager(empty_store)
    source, target = EntityRef(T, "task-1"), EntityRef(T, "task-2")

    relationship = manager.create_relationship(source, RelationshipType.TASK_BLOCKS, target, {"reason": "schema"})

    assert relationship.id
    assert relationship.created_at
    assert relationship.source == source
    assert relationship.target == target
    assert relationship.relationship_type == RelationshipType.TASK_BLOCKS
    assert relationship.metadata == {"reason": "schema"}
    assert manager.get_relationship(relationship.id) == relationship


@pytest.mark.parametrize("relationship_type", list(RelationshipType))
def test_create_relationship_creates_inverse(empty_store: MemoryStore, relationship_type: RelationshipType) -> None:
    """Test every relationship type gets its reverse edge."""
    manager = RelationshipManager(empty_store)
    source_type, target_type = sorted(allowed_pairs(relationship_type))[0]
    source, target = EntityRef(source_type, "a"), EntityRef(target_type, "b")

    manager.create_relationship(source, relationship_type, target)

    assert len(_rows(empty_store, source, relationship_type, target)) == 1
    assert len(_rows(empty_store, target, inverse_of(relationship_type), source)) == 1
    assert len(empty_store.query(RELATIONSHIPS_TABLE)) == 2


def test_create_relationship_accepts_string_type(empty_store: MemoryStore) -> None:
    """Test relationship types may be given by value."""
    manager = RelationshipManager(empty_store)
    relationship = manager.create_relationship(EntityRef(T, "task-1"), "task_blocks", EntityRef(T, "task-2"))
    assert relationship.relationship_type == RelationshipType.TASK_BLOCKS


def test_inverse_copies_metadata(empty_store: MemoryStore) -> None:
    """Test the reverse edge carries the same metadata."""
    manager = RelationshipManager(empty_store)
    source, target = EntityRef(T, "task-1"), EntityRef(T, "task-2")
    manager.create_relationship(source, RelationshipType.TASK_BLOCKS, target, {"reason": "schema"})

    inverse = _rows(empty_store, target, RelationshipType.TASK_BLOCKED_BY, source)[0]
    assert inverse["metadata"] == {"reason": "schema"}


@pytest.mark.parametrize("relationship_type", list(RelationshipType))
def test_self_relationship_rejected(empty_store: MemoryStore, relationship_type: RelationshipType) -> None:
    """Test an entity cannot be related to itself."""
    manager = RelationshipManager(empty_store)
    source_type, _ = sorted(allowed_pairs(relationship_type))[0]
    entity = EntityRef(source_type, "same")

    with pytest.raises(ValidationError) as exc_info:
        manager.create_relationship(entity, relationship_type, entity)

    assert exc_info.value.error_type == RelationshipErrorType.VALIDATION_ERROR
    assert empty_store.query(RELATIONSHIPS_TABLE) == []


def test_disallowed_type_pair_rejected(empty_store: MemoryStore) -> None:
    """Test a relationship type is rejected between the wrong entity types."""
    manager = RelationshipManager(empty_store)
    with pytest.raises(ValidationError, match="workspace_contains_project"):
        manager.create_relationship(
            EntityRef(T, "task-1"), RelationshipType.WORKSPACE_CONTAINS_PROJECT, EntityRef(T, "task-2")
        )
    assert empty_store.query(RELATIONSHIPS_TABLE) == []


@pytest.mark.parametrize(
    "source,relationship_type,target",
    [
        (None, RelationshipType.TASK_BLOCKS, EntityRef(T, "task-2")),
        (EntityRef(T, "task-1"), None, EntityRef(T, "task-2")),
        (EntityRef(T, "task-1"), RelationshipType.TASK_BLOCKS, None),
        (EntityRef(T, ""), RelationshipType.TASK_BLOCKS, EntityRef(T, "task-2")),
        (EntityRef(T, "task-1"), RelationshipType.TASK_BLOCKS, EntityRef(T, "")),
    ],
)
def test_missing_fields_rejected(
    empty_store: MemoryStore,
    source: EntityRef | None,
    relationship_type: RelationshipType | None,
    target: EntityRef | None,
) -> None:
    """Test missing endpoints or type fail validation."""
    manager = RelationshipManager(empty_store)
    with pytest.raises(ValidationError, match="Missing required fields"):
        manager.create_relationship(source, relationship_type, target)


def test_unknown_relationship_type_rejected(empty_store: MemoryStore) -> None:
    """Test an unknown relationship type value fails validation."""
    manager = RelationshipManager(empty_store)
    with pytest.raises(ValidationError):
        manager.create_relationship(EntityRef(T, "task-1"), "task_owns", EntityRef(T, "task-2"))


def test_duplicate_rejected(manager: RelationshipManager, store: MemoryStore) -> None:
    """Test creating an existing relationship fails and stores nothing new."""
    source, target = EntityRef(T, "task-1"), EntityRef(T, "task-2")
    before = len(store.query(RELATIONSHIPS_TABLE))

    with pytest.raises(DuplicateError) as exc_info:
        manager.create_relationship(source, RelationshipType.TASK_BLOCKS, target)

    assert exc_info.value.details["relationship"]["source_id"] == "task-1"
    assert len(store.query(RELATIONSHIPS_TABLE)) == before
    assert len(_rows(store, source, RelationshipType.TASK_BLOCKS, target)) == 1


def test_symmetric_inverse_not_duplicated(empty_store: MemoryStore) -> None:
    """Test an existing reverse related-to edge is reused."""
    manager = RelationshipManager(empty_store)
    first, second = EntityRef(T, "task-1"), EntityRef(T, "task-2")
    empty_store.insert(
        RELATIONSHIPS_TABLE,
        {
            "source_type": "task",
            "source_id": "task-2",
            "relationship_type": "task_related_to",
            "target_type": "task",
            "target_id": "task-1",
            "metadata": {},
        },
    )

    manager.create_relationship(first, RelationshipType.TASK_RELATED_TO, second)

    assert len(_rows(empty_store, first, RelationshipType.TASK_RELATED_TO, second)) == 1
    assert len(_rows(empty_store, second, RelationshipType.TASK_RELATED_TO, first)) == 1


def test_inverse_creation_failure_is_tolerated() -> None:
    """Test a failed reverse insert does not fail the create."""
    store = FailingSecondInsertStore()
    manager = RelationshipManager(store)

    relationship = manager.create_relationship(EntityRef(T, "task-1"), RelationshipType.TASK_BLOCKS, EntityRef(T, "task-2"))

    assert manager.get_relationship(relationship.id) is not None
    assert len(store.query(RELATIONSHIPS_TABLE)) == 1


def test_store_failure_raises_store_error() -> None:
    """Test store failures surface as StoreError naming the operation."""
    manager = RelationshipManager(FailingQueryStore())

    with pytest.raises(StoreError) as exc_info:
        manager.find_related_entities(T, "task-1")

    assert exc_info.value.operation == "find related entities"
    assert exc_info.value.error_type == RelationshipErrorType.STORE_ERROR
    assert "store unreachable" in exc_info.value.details["error"]


def test_store_failure_during_create() -> None:
    """Test a failing duplicate check aborts the create with a StoreError."""
    manager = RelationshipManager(FailingQueryStore())
    with pytest.raises(StoreError):
        manager.create_relationship(EntityRef(T, "task-1"), RelationshipType.TASK_BLOCKS, EntityRef(T, "task-2"))


def test_corrupt_row_raises_unknown_error(empty_store: MemoryStore) -> None:
    """Test unexpected failures surface as UnknownError."""
    empty_store.insert(
        RELATIONSHIPS_TABLE,
        {
            "source_type": "task",
            "source_id": "task-1",
            "relationship_type": "task_owns",
            "target_type": "task",
            "target_id": "task-2",
        },
    )
    manager = RelationshipManager(empty_store)

    with pytest.raises(UnknownError):
        manager.find_related_entities(T, "task-1")


def test_find_related_entities(manager: RelationshipManager) -> None:
    """Test finding outgoing relationships with optional filters."""
    outgoing = manager.find_related_entities(T, "task-1")
    assert {r.relationship_type for r in outgoing} == {
        RelationshipType.TASK_BELONGS_TO_PROJECT,
        RelationshipType.TASK_BELONGS_TO_WORKSTREAM,
        RelationshipType.TASK_BLOCKS,
    }
    assert all(r.source == EntityRef(T, "task-1") for r in outgoing)

    blocks = manager.find_related_entities(T, "task-1", relationship_type=RelationshipType.TASK_BLOCKS)
    assert [r.target.id for r in blocks] == ["task-2"]

    projects = manager.find_related_entities(T, "task-1", target_type=EntityType.PROJECT)
    assert [r.target.id for r in projects] == ["project-1"]


def test_find_related_entities_unknown_entity(manager: RelationshipManager) -> None:
    """Test an entity with no edges has no relationships."""
    assert manager.find_related_entities(T, "task-99") == []


def test_find_referencing_entities(manager: RelationshipManager) -> None:
    """Test finding incoming relationships with optional filters."""
    incoming = manager.find_referencing_entities(EntityType.PROJECT, "project-1")
    assert len(incoming) == 6
    assert all(r.target == EntityRef(EntityType.PROJECT, "project-1") for r in incoming)

    from_tasks = manager.find_referencing_entities(EntityType.PROJECT, "project-1", source_type=T)
    assert sorted(r.source.id for r in from_tasks) == ["task-1", "task-2", "task-3"]

    contained_by = manager.find_referencing_entities(
        EntityType.PROJECT, "project-1", relationship_type=RelationshipType.WORKSPACE_CONTAINS_PROJECT
    )
    assert [r.source.id for r in contained_by] == ["workspace-1"]


def test_get_relationship(manager: RelationshipManager) -> None:
    """Test getting relationships by ID."""
    relationship = manager.get_relationship("rel-001")
    assert relationship is not None
    assert relationship.relationship_type == RelationshipType.WORKSPACE_CONTAINS_PROJECT
    assert manager.get_relationship("rel-999") is None


def test_find_relationships_between_entities(manager: RelationshipManager) -> None:
    """Test both directions are returned, forward first."""
    between = manager.find_relationships_between_entities(T, "task-1", T, "task-2")
    assert [r.relationship_type for r in between] == [RelationshipType.TASK_BLOCKS, RelationshipType.TASK_BLOCKED_BY]

    reversed_between = manager.find_relationships_between_entities(T, "task-2", T, "task-1")
    assert [r.relationship_type for r in reversed_between] == [
        RelationshipType.TASK_BLOCKED_BY,
        RelationshipType.TASK_BLOCKS,
    ]

    assert manager.find_relationships_between_entities(T, "task-1", T, "task-5") == []


def test_update_relationship_metadata_merges(empty_store: MemoryStore) -> None:
    """Test metadata updates overwrite given keys and keep the rest."""
    manager = RelationshipManager(empty_store)
    relationship = manager.create_relationship(
        EntityRef(T, "task-1"), RelationshipType.TASK_BLOCKS, EntityRef(T, "task-2"), {"reason": "schema", "hard": True}
    )

    updated = manager.update_relationship_metadata(relationship.id, {"reason": "api", "note": "x"})

    assert updated.id == relationship.id
    assert updated.metadata == {"reason": "api", "hard": True, "note": "x"}
    assert manager.get_relationship(relationship.id).metadata == updated.metadata


def test_update_relationship_metadata_not_found(manager: RelationshipManager) -> None:
    """Test updating a missing relationship fails."""
    with pytest.raises(NotFoundError) as exc_info:
        manager.update_relationship_metadata("rel-999", {"a": 1})
    assert exc_info.value.error_type == RelationshipErrorType.NOT_FOUND


def test_delete_relationship_removes_inverse(manager: RelationshipManager) -> None:
    """Test deleting a relationship also deletes its reverse edge."""
    forward = manager.find_relationships_between_entities(T, "task-1", T, "task-2")[0]
    assert forward.relationship_type == RelationshipType.TASK_BLOCKS

    assert manager.delete_relationship(forward.id) is True

    assert manager.get_relationship(forward.id) is None
    assert manager.find_relationships_between_entities(T, "task-1", T, "task-2") == []


def test_delete_missing_relationship(manager: RelationshipManager, store: MemoryStore) -> None:
    """Test deleting a missing relationship returns False and changes nothing."""
    before = len(store.query(RELATIONSHIPS_TABLE))
    assert manager.delete_relationship("rel-999") is False
    assert len(store.query(RELATIONSHIPS_TABLE)) == before


def test_inverse_deletion_failure_is_tolerated() -> None:
    """Test a failed reverse delete does not fail the delete."""
    store = FailingSecondDeleteStore()
    manager = RelationshipManager(store)
    relationship = manager.create_relationship(EntityRef(T, "task-1"), RelationshipType.TASK_BLOCKS, EntityRef(T, "task-2"))

    assert manager.delete_relationship(relationship.id) is True
    assert manager.get_relationship(relationship.id) is None
    assert len(store.query(RELATIONSHIPS_TABLE)) == 1


def test_delete_entity_relationships(manager: RelationshipManager) -> None:
    """Test every edge touching an entity is deleted and counted."""
    assert manager.delete_entity_relationships(T, "task-1") == 6

    assert manager.find_related_entities(T, "task-1") == []
    assert manager.find_referencing_entities(T, "task-1") == []
    # Unrelated edges survive.
    assert manager.find_relationships_between_entities(T, "task-2", T, "task-3")


def test_delete_entity_relationships_without_edges(manager: RelationshipManager) -> None:
    """Test deleting relationships of an unconnected entity."""
    assert manager.delete_entity_relationships(T, "task-99") == 0


def test_update_relationship_metadata_with_none(manager: RelationshipManager) -> None:
    """Test a missing metadata update leaves the relationship unchanged."""
    relationship = manager.update_relationship_metadata("rel-001", {"order": 1})

    updated = manager.update_relationship_metadata(relationship.id, None)

    assert updated.metadata == {"order": 1}
