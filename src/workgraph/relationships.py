"""Relationship manager: validated CRUD over typed edges with inverse maintenance."""

import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

import structlog

from workgraph.errors import (
    DuplicateError,
    NotFoundError,
    RelationshipError,
    StoreError,
    UnknownError,
    ValidationError,
)
from workgraph.models import EntityRef, EntityType, Relationship, RelationshipType
from workgraph.schema import RELATIONSHIPS_TABLE, inverse_of, is_allowed
from workgraph.store import Store

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def _store_errors(operation: str, **context: Any) -> Iterator[None]:
    """Wrap store failures in a StoreError naming the operation."""
    try:
        yield
    except RelationshipError:
        raise
    except Exception as e:
        logger.error("Store operation failed", operation=operation, error=str(e), **context)
        raise StoreError(f"Failed to {operation}: {e}", operation=operation, details={"error": str(e), **context}) from e


def _guarded(operation: str) -> Callable[[F], F]:
    """Let relationship errors through and turn anything else into an UnknownError."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except RelationshipError:
                raise
            except Exception as e:
                logger.error("Unexpected error", operation=operation, error=str(e))
                raise UnknownError(f"Unexpected error during {operation}: {e}", {"error": str(e)}) from e

        return wrapper  # type: ignore[return-value]

    return decorator


class RelationshipManager:
    """Creates, reads, updates and deletes relationships in a store.

    Every relationship type with a declared inverse gets its reverse edge
    created and deleted alongside it. Inverse maintenance is best-effort: the
    forward write and the inverse write are not atomic, and a failure of the
    inverse write is logged without failing the operation.
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @_guarded("create relationship")
    def create_relationship(
        self,
        source: EntityRef | None,
        relationship_type: RelationshipType | str | None,
        target: EntityRef | None,
        metadata: dict[str, Any] | None = None,
    ) -> Relationship:
        """Create a relationship between two entities.

        Args:
            source: Entity the edge starts at
            relationship_type: Type of the edge
            target: Entity the edge points to
            metadata: Optional key-value data attached to the edge

        Returns:
            The created relationship

        Raises:
            ValidationError: Missing fields, self-relationship or disallowed type pair
            DuplicateError: An identical relationship already exists
            StoreError: The store failed to check or insert the relationship
        """
        source, rel_type, target = self._validate(source, relationship_type, target)
        logger.info("Creating relationship", source=str(source), relationship_type=rel_type.value, target=str(target))

        existing = self._find_existing(source, rel_type, target)
        if existing is not None:
            logger.info("Relationship already exists", relationship_id=existing.id)
            raise DuplicateError("Relationship already exists", {"relationship": existing.to_row()})

        row = {
            "source_type": source.type.value,
            "source_id": source.id,
            "relationship_type": rel_type.value,
            "target_type": target.type.value,
            "target_id": target.id,
            "metadata": dict(metadata or {}),
        }
        with _store_errors("create relationship", source=str(source), target=str(target)):
            stored = self.store.insert(RELATIONSHIPS_TABLE, row)

        relationship = Relationship.from_row(stored)
        logger.info("Relationship created", relationship_id=relationship.id)

        self._create_inverse_relationship(relationship)
        return relationship

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @_guarded("find related entities")
    def find_related_entities(
        self,
        source_type: EntityType,
        source_id: str,
        relationship_type: RelationshipType | None = None,
        target_type: EntityType | None = None,
    ) -> list[Relationship]:
        """Find relationships where the given entity is the source."""
        filters: dict[str, Any] = {"source_type": EntityType(source_type).value, "source_id": source_id}
        if relationship_type:
            filters["relationship_type"] = RelationshipType(relationship_type).value
        if target_type:
            filters["target_type"] = EntityType(target_type).value
        return self._query("find related entities", filters)

    @_guarded("find referencing entities")
    def find_referencing_entities(
        self,
        target_type: EntityType,
        target_id: str,
        relationship_type: RelationshipType | None = None,
        source_type: EntityType | None = None,
    ) -> list[Relationship]:
        """Find relationships where the given entity is the target."""
        filters: dict[str, Any] = {"target_type": EntityType(target_type).value, "target_id": target_id}
        if relationship_type:
            filters["relationship_type"] = RelationshipType(relationship_type).value
        if source_type:
            filters["source_type"] = EntityType(source_type).value
        return self._query("find referencing entities", filters)

    @_guarded("get relationship")
    def get_relationship(self, relationship_id: str) -> Relationship | None:
        """Get a relationship by ID, or None if it does not exist."""
        with _store_errors("get relationship", relationship_id=relationship_id):
            row = self.store.get_by_id(RELATIONSHIPS_TABLE, relationship_id)
        if row is None:
            logger.debug("Relationship not found", relationship_id=relationship_id)
            return None
        return Relationship.from_row(row)

    @_guarded("find relationships between entities")
    def find_relationships_between_entities(
        self,
        entity1_type: EntityType,
        entity1_id: str,
        entity2_type: EntityType,
        entity2_id: str,
    ) -> list[Relationship]:
        """Find all relationships between two entities, in either direction."""
        first = EntityRef(EntityType(entity1_type), entity1_id)
        second = EntityRef(EntityType(entity2_type), entity2_id)

        forward = self._query("find relationships between entities", self._endpoint_filters(first, second))
        backward = self._query("find relationships between entities", self._endpoint_filters(second, first))
        logger.debug(
            "Found relationships between entities",
            first=str(first),
            second=str(second),
            count=len(forward) + len(backward),
        )
        return forward + backward

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @_guarded("update relationship metadata")
    def update_relationship_metadata(self, relationship_id: str, metadata: dict[str, Any] | None) -> Relationship:
        """Merge new metadata into a relationship.

        Keys in ``metadata`` overwrite existing keys, other existing keys are kept.
        None is treated as an empty update.

        Raises:
            NotFoundError: The relationship does not exist
        """
        existing = self.get_relationship(relationship_id)
        if existing is None:
            raise NotFoundError(f"Relationship not found: {relationship_id}", {"relationship_id": relationship_id})

        metadata = metadata or {}
        merged = {**existing.metadata, **metadata}
        logger.info("Updating relationship metadata", relationship_id=relationship_id, keys=list(metadata))
        with _store_errors("update relationship metadata", relationship_id=relationship_id):
            row = self.store.update(RELATIONSHIPS_TABLE, relationship_id, {"metadata": merged})
        return Relationship.from_row(row)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    @_guarded("delete relationship")
    def delete_relationship(self, relationship_id: str) -> bool:
        """Delete a relationship and, best-effort, its inverse.

        Returns:
            True if the relationship was deleted, False if it did not exist
        """
        relationship = self.get_relationship(relationship_id)
        if relationship is None:
            logger.info("Relationship to delete not found", relationship_id=relationship_id)
            return False

        with _store_errors("delete relationship", relationship_id=relationship_id):
            self.store.delete(RELATIONSHIPS_TABLE, relationship_id)
        logger.info("Relationship deleted", relationship_id=relationship_id)

        self._delete_inverse_relationship(relationship)
        return True

    @_guarded("delete entity relationships")
    def delete_entity_relationships(self, entity_type: EntityType, entity_id: str) -> int:
        """Delete every relationship where the entity is the source or the target.

        Returns:
            Number of relationships deleted
        """
        outgoing = self.find_related_entities(entity_type, entity_id)
        incoming = self.find_referencing_entities(entity_type, entity_id)
        logger.info(
            "Deleting entity relationships",
            entity_type=EntityType(entity_type).value,
            entity_id=entity_id,
            outgoing=len(outgoing),
            incoming=len(incoming),
        )

        deleted = 0
        for relationship in outgoing + incoming:
            with _store_errors("delete entity relationships", relationship_id=relationship.id):
                self.store.delete(RELATIONSHIPS_TABLE, relationship.id)
            deleted += 1

        logger.info("Entity relationships deleted", entity_id=entity_id, count=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(
        self,
        source: EntityRef | None,
        relationship_type: RelationshipType | str | None,
        target: EntityRef | None,
    ) -> tuple[EntityRef, RelationshipType, EntityRef]:
        """Check required fields, self-relationships and the type-pair table."""
        if (
            source is None
            or target is None
            or not relationship_type
            or not source.type
            or not source.id
            or not target.type
            or not target.id
        ):
            raise ValidationError(
                "Missing required fields for relationship",
                {"source": source, "relationship_type": relationship_type, "target": target},
            )

        try:
            source = EntityRef(EntityType(source.type), str(source.id))
            target = EntityRef(EntityType(target.type), str(target.id))
            rel_type = RelationshipType(relationship_type)
        except ValueError as e:
            raise ValidationError(f"Invalid relationship field: {e}") from e

        if source == target:
            raise ValidationError("Source and target cannot be the same entity", {"entity": str(source)})

        if not is_allowed(rel_type, source.type, target.type):
            raise ValidationError(
                f"Invalid entity types for relationship type {rel_type.value}",
                {
                    "relationship_type": rel_type.value,
                    "source_type": source.type.value,
                    "target_type": target.type.value,
                },
            )

        return source, rel_type, target

    @staticmethod
    def _endpoint_filters(source: EntityRef, target: EntityRef) -> dict[str, Any]:
        return {
            "source_type": source.type.value,
            "source_id": source.id,
            "target_type": target.type.value,
            "target_id": target.id,
        }

    def _query(self, operation: str, filters: dict[str, Any]) -> list[Relationship]:
        with _store_errors(operation, filters=filters):
            rows = self.store.query(RELATIONSHIPS_TABLE, filters)
        return [Relationship.from_row(row) for row in rows]

    def _find_existing(
        self,
        source: EntityRef,
        relationship_type: RelationshipType,
        target: EntityRef,
    ) -> Relationship | None:
        """Find the relationship with exactly these endpoints and type."""
        filters = self._endpoint_filters(source, target)
        filters["relationship_type"] = relationship_type.value
        matches = self._query("find existing relationship", filters)
        return matches[0] if matches else None

    def _create_inverse_relationship(self, relationship: Relationship) -> None:
        """Create the reverse edge for a relationship whose type declares one.

        Best-effort: failures are logged and never raised.
        """
        inverse_type = inverse_of(relationship.relationship_type)
        if inverse_type is None:
            return

        try:
            # Also covers symmetric types, whose inverse is the same type reversed.
            existing = self._find_existing(relationship.target, inverse_type, relationship.source)
            if existing is not None:
                logger.debug("Inverse relationship already exists", relationship_id=existing.id)
                return

            stored = self.store.insert(
                RELATIONSHIPS_TABLE,
                {
                    "source_type": relationship.target.type.value,
                    "source_id": relationship.target.id,
                    "relationship_type": inverse_type.value,
                    "target_type": relationship.source.type.value,
                    "target_id": relationship.source.id,
                    "metadata": dict(relationship.metadata),
                },
            )
            logger.debug("Inverse relationship created", relationship_id=stored.get("id"), of=relationship.id)
        except Exception as e:
            logger.warning(
                "Failed to create inverse relationship",
                relationship_id=relationship.id,
                inverse_type=inverse_type.value,
                error=str(e),
            )

    def _delete_inverse_relationship(self, relationship: Relationship) -> None:
        """Delete the reverse edge of a deleted relationship.

        Best-effort: failures are logged and never raised.
        """
        inverse_type = inverse_of(relationship.relationship_type)
        if inverse_type is None:
            return

        try:
            inverse = self._find_existing(relationship.target, inverse_type, relationship.source)
            if inverse is None:
                logger.debug("No inverse relationship to delete", relationship_id=relationship.id)
                return

            self.store.delete(RELATIONSHIPS_TABLE, inverse.id)
            logger.debug("Inverse relationship deleted", relationship_id=inverse.id, of=relationship.id)
        except Exception as e:
            logger.warning(
                "Failed to delete inverse relationship",
                relationship_id=relationship.id,
                inverse_type=inverse_type.value,
                error=str(e),
            )
