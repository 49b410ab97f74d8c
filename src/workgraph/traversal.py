"""Graph traversal: breadth-first walks and path finding over relationships."""

from collections import deque
from dataclasses import replace
from typing import Any

import structlog

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
from workgraph.schema import (
    CONTAINMENT_RELATIONSHIP_TYPES,
    DEPENDENCY_RELATIONSHIP_TYPES,
    UPWARD_RELATIONSHIP_TYPES,
    table_for,
)
from workgraph.store import Store

logger = structlog.get_logger()

# Which bucket of RelatedTasks a dependency edge lands in, by edge direction.
_OUTGOING_TASK_BUCKETS = {
    RelationshipType.TASK_BLOCKS: "blocking_tasks",
    RelationshipType.TASK_BLOCKED_BY: "blocked_by_tasks",
    RelationshipType.TASK_RELATED_TO: "related_tasks",
}
_INCOMING_TASK_BUCKETS = {
    RelationshipType.TASK_BLOCKS: "blocked_by_tasks",
    RelationshipType.TASK_BLOCKED_BY: "blocking_tasks",
    RelationshipType.TASK_RELATED_TO: "related_tasks",
}


class GraphTraversal:
    """Traverses the relationship graph through a RelationshipManager.

    All traversal state (queue, visited set) lives in the call that uses it,
    so one instance can serve concurrent traversals against the same store.
    """

    def __init__(self, relationships: RelationshipManager, store: Store | None = None) -> None:
        """Initialize graph traversal.

        Args:
            relationships: Manager used for every relationship query
            store: Store used to hydrate entity data (defaults to the manager's store)
        """
        self.relationships = relationships
        self.store = store or relationships.store

    def traverse_upward(
        self,
        entity_type: EntityType,
        entity_id: str,
        options: TraversalOptions | None = None,
    ) -> list[TraversalResult]:
        """Walk from an entity to the entities it belongs to, breadth-first.

        Follows membership edges (task to workstream, workstream to project,
        project to workspace) unless ``options.relationship_types`` says otherwise.
        The first result is always the start entity at depth 0.
        """
        options = options or TraversalOptions()
        logger.debug("Traversing upward", entity_type=EntityType(entity_type).value, entity_id=entity_id)
        return self._traverse(EntityRef(EntityType(entity_type), entity_id), options, UPWARD_RELATIONSHIP_TYPES)

    def traverse_downward(
        self,
        entity_type: EntityType,
        entity_id: str,
        options: TraversalOptions | None = None,
    ) -> list[TraversalResult]:
        """Walk from an entity to the entities it contains, breadth-first.

        Follows containment edges (workspace to project, project to workstream
        and task, workstream to task) unless ``options.relationship_types`` says
        otherwise. The first result is always the start entity at depth 0.
        """
        options = options or TraversalOptions()
        logger.debug("Traversing downward", entity_type=EntityType(entity_type).value, entity_id=entity_id)
        return self._traverse(EntityRef(EntityType(entity_type), entity_id), options, CONTAINMENT_RELATIONSHIP_TYPES)

    def _traverse(
        self,
        start: EntityRef,
        options: TraversalOptions,
        default_types: tuple[RelationshipType, ...],
    ) -> list[TraversalResult]:
        # An empty list is an explicit filter that matches no edge.
        allowed = set(default_types if options.relationship_types is None else options.relationship_types)
        kept = set(options.target_entity_types) if options.target_entity_types else None

        results = [
            TraversalResult(
                entity=start,
                depth=0,
                path=[],
                entity_data=self._hydrate(start) if options.include_entity_data else None,
            )
        ]
        visited = {start}
        queue: deque[tuple[EntityRef, int, list[Relationship]]] = deque([(start, 0, [])])

        while queue:
            current, depth, path = queue.popleft()
            if depth >= options.max_depth:
                continue

            # Fetch unfiltered and filter here, the store only knows equality.
            for relationship in self.relationships.find_related_entities(current.type, current.id):
                if relationship.relationship_type not in allowed:
                    continue

                neighbor = relationship.target
                if neighbor in visited:
                    continue
                visited.add(neighbor)

                new_path = path + [relationship]
                if kept is None or neighbor.type in kept:
                    results.append(
                        TraversalResult(
                            entity=neighbor,
                            depth=depth + 1,
                            path=new_path,
                            entity_data=self._hydrate(neighbor) if options.include_entity_data else None,
                        )
                    )
                queue.append((neighbor, depth + 1, new_path))

        logger.debug("Traversal complete", start=str(start), count=len(results))
        return results

    def find_paths(
        self,
        source_type: EntityType,
        source_id: str,
        target_type: EntityType,
        target_id: str,
        options: PathFindingOptions | None = None,
    ) -> list[Path]:
        """Find paths between two entities, shortest first.

        The search ignores edge direction, following both outgoing and incoming
        relationships, but every relationship in a returned path keeps the
        direction it is stored with.
        """
        options = options or PathFindingOptions()
        source = EntityRef(EntityType(source_type), source_id)
        target = EntityRef(EntityType(target_type), target_id)
        allowed = set(options.relationship_types) if options.relationship_types is not None else None
        logger.debug(
            "Finding paths",
            source=str(source),
            target=str(target),
            max_depth=options.max_depth,
            max_paths=options.max_paths,
        )

        paths: list[Path] = []
        visited = {source}
        queue: deque[tuple[EntityRef, list[Relationship]]] = deque([(source, [])])

        while queue and len(paths) < options.max_paths:
            current, path = queue.popleft()
            if len(path) >= options.max_depth:
                continue

            candidates = self.relationships.find_related_entities(current.type, current.id)
            candidates += self.relationships.find_referencing_entities(current.type, current.id)

            for relationship in candidates:
                if allowed is not None and relationship.relationship_type not in allowed:
                    continue

                neighbor = relationship.other_end(current)
                new_path = path + [relationship]

                if neighbor == target:
                    paths.append(Path(relationships=new_path))
                    if len(paths) >= options.max_paths:
                        break
                    continue

                if neighbor in visited:
                    continue
                visited.add(neighbor)
                queue.append((neighbor, new_path))

        paths.sort(key=lambda p: p.length)
        logger.debug("Path finding complete", source=str(source), target=str(target), count=len(paths))
        return paths[: options.max_paths]

    def get_entity_data(self, entity_type: EntityType, entity_id: str) -> dict[str, Any] | None:
        """Fetch the full row of an entity.

        Returns None when the entity does not exist or the lookup fails, so a
        traversal survives edges that point at deleted entities.
        """
        try:
            row = self.store.get_by_id(table_for(EntityType(entity_type)), entity_id)
        except Exception as e:
            logger.warning("Failed to fetch entity data", entity_type=str(entity_type), entity_id=entity_id, error=str(e))
            return None

        if row is None:
            logger.debug("Entity data not found", entity_type=str(entity_type), entity_id=entity_id)
        return row

    def _hydrate(self, entity: EntityRef) -> dict[str, Any] | None:
        return self.get_entity_data(entity.type, entity.id)

    def find_entity_ancestry(
        self,
        entity_type: EntityType,
        entity_id: str,
        options: TraversalOptions | None = None,
    ) -> list[dict[str, Any]]:
        """Return the entities an entity belongs to, nearest ancestor first."""
        start = EntityRef(EntityType(entity_type), entity_id)
        options = replace(options or TraversalOptions(), include_entity_data=True)

        ancestry = [result for result in self.traverse_upward(start.type, start.id, options) if result.entity != start]
        ancestry.sort(key=lambda result: result.depth)
        return [result.entity_data for result in ancestry if result.entity_data is not None]

    def find_entities_in_workspace(
        self,
        workspace_id: str,
        entity_type: EntityType,
        options: TraversalOptions | None = None,
    ) -> list[dict[str, Any]]:
        """Return every entity of a type contained, at any depth, in a workspace."""
        entity_type = EntityType(entity_type)
        options = replace(options or TraversalOptions(), include_entity_data=True, target_entity_types=[entity_type])

        results = self.traverse_downward(EntityType.WORKSPACE, workspace_id, options)
        return [
            result.entity_data
            for result in results
            if result.entity.type == entity_type and result.entity_data is not None
        ]

    def find_related_tasks(
        self,
        task_id: str,
        relationship_types: list[RelationshipType] | tuple[RelationshipType, ...] = DEPENDENCY_RELATIONSHIP_TYPES,
    ) -> RelatedTasks:
        """Classify the tasks connected to a task by dependency edges.

        An outgoing ``task_blocks`` edge and an incoming ``task_blocked_by`` edge
        both mean the other task is blocked by this one, so it lands in
        ``blocking_tasks``; the reverse pair lands in ``blocked_by_tasks``.
        ``task_related_to`` lands in ``related_tasks`` either way. Each task
        appears at most once per bucket; tasks without data are skipped.
        """
        allowed = set(relationship_types)
        related = RelatedTasks()
        seen: dict[str, set[str]] = {"blocking_tasks": set(), "blocked_by_tasks": set(), "related_tasks": set()}

        outgoing = self.relationships.find_related_entities(EntityType.TASK, task_id, target_type=EntityType.TASK)
        incoming = self.relationships.find_referencing_entities(EntityType.TASK, task_id, source_type=EntityType.TASK)

        edges = [(rel, rel.target, _OUTGOING_TASK_BUCKETS) for rel in outgoing]
        edges += [(rel, rel.source, _INCOMING_TASK_BUCKETS) for rel in incoming]

        for relationship, other, buckets in edges:
            if relationship.relationship_type not in allowed:
                continue
            bucket = buckets.get(relationship.relationship_type)
            if bucket is None or other.id in seen[bucket]:
                continue

            task_data = self.get_entity_data(EntityType.TASK, other.id)
            if task_data is None:
                continue

            seen[bucket].add(other.id)
            getattr(related, bucket).append(task_data)

        logger.debug(
            "Related tasks found",
            task_id=task_id,
            blocking=len(related.blocking_tasks),
            blocked_by=len(related.blocked_by_tasks),
            related=len(related.related_tasks),
        )
        return related
