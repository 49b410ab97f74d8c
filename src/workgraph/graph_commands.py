"""Graph traversal commands for workgraph CLI."""

from cyclopts import App

from workgraph.models import EntityType, PathFindingOptions, RelationshipType, TraversalOptions, TraversalResult

graph_app = App(name="graph", help="Traverse the relationship graph")


def _print_results(results: list[TraversalResult]) -> None:
    from workgraph.cli import format_entity

    for result in results:
        indent = "  " * result.depth
        label = f" {format_entity(result.entity_data)}" if result.entity_data else ""
        print(f"{indent}{result.entity.type.value} {result.entity.id}{label} (depth {result.depth})")


@graph_app.command
def up(
    entity_type: EntityType,
    entity_id: str,
    max_depth: int | None = None,
    data: bool = False,
) -> None:
    """Show the entities an entity belongs to."""
    from workgraph.cli import get_traversal
    from workgraph.config import get_config

    options = TraversalOptions(
        max_depth=max_depth if max_depth is not None else get_config().get_int("traversal.max_depth"),
        include_entity_data=data,
    )
    _print_results(get_traversal().traverse_upward(entity_type, entity_id, options))


@graph_app.command
def down(
    entity_type: EntityType,
    entity_id: str,
    max_depth: int | None = None,
    only: EntityType | None = None,
    data: bool = False,
) -> None:
    """Show the entities an entity contains."""
    from workgraph.cli import get_traversal
    from workgraph.config import get_config

    options = TraversalOptions(
        max_depth=max_depth if max_depth is not None else get_config().get_int("traversal.max_depth"),
        include_entity_data=data,
        target_entity_types=[only] if only else None,
    )
    _print_results(get_traversal().traverse_downward(entity_type, entity_id, options))


@graph_app.command
def paths(
    source_type: EntityType,
    source_id: str,
    target_type: EntityType,
    target_id: str,
    max_depth: int | None = None,
    max_paths: int | None = None,
    type: list[RelationshipType] | None = None,
) -> None:
    """Find paths between two entities, shortest first."""
    from workgraph.cli import format_relationship, get_traversal
    from workgraph.config import get_config

    config = get_config()
    options = PathFindingOptions(
        max_depth=max_depth if max_depth is not None else config.get_int("paths.max_depth"),
        max_paths=max_paths if max_paths is not None else config.get_int("paths.max_paths"),
        relationship_types=type or None,
    )
    found = get_traversal().find_paths(source_type, source_id, target_type, target_id, options)

    if not found:
        print("No paths found")
        return

    print(f"Found {len(found)} path(s):\n")
    for i, path in enumerate(found, 1):
        print(f"{i}. length {path.length}")
        for relationship in path.relationships:
            print(f"     {format_relationship(relationship)}")


@graph_app.command
def ancestry(entity_type: EntityType, entity_id: str) -> None:
    """Show the ancestors of an entity, nearest first."""
    from workgraph.cli import format_entity, get_traversal

    ancestors = get_traversal().find_entity_ancestry(entity_type, entity_id)
    if not ancestors:
        print(f"No ancestors found for {entity_type.value} {entity_id}")
        return

    for row in ancestors:
        print(f"  - {format_entity(row)}")


@graph_app.command
def workspace(workspace_id: str, entity_type: EntityType) -> None:
    """List every entity of a type inside a workspace."""
    from workgraph.cli import format_entity, get_traversal

    entities = get_traversal().find_entities_in_workspace(workspace_id, entity_type)
    print(f"Found {len(entities)} {entity_type.value}(s) in workspace {workspace_id}:\n")
    for row in entities:
        print(f"  - {format_entity(row)}")


@graph_app.command
def related(task_id: str) -> None:
    """Show tasks blocking, blocked by, or related to a task."""
    from workgraph.cli import format_entity, get_traversal

    result = get_traversal().find_related_tasks(task_id)
    sections = {
        "Blocking": result.blocking_tasks,
        "Blocked By": result.blocked_by_tasks,
        "Related": result.related_tasks,
    }

    if not any(sections.values()):
        print(f"No related tasks found for task {task_id}")
        return

    for title, tasks in sections.items():
        if not tasks:
            continue
        print(f"{title}:")
        for row in tasks:
            print(f"  - {format_entity(row)}")
        print()
