"""CLI for workgraph."""

import sys
from typing import Annotated, Any, Literal

import structlog
from cyclopts import App, Parameter

from workgraph.config import get_config
from workgraph.config_commands import config_app
from workgraph.errors import RelationshipError
from workgraph.graph_commands import graph_app
from workgraph.link_commands import link_app
from workgraph.models import EntityType, Relationship
from workgraph.relationships import RelationshipManager
from workgraph.schema import table_for
from workgraph.store import Store
from workgraph.stores import MemoryStore, YamlFileStore
from workgraph.traversal import GraphTraversal

logger = structlog.get_logger()

app = App(
    help="workgraph - Relationship graph for workspaces, projects, workstreams and tasks",
)

app.command(link_app)
app.command(graph_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_store() -> Store:
    """Get the configured store."""
    config = get_config()
    store_type = config.get("store")

    if store_type == "yaml":
        return YamlFileStore(config.get("yaml.path"))
    elif store_type == "memory":
        logger.warning("Using memory store, changes will not be persisted")
        return MemoryStore()
    else:
        raise ValueError(f"Unknown store: {store_type}")


def get_manager() -> RelationshipManager:
    """Get a relationship manager over the configured store."""
    return RelationshipManager(get_store())


def get_traversal() -> GraphTraversal:
    """Get a graph traversal over the configured store."""
    return GraphTraversal(get_manager())


def format_relationship(relationship: Relationship) -> str:
    """Render a relationship as a single line."""
    return f"{relationship.source} --[{relationship.relationship_type.value}]--> {relationship.target}"


def format_entity(row: dict[str, Any]) -> str:
    """Render an entity row as a single line."""
    label = row.get("name") or row.get("title") or ""
    return f"{row.get('id')}: {label}" if label else str(row.get("id"))


@app.command
def add(entity_type: EntityType, entity_id: str, name: str = "", description: str = "") -> None:
    """Add an entity."""
    store = get_store()
    table = table_for(entity_type)

    if store.get_by_id(table, entity_id) is not None:
        raise ValueError(f"{entity_type.value} {entity_id} already exists")

    row = store.insert(table, {"id": entity_id, "name": name, "description": description})
    print(f"Added {entity_type.value} {format_entity(row)}")


@app.command
def show(entity_type: EntityType, entity_id: str) -> None:
    """Show an entity and its relationships."""
    traversal = get_traversal()
    row = traversal.get_entity_data(entity_type, entity_id)

    if row is None:
        print(f"{entity_type.value} {entity_id} not found")
    else:
        print(f"{entity_type.value.title()}: {row.get('id')}")
        for key, value in row.items():
            if key != "id" and value not in (None, ""):
                print(f"{key.replace('_', ' ').title()}: {value}")

    outgoing = traversal.relationships.find_related_entities(entity_type, entity_id)
    incoming = traversal.relationships.find_referencing_entities(entity_type, entity_id)
    if outgoing or incoming:
        print("\nRelationships:")
        for relationship in outgoing + incoming:
            print(f"  {relationship.id} {format_relationship(relationship)}")


@app.command
def remove(entity_type: EntityType, entity_id: str) -> None:
    """Remove an entity together with all of its relationships."""
    manager = get_manager()
    deleted = manager.delete_entity_relationships(entity_type, entity_id)

    table = table_for(entity_type)
    if manager.store.get_by_id(table, entity_id) is not None:
        manager.store.delete(table, entity_id)
    print(f"Removed {entity_type.value} {entity_id} and {deleted} relationship(s)")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    try:
        app(tokens)
    except RelationshipError as e:
        print(f"Error ({e.error_type.value}): {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    app.meta()
