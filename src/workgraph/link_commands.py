"""Relationship management commands for workgraph CLI."""

from cyclopts import App

from workgraph.models import EntityRef, EntityType, RelationshipType

link_app = App(name="link", help="Manage relationships between entities")


def parse_metadata(meta: str) -> dict[str, str]:
    """Parse ``key:value,key2:value2`` into a dict; bare keys map to an empty string."""
    metadata = {}
    if meta:
        for item in meta.split(","):
            item = item.strip()
            if not item:
                continue
            if ":" in item:
                key, value = item.split(":", 1)
                metadata[key.strip()] = value.strip()
            else:
                metadata[item] = ""
    return metadata


@link_app.command
def add(
    source_type: EntityType,
    source_id: str,
    relationship_type: RelationshipType,
    target_type: EntityType,
    target_id: str,
    meta: str = "",
) -> None:
    """Add a relationship (its inverse is added automatically)."""
    from workgraph.cli import format_relationship, get_manager

    manager = get_manager()
    relationship = manager.create_relationship(
        EntityRef(source_type, source_id),
        relationship_type,
        EntityRef(target_type, target_id),
        metadata=parse_metadata(meta),
    )
    print(f"Added relationship {relationship.id}: {format_relationship(relationship)}")


@link_app.command
def remove(relationship_id: str) -> None:
    """Remove a relationship (and its inverse) by ID."""
    from workgraph.cli import get_manager

    manager = get_manager()
    if manager.delete_relationship(relationship_id):
        print(f"Removed relationship {relationship_id}")
    else:
        print(f"Relationship {relationship_id} not found")


@link_app.command
def update(relationship_id: str, meta: str) -> None:
    """Merge metadata into a relationship."""
    from workgraph.cli import get_manager

    manager = get_manager()
    relationship = manager.update_relationship_metadata(relationship_id, parse_metadata(meta))
    print(f"Updated relationship {relationship.id}: {relationship.metadata}")


@link_app.command(name="list")
def list_links(
    entity_type: EntityType,
    entity_id: str,
    type: RelationshipType | None = None,
) -> None:
    """List relationships starting at or pointing to an entity."""
    from workgraph.cli import format_relationship, get_manager

    manager = get_manager()
    outgoing = manager.find_related_entities(entity_type, entity_id, relationship_type=type)
    incoming = manager.find_referencing_entities(entity_type, entity_id, relationship_type=type)

    if not outgoing and not incoming:
        print(f"No relationships found for {entity_type.value} {entity_id}")
        return

    print(f"Relationships for {entity_type.value} {entity_id}:\n")
    for relationship in outgoing + incoming:
        print(f"  {relationship.id} {format_relationship(relationship)}")


@link_app.command
def between(
    first_type: EntityType,
    first_id: str,
    second_type: EntityType,
    second_id: str,
) -> None:
    """List relationships between two entities, in either direction."""
    from workgraph.cli import format_relationship, get_manager

    manager = get_manager()
    relationships = manager.find_relationships_between_entities(first_type, first_id, second_type, second_id)

    if not relationships:
        print("No relationships found")
        return

    for relationship in relationships:
        print(f"  {relationship.id} {format_relationship(relationship)}")
