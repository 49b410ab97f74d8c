"""Shared fixtures: a small workspace/project/workstream/task graph."""

from typing import Any

import pytest
import structlog

from workgraph.cli import configure_logging
from workgraph.models import EntityType, RelationshipType
from workgraph.relationships import RelationshipManager
from workgraph.stores import MemoryStore
from workgraph.traversal import GraphTraversal

CREATED_AT = "2025-04-14T12:00:00+00:00"

WORKSPACES = [
    {"id": "workspace-1", "name": "Convoy Development"},
    {"id": "workspace-2", "name": "Personal Projects"},
]
PROJECTS = [
    {"id": "project-1", "workspace_id": "workspace-1", "name": "Data Architecture", "status": "active"},
    {"id": "project-2", "workspace_id": "workspace-1", "name": "UI Components", "status": "active"},
    {"id": "project-3", "workspace_id": "workspace-2", "name": "Learning Project", "status": "active"},
]
WORKSTREAMS = [
    {"id": "workstream-1", "project_id": "project-1", "name": "Database Implementation", "progress": 0.25},
    {"id": "workstream-2", "project_id": "project-1", "name": "Local Storage", "progress": 0},
    {"id": "workstream-3", "project_id": "project-2", "name": "Core Components", "progress": 0.5},
]
TASKS = [
    {"id": "task-1", "project_id": "project-1", "workstream_id": "workstream-1", "title": "Database Schema Design"},
    {"id": "task-2", "project_id": "project-1", "workstream_id": "workstream-1", "title": "Knowledge Graph"},
    {"id": "task-3", "project_id": "project-1", "workstream_id": "workstream-2", "title": "Local Models"},
    {"id": "task-4", "project_id": "project-2", "workstream_id": "workstream-3", "title": "Button Component"},
    {"id": "task-5", "project_id": "project-2", "workstream_id": None, "title": "Project Planning"},
]

W, P, S, T = EntityType.WORKSPACE, EntityType.PROJECT, EntityType.WORKSTREAM, EntityType.TASK
R = RelationshipType

# (source type, source id, forward type, target type, target id, inverse type)
EDGES = [
    (W, "workspace-1", R.WORKSPACE_CONTAINS_PROJECT, P, "project-1", R.PROJECT_BELONGS_TO_WORKSPACE),
    (W, "workspace-1", R.WORKSPACE_CONTAINS_PROJECT, P, "project-2", R.PROJECT_BELONGS_TO_WORKSPACE),
    (W, "workspace-2", R.WORKSPACE_CONTAINS_PROJECT, P, "project-3", R.PROJECT_BELONGS_TO_WORKSPACE),
    (P, "project-1", R.PROJECT_CONTAINS_WORKSTREAM, S, "workstream-1", R.WORKSTREAM_BELONGS_TO_PROJECT),
    (P, "project-1", R.PROJECT_CONTAINS_WORKSTREAM, S, "workstream-2", R.WORKSTREAM_BELONGS_TO_PROJECT),
    (P, "project-2", R.PROJECT_CONTAINS_WORKSTREAM, S, "workstream-3", R.WORKSTREAM_BELONGS_TO_PROJECT),
    (P, "project-1", R.PROJECT_CONTAINS_TASK, T, "task-1", R.TASK_BELONGS_TO_PROJECT),
    (P, "project-1", R.PROJECT_CONTAINS_TASK, T, "task-2", R.TASK_BELONGS_TO_PROJECT),
    (P, "project-1", R.PROJECT_CONTAINS_TASK, T, "task-3", R.TASK_BELONGS_TO_PROJECT),
    (P, "project-2", R.PROJECT_CONTAINS_TASK, T, "task-4", R.TASK_BELONGS_TO_PROJECT),
    (P, "project-2", R.PROJECT_CONTAINS_TASK, T, "task-5", R.TASK_BELONGS_TO_PROJECT),
    (S, "workstream-1", R.WORKSTREAM_CONTAINS_TASK, T, "task-1", R.TASK_BELONGS_TO_WORKSTREAM),
    (S, "workstream-1", R.WORKSTREAM_CONTAINS_TASK, T, "task-2", R.TASK_BELONGS_TO_WORKSTREAM),
    (S, "workstream-2", R.WORKSTREAM_CONTAINS_TASK, T, "task-3", R.TASK_BELONGS_TO_WORKSTREAM),
    (S, "workstream-3", R.WORKSTREAM_CONTAINS_TASK, T, "task-4", R.TASK_BELONGS_TO_WORKSTREAM),
    (T, "task-1", R.TASK_BLOCKS, T, "task-2", R.TASK_BLOCKED_BY),
    (T, "task-2", R.TASK_BLOCKS, T, "task-3", R.TASK_BLOCKED_BY),
    (T, "task-4", R.TASK_RELATED_TO, T, "task-5", R.TASK_RELATED_TO),
]


def relationship_rows() -> list[dict[str, Any]]:
    """Build relationship rows for every edge followed by its inverse."""
    rows = []
    for source_type, source_id, forward, target_type, target_id, inverse in EDGES:
        for s_type, s_id, rel_type, t_type, t_id in (
            (source_type, source_id, forward, target_type, target_id),
            (target_type, target_id, inverse, source_type, source_id),
        ):
            rows.append(
                {
                    "id": f"rel-{len(rows) + 1:03d}",
                    "source_type": s_type.value,
                    "source_id": s_id,
                    "relationship_type": rel_type.value,
                    "target_type": t_type.value,
                    "target_id": t_id,
                    "metadata": {},
                    "created_at": CREATED_AT,
                }
            )
    return rows


def graph_tables() -> dict[str, list[dict[str, Any]]]:
    """All fixture tables keyed by store table name."""
    return {
        "workspaces": WORKSPACES,
        "projects": PROJECTS,
        "workstreams": WORKSTREAMS,
        "tasks": TASKS,
        "relationships": relationship_rows(),
    }


@pytest.fixture
def store() -> MemoryStore:
    """A memory store seeded with the fixture graph."""
    return MemoryStore(graph_tables())


@pytest.fixture
def empty_store() -> MemoryStore:
    """A memory store with no rows."""
    return MemoryStore()


@pytest.fixture
def manager(store: MemoryStore) -> RelationshipManager:
    """A relationship manager over the fixture graph."""
    return RelationshipManager(store)


@pytest.fixture
def traversal(manager: RelationshipManager) -> GraphTraversal:
    """A graph traversal over the fixture graph."""
    return GraphTraversal(manager)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep log lines out of captured command output."""
    configure_logging("critical")
    yield
    structlog.reset_defaults()
