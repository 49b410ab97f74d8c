"""In-process store implementation."""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any

import structlog

from workgraph.store import Store

logger = structlog.get_logger()


class MemoryStore(Store):
    """Store keeping every table as an insertion-ordered list of rows.

    Rows are copied on the way in and out so callers never alias stored data.
    """

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        """Initialize memory store.

        Args:
            tables: Optional initial rows, keyed by table name
        """
        self.tables: dict[str, list[dict[str, Any]]] = copy.deepcopy(tables) if tables else {}
        logger.debug("Memory store initialized", tables=sorted(self.tables))

    def _rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def _index_of(self, table: str, row_id: str) -> int:
        for index, row in enumerate(self._rows(table)):
            if str(row.get("id")) == str(row_id):
                return index
        raise KeyError(f"Row {row_id} not found in table {table}")

    def query(self, table: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return rows matching all equality filters."""
        filters = filters or {}
        rows = [row for row in self._rows(table) if all(row.get(key) == value for key, value in filters.items())]
        logger.debug("Queried table", table=table, filters=filters, count=len(rows))
        return copy.deepcopy(rows)

    def get_by_id(self, table: str, row_id: str) -> dict[str, Any] | None:
        """Return a row by ID."""
        try:
            index = self._index_of(table, row_id)
        except KeyError:
            logger.debug("Row not found", table=table, row_id=row_id)
            return None
        return copy.deepcopy(self._rows(table)[index])

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row, assigning ID and creation timestamp when missing."""
        stored = copy.deepcopy(row)
        if not stored.get("id"):
            stored["id"] = str(uuid.uuid4())
        if not stored.get("created_at"):
            stored["created_at"] = datetime.now(timezone.utc).isoformat()
        self._rows(table).append(stored)
        logger.debug("Inserted row", table=table, row_id=stored["id"])
        return copy.deepcopy(stored)

    def update(self, table: str, row_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into an existing row."""
        index = self._index_of(table, row_id)
        stored = self._rows(table)[index]
        stored.update(copy.deepcopy(fields))
        logger.debug("Updated row", table=table, row_id=row_id, fields=list(fields))
        return copy.deepcopy(stored)

    def delete(self, table: str, row_id: str) -> None:
        """Delete a row by ID."""
        index = self._index_of(table, row_id)
        del self._rows(table)[index]
        logger.debug("Deleted row", table=table, row_id=row_id)
