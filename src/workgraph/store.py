"""Store interface for entity and relationship rows."""

from abc import ABC, abstractmethod
from typing import Any


class Store(ABC):
    """Abstract base class for row stores.

    A store holds named tables of flat rows keyed by ``id``. Implementations
    assign ``id`` and ``created_at`` on insert when the row does not carry them.
    """

    @abstractmethod
    def query(self, table: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return rows of a table whose columns equal every filter value."""
        pass

    @abstractmethod
    def get_by_id(self, table: str, row_id: str) -> dict[str, Any] | None:
        """Return a row by ID, or None if it does not exist."""
        pass

    @abstractmethod
    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored."""
        pass

    @abstractmethod
    def update(self, table: str, row_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Update columns of a row and return it as stored."""
        pass

    @abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        """Delete a row by ID."""
        pass
