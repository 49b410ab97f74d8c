"""YAML file store implementation."""

from pathlib import Path
from typing import Any

import structlog
import yaml

from workgraph.stores.memory import MemoryStore

logger = structlog.get_logger()


class YamlFileStore(MemoryStore):
    """Memory store persisted to a YAML file after every mutation."""

    def __init__(self, path: str | Path) -> None:
        """Initialize YAML file store.

        Args:
            path: Path to the YAML file holding all tables (created on first write)
        """
        self.path = Path(path)
        super().__init__(self._load())
        logger.info("YAML file store initialized", path=str(self.path))

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        """Load tables from the YAML file.

        Returns:
            Tables keyed by name, empty if the file does not exist
        """
        if not self.path.exists():
            logger.debug("Store file does not exist, starting empty", path=str(self.path))
            return {}

        try:
            with open(self.path, "r") as f:
                tables = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load store file", path=str(self.path), error=str(e))
            raise ValueError(f"Failed to load store from {self.path}: {e}") from e

        if not isinstance(tables, dict):
            raise ValueError(f"Store file {self.path} must contain a mapping of tables")
        for name, rows in tables.items():
            if rows is None:
                tables[name] = []
            elif not isinstance(rows, list):
                raise ValueError(f"Table {name} in store file {self.path} must be a list of rows")
        logger.debug("Store file loaded", path=str(self.path), tables=sorted(tables))
        return tables

    def _save(self) -> None:
        """Write all tables to the YAML file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(self.tables, f, default_flow_style=False, sort_keys=False)
            logger.debug("Store file saved", path=str(self.path))
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save store file", path=str(self.path), error=str(e))
            raise ValueError(f"Failed to save store to {self.path}: {e}") from e

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        stored = super().insert(table, row)
        self._save()
        return stored

    def update(self, table: str, row_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        stored = super().update(table, row_id, fields)
        self._save()
        return stored

    def delete(self, table: str, row_id: str) -> None:
        super().delete(table, row_id)
        self._save()
