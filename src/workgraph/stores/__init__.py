"""Store implementations."""

from workgraph.stores.memory import MemoryStore
from workgraph.stores.yaml_file import YamlFileStore

__all__ = ["MemoryStore", "YamlFileStore"]
