from .json_store import JsonFileIntersectionStore
from .sql_store import SqlIntersectionStore
from .memory_store import InMemoryIntersectionStore

__all__ = [
    "JsonFileIntersectionStore",
    "SqlIntersectionStore",
    "InMemoryIntersectionStore",
]
