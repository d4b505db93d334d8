"""Key-value state stores and versioned snapshots."""

from cipher.state.base import KeyValueStore
from cipher.state.json_store import JsonFileStore
from cipher.state.memory import InMemoryStore
from cipher.state.snapshot import SCHEMA_VERSION, StatePersistence, unwrap, wrap

__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "SCHEMA_VERSION",
    "StatePersistence",
    "unwrap",
    "wrap",
]
