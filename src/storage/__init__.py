"""Storage layer: key-value store and bounded list indexes."""

from src.storage.index import BoundedListIndex
from src.storage.kv import KeyValueStore, MemoryStore, RedisStore, create_store

__all__ = [
    "BoundedListIndex",
    "KeyValueStore",
    "MemoryStore",
    "RedisStore",
    "create_store",
]
