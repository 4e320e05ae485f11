"""
Bounded append-list indexes over the key-value store.

Every secondary index in the network (signal feed, per-agent, per-beat and
per-tag lists, the beat registry index, the brief archive) is one JSON list
stored under one key. Updates are read-modify-write with no locking, so two
writers touching the same key in the same instant can lose one update
(last writer wins). That is accepted; callers must not assume an index is a
complete record of the underlying facts.
"""

from typing import Any

from src.storage.kv import KeyValueStore


class BoundedListIndex:
    """Most-recent-first (or insertion-ordered) capped lists keyed by name."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def read(self, key: str) -> list[Any]:
        """Return the list at ``key`` (empty when absent)."""
        return (await self._store.get(key)) or []

    async def prepend(self, key: str, item: Any, cap: int) -> list[Any]:
        """
        Put ``item`` at the head of the list and drop entries beyond ``cap``.

        Args:
            key: Index key
            item: Value to insert
            cap: Maximum list length after insertion

        Returns:
            The list as written
        """
        items = await self.read(key)
        items.insert(0, item)
        del items[cap:]
        await self._store.put(key, items)
        return items

    async def add_unique(
        self,
        key: str,
        item: Any,
        cap: int | None = None,
        *,
        at_head: bool = False,
    ) -> list[Any]:
        """
        Add ``item`` once; a no-op (no write) when it is already present.

        Args:
            key: Index key
            item: Value to insert
            cap: Optional maximum length (oldest entries dropped)
            at_head: Insert at the head instead of appending

        Returns:
            The current list
        """
        items = await self.read(key)
        if item in items:
            return items
        if at_head:
            items.insert(0, item)
            if cap is not None:
                del items[cap:]
        else:
            items.append(item)
            if cap is not None and len(items) > cap:
                del items[: len(items) - cap]
        await self._store.put(key, items)
        return items
