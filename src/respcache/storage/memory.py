"""Synchronous key-value backend.

:class:`MemoryStorage` keeps records as JSON strings in any
``MutableMapping[str, str]``.  By default that is a private ``dict``, which
makes it an in-process cache; passing a shared mapping lets several
adapters (with different namespaces) live side by side in one store.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Optional

from respcache.storage.base import StorageAdapter


class MemoryStorage(StorageAdapter):
    """Storage adapter over a synchronous mapping.

    Args:
        store: Backing mapping.  A new ``dict`` when omitted.
        **kwargs: Forwarded to :class:`~respcache.storage.base.StorageAdapter`.

    Example::

        storage = MemoryStorage(default_stale_time=60_000)
        await storage.set_item("/todos/1", {"id": 1})
        assert await storage.get_item("/todos/1") == {"id": 1}
    """

    def __init__(self, store: Optional[MutableMapping[str, str]] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._store: MutableMapping[str, str] = {} if store is None else store

    async def _read(self, pkey: str) -> Optional[str]:
        return self._store.get(pkey)

    async def _write(self, pkey: str, data: str, stale_time: int) -> None:
        self._store[pkey] = data

    async def _delete(self, pkey: str) -> None:
        self._store.pop(pkey, None)

    async def _clear(self) -> None:
        for pkey in [k for k in self._store if self.owns_physical_key(k)]:
            del self._store[pkey]
