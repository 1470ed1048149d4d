"""Storage adapters for respcache.

All backends implement :class:`StorageAdapter`:

- :class:`DiskStorage` -- ``indexed``; a :mod:`diskcache` directory.
- :class:`MemoryStorage` -- ``synchronous``; any string mapping.
- :class:`RedisStorage` -- ``external``; Redis via :mod:`redis.asyncio`.

Use :func:`create_storage` to build one from a
:class:`~respcache.models.StorageConfig`.
"""

from respcache.storage.base import StorageAdapter, now_ms
from respcache.storage.disk import DiskStorage
from respcache.storage.factory import coerce_storage_config, create_storage
from respcache.storage.memory import MemoryStorage
from respcache.storage.redis import RedisStorage

__all__ = [
    "DiskStorage",
    "MemoryStorage",
    "RedisStorage",
    "StorageAdapter",
    "coerce_storage_config",
    "create_storage",
    "now_ms",
]
