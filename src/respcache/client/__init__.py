"""Cache-aware HTTP client facade.

Classes:
    :class:`CachedClient` -- wraps :class:`httpx.AsyncClient` verbs with the
    read-through / write-back cache.

Functions:
    :func:`create_cached_client` -- builds the storage adapter from a
    :class:`~respcache.models.StorageConfig` and returns a ``CachedClient``.

Example::

    from respcache.client import create_cached_client

    client = create_cached_client(http, storage={"type": "synchronous"})
    user = await client.get("/users/1", cache_options={"useCache": True})
"""

from respcache.client.cached_client import CachedClient, create_cached_client

__all__ = ["CachedClient", "create_cached_client"]
