"""respcache -- a transparent response cache for :mod:`httpx` async clients.

The package wraps an :class:`httpx.AsyncClient` so that each request first
consults a storage backend and only reaches the network on a miss.  Fresh
responses are written back under a key derived from the request URL and
payload.

Typical usage::

    import httpx
    from respcache import DefaultCacheOptions, StorageConfig, create_cached_client

    async with httpx.AsyncClient(base_url="https://api.example.com") as http:
        client = create_cached_client(
            http,
            storage=StorageConfig(type="synchronous"),
            default_cache_options=DefaultCacheOptions(use_cache=True),
        )
        todo = await client.get("/todos/1")      # network
        todo = await client.get("/todos/1")      # cache

Modules:
    models: Pydantic models for records, options, and configuration.
    keys: Cache key derivation and the FNV-1a key hash.
    storage: The storage adapter contract and its backends.
    cache: The read-through / write-back orchestrator.
    client: The cache-aware client facade.
    app: Typer CLI entry point.
"""

from respcache.client import CachedClient, create_cached_client
from respcache.exceptions import ConfigurationError, RespcacheError, StorageIOError
from respcache.models import CacheOptions, DefaultCacheOptions, StorageConfig, StorageType

__version__ = "0.1.0"

__all__ = [
    "CacheOptions",
    "CachedClient",
    "ConfigurationError",
    "DefaultCacheOptions",
    "RespcacheError",
    "StorageConfig",
    "StorageIOError",
    "StorageType",
    "create_cached_client",
]
