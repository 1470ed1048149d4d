"""The cache orchestrator.

:func:`with_cache` ties key lookup, the underlying call, and cache
population into one request lifecycle.  It is consumed by
:class:`~respcache.client.cached_client.CachedClient`.
"""

from respcache.cache.orchestrator import with_cache

__all__ = ["with_cache"]
