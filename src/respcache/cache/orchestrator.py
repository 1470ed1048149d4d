"""Read-through / write-back request lifecycle.

:func:`with_cache` wraps one transport call:

1. When caching is on, look the key up; a hit returns immediately and the
   transport is never called.
2. Otherwise await the transport call.
3. On success, write the payload back under the key and return it.  The
   outcome of the write never changes the returned value.  An empty
   (``None``) payload is returned but not stored, since a read cannot tell
   it apart from a miss.
4. Transport exceptions (including cancellation and timeouts) propagate
   unchanged and nothing is written.

Concurrent calls for the same key are not coalesced: two simultaneous
misses both reach the transport and the later write wins.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from respcache.exceptions import StorageIOError
from respcache.models import ResolvedCacheOptions
from respcache.storage.base import StorageAdapter

logger = logging.getLogger(__name__)


async def with_cache(
    call: Callable[..., Awaitable[Any]],
    storage: StorageAdapter,
    options: ResolvedCacheOptions,
    *args: Any,
    unwrap: Optional[Callable[[Any], Any]] = None,
    **kwargs: Any,
) -> Any:
    """Serve *call* from *storage* when possible, else call and store.

    Args:
        call: The uncached transport call.
        storage: The active storage adapter.
        options: Resolved key, ``use_cache`` flag, and staleness window.
        *args: Positional arguments for *call*.
        unwrap: Extracts the cacheable payload from *call*'s result (for
            example the JSON body of an :class:`httpx.Response`).  The
            result is used as-is when omitted.
        **kwargs: Keyword arguments for *call*.

    Returns:
        The cached payload on a hit, otherwise the (unwrapped) result of
        *call*.
    """
    cacheable = options.use_cache and bool(options.key)

    if cacheable:
        try:
            cached = await storage.get_item(options.key)
        except StorageIOError as exc:
            logger.warning("Cache lookup failed for %r: %s", options.key, exc)
            cached = None
        if cached is not None:
            logger.debug("Cache hit for %r", options.key)
            return cached
        logger.debug("Cache miss for %r", options.key)

    result = await call(*args, **kwargs)
    payload = unwrap(result) if unwrap is not None else result

    if cacheable and payload is None:
        logger.debug("Not caching empty payload for %r", options.key)
    elif cacheable:
        try:
            written = await storage.set_item(options.key, payload, options.stale_time)
        except StorageIOError as exc:
            logger.warning("Cache write failed for %r: %s", options.key, exc)
        else:
            if not written:
                logger.debug("Cache write was rejected for %r", options.key)

    return payload
