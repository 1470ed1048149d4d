"""Cache-aware facade over :class:`httpx.AsyncClient`.

:class:`CachedClient` mirrors the client's verbs -- ``get``, ``post``,
``put``, ``delete``, ``patch``, ``head``, ``options``, and ``request`` --
but returns the unwrapped response payload and routes every call through
:func:`~respcache.cache.with_cache`.  Each verb accepts the usual httpx
keyword arguments plus ``cache_options``.

Keys are derived from the request URL, with ``params`` folded into the
query string, and for body-bearing calls from the ``json`` / ``data`` /
``content`` payload.  The HTTP method is not part of the key, so a
``GET`` and a ``DELETE`` on the same URL share an entry; pass an explicit
``key`` to keep them apart.

Non-2xx responses raise :class:`httpx.HTTPStatusError`; like every other
transport error it reaches the caller unchanged and is never cached.
Empty bodies (``HEAD``, ``204``) unwrap to ``None`` and are not cached
either, so those calls always reach the transport.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from respcache.cache import with_cache
from respcache.client.response import extract_response_data
from respcache.exceptions import StorageIOError
from respcache.keys import resolve_cache_options
from respcache.models import CacheOptions, DefaultCacheOptions, StorageConfig
from respcache.storage.base import StorageAdapter
from respcache.storage.factory import create_storage

logger = logging.getLogger(__name__)

CacheOptionsArg = Optional[CacheOptions | Mapping[str, Any]]


class CachedClient:
    """Cache-aware wrapper around an :class:`httpx.AsyncClient`.

    Args:
        client: The underlying transport.  It stays owned by the caller and
            is not closed by :meth:`aclose`.
        storage: The storage adapter shared by every call.
        default_cache_options: Process-wide ``use_cache`` and
            ``stale_time`` defaults.

    Example::

        async with httpx.AsyncClient(base_url="https://api.example.com") as http:
            async with CachedClient(http, MemoryStorage()) as client:
                todo = await client.get("/todos/1", cache_options={"useCache": True})
                await client.revalidate("/todos/1")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        storage: StorageAdapter,
        default_cache_options: Optional[DefaultCacheOptions] = None,
    ) -> None:
        self._client = client
        self._storage = storage
        self._defaults = default_cache_options or DefaultCacheOptions()

    @property
    def storage(self) -> StorageAdapter:
        return self._storage

    @property
    def defaults(self) -> DefaultCacheOptions:
        return self._defaults

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> CachedClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the storage adapter."""
        await self._storage.aclose()

    # ------------------------------------------------------------------ #
    # Verbs
    # ------------------------------------------------------------------ #

    async def request(
        self,
        method: str,
        url: str,
        *,
        cache_options: CacheOptionsArg = None,
        **kwargs: Any,
    ) -> Any:
        """Send a request of any method through the cache.

        Args:
            method: HTTP method.
            url: Absolute URL or path relative to the client's ``base_url``.
            cache_options: Per-call cache options.
            **kwargs: Forwarded to :meth:`httpx.AsyncClient.request`
                (``params``, ``headers``, ``json``, ``data``, ...).

        Returns:
            The decoded JSON body, the text body, or ``None`` when empty.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response.
            httpx.HTTPError: On any other transport failure.
        """
        options = resolve_cache_options(
            self._defaults,
            self._key_url(url, kwargs.get("params")),
            _payload(kwargs),
            cache_options,
        )
        return await with_cache(
            self._send,
            self._storage,
            options,
            method.upper(),
            url,
            unwrap=extract_response_data,
            **kwargs,
        )

    async def get(self, url: str, *, cache_options: CacheOptionsArg = None, **kwargs: Any) -> Any:
        """Send a GET request through the cache."""
        return await self.request("GET", url, cache_options=cache_options, **kwargs)

    async def delete(self, url: str, *, cache_options: CacheOptionsArg = None, **kwargs: Any) -> Any:
        """Send a DELETE request through the cache."""
        return await self.request("DELETE", url, cache_options=cache_options, **kwargs)

    async def head(self, url: str, *, cache_options: CacheOptionsArg = None, **kwargs: Any) -> Any:
        """Send a HEAD request through the cache."""
        return await self.request("HEAD", url, cache_options=cache_options, **kwargs)

    async def options(self, url: str, *, cache_options: CacheOptionsArg = None, **kwargs: Any) -> Any:
        """Send an OPTIONS request through the cache."""
        return await self.request("OPTIONS", url, cache_options=cache_options, **kwargs)

    async def post(self, url: str, *, cache_options: CacheOptionsArg = None, **kwargs: Any) -> Any:
        """Send a POST request through the cache.  The body takes part in the key."""
        return await self.request("POST", url, cache_options=cache_options, **kwargs)

    async def put(self, url: str, *, cache_options: CacheOptionsArg = None, **kwargs: Any) -> Any:
        """Send a PUT request through the cache.  The body takes part in the key."""
        return await self.request("PUT", url, cache_options=cache_options, **kwargs)

    async def patch(self, url: str, *, cache_options: CacheOptionsArg = None, **kwargs: Any) -> Any:
        """Send a PATCH request through the cache.  The body takes part in the key."""
        return await self.request("PATCH", url, cache_options=cache_options, **kwargs)

    # ------------------------------------------------------------------ #
    # Cache management
    # ------------------------------------------------------------------ #

    async def revalidate(self, *keys: str) -> None:
        """Drop the entries for *keys* so the next call refetches them.

        Keys are processed independently: a missing key or a failed
        removal is logged and the remaining keys are still processed.
        """
        for key in keys:
            try:
                removed = await self._storage.remove_item(key)
            except StorageIOError as exc:
                logger.warning("Failed to revalidate %r: %s", key, exc)
                continue
            if not removed:
                logger.warning("Failed to revalidate %r", key)

    async def clear_cache(self) -> None:
        """Drop every entry in the storage adapter's namespace."""
        if not await self._storage.clear():
            logger.warning("Failed to clear cache namespace %s", self._storage.namespace)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """The uncached call: send, then raise for non-2xx statuses."""
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    @staticmethod
    def _key_url(url: str, params: Any) -> str:
        """Return *url* with *params* merged into its query string."""
        if not params:
            return url
        return str(httpx.URL(url, params=params))


def _payload(kwargs: Mapping[str, Any]) -> Any:
    """Return the request body used for key derivation, if any."""
    for name in ("json", "data", "content"):
        if kwargs.get(name) is not None:
            return kwargs[name]
    return None


def create_cached_client(
    client: httpx.AsyncClient,
    storage: StorageConfig | Mapping[str, Any] | StorageAdapter | None = None,
    default_cache_options: Optional[DefaultCacheOptions | Mapping[str, Any]] = None,
) -> CachedClient:
    """Wrap *client* with a cache built from *storage*.

    Args:
        client: The transport to wrap.
        storage: A ready adapter, or a :class:`StorageConfig` (or dict) for
            :func:`~respcache.storage.factory.create_storage`.  Defaults to
            the ``synchronous`` in-process backend.
        default_cache_options: Process-wide defaults.

    Returns:
        The cache-aware client.

    Raises:
        ConfigurationError: If *storage* describes an invalid backend.
    """
    if default_cache_options is None:
        defaults = DefaultCacheOptions()
    elif isinstance(default_cache_options, DefaultCacheOptions):
        defaults = default_cache_options
    else:
        defaults = DefaultCacheOptions.model_validate(default_cache_options)

    if isinstance(storage, StorageAdapter):
        adapter = storage
    else:
        adapter = create_storage(storage or StorageConfig(type="synchronous"), defaults)

    return CachedClient(client, adapter, defaults)
