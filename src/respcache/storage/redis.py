"""External backend using Redis through :mod:`redis.asyncio`.

:class:`RedisStorage` stores each record as a JSON string under
``<namespace>:<hash>``.  Records with a finite staleness window also get a
native Redis expiry one millisecond past the window, so Redis never drops
a record that is still fresh while abandoned keys are still reclaimed.

:meth:`RedisStorage.clear` walks only the adapter's namespace with
``SCAN``; other keys in the same database are left alone.
"""

from __future__ import annotations

from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from respcache.exceptions import ConfigurationError, StorageIOError
from respcache.models import NEVER_STALE
from respcache.storage.base import StorageAdapter

_CLEAR_BATCH = 500


class RedisStorage(StorageAdapter):
    """Storage adapter backed by Redis.

    Args:
        uri: Redis connection URL (``redis://host:port/db``).  Ignored
            when *client* is given.
        client: An existing :class:`redis.asyncio.Redis` client.  The
            adapter does not close clients it did not create.
        **kwargs: Forwarded to :class:`~respcache.storage.base.StorageAdapter`.

    Raises:
        ConfigurationError: If neither *uri* nor *client* is given, or the
            URI cannot be parsed.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        client: Optional[Redis] = None,  # type: ignore[type-arg]
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._owns_client = client is None
        if client is not None:
            self._redis = client
        elif uri:
            try:
                self._redis = Redis.from_url(uri)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid external storage URI {uri!r}: {exc}") from exc
        else:
            raise ConfigurationError("External storage requires an endpoint URI")

    async def _read(self, pkey: str) -> Optional[str]:
        try:
            value = await self._redis.get(pkey)
        except RedisError as exc:
            raise StorageIOError(str(exc)) from exc
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value

    async def _write(self, pkey: str, data: str, stale_time: int) -> None:
        px = None if stale_time == NEVER_STALE else stale_time + 1
        try:
            await self._redis.set(name=pkey, value=data, px=px)
        except RedisError as exc:
            raise StorageIOError(str(exc)) from exc

    async def _delete(self, pkey: str) -> None:
        try:
            await self._redis.delete(pkey)
        except RedisError as exc:
            raise StorageIOError(str(exc)) from exc

    async def _clear(self) -> None:
        batch: list[Any] = []
        try:
            async for pkey in self._redis.scan_iter(match=f"{self.namespace}:????????"):
                name = pkey.decode("utf-8", errors="replace") if isinstance(pkey, bytes) else pkey
                if not self.owns_physical_key(name):
                    continue
                batch.append(pkey)
                if len(batch) >= _CLEAR_BATCH:
                    await self._redis.delete(*batch)
                    batch = []
            if batch:
                await self._redis.delete(*batch)
        except RedisError as exc:
            raise StorageIOError(str(exc)) from exc

    async def aclose(self) -> None:
        """Close the connection pool if this adapter created it."""
        if self._owns_client:
            await self._redis.aclose()
