"""Abstract base class for storage adapters.

Every backend exposes the same four asynchronous operations --
:meth:`~StorageAdapter.get_item`, :meth:`~StorageAdapter.set_item`,
:meth:`~StorageAdapter.remove_item`, and :meth:`~StorageAdapter.clear` -- so
the orchestrator and the client facade never need to know which one is
active.

The public operations live here and share one behaviour:

- logical keys are hashed with :func:`~respcache.keys.hash_key` and prefixed
  with the adapter's namespace;
- records are stored as JSON (see :class:`~respcache.models.CacheRecord`);
- stale and corrupt records are deleted on read and reported as a miss;
- :class:`~respcache.exceptions.StorageIOError` raised by a backend is
  logged and turned into a miss or a ``False`` result.

To implement a new backend, subclass :class:`StorageAdapter` and implement
the four primitives :meth:`~StorageAdapter._read`,
:meth:`~StorageAdapter._write`, :meth:`~StorageAdapter._delete`, and
:meth:`~StorageAdapter._clear`.  Primitives raise ``StorageIOError`` for
backend failures.  Override :meth:`~StorageAdapter.aclose` to release
resources held for the adapter's lifetime.

See Also:
    :mod:`respcache.storage.factory` for backend selection.
"""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from pydantic import ValidationError

from respcache.exceptions import ConfigurationError, StorageIOError
from respcache.keys import hash_key
from respcache.models import DEFAULT_STALE_TIME_MS, NAMESPACE_PATTERN, CacheRecord

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class StorageAdapter(ABC):
    """Base class for every storage backend.

    Args:
        default_stale_time: Staleness window (ms) applied by
            :meth:`set_item` when the caller passes none.  ``-1`` means
            never stale.
        namespace: Prefix for every physical key.  :meth:`clear` only
            touches records inside this namespace.  Letters, digits,
            ``_``, ``-`` and a non-leading ``.`` only.
        clock: Returns the current time in milliseconds.  Tests inject a
            fake clock to step through staleness windows.

    Raises:
        ConfigurationError: If *namespace* contains a separator, a glob
            character, or a path component such as ``..``.
    """

    def __init__(
        self,
        default_stale_time: int = DEFAULT_STALE_TIME_MS,
        namespace: str = "respcache",
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if not re.fullmatch(NAMESPACE_PATTERN, namespace):
            raise ConfigurationError(f"Invalid storage namespace {namespace!r}")
        self._default_stale_time = default_stale_time
        self._namespace = namespace
        self._clock = clock

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def default_stale_time(self) -> int:
        return self._default_stale_time

    def physical_key(self, key: str) -> str:
        """Return the backend key for logical *key* (``<namespace>:<hash>``)."""
        return f"{self._namespace}:{hash_key(key)}"

    def owns_physical_key(self, pkey: str) -> bool:
        """Return True if *pkey* has this namespace's exact ``<namespace>:<8 hex>`` shape."""
        return re.fullmatch(rf"{re.escape(self._namespace)}:[0-9a-f]{{8}}", pkey) is not None

    # ------------------------------------------------------------------ #
    # Public contract
    # ------------------------------------------------------------------ #

    async def get_item(self, key: str) -> Any:
        """Return the stored value for *key*, or ``None`` on a miss.

        A stale record is deleted before ``None`` is returned.  A record
        that cannot be parsed is treated as corrupt and deleted as well.
        Backend failures are logged and reported as a miss.

        Args:
            key: The logical cache key.

        Returns:
            The cached payload, or ``None``.
        """
        pkey = self.physical_key(key)
        try:
            raw = await self._read(pkey)
            if raw is None:
                return None

            try:
                record = CacheRecord.model_validate_json(raw)
            except ValidationError:
                logger.warning("Discarding corrupt cache record %s", pkey)
                await self._delete(pkey)
                return None

            if record.is_stale(self._clock()):
                logger.debug("Evicting stale cache record %s", pkey)
                await self._delete(pkey)
                return None

            return record.value
        except StorageIOError as exc:
            logger.warning("Cache read failed for %s: %s", pkey, exc)
            return None

    async def set_item(self, key: str, value: Any, stale_time: Optional[int] = None) -> bool:
        """Store *value* under *key*, replacing any existing record.

        Args:
            key: The logical cache key.
            value: A JSON-serialisable payload.
            stale_time: Staleness window in ms; ``None`` uses the adapter
                default, ``-1`` never expires.

        Returns:
            ``True`` when the record was written, ``False`` when
            serialisation or the backend write failed.
        """
        pkey = self.physical_key(key)
        window = self._default_stale_time if stale_time is None else stale_time
        try:
            data = CacheRecord(value=value, timestamp=self._clock(), stale_time=window).to_json()
        except (TypeError, ValueError) as exc:
            logger.warning("Cannot serialise value for %s: %s", pkey, exc)
            return False

        try:
            await self._write(pkey, data, window)
        except StorageIOError as exc:
            logger.warning("Cache write failed for %s: %s", pkey, exc)
            return False
        return True

    async def remove_item(self, key: str) -> bool:
        """Delete the record for *key*.  Deleting an absent key succeeds.

        Returns:
            ``False`` only when the backend delete failed.
        """
        pkey = self.physical_key(key)
        try:
            await self._delete(pkey)
        except StorageIOError as exc:
            logger.warning("Cache delete failed for %s: %s", pkey, exc)
            return False
        return True

    async def clear(self) -> bool:
        """Delete every record in this adapter's namespace.

        Returns:
            ``False`` only when the backend failed.
        """
        try:
            await self._clear()
        except StorageIOError as exc:
            logger.warning("Cache clear failed for namespace %s: %s", self._namespace, exc)
            return False
        return True

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def aclose(self) -> None:
        """Release resources held for the adapter's lifetime.  No-op by default."""

    async def __aenter__(self) -> StorageAdapter:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Backend primitives
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def _read(self, pkey: str) -> Optional[str]:
        """Return the raw JSON stored at *pkey*, or ``None`` if absent."""

    @abstractmethod
    async def _write(self, pkey: str, data: str, stale_time: int) -> None:
        """Store *data* at *pkey*, overwriting any existing value.

        *stale_time* is passed so backends with native expiry can use it;
        the record itself remains the authority on staleness.
        """

    @abstractmethod
    async def _delete(self, pkey: str) -> None:
        """Delete *pkey*.  Must not raise when the key is absent."""

    @abstractmethod
    async def _clear(self) -> None:
        """Delete every key in this adapter's namespace."""
