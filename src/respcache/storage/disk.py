"""Indexed on-disk backend using :mod:`diskcache`.

:class:`DiskStorage` opens one :class:`diskcache.Cache` (SQLite under the
hood) when constructed and keeps it for its whole lifetime; call
:meth:`DiskStorage.aclose` or use it as an async context manager to release
it.  Blocking ``diskcache`` calls run in a worker thread via
:func:`asyncio.to_thread`.

Each namespace gets its own subdirectory, so :meth:`clear` wipes exactly
one namespace.
"""

from __future__ import annotations

import asyncio
import sqlite3
from pathlib import Path
from typing import Any, Optional

import diskcache

from respcache.exceptions import ConfigurationError, StorageIOError
from respcache.storage.base import StorageAdapter

_BACKEND_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)


class DiskStorage(StorageAdapter):
    """Storage adapter backed by a :class:`diskcache.Cache` directory.

    Args:
        directory: Root directory.  Records live in
            ``<directory>/<namespace>/``.
        **kwargs: Forwarded to :class:`~respcache.storage.base.StorageAdapter`.

    Raises:
        ConfigurationError: If the cache directory cannot be opened.
    """

    def __init__(self, directory: str | Path, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._directory = Path(directory) / self.namespace
        self._cache: Optional[diskcache.Cache] = None
        try:
            self._cache = diskcache.Cache(str(self._directory))
        except _BACKEND_ERRORS as exc:
            raise ConfigurationError(
                f"Cannot open indexed cache at {self._directory}: {exc}"
            ) from exc

    @property
    def directory(self) -> Path:
        return self._directory

    def _require_cache(self) -> diskcache.Cache:
        if self._cache is None:
            raise StorageIOError(f"Indexed cache at {self._directory} is closed")
        return self._cache

    async def _read(self, pkey: str) -> Optional[str]:
        cache = self._require_cache()
        try:
            return await asyncio.to_thread(cache.get, pkey)
        except _BACKEND_ERRORS as exc:
            raise StorageIOError(str(exc)) from exc

    async def _write(self, pkey: str, data: str, stale_time: int) -> None:
        cache = self._require_cache()
        try:
            await asyncio.to_thread(cache.set, pkey, data)
        except _BACKEND_ERRORS as exc:
            raise StorageIOError(str(exc)) from exc

    async def _delete(self, pkey: str) -> None:
        cache = self._require_cache()
        try:
            await asyncio.to_thread(cache.delete, pkey)
        except _BACKEND_ERRORS as exc:
            raise StorageIOError(str(exc)) from exc

    async def _clear(self) -> None:
        cache = self._require_cache()
        try:
            await asyncio.to_thread(cache.clear)
        except _BACKEND_ERRORS as exc:
            raise StorageIOError(str(exc)) from exc

    def __len__(self) -> int:
        return 0 if self._cache is None else len(self._cache)

    async def aclose(self) -> None:
        """Close the underlying :class:`diskcache.Cache`.  Safe to call twice."""
        if self._cache is not None:
            self._cache.close()
            self._cache = None
