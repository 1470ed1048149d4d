"""Canonical Pydantic models shared across all respcache modules.

The models fall into three groups:

**Cache models** -- the stored unit and the per-call knobs:
    :class:`CacheRecord`, :class:`CacheOptions`, :class:`DefaultCacheOptions`,
    and :class:`ResolvedCacheOptions`.

**Storage models** -- backend selection passed to
:func:`~respcache.storage.factory.create_storage`:
    :class:`StorageType` and :class:`StorageConfig`.

**CLI configuration** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig` and :class:`AppConfig`.

Fields that appear on the wire or in user-facing option dicts accept both
the camelCase name (``staleTime``) and the Python name (``stale_time``).
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


NEVER_STALE = -1
"""Sentinel ``stale_time`` for records that never expire."""

DEFAULT_STALE_TIME_MS = 5 * 60 * 1000

NAMESPACE_PATTERN = r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$"
"""Allowed storage namespaces: no separators, glob characters, or leading dot."""


# --- Cache models ---


class CacheRecord(BaseModel):
    """A single stored response as persisted by a storage adapter.

    Serialised with :meth:`to_json` to
    ``{"value": ..., "timestamp": ..., "staleTime": ...}``.  A record is
    never partially updated; writing the same key replaces it entirely.

    Example::

        record = CacheRecord(value={"id": 1}, timestamp=1_000, stale_time=500)
        assert not record.is_stale(1_500)
        assert record.is_stale(1_501)
    """

    model_config = ConfigDict(populate_by_name=True)

    value: Any = None
    timestamp: int = Field(description="Write time in milliseconds since the epoch")
    stale_time: int = Field(
        alias="staleTime",
        ge=NEVER_STALE,
        description="Staleness window in milliseconds, or -1 for never stale",
    )

    def is_stale(self, now: int) -> bool:
        """Return ``True`` once more than ``stale_time`` ms have elapsed.

        Equality is still fresh.  Records with ``stale_time == -1`` are
        never stale.
        """
        if self.stale_time == NEVER_STALE:
            return False
        return now - self.timestamp > self.stale_time

    def to_json(self) -> str:
        """Serialise with the camelCase wire names."""
        return self.model_dump_json(by_alias=True)


class CacheOptions(BaseModel):
    """Per-call cache options.  Unset fields fall back to the defaults.

    Example::

        await client.get("/todos/1", cache_options=CacheOptions(use_cache=True, stale_time=-1))
        await client.get("/todos/1", cache_options={"useCache": True, "key": "todo-1"})
    """

    model_config = ConfigDict(populate_by_name=True)

    use_cache: Optional[bool] = Field(default=None, alias="useCache")
    key: Optional[str] = Field(
        default=None, description="Explicit cache key; bypasses derivation"
    )
    stale_time: Optional[int] = Field(default=None, alias="staleTime", ge=NEVER_STALE)


class DefaultCacheOptions(BaseModel):
    """Process-wide defaults merged under every :class:`CacheOptions`."""

    model_config = ConfigDict(populate_by_name=True)

    use_cache: bool = Field(default=False, alias="useCache")
    stale_time: int = Field(
        default=DEFAULT_STALE_TIME_MS, alias="staleTime", ge=NEVER_STALE
    )


class ResolvedCacheOptions(BaseModel):
    """The outcome of :func:`~respcache.keys.resolve_cache_options`."""

    key: str
    use_cache: bool = False
    stale_time: Optional[int] = None


# --- Storage models ---


class StorageType(str, enum.Enum):
    """Closed set of storage backend kinds."""

    INDEXED = "indexed"
    SYNCHRONOUS = "synchronous"
    EXTERNAL = "external"


class StorageConfig(BaseModel):
    """Storage backend selection.

    Example::

        StorageConfig(type="external", external_uri="redis://localhost:6379/0")
        StorageConfig(type="indexed", directory="/var/cache/myapp")
    """

    model_config = ConfigDict(populate_by_name=True)

    type: StorageType = Field(default=StorageType.INDEXED)
    external_uri: Optional[str] = Field(
        default=None, alias="externalUri", description="Endpoint for the external backend"
    )
    directory: Optional[Path] = Field(
        default=None, description="On-disk location for the indexed backend"
    )
    namespace: str = Field(
        default="respcache",
        min_length=1,
        pattern=NAMESPACE_PATTERN,
        description="Partition of the backend owned by this cache; clear() stays inside it",
    )
    allow_network: bool = Field(
        default=True, description="Whether networked backends may be selected"
    )


# --- CLI configuration ---


class RequestConfig(BaseModel):
    """HTTP settings used by the CLI's :class:`httpx.AsyncClient`."""

    base_url: Optional[str] = Field(default=None, description="Prefix for relative URLs")
    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    headers: dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Top-level CLI configuration stored in ``config.json``.

    Loaded by :func:`~respcache.config.load_config` and written by
    :func:`~respcache.config.save_config`.
    """

    storage: StorageConfig = Field(default_factory=StorageConfig)
    defaults: DefaultCacheOptions = Field(
        default_factory=lambda: DefaultCacheOptions(use_cache=True)
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
