"""Storage backend selection.

:func:`create_storage` dispatches on :class:`~respcache.models.StorageType`
and returns an adapter exposing the
:class:`~respcache.storage.base.StorageAdapter` contract.  Invalid
selections fail here, at construction time, with
:class:`~respcache.exceptions.ConfigurationError`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional

from pydantic import ValidationError

from respcache.exceptions import ConfigurationError
from respcache.models import DefaultCacheOptions, StorageConfig, StorageType
from respcache.storage.base import StorageAdapter, now_ms
from respcache.storage.disk import DiskStorage
from respcache.storage.memory import MemoryStorage
from respcache.storage.redis import RedisStorage


def coerce_storage_config(config: StorageConfig | Mapping[str, Any]) -> StorageConfig:
    """Validate a plain dict into a :class:`StorageConfig`.

    Raises:
        ConfigurationError: If the dict names an unsupported type or has
            invalid fields.
    """
    if isinstance(config, StorageConfig):
        return config
    try:
        return StorageConfig.model_validate(config)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid storage configuration: {exc}") from exc


def create_storage(
    config: StorageConfig | Mapping[str, Any],
    defaults: Optional[DefaultCacheOptions] = None,
    clock: Callable[[], int] = now_ms,
) -> StorageAdapter:
    """Build the storage adapter described by *config*.

    Args:
        config: Backend selection.
        defaults: Supplies the adapter's default staleness window.
        clock: Millisecond clock handed to the adapter.

    Returns:
        A ready-to-use adapter.

    Raises:
        ConfigurationError: For an unsupported type, an ``external``
            backend without ``external_uri`` or with networking disallowed,
            or an ``indexed`` backend without ``directory``.
    """
    config = coerce_storage_config(config)
    defaults = defaults or DefaultCacheOptions()
    common: dict[str, Any] = {
        "default_stale_time": defaults.stale_time,
        "namespace": config.namespace,
        "clock": clock,
    }

    if config.type == StorageType.INDEXED:
        if config.directory is None:
            raise ConfigurationError("Indexed storage requires a directory")
        return DiskStorage(config.directory, **common)

    if config.type == StorageType.SYNCHRONOUS:
        return MemoryStorage(**common)

    if config.type == StorageType.EXTERNAL:
        if not config.allow_network:
            raise ConfigurationError(
                "External storage is networked and networking is disabled for this context"
            )
        if not config.external_uri:
            raise ConfigurationError("External storage requires external_uri")
        return RedisStorage(config.external_uri, **common)

    raise ConfigurationError(f"Unsupported storage type: {config.type}")
