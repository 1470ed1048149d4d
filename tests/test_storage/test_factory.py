"""Tests for storage backend selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from respcache.exceptions import ConfigurationError
from respcache.models import DefaultCacheOptions, StorageConfig, StorageType
from respcache.storage import DiskStorage, MemoryStorage, RedisStorage, create_storage


class TestCreateStorage:
    async def test_indexed(self, tmp_path: Path) -> None:
        storage = create_storage(StorageConfig(type="indexed", directory=tmp_path))
        try:
            assert isinstance(storage, DiskStorage)
        finally:
            await storage.aclose()

    def test_synchronous(self) -> None:
        storage = create_storage({"type": "synchronous", "namespace": "ns"})
        assert isinstance(storage, MemoryStorage)
        assert storage.namespace == "ns"

    def test_external(self) -> None:
        storage = create_storage(
            StorageConfig(type=StorageType.EXTERNAL, external_uri="redis://localhost:6379/0")
        )
        assert isinstance(storage, RedisStorage)

    def test_external_accepts_camel_case_uri(self) -> None:
        storage = create_storage({"type": "external", "externalUri": "redis://localhost:6379/0"})
        assert isinstance(storage, RedisStorage)

    def test_default_stale_time_from_defaults(self) -> None:
        storage = create_storage(
            StorageConfig(type="synchronous"), DefaultCacheOptions(stale_time=1_234)
        )
        assert storage.default_stale_time == 1_234


class TestConfigurationErrors:
    def test_external_without_uri(self) -> None:
        with pytest.raises(ConfigurationError, match="external_uri"):
            create_storage(StorageConfig(type="external"))

    def test_external_without_network(self) -> None:
        with pytest.raises(ConfigurationError, match="networking"):
            create_storage(
                StorageConfig(
                    type="external",
                    external_uri="redis://localhost:6379/0",
                    allow_network=False,
                )
            )

    def test_indexed_without_directory(self) -> None:
        with pytest.raises(ConfigurationError, match="directory"):
            create_storage(StorageConfig(type="indexed"))

    def test_unknown_type(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid storage configuration"):
            create_storage({"type": "floppy"})

    def test_unsafe_namespace(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid storage configuration"):
            create_storage({"type": "synchronous", "namespace": "app:v2"})

    def test_unparseable_uri(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid external storage URI"):
            create_storage(StorageConfig(type="external", external_uri="ftp://nope"))

    def test_error_exit_code(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            create_storage(StorageConfig(type="external"))
        assert exc_info.value.exit_code == 7
