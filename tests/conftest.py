"""Shared test fixtures for respcache.

Provides a controllable millisecond clock, one fixture per storage backend,
an in-memory stand-in for the asyncio Redis client, output-state reset, and
XDG isolation for config tests.
"""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Any, AsyncIterator, Optional

import pytest

from respcache.output import reset_output
from respcache.storage import DiskStorage, MemoryStorage, RedisStorage


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeRedis:
    """Just enough of :class:`redis.asyncio.Redis` for :class:`RedisStorage`.

    Values are kept as bytes, like the real client returns them.  Expiry
    arguments are recorded but not enforced.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.expiries: dict[str, Optional[int]] = {}
        self.closed = False

    async def get(self, name: str) -> Optional[bytes]:
        return self.data.get(name)

    async def set(self, name: str, value: str, px: Optional[int] = None) -> bool:
        self.data[name] = value.encode("utf-8")
        self.expiries[name] = px
        return True

    async def delete(self, *names: Any) -> int:
        removed = 0
        for name in names:
            key = name.decode() if isinstance(name, bytes) else name
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan_iter(self, match: str = "*") -> AsyncIterator[bytes]:
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key.encode("utf-8")

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Clock and backends
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def memory_storage(clock: FakeClock) -> MemoryStorage:
    return MemoryStorage(default_stale_time=60_000, clock=clock)


@pytest.fixture
async def disk_storage(tmp_path: Path, clock: FakeClock) -> AsyncIterator[DiskStorage]:
    storage = DiskStorage(tmp_path / "cache", default_stale_time=60_000, clock=clock)
    yield storage
    await storage.aclose()


@pytest.fixture
def redis_storage(fake_redis: FakeRedis, clock: FakeClock) -> RedisStorage:
    return RedisStorage(client=fake_redis, default_stale_time=60_000, clock=clock)


@pytest.fixture(params=["synchronous", "indexed", "external"])
async def storage(
    request: pytest.FixtureRequest,
    tmp_path: Path,
    clock: FakeClock,
    fake_redis: FakeRedis,
) -> AsyncIterator[Any]:
    """Each backend in turn, all driven by the same fake clock."""
    if request.param == "synchronous":
        adapter: Any = MemoryStorage(default_stale_time=60_000, clock=clock)
    elif request.param == "indexed":
        adapter = DiskStorage(tmp_path / "cache", default_stale_time=60_000, clock=clock)
    else:
        adapter = RedisStorage(client=fake_redis, default_stale_time=60_000, clock=clock)
    yield adapter
    await adapter.aclose()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config/cache dirs at tmp_path so tests never touch real user files."""
    monkeypatch.setattr("respcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.chdir(tmp_path)
    return tmp_path
