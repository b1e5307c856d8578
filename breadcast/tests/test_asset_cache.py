"""
Tests for the asset caches.

Covers single-flight generation, failure recovery, TTL expiry and pin map
persistence.
"""

import asyncio
import json
from unittest.mock import patch

import pytest

from breadcast.engine.asset_cache import AssetTTLCache, PinOnceAssetCache


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingFactory:
    """Coroutine factory that yields to the loop before producing content."""

    def __init__(self, result: str = "content", fail_times: int = 0):
        self.result = result
        self.fail_times = fail_times
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        await asyncio.sleep(0.01)
        if self.calls <= self.fail_times:
            raise ValueError("generation failed")
        return f"{self.result}-{self.calls}"


class TestAssetTTLCache:
    """Tests for AssetTTLCache."""

    def test_concurrent_lookups_generate_once(self):
        """Many simultaneous requests for one key share a single generation."""
        cache = AssetTTLCache(ttl_seconds=60)
        factory = CountingFactory()

        async def run():
            return await asyncio.gather(*[
                cache.get_or_create("recipe-title-1", factory) for _ in range(10)
            ])

        results = asyncio.run(run())

        assert factory.calls == 1
        assert set(results) == {"content-1"}

    def test_distinct_keys_generate_independently(self):
        cache = AssetTTLCache()
        factory = CountingFactory()

        async def run():
            return await asyncio.gather(
                cache.get_or_create("a", factory),
                cache.get_or_create("b", factory),
            )

        asyncio.run(run())
        assert factory.calls == 2
        assert cache.size == 2

    def test_failure_propagates_to_all_waiters(self):
        cache = AssetTTLCache()
        factory = CountingFactory(fail_times=1)

        async def run():
            return await asyncio.gather(
                cache.get_or_create("k", factory),
                cache.get_or_create("k", factory),
                return_exceptions=True,
            )

        results = asyncio.run(run())

        assert factory.calls == 1
        assert all(isinstance(result, ValueError) for result in results)
        assert cache.get("k") is None

    def test_failure_releases_slot_for_retry(self):
        """A failed generation is not cached; the next lookup tries again."""
        cache = AssetTTLCache()
        factory = CountingFactory(fail_times=1)

        with pytest.raises(ValueError):
            asyncio.run(cache.get_or_create("k", factory))

        assert asyncio.run(cache.get_or_create("k", factory)) == "content-2"
        assert factory.calls == 2

    def test_hit_within_ttl(self):
        clock = FakeClock()
        cache = AssetTTLCache(ttl_seconds=60, clock=clock)
        factory = CountingFactory()

        asyncio.run(cache.get_or_create("k", factory))
        clock.now += 59
        assert asyncio.run(cache.get_or_create("k", factory)) == "content-1"
        assert factory.calls == 1

    def test_regenerates_after_ttl(self):
        clock = FakeClock()
        cache = AssetTTLCache(ttl_seconds=60, clock=clock)
        factory = CountingFactory()

        asyncio.run(cache.get_or_create("k", factory))
        clock.now += 61
        assert cache.get("k") is None
        assert asyncio.run(cache.get_or_create("k", factory)) == "content-2"

    def test_cleanup_expired(self):
        clock = FakeClock()
        cache = AssetTTLCache(ttl_seconds=10, clock=clock)

        asyncio.run(cache.get_or_create("old", CountingFactory()))
        clock.now += 20
        asyncio.run(cache.get_or_create("new", CountingFactory()))

        assert cache.cleanup_expired() == 1
        assert cache.size == 1
        assert cache.get("new") == "content-1"

    def test_cancelled_caller_does_not_cancel_shared_generation(self):
        """A waiter that gives up leaves the generation running for the others."""
        cache = AssetTTLCache()
        factory = CountingFactory()

        async def run():
            first = asyncio.ensure_future(cache.get_or_create("k", factory))
            await asyncio.sleep(0)
            second = asyncio.ensure_future(cache.get_or_create("k", factory))
            await asyncio.sleep(0)
            first.cancel()
            with pytest.raises(asyncio.CancelledError):
                await first
            return await second

        assert asyncio.run(run()) == "content-1"
        assert factory.calls == 1
        assert cache.get("k") == "content-1"

    def test_clear(self):
        cache = AssetTTLCache()
        asyncio.run(cache.get_or_create("k", CountingFactory()))
        cache.clear()
        assert cache.size == 0


class TestPinOnceAssetCache:
    """Tests for PinOnceAssetCache."""

    def test_concurrent_lookups_pin_once(self):
        cache = PinOnceAssetCache()
        factory = CountingFactory(result="QmPinned")

        async def run():
            return await asyncio.gather(*[cache.get_or_create("k", factory) for _ in range(5)])

        results = asyncio.run(run())

        assert factory.calls == 1
        assert set(results) == {"QmPinned-1"}
        assert cache.dirty

    def test_never_regenerates(self):
        cache = PinOnceAssetCache({"k": "QmExisting"})
        factory = CountingFactory()

        assert asyncio.run(cache.get_or_create("k", factory)) == "QmExisting"
        assert factory.calls == 0
        assert not cache.dirty

    def test_failure_allows_retry(self):
        cache = PinOnceAssetCache()
        factory = CountingFactory(fail_times=1)

        with pytest.raises(ValueError):
            asyncio.run(cache.get_or_create("k", factory))
        assert cache.get("k") is None

        assert asyncio.run(cache.get_or_create("k", factory)) == "content-2"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "env" / "cid-data.json"
        cache = PinOnceAssetCache()
        asyncio.run(cache.get_or_create("k", CountingFactory(result="QmA")))

        assert cache.save(path) is True
        assert json.loads(path.read_text()) == {"k": "QmA-1"}
        assert not cache.dirty

        loaded = PinOnceAssetCache.load(path)
        assert loaded.snapshot() == {"k": "QmA-1"}

    def test_save_skipped_when_clean(self, tmp_path):
        path = tmp_path / "cid-data.json"
        assert PinOnceAssetCache({"k": "QmA"}).save(path) is False
        assert not path.exists()

    def test_load_missing_file(self, tmp_path):
        assert PinOnceAssetCache.load(tmp_path / "missing.json").size == 0

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_load_bad_file(self, tmp_path, content):
        path = tmp_path / "cid-data.json"
        path.write_text(content)
        assert PinOnceAssetCache.load(path).size == 0

    def test_pin_added_during_save_stays_dirty(self, tmp_path):
        """A pin recorded while the file is being written is flushed next time."""
        path = tmp_path / "cid-data.json"
        cache = PinOnceAssetCache()
        asyncio.run(cache.get_or_create("a", CountingFactory(result="QmA")))
        real_dump = json.dump

        def dump_while_pinning(data, f):
            asyncio.run(cache.get_or_create("b", CountingFactory(result="QmB")))
            real_dump(data, f)

        with patch("breadcast.engine.asset_cache.json.dump", side_effect=dump_while_pinning):
            assert cache.save(path) is True

        assert json.loads(path.read_text()) == {"a": "QmA-1"}
        assert cache.dirty

        assert cache.save(path) is True
        assert json.loads(path.read_text()) == {"a": "QmA-1", "b": "QmB-1"}
        assert not cache.dirty

    def test_failed_save_stays_dirty(self, tmp_path):
        cache = PinOnceAssetCache()
        asyncio.run(cache.get_or_create("a", CountingFactory(result="QmA")))

        with patch("breadcast.engine.asset_cache.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                cache.save(tmp_path / "cid-data.json")

        assert cache.dirty
