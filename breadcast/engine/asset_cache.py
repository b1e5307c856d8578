"""
In-memory caches for generated frame assets.

Two policies are provided:
- AssetTTLCache: rendered content is kept for a fixed time, then regenerated.
- PinOnceAssetCache: the first content id produced for a key is kept for the
  lifetime of the process (and optionally persisted to disk).

Both guarantee at most one in-flight generation per key: concurrent callers
for the same key await the same task instead of starting another one.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

AssetFactory = Callable[[], Awaitable[str]]


class SingleFlight:
    """Per-key registry of in-flight coroutine tasks."""

    def __init__(self):
        self._in_flight: Dict[str, asyncio.Task] = {}

    async def run(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run `factory` for `key` unless a run is already in flight.

        The shared task is shielded so a cancelled caller does not cancel it
        for the other waiters. The slot is released when the task finishes,
        whether it succeeded or failed.
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._release(key, done))
        else:
            logger.debug(f"Joining in-flight generation for {key}")
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Generation failed for {key}: {task.exception()}")


@dataclass
class CacheEntry:
    """A cached asset with its creation time."""

    content: str
    created_at: float  # Unix timestamp


class AssetTTLCache:
    """
    Time-boxed cache of rendered frame images.

    Entries are regenerated on the first lookup after `ttl_seconds` have
    passed. Meant for live rendering where recipe content may change.
    """

    def __init__(self, ttl_seconds: int = 60, clock: Callable[[], float] = time.time):
        """
        Initialize the cache.

        Args:
            ttl_seconds: How long an entry is served before it is regenerated.
            clock: Time source, injectable for tests.
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._flights = SingleFlight()

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() <= entry.created_at + self._ttl_seconds

    def get(self, key: str) -> Optional[str]:
        """Return the cached content for `key` if present and not expired."""
        entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.content

    async def get_or_create(self, key: str, create: AssetFactory) -> str:
        """
        Return cached content for `key`, generating it when absent or expired.

        Args:
            key: The asset key.
            create: Coroutine factory producing the content.

        Returns:
            The cached or freshly generated content.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return cached

        async def populate() -> str:
            content = await create()
            self._entries[key] = CacheEntry(content=content, created_at=self._clock())
            logger.debug(f"Cached {key}")
            return content

        return await self._flights.run(key, populate)

    def clear(self) -> None:
        """Clear all cached entries."""
        self._entries.clear()
        logger.info("Asset cache cleared")

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries from the cache.

        Returns:
            Number of entries removed.
        """
        expired = [
            (key, entry) for key, entry in list(self._entries.items())
            if not self._is_fresh(entry)
        ]

        # Entries refreshed since the scan are kept
        expired_keys = [
            key for key, entry in expired if self._entries.get(key) is entry
        ]
        for key in expired_keys:
            self._entries.pop(key, None)

        if expired_keys:
            logger.debug(f"Cleaned up {len(expired_keys)} expired cache entries")

        return len(expired_keys)

    @property
    def size(self) -> int:
        """Return the number of entries in the cache."""
        return len(self._entries)


class PinOnceAssetCache:
    """
    Write-once map of asset keys to content ids.

    Once a key has a content id it is never regenerated. The map can be
    seeded from and flushed to a JSON file so pins survive restarts.
    """

    def __init__(self, pinned: Optional[Dict[str, str]] = None):
        self._pinned: Dict[str, str] = dict(pinned or {})
        self._flights = SingleFlight()
        self._dirty = False

    def get(self, key: str) -> Optional[str]:
        return self._pinned.get(key)

    async def get_or_create(self, key: str, create: AssetFactory) -> str:
        """
        Return the content id for `key`, pinning it on first use.

        Args:
            key: The asset key.
            create: Coroutine factory that renders and uploads, returning a content id.

        Returns:
            The content id recorded for `key`.
        """
        existing = self._pinned.get(key)
        if existing is not None:
            return existing

        async def populate() -> str:
            content_id = await create()
            # First result wins
            recorded = self._pinned.setdefault(key, content_id)
            self._dirty = True
            logger.info(f"Pinned {key} as {recorded}")
            return recorded

        return await self._flights.run(key, populate)

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of the key -> content id map."""
        return dict(self._pinned)

    @property
    def dirty(self) -> bool:
        """True when pins were added since the last save."""
        return self._dirty

    @property
    def size(self) -> int:
        return len(self._pinned)

    @classmethod
    def load(cls, path: Path) -> "PinOnceAssetCache":
        """
        Create a cache seeded from a JSON pin map file.

        A missing or unreadable file yields an empty cache.
        """
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading pin map {path}: {e}")
            return cls()
        if not isinstance(data, dict):
            logger.error(f"Ignoring pin map {path}: expected a JSON object")
            return cls()
        return cls({str(key): str(value) for key, value in data.items()})

    def save(self, path: Path) -> bool:
        """
        Write the pin map to `path` if it changed.

        May run on a scheduler thread while pins are being added: the dirty
        flag is cleared before the snapshot is taken, so a pin recorded during
        the write leaves the cache dirty for the next flush.

        Returns:
            True if the file was written.
        """
        if not self._dirty:
            return False
        self._dirty = False
        pinned = self.snapshot()
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump(pinned, f)
        except OSError:
            self._dirty = True
            raise
        logger.info(f"Pin map saved to {path} ({len(pinned)} entries)")
        return True
