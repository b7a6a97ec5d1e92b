"""
Two-tier price cache.
A process-local memory tier in front of a JSON file per namespace.
"""
import asyncio
import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from typing import Dict, Optional

from stackcost.core.config import CacheSettings
from stackcost.domain.price_models import CacheEntry
from stackcost.utils.debug_logger import PricingDebugLogger, NULL_DEBUG_LOGGER


logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheLookup:
    """Result of a cache read. ``value`` may be None on a hit."""
    hit: bool
    value: Optional[float] = None


MISS = CacheLookup(hit=False)


class MemoryPriceStore:
    """In-memory cache entries keyed by query key."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def set(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> Dict[str, CacheEntry]:
        return dict(self._entries)


class PersistentPriceStore:
    """
    File-backed cache entries for one namespace.

    The file ``<cache_dir>/<namespace>.json`` maps each key to
    ``{"value": float | null, "expires_at": epoch-ms}``. It is loaded on first
    access and rewritten atomically on every change. I/O failures are logged
    and treated as a miss.
    """

    def __init__(self, cache_dir: str, namespace: str):
        self.path = os.path.join(cache_dir, f"{namespace}.json")
        self._entries: Optional[Dict[str, CacheEntry]] = None
        self._lock = asyncio.Lock()

    def _read_file(self) -> Dict[str, CacheEntry]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return {
                key: CacheEntry(key=key, value=item.get("value"), expires_at=int(item["expires_at"]))
                for key, item in raw.items()
            }
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as error:
            logger.warning(f"Ignoring unreadable price cache {self.path}: {error}")
            return {}

    def _write_file(self, entries: Dict[str, CacheEntry]) -> None:
        directory = os.path.dirname(self.path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump({key: entry.to_dict() for key, entry in entries.items()}, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except (OSError, ValueError) as error:
            logger.warning(f"Failed to write price cache {self.path}: {error}")

    async def _load(self) -> Dict[str, CacheEntry]:
        if self._entries is None:
            self._entries = await asyncio.to_thread(self._read_file)
        return self._entries

    async def get(self, key: str) -> Optional[CacheEntry]:
        async with self._lock:
            entries = await self._load()
            return entries.get(key)

    async def set(self, entry: CacheEntry) -> None:
        async with self._lock:
            entries = await self._load()
            entries[entry.key] = entry
            await asyncio.to_thread(self._write_file, dict(entries))

    async def delete(self, key: str) -> None:
        async with self._lock:
            entries = await self._load()
            if entries.pop(key, None) is not None:
                await asyncio.to_thread(self._write_file, dict(entries))

    async def replace_all(self, new_entries: Dict[str, CacheEntry]) -> None:
        async with self._lock:
            self._entries = dict(new_entries)
            await asyncio.to_thread(self._write_file, dict(new_entries))

    async def entries(self) -> Dict[str, CacheEntry]:
        async with self._lock:
            return dict(await self._load())


class TieredPriceCache:
    """
    Memory tier in front of a persistent tier.

    Persistent hits are promoted into memory. Expired entries are dropped
    from both tiers and reported as a miss.
    """

    def __init__(
        self,
        persistent: Optional[PersistentPriceStore] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        debug_logger: Optional[PricingDebugLogger] = None,
    ):
        self.memory = MemoryPriceStore()
        self.persistent = persistent
        self.ttl_seconds = ttl_seconds
        self.debug_logger = debug_logger or NULL_DEBUG_LOGGER
        self._destroyed = False

    async def get(self, key: str) -> CacheLookup:
        """
        Look up a cached price.

        Returns:
            CacheLookup with ``hit`` set when a fresh entry exists. A hit may
            carry a None value, which records a known catalog miss.
        """
        if self._destroyed:
            return MISS

        now = _now_ms()
        entry = self.memory.get(key)
        if entry is not None:
            if not entry.is_expired(now):
                self.debug_logger.log_cache_status(key, True, "memory")
                return CacheLookup(hit=True, value=entry.value)
            self.memory.delete(key)

        if self.persistent is not None:
            entry = await self.persistent.get(key)
            if entry is not None:
                if not entry.is_expired(now):
                    self.memory.set(entry)
                    self.debug_logger.log_cache_status(key, True, "persistent")
                    return CacheLookup(hit=True, value=entry.value)
                await self.persistent.delete(key)

        self.debug_logger.log_cache_status(key, False)
        return MISS

    async def set(self, key: str, value: Optional[float], ttl_seconds: Optional[int] = None) -> None:
        """Store a price (or a known miss) until now + ttl."""
        if self._destroyed:
            return
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        entry = CacheEntry(key=key, value=value, expires_at=_now_ms() + ttl * 1000)
        self.memory.set(entry)
        if self.persistent is not None:
            await self.persistent.set(entry)

    async def clear(self) -> None:
        self.memory.clear()
        if self.persistent is not None:
            await self.persistent.replace_all({})

    async def prune_expired(self) -> int:
        """
        Remove expired entries from both tiers.

        Returns:
            Number of entries removed from the persistent tier (or memory when
            no persistent tier is configured).
        """
        now = _now_ms()
        removed = 0
        for key, entry in self.memory.entries().items():
            if entry.is_expired(now):
                self.memory.delete(key)
                removed += 1
        if self.persistent is not None:
            entries = await self.persistent.entries()
            fresh = {key: entry for key, entry in entries.items() if not entry.is_expired(now)}
            removed = len(entries) - len(fresh)
            if removed:
                await self.persistent.replace_all(fresh)
        return removed

    async def stats(self) -> Dict[str, int]:
        """Entry counts of the backing tier."""
        if self.persistent is not None:
            entries = await self.persistent.entries()
        else:
            entries = self.memory.entries()
        now = _now_ms()
        fresh = sum(1 for entry in entries.values() if not entry.is_expired(now))
        return {
            "total_entries": len(entries),
            "fresh_entries": fresh,
            "stale_entries": len(entries) - fresh,
        }

    async def destroy(self) -> None:
        """Release the cache. Safe to call more than once."""
        if self._destroyed:
            return
        self._destroyed = True
        self.memory.clear()


def create_price_cache(
    settings: CacheSettings,
    debug_logger: Optional[PricingDebugLogger] = None,
) -> Optional[TieredPriceCache]:
    """
    Build the cache described by ``settings``.

    Returns:
        A TieredPriceCache, or None when caching is disabled.
    """
    if not settings.enabled:
        return None
    persistent = PersistentPriceStore(settings.cache_dir, settings.namespace)
    return TieredPriceCache(
        persistent=persistent,
        ttl_seconds=settings.ttl_seconds,
        debug_logger=debug_logger,
    )
