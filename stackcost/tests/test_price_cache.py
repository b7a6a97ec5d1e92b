"""
Tests for the two-tier price cache.
"""

import json
import os
import pytest
from unittest.mock import Mock, AsyncMock, patch

from stackcost.core.config import CacheSettings
from stackcost.domain.price_models import PriceFilter, PriceQuery
from stackcost.pricing.price_cache import (
    PersistentPriceStore,
    TieredPriceCache,
    create_price_cache,
)
from stackcost.pricing.pricing_client import PricingClient


@pytest.fixture
def cache_dir(tmp_path):
    return str(tmp_path / "cache")


def _cache(cache_dir, ttl_seconds=3600):
    return TieredPriceCache(PersistentPriceStore(cache_dir, "pricing"), ttl_seconds=ttl_seconds)


@pytest.mark.asyncio
async def test_set_then_get_returns_value(cache_dir):
    """A stored price is returned before it expires."""
    cache = _cache(cache_dir)
    await cache.set("AmazonEC2:US East (N. Virginia):instanceType:t3.micro", 0.0104)

    lookup = await cache.get("AmazonEC2:US East (N. Virginia):instanceType:t3.micro")

    assert lookup.hit is True
    assert lookup.value == 0.0104


@pytest.mark.asyncio
async def test_missing_key_is_a_miss(cache_dir):
    cache = _cache(cache_dir)
    lookup = await cache.get("nothing")
    assert lookup.hit is False
    assert lookup.value is None


@pytest.mark.asyncio
async def test_none_value_is_cached(cache_dir):
    """A known catalog miss is cached as a hit with a None value."""
    cache = _cache(cache_dir)
    await cache.set("k", None)

    lookup = await cache.get("k")

    assert lookup.hit is True
    assert lookup.value is None


@pytest.mark.asyncio
async def test_entry_expires_after_ttl(cache_dir):
    """Entries are a miss once their TTL has elapsed."""
    cache = _cache(cache_dir, ttl_seconds=60)
    with patch('stackcost.pricing.price_cache._now_ms', return_value=1_000_000):
        await cache.set("k", 1.5)

    with patch('stackcost.pricing.price_cache._now_ms', return_value=1_000_000 + 59_000):
        assert (await cache.get("k")).hit is True

    with patch('stackcost.pricing.price_cache._now_ms', return_value=1_000_000 + 60_000):
        assert (await cache.get("k")).hit is False

    # Expired entries are removed from the persistent tier as well
    store = PersistentPriceStore(cache_dir, "pricing")
    assert await store.get("k") is None


@pytest.mark.asyncio
async def test_persistent_tier_survives_new_instance(cache_dir):
    """A new cache instance reads prices written by a previous one."""
    first = _cache(cache_dir)
    await first.set("k", 2.25)
    await first.destroy()

    second = _cache(cache_dir)
    lookup = await second.get("k")

    assert lookup.hit is True
    assert lookup.value == 2.25
    assert os.path.exists(os.path.join(cache_dir, "pricing.json"))


@pytest.mark.asyncio
async def test_persistent_hit_is_promoted_to_memory(cache_dir):
    first = _cache(cache_dir)
    await first.set("k", 3.0)

    second = _cache(cache_dir)
    await second.get("k")

    assert second.memory.get("k") is not None


@pytest.mark.asyncio
async def test_corrupt_cache_file_is_treated_as_empty(cache_dir):
    """Unreadable cache files never raise."""
    os.makedirs(cache_dir, exist_ok=True)
    with open(os.path.join(cache_dir, "pricing.json"), "w") as f:
        f.write("{not json")

    cache = _cache(cache_dir)

    assert (await cache.get("k")).hit is False
    await cache.set("k", 1.0)
    assert (await cache.get("k")).value == 1.0


@pytest.mark.asyncio
async def test_failed_persistent_write_is_absorbed(tmp_path):
    """A cache directory that cannot be created degrades to an uncached value."""
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("occupied")
    cache = _cache(str(blocker))

    await cache.set("k", 1.0)

    assert not os.path.exists(os.path.join(str(blocker), "pricing.json"))
    assert await PersistentPriceStore(str(blocker), "pricing").get("k") is None


@pytest.mark.asyncio
async def test_lookup_succeeds_when_cache_writes_fail(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("occupied")
    catalog = Mock()
    catalog.fetch_prices = AsyncMock(return_value=[0.0104])
    client = PricingClient(catalog=catalog, cache=_cache(str(blocker)))
    query = PriceQuery(
        service_code='AmazonEC2',
        region='US East (N. Virginia)',
        filters=(PriceFilter('instanceType', 't3.micro'),),
    )

    assert await client.get_price(query) == 0.0104
    assert await client.get_price(query) == 0.0104
    assert blocker.read_text() == "occupied"


@pytest.mark.asyncio
async def test_cache_file_format(cache_dir):
    cache = _cache(cache_dir)
    with patch('stackcost.pricing.price_cache._now_ms', return_value=5_000):
        await cache.set("k", 0.5, ttl_seconds=10)

    with open(os.path.join(cache_dir, "pricing.json")) as f:
        data = json.load(f)

    assert data == {"k": {"value": 0.5, "expires_at": 15_000}}


@pytest.mark.asyncio
async def test_destroy_is_idempotent(cache_dir):
    """After destroy, reads miss and writes are ignored."""
    cache = _cache(cache_dir)
    await cache.set("k", 1.0)

    await cache.destroy()
    await cache.destroy()

    assert (await cache.get("k")).hit is False
    await cache.set("other", 2.0)
    assert cache.memory.get("other") is None


@pytest.mark.asyncio
async def test_prune_expired_and_stats(cache_dir):
    cache = _cache(cache_dir, ttl_seconds=10)
    with patch('stackcost.pricing.price_cache._now_ms', return_value=0):
        await cache.set("old", 1.0)
    with patch('stackcost.pricing.price_cache._now_ms', return_value=20_000):
        await cache.set("new", 2.0)
        stats = await cache.stats()
        assert stats == {"total_entries": 2, "fresh_entries": 1, "stale_entries": 1}

        removed = await cache.prune_expired()
        assert removed == 1
        assert (await cache.stats())["total_entries"] == 1


@pytest.mark.asyncio
async def test_clear_removes_everything(cache_dir):
    cache = _cache(cache_dir)
    await cache.set("k", 1.0)
    await cache.clear()
    assert (await cache.get("k")).hit is False


def test_create_price_cache_disabled_returns_none(cache_dir):
    settings = CacheSettings(enabled=False, cache_dir=cache_dir)
    assert create_price_cache(settings) is None


def test_create_price_cache_uses_settings(cache_dir):
    settings = CacheSettings(enabled=True, ttl_seconds=120, cache_dir=cache_dir, namespace="test-ns")
    cache = create_price_cache(settings)
    assert cache.ttl_seconds == 120
    assert cache.persistent.path == os.path.join(cache_dir, "test-ns.json")
