"""
Tests for the price lookup client.
"""

import asyncio
import logging
import pytest
from unittest.mock import Mock, AsyncMock

from stackcost.domain.price_models import PriceFilter, PriceQuery
from stackcost.pricing.errors import PricingAPIError
from stackcost.pricing.price_cache import PersistentPriceStore, TieredPriceCache
from stackcost.pricing.pricing_client import PricingClient
from stackcost.utils.debug_logger import PricingDebugLogger


def _ec2_query(*filters):
    return PriceQuery(
        service_code='AmazonEC2',
        region='US East (N. Virginia)',
        filters=filters or (PriceFilter('instanceType', 't3.micro'),),
    )


def test_cache_key_ignores_filter_order():
    """Logically identical queries share a cache key."""
    a = _ec2_query(PriceFilter('instanceType', 't3.micro'), PriceFilter('tenancy', 'Shared'))
    b = _ec2_query(PriceFilter('tenancy', 'Shared'), PriceFilter('instanceType', 't3.micro'))

    assert a.cache_key() == b.cache_key()
    assert a.cache_key() == 'AmazonEC2:US East (N. Virginia):instanceType:t3.micro|tenancy:Shared'


def test_boto_filters_include_location():
    query = _ec2_query()
    assert query.to_boto_filters() == [
        {'Type': 'TERM_MATCH', 'Field': 'instanceType', 'Value': 't3.micro'},
        {'Type': 'TERM_MATCH', 'Field': 'location', 'Value': 'US East (N. Virginia)'},
    ]


@pytest.mark.asyncio
async def test_returns_lowest_candidate_price(mock_catalog):
    mock_catalog.fetch_prices = AsyncMock(return_value=[0.02, 0.0104, 0.5])
    client = PricingClient(catalog=mock_catalog)

    assert await client.get_price(_ec2_query()) == 0.0104


@pytest.mark.asyncio
async def test_no_match_returns_none(mock_catalog):
    mock_catalog.fetch_prices = AsyncMock(return_value=[])
    client = PricingClient(catalog=mock_catalog)

    assert await client.get_price(_ec2_query()) is None


@pytest.mark.asyncio
async def test_warm_cache_skips_catalog(mock_catalog, tmp_path):
    """Second identical lookup is served from cache with the same value."""
    cache = TieredPriceCache(PersistentPriceStore(str(tmp_path), "pricing"))
    client = PricingClient(catalog=mock_catalog, cache=cache)

    first = await client.get_price(_ec2_query())
    second = await client.get_price(_ec2_query())

    assert first == second == 0.0104
    assert mock_catalog.fetch_prices.await_count == 1


@pytest.mark.asyncio
async def test_catalog_miss_is_cached(mock_catalog):
    mock_catalog.fetch_prices = AsyncMock(return_value=[])
    client = PricingClient(catalog=mock_catalog, cache=TieredPriceCache())

    assert await client.get_price(_ec2_query()) is None
    assert await client.get_price(_ec2_query()) is None
    assert mock_catalog.fetch_prices.await_count == 1


@pytest.mark.asyncio
async def test_errors_propagate_and_are_not_cached(mock_catalog):
    """Transport failures raise and a later lookup calls the catalog again."""
    mock_catalog.fetch_prices = AsyncMock(side_effect=[PricingAPIError("throttled"), [0.3]])
    client = PricingClient(catalog=mock_catalog, cache=TieredPriceCache())

    with pytest.raises(PricingAPIError):
        await client.get_price(_ec2_query())

    assert await client.get_price(_ec2_query()) == 0.3
    assert mock_catalog.fetch_prices.await_count == 2


@pytest.mark.asyncio
async def test_concurrent_identical_lookups_share_one_call():
    """Concurrent lookups of the same query are coalesced."""
    release = asyncio.Event()

    async def slow_fetch(query):
        await release.wait()
        return [0.07]

    catalog = Mock()
    catalog.fetch_prices = AsyncMock(side_effect=slow_fetch)
    client = PricingClient(catalog=catalog, cache=TieredPriceCache())

    tasks = [asyncio.ensure_future(client.get_price(_ec2_query())) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*tasks)

    assert results == [0.07, 0.07, 0.07]
    assert catalog.fetch_prices.await_count == 1


@pytest.mark.asyncio
async def test_concurrent_lookup_failure_reaches_all_waiters():
    release = asyncio.Event()

    async def failing_fetch(query):
        await release.wait()
        raise PricingAPIError("boom")

    catalog = Mock()
    catalog.fetch_prices = AsyncMock(side_effect=failing_fetch)
    client = PricingClient(catalog=catalog)

    tasks = [asyncio.ensure_future(client.get_price(_ec2_query())) for _ in range(2)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(result, PricingAPIError) for result in results)
    assert catalog.fetch_prices.await_count == 1


@pytest.mark.asyncio
async def test_cancelled_lookup_fails_waiters_with_pricing_error():
    """Cancelling the lookup that owns the catalog call does not cancel its waiters."""
    release = asyncio.Event()

    async def slow_fetch(query):
        await release.wait()
        return [0.07]

    catalog = Mock()
    catalog.fetch_prices = AsyncMock(side_effect=slow_fetch)
    client = PricingClient(catalog=catalog)

    owner = asyncio.ensure_future(client.get_price(_ec2_query()))
    waiter = asyncio.ensure_future(client.get_price(_ec2_query()))
    await asyncio.sleep(0)
    owner.cancel()
    results = await asyncio.gather(owner, waiter, return_exceptions=True)

    assert isinstance(results[0], asyncio.CancelledError)
    assert isinstance(results[1], PricingAPIError)
    assert "cancelled" in str(results[1])

    # The next lookup starts a fresh catalog call
    release.set()
    assert await client.get_price(_ec2_query()) == 0.07


@pytest.mark.asyncio
async def test_debug_events_logged(mock_catalog, caplog):
    test_logger = logging.getLogger('stackcost.tests.client')
    client = PricingClient(
        catalog=mock_catalog,
        cache=TieredPriceCache(debug_logger=PricingDebugLogger(True, test_logger)),
        debug_logger=PricingDebugLogger(True, test_logger),
    )

    with caplog.at_level(logging.DEBUG, logger='stackcost.tests.client'):
        await client.get_price(_ec2_query())
        await client.get_price(_ec2_query())

    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith('Pricing API Query') for m in messages)
    assert any(m.startswith('Pricing API Response') for m in messages)
    assert any(m.startswith('Cache MISS') for m in messages)
    assert any(m.startswith('Cache HIT') and '"memory"' in m for m in messages)


@pytest.mark.asyncio
async def test_failure_event_reports_retryable(mock_catalog, caplog):
    test_logger = logging.getLogger('stackcost.tests.failure')
    mock_catalog.fetch_prices = AsyncMock(side_effect=PricingAPIError("denied", retryable=False))
    client = PricingClient(catalog=mock_catalog, debug_logger=PricingDebugLogger(True, test_logger))

    with caplog.at_level(logging.DEBUG, logger='stackcost.tests.failure'):
        with pytest.raises(PricingAPIError):
            await client.get_price(_ec2_query())

    failures = [r.getMessage() for r in caplog.records if r.getMessage().startswith('Pricing Lookup Failed')]
    assert len(failures) == 1
    assert '"retryable": false' in failures[0]


@pytest.mark.asyncio
async def test_disabled_debug_logger_emits_nothing(mock_catalog, caplog):
    test_logger = logging.getLogger('stackcost.tests.quiet')
    client = PricingClient(catalog=mock_catalog, debug_logger=PricingDebugLogger(False, test_logger))

    with caplog.at_level(logging.DEBUG, logger='stackcost.tests.quiet'):
        assert await client.get_price(_ec2_query()) == 0.0104

    assert caplog.records == []


@pytest.mark.asyncio
async def test_destroy_releases_cache(mock_catalog):
    cache = TieredPriceCache()
    client = PricingClient(catalog=mock_catalog, cache=cache)
    await client.get_price(_ec2_query())

    await client.destroy()
    await client.destroy()

    assert (await cache.get(_ec2_query().cache_key())).hit is False
