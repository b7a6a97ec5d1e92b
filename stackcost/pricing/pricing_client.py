"""
Price lookup client.
Resolves a PriceQuery to a single unit price through the cache and the
remote catalog.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Protocol

from stackcost.domain.price_models import PriceQuery
from stackcost.pricing.errors import PricingAPIError
from stackcost.pricing.price_cache import TieredPriceCache
from stackcost.utils.debug_logger import PricingDebugLogger, NULL_DEBUG_LOGGER


logger = logging.getLogger(__name__)


class PriceCatalog(Protocol):
    async def fetch_prices(self, query: PriceQuery) -> List[float]:
        ...


class PricingClient:
    """
    Cache-checked access to the price catalog.

    Concurrent lookups of the same query share one catalog call.
    """

    def __init__(
        self,
        catalog: Optional[PriceCatalog] = None,
        cache: Optional[TieredPriceCache] = None,
        ttl_seconds: Optional[int] = None,
        debug_logger: Optional[PricingDebugLogger] = None,
    ):
        if catalog is None:
            from stackcost.pricing.aws_price_catalog import AWSPriceCatalog
            catalog = AWSPriceCatalog()
        self.catalog = catalog
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.debug_logger = debug_logger or NULL_DEBUG_LOGGER
        self._in_flight: Dict[str, asyncio.Future] = {}

    async def get_price(self, query: PriceQuery) -> Optional[float]:
        """
        Get the unit price for a query.

        Args:
            query: Price query; ``query.region`` must already be a catalog
                location name

        Returns:
            Lowest matching USD unit price, or None when nothing matches

        Raises:
            PricingAPIError: If the catalog call fails. Failures are not cached.
        """
        key = query.cache_key()

        if self.cache is not None:
            lookup = await self.cache.get(key)
            if lookup.hit:
                return lookup.value

        pending = self._in_flight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            price = await self._fetch(query)
            if self.cache is not None:
                await self.cache.set(key, price, self.ttl_seconds)
        except asyncio.CancelledError:
            # Waiters see a pricing failure, not the owner's cancellation
            self._fail_waiters(future, PricingAPIError(f"Price lookup cancelled: {key}"))
            raise
        except Exception as error:
            self._fail_waiters(future, error)
            raise
        else:
            future.set_result(price)
            return price
        finally:
            self._in_flight.pop(key, None)

    @staticmethod
    def _fail_waiters(future: asyncio.Future, error: BaseException) -> None:
        future.set_exception(error)
        # Mark retrieved so an unawaited future does not warn
        future.exception()

    async def _fetch(self, query: PriceQuery) -> Optional[float]:
        filters = [{"field": f.field, "value": f.value, "type": f.match_kind} for f in query.filters]
        self.debug_logger.log_price_query(query.service_code, query.region, filters)
        try:
            prices = await self.catalog.fetch_prices(query)
        except PricingAPIError as error:
            self.debug_logger.log_pricing_failure(query.service_code, query.region, error)
            raise
        # One candidate per matching product; the cheapest product wins
        price = min(prices) if prices else None
        self.debug_logger.log_price_response(query.service_code, price, len(prices))
        return price

    async def destroy(self) -> None:
        """Release the cache. Safe to call more than once."""
        if self.cache is not None:
            await self.cache.destroy()
