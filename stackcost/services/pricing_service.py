"""
Cost resolution service.
Prices single resources and whole resource diffs.
"""
import asyncio
import logging
from typing import Iterable, List, Optional

from stackcost.core.config import CacheSettings, UsageAssumptions, config
from stackcost.domain.cost_models import (
    CostDelta,
    ModifiedResource,
    ModifiedResourceCost,
    MonthlyCost,
    Resource,
    ResourceCost,
    ResourceDiff,
)
from stackcost.pricing.calculator_registry import CalculatorRegistry, build_default_calculators
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.price_cache import create_price_cache
from stackcost.pricing.pricing_client import PricingClient
from stackcost.utils.debug_logger import PricingDebugLogger


logger = logging.getLogger(__name__)


class PricingService:
    """Service for estimating monthly costs of template resources."""

    def __init__(
        self,
        pricing_client: Optional[PricingClient] = None,
        usage_assumptions: Optional[UsageAssumptions] = None,
        excluded_resource_types: Optional[Iterable[str]] = None,
        cache_settings: Optional[CacheSettings] = None,
        calculators: Optional[Iterable[ResourceCostCalculator]] = None,
        debug_logger: Optional[PricingDebugLogger] = None,
    ):
        """
        Initialize the service.

        Args:
            pricing_client: Client used for price lookups. When omitted, one is
                created against the AWS Price List API with a cache built
                from ``cache_settings``.
            usage_assumptions: Usage assumptions for usage-based calculators
            excluded_resource_types: Resource types reported as zero cost
                without any price lookup
            cache_settings: Cache settings (defaults to configuration)
            calculators: Calculators in dispatch order (defaults to the
                built-in set)
            debug_logger: Diagnostic logger (defaults to PRICING_DEBUG)
        """
        self.debug_logger = debug_logger or PricingDebugLogger(enabled=config.PRICING_DEBUG)

        if pricing_client is None:
            settings = cache_settings or CacheSettings.from_config()
            pricing_client = PricingClient(
                cache=create_price_cache(settings, self.debug_logger),
                ttl_seconds=settings.ttl_seconds,
                debug_logger=self.debug_logger,
            )
        self.pricing_client = pricing_client

        if calculators is None:
            calculators = build_default_calculators(usage_assumptions, self.debug_logger)
        self.registry = CalculatorRegistry(calculators)
        self.excluded_resource_types = frozenset(excluded_resource_types or ())
        self._destroyed = False

    def is_excluded(self, resource_type: str) -> bool:
        return resource_type in self.excluded_resource_types

    async def get_resource_cost(
        self,
        resource: Resource,
        region: str,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        """
        Estimate the monthly cost of one resource.

        Args:
            resource: Resource to price
            region: AWS region code
            template_resources: Other resources, for reference resolution

        Returns:
            MonthlyCost; never raises
        """
        if self.is_excluded(resource.type):
            return MonthlyCost.excluded(resource.type)

        calculator = self.registry.find_calculator(resource)
        if calculator is None:
            return MonthlyCost.unsupported(resource.type)

        try:
            return await calculator.calculate_cost(resource, region, self.pricing_client, template_resources)
        except Exception as error:
            logger.error(f"Cost calculation failed for {resource.logical_id} ({resource.type}): {error}")
            return MonthlyCost.failed(error)

    async def _resource_cost(
        self,
        resource: Resource,
        region: str,
        template_resources: List[Resource],
    ) -> ResourceCost:
        cost = await self.get_resource_cost(resource, region, template_resources)
        return ResourceCost(logical_id=resource.logical_id, type=resource.type, monthly_cost=cost)

    async def _modified_cost(
        self,
        resource: ModifiedResource,
        region: str,
        template_resources: List[Resource],
    ) -> ModifiedResourceCost:
        old_cost, new_cost = await asyncio.gather(
            self.get_resource_cost(resource.old_resource(), region, template_resources),
            self.get_resource_cost(resource.new_resource(), region, template_resources),
        )
        return ModifiedResourceCost(
            logical_id=resource.logical_id,
            type=resource.type,
            old_monthly_cost=old_cost,
            new_monthly_cost=new_cost,
            cost_delta=new_cost.amount - old_cost.amount,
        )

    async def get_cost_delta(self, diff: ResourceDiff, region: str) -> CostDelta:
        """
        Estimate the net monthly cost change of a diff.

        Excluded resource types are dropped from the result. Per-resource
        estimates run concurrently and keep the input order.
        """
        added = [r for r in diff.added if not self.is_excluded(r.type)]
        removed = [r for r in diff.removed if not self.is_excluded(r.type)]
        modified = [r for r in diff.modified if not self.is_excluded(r.type)]
        template_resources = diff.all_resources()

        added_costs, removed_costs, modified_costs = await asyncio.gather(
            asyncio.gather(*(self._resource_cost(r, region, template_resources) for r in added)),
            asyncio.gather(*(self._resource_cost(r, region, template_resources) for r in removed)),
            asyncio.gather(*(self._modified_cost(r, region, template_resources) for r in modified)),
        )

        total_delta = (
            sum(cost.monthly_cost.amount for cost in added_costs)
            - sum(cost.monthly_cost.amount for cost in removed_costs)
            + sum(cost.cost_delta for cost in modified_costs)
        )

        return CostDelta(
            total_delta=total_delta,
            added_costs=list(added_costs),
            removed_costs=list(removed_costs),
            modified_costs=list(modified_costs),
        )

    async def destroy(self) -> None:
        """Release the pricing client and its cache. Safe to call more than once."""
        if self._destroyed:
            return
        self._destroyed = True
        await self.pricing_client.destroy()
