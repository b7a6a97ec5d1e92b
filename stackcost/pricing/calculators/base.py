"""
Base contract for per-service cost calculators.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from stackcost.core.config import UsageAssumptions, config
from stackcost.domain.cost_models import MonthlyCost, Resource
from stackcost.domain.price_models import PriceFilter, PriceQuery
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import normalize_region
from stackcost.utils.debug_logger import PricingDebugLogger, NULL_DEBUG_LOGGER


HOURS_PER_MONTH = config.HOURS_PER_MONTH


def to_int(value: Any) -> int:
    """Parse a template count property; unparseable values become 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ResourceCostCalculator(ABC):
    """
    Computes the monthly cost of one resource type.

    Subclasses implement ``supports`` and ``calculate_cost``. Calculators
    handle their own failures and always return a MonthlyCost.
    """

    def __init__(
        self,
        usage_assumptions: Optional[UsageAssumptions] = None,
        debug_logger: Optional[PricingDebugLogger] = None,
    ):
        self.usage = usage_assumptions or UsageAssumptions()
        self.debug_logger = debug_logger or NULL_DEBUG_LOGGER

    @abstractmethod
    def supports(self, resource_type: str) -> bool:
        """Whether this calculator handles the given resource type tag."""

    def can_calculate(self, resource: Resource) -> bool:
        """Whether this calculator handles the given resource. Defaults to ``supports``."""
        return self.supports(resource.type)

    @abstractmethod
    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        """
        Estimate the monthly cost of a resource.

        Args:
            resource: Resource to price
            region: AWS region code (e.g., 'us-east-1')
            pricing_client: Client used for all price lookups
            template_resources: Other resources of the template, used to
                resolve references

        Returns:
            MonthlyCost; never raises
        """

    def build_query(self, service_code: str, region: str, filters: Dict[str, str]) -> PriceQuery:
        """Build a TERM_MATCH price query for a region code."""
        return PriceQuery(
            service_code=service_code,
            region=normalize_region(region, self.debug_logger),
            filters=tuple(PriceFilter(field=name, value=value) for name, value in filters.items()),
        )
