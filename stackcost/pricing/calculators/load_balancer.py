"""
Elastic Load Balancing v2 cost calculators.
Application and network load balancers share one resource type and are
told apart by the ``Type`` property.
"""
import logging
from abc import abstractmethod
from typing import List, Optional, Tuple

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

LOAD_BALANCER_TYPE = "AWS::ElasticLoadBalancingV2::LoadBalancer"

DEFAULT_NEW_CONNECTIONS_PER_SECOND = 25
DEFAULT_ACTIVE_CONNECTIONS_PER_MINUTE = 3000
DEFAULT_PROCESSED_BYTES_GB = 100


class _LoadBalancerCalculator(ResourceCostCalculator):
    """Hourly charge plus capacity units, where capacity is the busiest dimension."""

    product_family = ""
    display_name = ""
    unit_name = "LCU"
    new_connections_per_unit = 1.0
    active_connections_per_unit = 1.0

    def supports(self, resource_type: str) -> bool:
        return resource_type == LOAD_BALANCER_TYPE

    @abstractmethod
    def usage_values(self) -> Tuple[float, float, float]:
        """(new connections/sec, active connections/min, processed GB/month)"""

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        new_connections, active_connections, processed_gb = self.usage_values()
        from_new = new_connections / self.new_connections_per_unit
        from_active = active_connections / self.active_connections_per_unit
        from_bytes = processed_gb / HOURS_PER_MONTH
        units_per_hour = max(from_new, from_active, from_bytes)

        breakdown = [
            f"{self.unit_name} consumption: {units_per_hour:.2f} {self.unit_name}/hour based on:",
            f"  - New connections: {new_connections:g}/sec -> {from_new:.2f} {self.unit_name}",
            f"  - Active connections: {active_connections:g}/min -> {from_active:.2f} {self.unit_name}",
            f"  - Processed data: {processed_gb:g} GB/month -> {from_bytes:.2f} {self.unit_name}",
        ]

        prefix = get_region_prefix(region)
        try:
            hourly_rate = await pricing_client.get_price(
                self.build_query("AWSELB", region, {
                    "productFamily": self.product_family,
                    "usagetype": f"{prefix}LoadBalancerUsage",
                })
            )
            unit_rate = await pricing_client.get_price(
                self.build_query("AWSELB", region, {
                    "productFamily": self.product_family,
                    "usagetype": f"{prefix}LCUUsage",
                })
            )
        except Exception as error:
            logger.warning(f"{self.display_name} pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error, *breakdown)

        if hourly_rate is None or unit_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for {self.display_name} in region {region}",
                *breakdown,
            )

        hourly_cost = hourly_rate * HOURS_PER_MONTH
        unit_cost = unit_rate * units_per_hour * HOURS_PER_MONTH
        total = hourly_cost + unit_cost

        return MonthlyCost(
            amount=total,
            confidence=Confidence.MEDIUM,
            assumptions=[
                f"Hourly rate: ${hourly_rate:.4f}/hour x {HOURS_PER_MONTH} hours = ${hourly_cost:.2f}/month",
                *breakdown,
                f"{self.unit_name} cost: ${unit_rate:.4f}/{self.unit_name}/hour x {units_per_hour:.2f} "
                f"{self.unit_name} x {HOURS_PER_MONTH} hours = ${unit_cost:.2f}/month",
                f"Total: ${total:.2f}/month",
            ],
        )


class ALBCalculator(_LoadBalancerCalculator):
    """Application load balancers; ``Type`` absent or ``application``."""

    product_family = "Load Balancer-Application"
    display_name = "Application Load Balancer"
    unit_name = "LCU"
    # One LCU: 25 new connections/sec, 3000 active connections/min, 1 GB/hour
    new_connections_per_unit = 25.0
    active_connections_per_unit = 3000.0

    def can_calculate(self, resource: Resource) -> bool:
        lb_type = resource.properties.get("Type")
        return self.supports(resource.type) and (not lb_type or lb_type == "application")

    def usage_values(self) -> Tuple[float, float, float]:
        return (
            _or_default(self.usage.alb_new_connections_per_second, DEFAULT_NEW_CONNECTIONS_PER_SECOND),
            _or_default(self.usage.alb_active_connections_per_minute, DEFAULT_ACTIVE_CONNECTIONS_PER_MINUTE),
            _or_default(self.usage.alb_processed_bytes_gb, DEFAULT_PROCESSED_BYTES_GB),
        )


class NLBCalculator(_LoadBalancerCalculator):
    """Network load balancers; ``Type`` is ``network``."""

    product_family = "Load Balancer-Network"
    display_name = "Network Load Balancer"
    unit_name = "NLCU"
    # One NLCU: 800 new connections/sec, 100,000 active connections/min, 1 GB/hour
    new_connections_per_unit = 800.0
    active_connections_per_unit = 100_000.0

    def can_calculate(self, resource: Resource) -> bool:
        return self.supports(resource.type) and resource.properties.get("Type") == "network"

    def usage_values(self) -> Tuple[float, float, float]:
        return (
            _or_default(self.usage.nlb_new_connections_per_second, DEFAULT_NEW_CONNECTIONS_PER_SECOND),
            _or_default(self.usage.nlb_active_connections_per_minute, DEFAULT_ACTIVE_CONNECTIONS_PER_MINUTE),
            _or_default(self.usage.nlb_processed_bytes_gb, DEFAULT_PROCESSED_BYTES_GB),
        )


def _or_default(value: Optional[float], default: float) -> float:
    return float(default if value is None else value)
