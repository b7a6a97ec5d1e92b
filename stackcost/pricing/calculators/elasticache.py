"""
ElastiCache cluster cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

ENGINE_NAMES = {
    "redis": "Redis",
    "memcached": "Memcached",
}


class ElastiCacheCalculator(ResourceCostCalculator):
    """Prices AWS::ElastiCache::CacheCluster as node-hours."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::ElastiCache::CacheCluster"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        node_type = resource.properties.get("CacheNodeType")
        engine = resource.properties.get("Engine")
        if not node_type or not engine:
            return MonthlyCost.unknown("Cache node type or engine not specified")

        num_nodes = int(resource.properties.get("NumCacheNodes") or 1)
        cross_az = resource.properties.get("AZMode") == "cross-az"
        cache_engine = ENGINE_NAMES.get(str(engine).lower(), engine)

        try:
            hourly_rate = await pricing_client.get_price(
                self.build_query("AmazonElastiCache", region, {
                    "instanceType": node_type,
                    "cacheEngine": cache_engine,
                })
            )
        except Exception as error:
            logger.warning(f"ElastiCache pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if hourly_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for {node_type} with engine {engine} in region {region}"
            )

        amount = hourly_rate * HOURS_PER_MONTH * num_nodes
        assumptions = [
            f"{num_nodes} cache node(s) of type {node_type}",
            f"Assumes {HOURS_PER_MONTH} hours per month (24/7 operation)",
        ]
        if cross_az:
            amount *= 2
            assumptions.append("Multi-AZ deployment doubles node cost")

        return MonthlyCost(amount=amount, confidence=Confidence.HIGH, assumptions=assumptions)
