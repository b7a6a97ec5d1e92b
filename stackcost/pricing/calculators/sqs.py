"""
SQS queue cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

DEFAULT_MONTHLY_REQUESTS = 1_000_000

# us-east-1 list prices, used only with caller-supplied request volumes
FALLBACK_STANDARD_PRICE_PER_MILLION = 0.40
FALLBACK_FIFO_PRICE_PER_MILLION = 0.50


def is_fifo_queue(resource: Resource) -> bool:
    fifo = resource.properties.get("FifoQueue")
    return fifo is True or fifo == "true"


class SQSCalculator(ResourceCostCalculator):
    """Prices AWS::SQS::Queue by request volume."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::SQS::Queue"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        fifo = is_fifo_queue(resource)
        custom = self.usage.sqs_monthly_requests is not None
        requests = self.usage.sqs_monthly_requests if custom else DEFAULT_MONTHLY_REQUESTS

        assumptions = [
            f"Assumes {requests:,} requests per month",
            "FIFO queue" if fifo else "Standard queue",
            "Does not include data transfer costs",
        ]
        if custom:
            assumptions.append("Using custom monthly requests assumption from configuration")

        fallback_price = FALLBACK_FIFO_PRICE_PER_MILLION if fifo else FALLBACK_STANDARD_PRICE_PER_MILLION
        prefix = get_region_prefix(region)
        base_usage_type = "Requests-FIFO" if fifo else "Requests"
        usage_type = f"{prefix}-{base_usage_type}" if prefix else base_usage_type

        try:
            price_per_million = await pricing_client.get_price(
                self.build_query("AWSQueueService", region, {
                    "productFamily": "Queue",
                    "usagetype": usage_type,
                })
            )
        except Exception as error:
            logger.warning(f"SQS pricing failed for {resource.logical_id}: {error}")
            if custom:
                return MonthlyCost(
                    amount=(requests / 1_000_000) * fallback_price,
                    confidence=Confidence.LOW,
                    assumptions=["Using fallback pricing (API error)", *assumptions],
                )
            return MonthlyCost.failed(error, *assumptions)

        if price_per_million is None:
            if custom:
                return MonthlyCost(
                    amount=(requests / 1_000_000) * fallback_price,
                    confidence=Confidence.LOW,
                    assumptions=["Using fallback pricing (API unavailable)", *assumptions],
                )
            return MonthlyCost.unknown(f"Pricing data not available for SQS in region {region}", *assumptions)

        return MonthlyCost(
            amount=(requests / 1_000_000) * price_per_million,
            confidence=Confidence.MEDIUM,
            assumptions=assumptions,
        )
