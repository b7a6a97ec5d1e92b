"""
SNS topic cost calculator.
Covers publishes and HTTP/S deliveries.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

DEFAULT_MONTHLY_PUBLISHES = 1_000_000
DEFAULT_HTTP_DELIVERIES = 1_000_000
FREE_TIER_PUBLISHES = 1_000_000

# us-east-1 list prices, used only with caller-supplied usage
FALLBACK_PUBLISH_PRICE_PER_MILLION = 0.50
FALLBACK_HTTP_DELIVERY_PRICE_PER_MILLION = 0.60


class SNSCalculator(ResourceCostCalculator):
    """Prices AWS::SNS::Topic by publishes and HTTP/S deliveries."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::SNS::Topic"

    def _has_custom_assumptions(self) -> bool:
        return self.usage.sns_monthly_publishes is not None or self.usage.sns_http_deliveries is not None

    def _usage_type(self, region: str, base: str) -> str:
        prefix = get_region_prefix(region)
        return f"{prefix}-{base}" if prefix else base

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        publishes = self.usage.sns_monthly_publishes
        if publishes is None:
            publishes = DEFAULT_MONTHLY_PUBLISHES
        deliveries = self.usage.sns_http_deliveries
        if deliveries is None:
            deliveries = DEFAULT_HTTP_DELIVERIES
        custom = self._has_custom_assumptions()

        try:
            publish_price = await pricing_client.get_price(
                self.build_query("AmazonSNS", region, {
                    "productFamily": "Notification",
                    "usagetype": self._usage_type(region, "PublishRequests"),
                })
            )
            delivery_price = await pricing_client.get_price(
                self.build_query("AmazonSNS", region, {
                    "productFamily": "Notification",
                    "usagetype": self._usage_type(region, "DeliveryAttempts-HTTP"),
                })
            )
        except Exception as error:
            logger.warning(f"SNS pricing failed for {resource.logical_id}: {error}")
            if custom:
                amount = self._total(publishes, deliveries, None, None)
                return MonthlyCost(
                    amount=amount,
                    confidence=Confidence.LOW,
                    assumptions=[
                        "Using fallback pricing (API error)",
                        f"Assumes {publishes:,} publishes per month",
                        f"Assumes {deliveries:,} HTTP/S deliveries per month",
                    ],
                )
            return MonthlyCost.failed(error)

        all_prices = publish_price is not None and delivery_price is not None
        assumptions = [
            f"Assumes {publishes:,} publishes per month (first {FREE_TIER_PUBLISHES:,} free)",
            f"Assumes {deliveries:,} HTTP/S deliveries per month",
        ]

        if not all_prices and not custom:
            return MonthlyCost.unknown(f"Pricing data not available for SNS in region {region}", *assumptions)

        if publish_price is None:
            assumptions.append("Using fallback publish pricing (API unavailable)")
        if delivery_price is None:
            assumptions.append("Using fallback HTTP delivery pricing (API unavailable)")
        if self.usage.sns_monthly_publishes is not None:
            assumptions.append("Using custom publish count from configuration")
        if self.usage.sns_http_deliveries is not None:
            assumptions.append("Using custom HTTP delivery count from configuration")

        return MonthlyCost(
            amount=self._total(publishes, deliveries, publish_price, delivery_price),
            confidence=Confidence.MEDIUM if all_prices else Confidence.LOW,
            assumptions=assumptions,
        )

    @staticmethod
    def _total(
        publishes: int,
        deliveries: int,
        publish_price: Optional[float],
        delivery_price: Optional[float],
    ) -> float:
        if publish_price is None:
            publish_price = FALLBACK_PUBLISH_PRICE_PER_MILLION
        if delivery_price is None:
            delivery_price = FALLBACK_HTTP_DELIVERY_PRICE_PER_MILLION
        billable_publishes = max(0, publishes - FREE_TIER_PUBLISHES)
        return (billable_publishes / 1_000_000) * publish_price + (deliveries / 1_000_000) * delivery_price
