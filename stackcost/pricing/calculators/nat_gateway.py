"""
NAT gateway cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

DEFAULT_DATA_PROCESSED_GB = 100


class NatGatewayCalculator(ResourceCostCalculator):
    """Prices AWS::EC2::NatGateway as gateway-hours plus processed data."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::EC2::NatGateway"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        data_gb = self.usage.nat_gateway_data_processed_gb
        if data_gb is None:
            data_gb = DEFAULT_DATA_PROCESSED_GB
        prefix = get_region_prefix(region)

        try:
            hourly_rate = await pricing_client.get_price(
                self.build_query("AmazonEC2", region, {
                    "productFamily": "NAT Gateway",
                    "usagetype": f"{prefix}-RegionalNatGateway-Hours",
                })
            )
            data_rate = await pricing_client.get_price(
                self.build_query("AmazonEC2", region, {
                    "productFamily": "NAT Gateway",
                    "usagetype": f"{prefix}-RegionalNatGateway-Bytes",
                })
            )
        except Exception as error:
            logger.warning(f"NAT gateway pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if hourly_rate is None or data_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for NAT Gateway in region {region}",
                f"Would assume {data_gb:g} GB of data processed per month",
            )

        hourly_cost = hourly_rate * HOURS_PER_MONTH
        data_cost = data_rate * data_gb
        assumptions = [
            f"Hourly rate: ${hourly_rate:.4f}/hour x {HOURS_PER_MONTH} hours = ${hourly_cost:.2f}/month",
            f"Data processing: ${data_rate:.4f}/GB x {data_gb:g} GB = ${data_cost:.2f}/month",
        ]
        if self.usage.nat_gateway_data_processed_gb is not None:
            assumptions.append("Using custom data processing assumption from configuration")

        return MonthlyCost(
            amount=hourly_cost + data_cost,
            confidence=Confidence.MEDIUM,
            assumptions=assumptions,
        )
