"""
CloudFront distribution cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

DEFAULT_DATA_TRANSFER_GB = 100
DEFAULT_REQUESTS = 1_000_000


class CloudFrontCalculator(ResourceCostCalculator):
    """Prices AWS::CloudFront::Distribution as data transfer plus HTTP requests."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::CloudFront::Distribution"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        transfer_gb = self.usage.cloudfront_data_transfer_gb
        if transfer_gb is None:
            transfer_gb = DEFAULT_DATA_TRANSFER_GB
        requests = self.usage.cloudfront_requests
        if requests is None:
            requests = DEFAULT_REQUESTS

        try:
            transfer_price = await pricing_client.get_price(
                self.build_query("AmazonCloudFront", region, {"transferType": "CloudFront to Internet"})
            )
            request_price = await pricing_client.get_price(
                self.build_query("AmazonCloudFront", region, {"requestType": "HTTP-Requests"})
            )
        except Exception as error:
            logger.warning(f"CloudFront pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if transfer_price is None or request_price is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for CloudFront in region {region}"
            )

        transfer_cost = transfer_gb * transfer_price
        # Request pricing is per 10,000 requests
        request_cost = (requests / 10_000) * request_price

        assumptions = [
            f"Assumes {transfer_gb:g} GB data transfer out to internet",
            f"Assumes {requests:,} HTTP requests per month",
        ]
        if self.usage.cloudfront_data_transfer_gb is not None:
            assumptions.append("Using custom data transfer assumption from configuration")
        if self.usage.cloudfront_requests is not None:
            assumptions.append("Using custom request count assumption from configuration")

        return MonthlyCost(
            amount=transfer_cost + request_cost,
            confidence=Confidence.MEDIUM,
            assumptions=assumptions,
        )
