"""
S3 bucket cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

DEFAULT_STORAGE_GB = 100


class S3Calculator(ResourceCostCalculator):
    """Prices AWS::S3::Bucket as Standard storage of an assumed size."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::S3::Bucket"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        storage_gb = self.usage.s3_storage_gb
        if storage_gb is None:
            storage_gb = DEFAULT_STORAGE_GB

        try:
            price_per_gb = await pricing_client.get_price(
                self.build_query("AmazonS3", region, {
                    "storageClass": "General Purpose",
                    "volumeType": "Standard",
                })
            )
        except Exception as error:
            logger.warning(f"S3 pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if price_per_gb is None:
            return MonthlyCost.unknown(f"Pricing data not available for S3 in region {region}")

        assumptions = [
            f"Assumes {storage_gb:g} GB of standard storage",
            "Does not include request costs or data transfer",
        ]
        if self.usage.s3_storage_gb is not None:
            assumptions.append("Using custom storage assumption from configuration")

        return MonthlyCost(
            amount=price_per_gb * storage_gb,
            confidence=Confidence.MEDIUM,
            assumptions=assumptions,
        )
