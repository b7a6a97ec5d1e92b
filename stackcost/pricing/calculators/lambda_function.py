"""
Lambda function cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

DEFAULT_INVOCATIONS = 1_000_000
DEFAULT_DURATION_MS = 1000
DEFAULT_MEMORY_MB = 128


class LambdaCalculator(ResourceCostCalculator):
    """Prices AWS::Lambda::Function as requests plus GB-seconds of compute."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::Lambda::Function"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        memory_mb = resource.properties.get("MemorySize") or DEFAULT_MEMORY_MB
        invocations = self.usage.lambda_invocations_per_month
        if invocations is None:
            invocations = DEFAULT_INVOCATIONS
        duration_ms = self.usage.lambda_average_duration_ms
        if duration_ms is None:
            duration_ms = DEFAULT_DURATION_MS

        try:
            request_price = await pricing_client.get_price(
                self.build_query("AWSLambda", region, {"group": "AWS-Lambda-Requests"})
            )
            compute_price = await pricing_client.get_price(
                self.build_query("AWSLambda", region, {"group": "AWS-Lambda-Duration"})
            )
        except Exception as error:
            logger.warning(f"Lambda pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if request_price is None or compute_price is None:
            return MonthlyCost.unknown(f"Pricing data not available for Lambda in region {region}")

        memory_mb = float(memory_mb)
        request_cost = (invocations / 1_000_000) * request_price
        gb_seconds = (memory_mb / 1024) * (duration_ms / 1000) * invocations
        compute_cost = gb_seconds * compute_price

        return MonthlyCost(
            amount=request_cost + compute_cost,
            confidence=Confidence.MEDIUM,
            assumptions=[
                f"Assumes {invocations:,} invocations per month",
                f"Assumes {duration_ms:g}ms average execution time",
                f"Assumes {memory_mb:g}MB memory allocation",
            ],
        )
