"""
Secrets Manager secret cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

DEFAULT_MONTHLY_API_CALLS = 10_000

FALLBACK_SECRET_STORAGE_PRICE = 0.40  # per secret per month
FALLBACK_API_CALL_PRICE_PER_10K = 0.05


class SecretsManagerCalculator(ResourceCostCalculator):
    """Prices AWS::SecretsManager::Secret as storage plus API calls."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::SecretsManager::Secret"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        api_calls = self.usage.secrets_manager_monthly_api_calls
        if api_calls is None:
            api_calls = DEFAULT_MONTHLY_API_CALLS

        try:
            storage_price = await pricing_client.get_price(
                self.build_query("AWSSecretsManager", region, {
                    "productFamily": "Secret",
                    "group": "SecretStorage",
                })
            )
            api_call_price = await pricing_client.get_price(
                self.build_query("AWSSecretsManager", region, {
                    "productFamily": "Secret",
                    "group": "SecretRotation",
                })
            )
        except Exception as error:
            logger.warning(f"Secrets Manager pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if storage_price is None and api_call_price is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for Secrets Manager in region {region}",
                f"Would assume {api_calls:,} API calls per month",
            )

        assumptions = []
        if storage_price is None:
            assumptions.append("Using fallback storage pricing (API unavailable)")
            storage_price = FALLBACK_SECRET_STORAGE_PRICE
            confidence = Confidence.LOW
        elif api_call_price is None:
            confidence = Confidence.LOW
        else:
            confidence = Confidence.MEDIUM
        if api_call_price is None:
            assumptions.append("Using fallback API call pricing (API unavailable)")
            api_call_price = FALLBACK_API_CALL_PRICE_PER_10K

        api_call_cost = (api_calls / 10_000) * api_call_price
        total = storage_price + api_call_cost

        assumptions.extend([
            f"Secret storage: ${storage_price:.2f}/month",
            f"API calls: {api_calls:,} calls x ${api_call_price:.4f}/10K = ${api_call_cost:.2f}/month",
            f"Total: ${total:.2f}/month",
        ])
        if self.usage.secrets_manager_monthly_api_calls is not None:
            assumptions.append("Using custom API call volume from configuration")
        assumptions.append("No free tier for Secrets Manager")

        return MonthlyCost(amount=total, confidence=confidence, assumptions=assumptions)
