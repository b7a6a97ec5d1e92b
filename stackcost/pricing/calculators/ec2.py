"""
EC2 instance cost calculator.
"""
import logging
from typing import Dict, List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)


def ec2_instance_filters(instance_type: str) -> Dict[str, str]:
    """Filters for a Linux, shared tenancy, on-demand instance."""
    return {
        "instanceType": instance_type,
        "operatingSystem": "Linux",
        "tenancy": "Shared",
        "preInstalledSw": "NA",
        "capacitystatus": "Used",
    }


class EC2Calculator(ResourceCostCalculator):
    """Prices AWS::EC2::Instance at its on-demand hourly rate."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::EC2::Instance"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        instance_type = resource.properties.get("InstanceType")
        if not instance_type:
            return MonthlyCost.unknown("Instance type not specified")

        try:
            hourly_rate = await pricing_client.get_price(
                self.build_query("AmazonEC2", region, ec2_instance_filters(instance_type))
            )
        except Exception as error:
            logger.warning(f"EC2 pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if hourly_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for instance type {instance_type} in region {region}"
            )

        return MonthlyCost(
            amount=hourly_rate * HOURS_PER_MONTH,
            confidence=Confidence.HIGH,
            assumptions=[
                f"Assumes {HOURS_PER_MONTH} hours per month (24/7 operation)",
                "Assumes Linux OS, shared tenancy, on-demand pricing",
            ],
        )
