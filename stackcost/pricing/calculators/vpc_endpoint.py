"""
VPC endpoint cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

DEFAULT_DATA_PROCESSED_GB = 100


def is_gateway_endpoint(resource: Resource) -> bool:
    """
    Gateway endpoints are free.

    An explicit VpcEndpointType wins; otherwise S3 and DynamoDB service names
    are treated as gateway endpoints.
    """
    endpoint_type = resource.properties.get("VpcEndpointType")
    if endpoint_type is not None:
        return endpoint_type == "Gateway"
    service_name = resource.properties.get("ServiceName") or ""
    if not isinstance(service_name, str):
        return False
    return "s3" in service_name or "dynamodb" in service_name


class VPCEndpointCalculator(ResourceCostCalculator):
    """Prices AWS::EC2::VPCEndpoint; interface endpoints only."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::EC2::VPCEndpoint"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        if is_gateway_endpoint(resource):
            return MonthlyCost(
                amount=0.0,
                confidence=Confidence.HIGH,
                assumptions=[
                    "Gateway VPC endpoints for S3 and DynamoDB are free",
                    "No data processing charges for gateway endpoints",
                ],
            )

        data_gb = self.usage.vpc_endpoint_data_processed_gb
        if data_gb is None:
            data_gb = DEFAULT_DATA_PROCESSED_GB
        prefix = get_region_prefix(region)

        try:
            hourly_rate = await pricing_client.get_price(
                self.build_query("AmazonVPC", region, {
                    "productFamily": "VpcEndpoint",
                    "usagetype": f"{prefix}VpcEndpoint-Hours",
                })
            )
            data_rate = await pricing_client.get_price(
                self.build_query("AmazonVPC", region, {
                    "productFamily": "VpcEndpoint",
                    "usagetype": f"{prefix}VpcEndpoint-Bytes",
                })
            )
        except Exception as error:
            logger.warning(f"VPC endpoint pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if hourly_rate is None or data_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for VPC interface endpoints in region {region}"
            )

        hourly_cost = hourly_rate * HOURS_PER_MONTH
        data_cost = data_rate * data_gb
        assumptions = [
            "Interface endpoint",
            f"Hourly rate: ${hourly_rate:.4f}/hour x {HOURS_PER_MONTH} hours = ${hourly_cost:.2f}/month",
            f"Data processing: ${data_rate:.4f}/GB x {data_gb:g} GB = ${data_cost:.2f}/month",
        ]
        if self.usage.vpc_endpoint_data_processed_gb is not None:
            assumptions.append("Using custom data processing assumption from configuration")

        return MonthlyCost(
            amount=hourly_cost + data_cost,
            confidence=Confidence.MEDIUM,
            assumptions=assumptions,
        )
