"""
DynamoDB table cost calculator.
Handles provisioned and on-demand billing modes.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

DEFAULT_CAPACITY_UNITS = 5
DEFAULT_READ_REQUESTS = 10_000_000
DEFAULT_WRITE_REQUESTS = 1_000_000


class DynamoDBCalculator(ResourceCostCalculator):
    """Prices AWS::DynamoDB::Table by capacity units or request volume."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::DynamoDB::Table"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        billing_mode = resource.properties.get("BillingMode") or "PROVISIONED"
        provisioned = bool(resource.properties.get("ProvisionedThroughput")) or billing_mode == "PROVISIONED"

        try:
            if provisioned:
                return await self._provisioned_cost(resource, region, pricing_client)
            return await self._on_demand_cost(region, pricing_client)
        except Exception as error:
            logger.warning(f"DynamoDB pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

    async def _provisioned_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
    ) -> MonthlyCost:
        throughput = resource.properties.get("ProvisionedThroughput") or {}
        read_capacity = throughput.get("ReadCapacityUnits") or DEFAULT_CAPACITY_UNITS
        write_capacity = throughput.get("WriteCapacityUnits") or DEFAULT_CAPACITY_UNITS

        read_rate = await pricing_client.get_price(
            self.build_query("AmazonDynamoDB", region, {"usagetype": f"{region}-ReadCapacityUnit-Hrs"})
        )
        write_rate = await pricing_client.get_price(
            self.build_query("AmazonDynamoDB", region, {"usagetype": f"{region}-WriteCapacityUnit-Hrs"})
        )

        if read_rate is None or write_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for DynamoDB provisioned capacity in region {region}"
            )

        read_capacity = float(read_capacity)
        write_capacity = float(write_capacity)
        read_cost = read_capacity * HOURS_PER_MONTH * read_rate
        write_cost = write_capacity * HOURS_PER_MONTH * write_rate

        return MonthlyCost(
            amount=read_cost + write_cost,
            confidence=Confidence.HIGH,
            assumptions=[
                f"Provisioned mode: {read_capacity:g} read capacity units, {write_capacity:g} write capacity units",
                f"Assumes {HOURS_PER_MONTH} hours per month (24/7 operation)",
            ],
        )

    async def _on_demand_cost(self, region: str, pricing_client: PricingClient) -> MonthlyCost:
        reads = self.usage.dynamodb_read_requests_per_month
        if reads is None:
            reads = DEFAULT_READ_REQUESTS
        writes = self.usage.dynamodb_write_requests_per_month
        if writes is None:
            writes = DEFAULT_WRITE_REQUESTS

        read_price = await pricing_client.get_price(
            self.build_query("AmazonDynamoDB", region, {
                "group": "DDB-ReadUnits",
                "groupDescription": "OnDemand ReadRequestUnits",
            })
        )
        write_price = await pricing_client.get_price(
            self.build_query("AmazonDynamoDB", region, {
                "group": "DDB-WriteUnits",
                "groupDescription": "OnDemand WriteRequestUnits",
            })
        )

        if read_price is None or write_price is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for DynamoDB on-demand in region {region}"
            )

        read_cost = (reads / 1_000_000) * read_price
        write_cost = (writes / 1_000_000) * write_price

        return MonthlyCost(
            amount=read_cost + write_cost,
            confidence=Confidence.MEDIUM,
            assumptions=[
                "On-demand billing mode",
                f"Assumes {reads:,} read requests per month",
                f"Assumes {writes:,} write requests per month",
            ],
        )
