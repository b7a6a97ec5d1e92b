"""
API Gateway cost calculator.
Covers REST APIs and the HTTP and WebSocket protocols of API Gateway v2.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

REST_API_TYPE = "AWS::ApiGateway::RestApi"
V2_API_TYPE = "AWS::ApiGatewayV2::Api"

DEFAULT_MONTHLY_REQUESTS = 1_000_000
DEFAULT_MONTHLY_MESSAGES = 1_000_000
DEFAULT_CONNECTION_MINUTES = 100_000


def api_protocol(resource: Resource) -> str:
    """REST for v1 APIs, otherwise the v2 ``ProtocolType``."""
    if resource.type == V2_API_TYPE:
        return resource.properties.get("ProtocolType") or "HTTP"
    return "REST"


class APIGatewayCalculator(ResourceCostCalculator):
    """Prices API Gateway APIs by request, message and connection volume."""

    def supports(self, resource_type: str) -> bool:
        return resource_type in (REST_API_TYPE, V2_API_TYPE)

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
        protocol = api_protocol(resource)
        try:
            if protocol == "WEBSOCKET":
                return await self._websocket_cost(region, pricing_client)
            if protocol == "HTTP":
                return await self._request_cost(
                    region, pricing_client, "ApiGatewayHttpRequest", "HTTP API",
                    "First 300M requests may have tiered pricing (not calculated)",
                )
            return await self._request_cost(
                region, pricing_client, "ApiGatewayRequest", "REST API",
                "First 333M requests may have tiered pricing (not calculated)",
            )
        except Exception as error:
            logger.warning(f"API Gateway pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

    async def _request_cost(
        self,
        region: str,
        pricing_client: PricingClient,
        base_usage_type: str,
        label: str,
        tier_note: str,
    ) -> MonthlyCost:
        price_per_million = await pricing_client.get_price(
            self.build_query("AmazonApiGateway", region, {
                "productFamily": "API Calls",
                "usagetype": self._usage_type(region, base_usage_type),
            })
        )
        if price_per_million is None:
            return MonthlyCost.unknown(f"Pricing data not available for API Gateway {label}")

        return MonthlyCost(
            amount=(DEFAULT_MONTHLY_REQUESTS / 1_000_000) * price_per_million,
            confidence=Confidence.MEDIUM,
            assumptions=[
                f"Assumes {DEFAULT_MONTHLY_REQUESTS:,} {label} requests per month",
                f"{label} type",
                "Does not include data transfer, caching, or other features",
                tier_note,
            ],
        )

    async def _websocket_cost(self, region: str, pricing_client: PricingClient) -> MonthlyCost:
        message_price = await pricing_client.get_price(
            self.build_query("AmazonApiGateway", region, {
                "productFamily": "WebSocket",
                "usagetype": self._usage_type(region, "ApiGatewayMessage"),
            })
        )
        minute_price = await pricing_client.get_price(
            self.build_query("AmazonApiGateway", region, {
                "productFamily": "WebSocket",
                "usagetype": self._usage_type(region, "ApiGatewayMinute"),
            })
        )
        if message_price is None or minute_price is None:
            return MonthlyCost.unknown("Pricing data not available for API Gateway WebSocket API")

        message_cost = (DEFAULT_MONTHLY_MESSAGES / 1_000_000) * message_price
        connection_cost = DEFAULT_CONNECTION_MINUTES * minute_price
        return MonthlyCost(
            amount=message_cost + connection_cost,
            confidence=Confidence.MEDIUM,
            assumptions=[
                f"Assumes {DEFAULT_MONTHLY_MESSAGES:,} WebSocket messages per month",
                f"Assumes {DEFAULT_CONNECTION_MINUTES:,} connection minutes per month",
                "WebSocket API type",
                "Does not include data transfer costs",
            ],
        )
