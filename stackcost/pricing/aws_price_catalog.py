"""
AWS Price List API adapter.
Uses boto3 to query official AWS Price List API.
"""
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from stackcost.core.config import config
from stackcost.domain.price_models import PriceQuery
from stackcost.pricing.errors import PricingAPIError


logger = logging.getLogger(__name__)

# Client errors that will fail the same way when repeated
NON_RETRYABLE_ERROR_CODES = frozenset({
    "AccessDeniedException",
    "InvalidParameterException",
    "NotFoundException",
    "ValidationException",
    "UnrecognizedClientException",
})


def _range_start(dimension: Dict[str, Any]) -> float:
    try:
        return float(dimension.get("beginRange") or 0)
    except (TypeError, ValueError):
        return 0.0


def extract_on_demand_price(price_item: Dict[str, Any]) -> Optional[float]:
    """
    Reduce one price list product to a single On-Demand USD unit price.

    Zero-priced dimensions (free tiers, placeholder rates) are skipped. Of the
    remaining dimensions the one starting at the lowest ``beginRange`` wins,
    so tiered products are priced at their first paid tier.

    Args:
        price_item: Decoded product document from ``get_products``

    Returns:
        USD unit price, or None when the product has no positive price
    """
    candidates = []
    terms = price_item.get("terms", {}).get("OnDemand", {})
    for term in terms.values():
        for dimension in term.get("priceDimensions", {}).values():
            usd = dimension.get("pricePerUnit", {}).get("USD")
            if usd is None:
                continue
            price = float(usd)
            if price > 0:
                candidates.append((_range_start(dimension), len(candidates), price))
    if not candidates:
        return None
    return min(candidates)[2]


class AWSPriceCatalog:
    """Remote price catalog backed by the AWS ``pricing`` API."""

    def __init__(self, pricing_client: Optional[Any] = None):
        """
        Initialize the catalog.

        Args:
            pricing_client: Preconfigured boto3 pricing client. Created from
                configuration when omitted.
        """
        if pricing_client is None:
            boto_config = BotoConfig(
                connect_timeout=config.PRICING_API_TIMEOUT_SECONDS,
                read_timeout=config.PRICING_API_TIMEOUT_SECONDS,
                retries={"max_attempts": 0},
            )
            pricing_client = boto3.client(
                "pricing",
                region_name=config.AWS_PRICING_REGION,
                config=boto_config,
            )
        self.pricing_client = pricing_client

    def _fetch_prices_sync(self, query: PriceQuery) -> List[float]:
        paginator = self.pricing_client.get_paginator("get_products")
        prices: List[float] = []
        for page in paginator.paginate(
            ServiceCode=query.service_code,
            Filters=query.to_boto_filters(),
        ):
            for raw_item in page.get("PriceList", []):
                item = json.loads(raw_item) if isinstance(raw_item, str) else raw_item
                price = extract_on_demand_price(item)
                if price is not None:
                    prices.append(price)
        return prices

    async def fetch_prices(self, query: PriceQuery) -> List[float]:
        """
        Fetch candidate unit prices for a query.

        Args:
            query: Price query with a normalized location as region

        Returns:
            One On-Demand USD unit price per matching product; products
            without a positive price are left out

        Raises:
            PricingAPIError: If the API call fails or the response is malformed
        """
        try:
            return await asyncio.to_thread(self._fetch_prices_sync, query)
        except ClientError as error:
            logger.error(f"AWS pricing API error: {error}")
            code = error.response.get("Error", {}).get("Code", "")
            raise PricingAPIError(
                f"Failed to query AWS pricing: {error}",
                retryable=code not in NON_RETRYABLE_ERROR_CODES,
            ) from error
        except BotoCoreError as error:
            logger.error(f"AWS pricing API connection error: {error}")
            raise PricingAPIError(f"Failed to query AWS pricing: {error}") from error
        except (ValueError, KeyError, TypeError, AttributeError) as error:
            logger.error(f"Error parsing AWS pricing response: {error}")
            raise PricingAPIError(
                f"Failed to parse AWS pricing response: {error}",
                retryable=False,
            ) from error
