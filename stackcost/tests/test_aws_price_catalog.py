"""
Tests for the AWS Price List adapter.
"""

import json
import pytest
from unittest.mock import Mock
from botocore.exceptions import ClientError, EndpointConnectionError

from stackcost.domain.cost_models import Confidence, Resource
from stackcost.domain.price_models import PriceFilter, PriceQuery
from stackcost.pricing.aws_price_catalog import AWSPriceCatalog, extract_on_demand_price
from stackcost.pricing.calculators.ec2 import EC2Calculator
from stackcost.pricing.calculators.s3 import S3Calculator
from stackcost.pricing.errors import PricingAPIError
from stackcost.pricing.pricing_client import PricingClient


def _product(*prices):
    dimensions = {
        f"dim{i}": {"unit": "Hrs", "pricePerUnit": {"USD": str(price)}}
        for i, price in enumerate(prices)
    }
    return {
        "product": {"attributes": {"instanceType": "t3.micro"}},
        "terms": {"OnDemand": {"TERM1": {"priceDimensions": dimensions}}},
    }


def _tiered_product(*tiers):
    """Product with (price, beginRange) dimensions, in the given order."""
    dimensions = {
        f"dim{i}": {"unit": "GB-Mo", "beginRange": begin, "pricePerUnit": {"USD": str(price)}}
        for i, (price, begin) in enumerate(tiers)
    }
    return {"terms": {"OnDemand": {"TERM1": {"priceDimensions": dimensions}}}}


def _boto_client(pages):
    paginator = Mock()
    paginator.paginate = Mock(return_value=pages)
    client = Mock()
    client.get_paginator = Mock(return_value=paginator)
    return client, paginator


QUERY = PriceQuery(
    service_code='AmazonEC2',
    region='US East (N. Virginia)',
    filters=(PriceFilter('instanceType', 't3.micro'),),
)


def test_extract_on_demand_price_skips_zero_dimensions():
    assert extract_on_demand_price(_product("0.0000000000", "0.0104000000")) == 0.0104
    assert extract_on_demand_price(_product(0.0)) is None
    assert extract_on_demand_price({"terms": {}}) is None


def test_extract_on_demand_price_uses_first_tier():
    tiers = [(0.021, "512000"), (0.023, "0"), (0.022, "51200")]
    assert extract_on_demand_price(_tiered_product(*tiers)) == 0.023


def test_extract_on_demand_price_skips_free_tier():
    tiers = [(0.0, "0"), (0.09, "1"), (0.085, "10240")]
    assert extract_on_demand_price(_tiered_product(*tiers)) == 0.09


def test_extract_on_demand_price_keeps_order_without_ranges():
    assert extract_on_demand_price(_product(0.023, 0.022, 0.021)) == 0.023


@pytest.mark.asyncio
async def test_fetch_prices_one_price_per_product():
    client, _ = _boto_client([
        {"PriceList": [
            json.dumps(_tiered_product((0.023, "0"), (0.022, "51200"))),
            json.dumps(_product(0.0)),
            json.dumps(_product(0.025)),
        ]},
    ])
    catalog = AWSPriceCatalog(pricing_client=client)

    assert await catalog.fetch_prices(QUERY) == [0.023, 0.025]


@pytest.mark.asyncio
async def test_tiered_sku_is_priced_at_first_tier():
    client, _ = _boto_client([
        {"PriceList": [json.dumps(_tiered_product((0.023, "0"), (0.022, "51200"), (0.021, "512000")))]},
    ])
    pricing_client = PricingClient(catalog=AWSPriceCatalog(pricing_client=client), cache=None)

    cost = await S3Calculator().calculate_cost(Resource('Bucket', 'AWS::S3::Bucket'), 'us-east-1', pricing_client)

    assert cost.amount == pytest.approx(2.3)


@pytest.mark.asyncio
async def test_zero_priced_dimension_does_not_zero_the_cost(ec2_instance):
    client, _ = _boto_client([
        {"PriceList": [json.dumps(_product("0.0000000000", "0.0104000000"))]},
    ])
    pricing_client = PricingClient(catalog=AWSPriceCatalog(pricing_client=client), cache=None)

    cost = await EC2Calculator().calculate_cost(ec2_instance, 'us-east-1', pricing_client)

    assert cost.amount > 0
    assert cost.amount == pytest.approx(7.592)
    assert cost.confidence == Confidence.HIGH


@pytest.mark.asyncio
async def test_sku_without_positive_price_is_a_miss(ec2_instance):
    client, _ = _boto_client([{"PriceList": [json.dumps(_product(0.0))]}])
    pricing_client = PricingClient(catalog=AWSPriceCatalog(pricing_client=client), cache=None)

    cost = await EC2Calculator().calculate_cost(ec2_instance, 'us-east-1', pricing_client)

    assert cost.amount == 0
    assert cost.confidence == Confidence.UNKNOWN


@pytest.mark.asyncio
async def test_fetch_prices_collects_all_pages():
    client, paginator = _boto_client([
        {"PriceList": [json.dumps(_product(0.0104))]},
        {"PriceList": [json.dumps(_product(0.02))]},
    ])
    catalog = AWSPriceCatalog(pricing_client=client)

    prices = await catalog.fetch_prices(QUERY)

    assert prices == [0.0104, 0.02]
    client.get_paginator.assert_called_once_with('get_products')
    paginator.paginate.assert_called_once_with(
        ServiceCode='AmazonEC2',
        Filters=[
            {'Type': 'TERM_MATCH', 'Field': 'instanceType', 'Value': 't3.micro'},
            {'Type': 'TERM_MATCH', 'Field': 'location', 'Value': 'US East (N. Virginia)'},
        ],
    )


@pytest.mark.asyncio
async def test_fetch_prices_empty_result():
    client, _ = _boto_client([{"PriceList": []}])
    catalog = AWSPriceCatalog(pricing_client=client)

    assert await catalog.fetch_prices(QUERY) == []


@pytest.mark.asyncio
async def test_client_error_raises_pricing_api_error():
    client, paginator = _boto_client([])
    paginator.paginate = Mock(side_effect=ClientError(
        {"Error": {"Code": "ThrottlingException", "Message": "Rate exceeded"}},
        "GetProducts",
    ))
    catalog = AWSPriceCatalog(pricing_client=client)

    with pytest.raises(PricingAPIError, match="Failed to query AWS pricing") as excinfo:
        await catalog.fetch_prices(QUERY)

    assert excinfo.value.retryable is True


@pytest.mark.asyncio
async def test_connection_error_raises_pricing_api_error():
    client, paginator = _boto_client([])
    paginator.paginate = Mock(side_effect=EndpointConnectionError(endpoint_url="https://api.pricing"))
    catalog = AWSPriceCatalog(pricing_client=client)

    with pytest.raises(PricingAPIError):
        await catalog.fetch_prices(QUERY)


@pytest.mark.asyncio
async def test_malformed_price_list_raises_pricing_api_error():
    client, _ = _boto_client([{"PriceList": ["{not json"]}])
    catalog = AWSPriceCatalog(pricing_client=client)

    with pytest.raises(PricingAPIError, match="Failed to parse") as excinfo:
        await catalog.fetch_prices(QUERY)

    assert excinfo.value.retryable is False


@pytest.mark.asyncio
async def test_access_denied_is_not_retryable():
    client, paginator = _boto_client([])
    paginator.paginate = Mock(side_effect=ClientError(
        {"Error": {"Code": "AccessDeniedException", "Message": "not authorized"}},
        "GetProducts",
    ))
    catalog = AWSPriceCatalog(pricing_client=client)

    with pytest.raises(PricingAPIError) as excinfo:
        await catalog.fetch_prices(QUERY)

    assert excinfo.value.retryable is False
