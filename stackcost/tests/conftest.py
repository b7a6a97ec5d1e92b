"""
Shared pytest fixtures for stackcost tests.
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Keep tests off the real cache directory and out of AWS
os.environ.setdefault('PRICING_CACHE_ENABLED', 'false')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')

import pytest
from unittest.mock import Mock, AsyncMock

from stackcost.domain.cost_models import Resource
from stackcost.pricing.pricing_client import PricingClient


@pytest.fixture
def mock_pricing_client():
    """Pricing client mock returning $0.0104 for every query."""
    mock = Mock()
    mock.get_price = AsyncMock(return_value=0.0104)
    mock.destroy = AsyncMock()
    return mock


@pytest.fixture
def pricing_client_for():
    """Build a pricing client mock that answers by usage type / field values."""
    def build(prices, default=None):
        def lookup(query):
            for f in query.filters:
                if f.value in prices:
                    return prices[f.value]
            return default

        mock = Mock()
        mock.get_price = AsyncMock(side_effect=lookup)
        mock.destroy = AsyncMock()
        return mock
    return build


@pytest.fixture
def mock_catalog():
    """Remote catalog mock with one candidate price."""
    mock = Mock()
    mock.fetch_prices = AsyncMock(return_value=[0.0104])
    return mock


@pytest.fixture
def uncached_client(mock_catalog):
    """PricingClient without a cache."""
    return PricingClient(catalog=mock_catalog, cache=None)


@pytest.fixture
def ec2_instance():
    """Sample EC2 instance resource."""
    return Resource(
        logical_id='WebServer',
        type='AWS::EC2::Instance',
        properties={'InstanceType': 't3.micro'},
    )
