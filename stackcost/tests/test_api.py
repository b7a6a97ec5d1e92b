"""
Tests for the HTTP surface.
"""

import pytest
from unittest.mock import Mock, AsyncMock
from fastapi.testclient import TestClient

from stackcost.api.pricing import get_pricing_service
from stackcost.main import app
from stackcost.services.pricing_service import PricingService


@pytest.fixture
def client(mock_pricing_client):
    """FastAPI test client backed by a mocked pricing client."""
    service = PricingService(pricing_client=mock_pricing_client, excluded_resource_types=['AWS::IAM::Role'])
    app.dependency_overrides[get_pricing_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json() == {'status': 'ok'}


def test_resource_cost(client):
    response = client.post('/api/pricing/resource-cost', json={
        'resource': {'logicalId': 'Web', 'type': 'AWS::EC2::Instance', 'properties': {'InstanceType': 't3.micro'}},
        'region': 'us-east-1',
    })

    assert response.status_code == 200
    body = response.json()
    assert body['status'] == 'ok'
    assert body['cost']['amount'] == 7.59
    assert body['cost']['confidence'] == 'high'
    assert body['cost']['currency'] == 'USD'


def test_resource_cost_unsupported(client):
    response = client.post('/api/pricing/resource-cost', json={
        'resource': {'logicalId': 'Q', 'type': 'AWS::Kinesis::Stream'},
    })

    assert response.status_code == 200
    assert response.json()['cost']['confidence'] == 'unknown'


def test_resource_cost_strict_rejects_unsupported(client):
    response = client.post('/api/pricing/resource-cost', json={
        'resource': {'logicalId': 'Q', 'type': 'AWS::Kinesis::Stream'},
        'strict': True,
    })

    assert response.status_code == 422
    assert 'not supported' in response.json()['detail']


def test_cost_delta(client):
    response = client.post('/api/pricing/cost-delta', json={
        'added': [{'logicalId': 'Web', 'type': 'AWS::EC2::Instance', 'properties': {'InstanceType': 't3.micro'}}],
        'removed': [{'logicalId': 'Role', 'type': 'AWS::IAM::Role'}],
        'modified': [{
            'logicalId': 'Db',
            'type': 'AWS::EC2::Instance',
            'oldProperties': {'InstanceType': 't3.micro'},
            'newProperties': {},
        }],
    })

    assert response.status_code == 200
    delta = response.json()['delta']
    assert delta['removedCosts'] == []
    assert delta['addedCosts'][0]['logicalId'] == 'Web'
    assert delta['modifiedCosts'][0]['costDelta'] == -7.59
    assert delta['totalDelta'] == 0.0


def test_invalid_request_rejected(client):
    response = client.post('/api/pricing/resource-cost', json={'region': 'us-east-1'})
    assert response.status_code == 422


def test_supported_types(client):
    response = client.get('/api/pricing/supported-types')
    assert response.status_code == 200
    assert 'AWS::S3::Bucket' in response.json()['types']
