"""
Tests for calculator selection.
"""

import pytest
from unittest.mock import Mock

from stackcost.domain.cost_models import Resource
from stackcost.pricing.calculator_registry import CalculatorRegistry, build_default_calculators
from stackcost.pricing.calculators.autoscaling_group import AutoScalingGroupCalculator
from stackcost.pricing.calculators.ec2 import EC2Calculator
from stackcost.pricing.calculators.load_balancer import ALBCalculator, NLBCalculator
from stackcost.pricing.errors import UnsupportedResourceError


@pytest.fixture
def registry():
    return CalculatorRegistry(build_default_calculators())


def test_default_calculators_order():
    calculators = build_default_calculators()
    assert len(calculators) == 20
    assert isinstance(calculators[0], EC2Calculator)
    assert isinstance(calculators[-1], AutoScalingGroupCalculator)


def test_find_calculator_by_type(registry):
    calculator = registry.find_calculator(Resource('Web', 'AWS::EC2::Instance', {}))
    assert isinstance(calculator, EC2Calculator)


def test_load_balancer_dispatch_uses_type_property(registry):
    alb = registry.find_calculator(Resource('Lb', 'AWS::ElasticLoadBalancingV2::LoadBalancer', {}))
    nlb = registry.find_calculator(
        Resource('Lb', 'AWS::ElasticLoadBalancingV2::LoadBalancer', {'Type': 'network'})
    )
    assert isinstance(alb, ALBCalculator)
    assert isinstance(nlb, NLBCalculator)


def test_unsupported_type_has_no_calculator(registry):
    resource = Resource('Role', 'AWS::IAM::Role', {})
    assert registry.find_calculator(resource) is None

    with pytest.raises(UnsupportedResourceError, match="Resource type AWS::IAM::Role is not supported"):
        registry.require_calculator(resource)


def test_first_matching_calculator_wins():
    first = Mock()
    first.can_calculate = Mock(return_value=True)
    second = Mock()
    second.can_calculate = Mock(return_value=True)

    registry = CalculatorRegistry([first, second])

    assert registry.find_calculator(Resource('X', 'Custom::Thing')) is first
    second.can_calculate.assert_not_called()


def test_supported_types(registry):
    types = registry.supported_types()
    assert 'AWS::EC2::Instance' in types
    assert 'AWS::AutoScaling::AutoScalingGroup' in types
    assert 'AWS::ApiGatewayV2::Api' in types
    assert 'AWS::EFS::FileSystem' in types
    assert 'AWS::IAM::Role' not in types
