"""
Calculator registry.
Selects the calculator responsible for a resource.
"""
from typing import Iterable, List, Optional

from stackcost.core.config import UsageAssumptions
from stackcost.domain.cost_models import Resource
from stackcost.pricing.calculators.api_gateway import APIGatewayCalculator
from stackcost.pricing.calculators.autoscaling_group import AutoScalingGroupCalculator
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.calculators.cloudfront import CloudFrontCalculator
from stackcost.pricing.calculators.dynamodb import DynamoDBCalculator
from stackcost.pricing.calculators.ec2 import EC2Calculator
from stackcost.pricing.calculators.ecs import ECSCalculator
from stackcost.pricing.calculators.efs import EFSCalculator
from stackcost.pricing.calculators.elasticache import ElastiCacheCalculator
from stackcost.pricing.calculators.lambda_function import LambdaCalculator
from stackcost.pricing.calculators.launch_template import LaunchTemplateCalculator
from stackcost.pricing.calculators.load_balancer import ALBCalculator, NLBCalculator
from stackcost.pricing.calculators.nat_gateway import NatGatewayCalculator
from stackcost.pricing.calculators.rds import RDSCalculator
from stackcost.pricing.calculators.s3 import S3Calculator
from stackcost.pricing.calculators.secrets_manager import SecretsManagerCalculator
from stackcost.pricing.calculators.sns import SNSCalculator
from stackcost.pricing.calculators.sqs import SQSCalculator
from stackcost.pricing.calculators.step_functions import StepFunctionsCalculator
from stackcost.pricing.calculators.vpc_endpoint import VPCEndpointCalculator
from stackcost.pricing.errors import UnsupportedResourceError
from stackcost.utils.debug_logger import PricingDebugLogger


def build_default_calculators(
    usage_assumptions: Optional[UsageAssumptions] = None,
    debug_logger: Optional[PricingDebugLogger] = None,
) -> List[ResourceCostCalculator]:
    """Every built-in calculator, in dispatch order."""
    calculator_classes = [
        EC2Calculator,
        S3Calculator,
        LambdaCalculator,
        RDSCalculator,
        DynamoDBCalculator,
        ElastiCacheCalculator,
        CloudFrontCalculator,
        ALBCalculator,
        NLBCalculator,
        NatGatewayCalculator,
        VPCEndpointCalculator,
        SQSCalculator,
        SNSCalculator,
        StepFunctionsCalculator,
        SecretsManagerCalculator,
        APIGatewayCalculator,
        ECSCalculator,
        EFSCalculator,
        LaunchTemplateCalculator,
        AutoScalingGroupCalculator,
    ]
    return [cls(usage_assumptions, debug_logger) for cls in calculator_classes]


KNOWN_RESOURCE_TYPES = (
    "AWS::EC2::Instance",
    "AWS::S3::Bucket",
    "AWS::Lambda::Function",
    "AWS::RDS::DBInstance",
    "AWS::DynamoDB::Table",
    "AWS::ElastiCache::CacheCluster",
    "AWS::CloudFront::Distribution",
    "AWS::ElasticLoadBalancingV2::LoadBalancer",
    "AWS::EC2::NatGateway",
    "AWS::EC2::VPCEndpoint",
    "AWS::SQS::Queue",
    "AWS::SNS::Topic",
    "AWS::StepFunctions::StateMachine",
    "AWS::SecretsManager::Secret",
    "AWS::ApiGateway::RestApi",
    "AWS::ApiGatewayV2::Api",
    "AWS::ECS::Service",
    "AWS::EFS::FileSystem",
    "AWS::EC2::LaunchTemplate",
    "AWS::AutoScaling::AutoScalingGroup",
)


class CalculatorRegistry:
    """Ordered list of calculators; the first one that accepts a resource wins."""

    def __init__(self, calculators: Iterable[ResourceCostCalculator]):
        self.calculators = list(calculators)

    def find_calculator(self, resource: Resource) -> Optional[ResourceCostCalculator]:
        for calculator in self.calculators:
            if calculator.can_calculate(resource):
                return calculator
        return None

    def require_calculator(self, resource: Resource) -> ResourceCostCalculator:
        """
        Raises:
            UnsupportedResourceError: If no calculator accepts the resource.
        """
        calculator = self.find_calculator(resource)
        if calculator is None:
            raise UnsupportedResourceError(resource.type)
        return calculator

    def supported_types(self) -> List[str]:
        return sorted({
            resource_type
            for resource_type in KNOWN_RESOURCE_TYPES
            if any(calculator.supports(resource_type) for calculator in self.calculators)
        })

