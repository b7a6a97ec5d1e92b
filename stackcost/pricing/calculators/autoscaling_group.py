"""
Auto Scaling group cost calculator.
Resolves the instance type through launch configurations and templates.
"""
import logging
from typing import Any, Dict, List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator, to_int
from stackcost.pricing.calculators.ec2 import ec2_instance_filters
from stackcost.pricing.calculators.launch_template import extract_launch_template_config
from stackcost.pricing.calculators.references import resolve_reference
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)


class AutoScalingGroupCalculator(ResourceCostCalculator):
    """Prices AWS::AutoScaling::AutoScalingGroup as DesiredCapacity EC2 instances."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::AutoScaling::AutoScalingGroup"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        desired_capacity = to_int(resource.properties.get("DesiredCapacity")) or 1
        instance_type = self.resolve_instance_type(resource, template_resources)

        if not instance_type:
            return MonthlyCost.unknown(
                "Could not determine instance type from LaunchConfiguration or LaunchTemplate"
            )

        try:
            hourly_rate = await pricing_client.get_price(
                self.build_query("AmazonEC2", region, ec2_instance_filters(instance_type))
            )
        except Exception as error:
            logger.warning(f"Auto Scaling group pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if hourly_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for instance type {instance_type} in region {region}"
            )

        return MonthlyCost(
            amount=hourly_rate * HOURS_PER_MONTH * desired_capacity,
            confidence=Confidence.MEDIUM,
            assumptions=[
                f"{desired_capacity} instance(s) of type {instance_type}",
                f"Assumes {HOURS_PER_MONTH} hours per month (24/7 operation)",
                "Assumes Linux OS, shared tenancy, on-demand pricing",
                "Does not include EBS volumes or data transfer costs",
            ],
        )

    def resolve_instance_type(
        self,
        resource: Resource,
        template_resources: Optional[List[Resource]],
    ) -> Optional[str]:
        """
        Find the instance type of an Auto Scaling group.

        Tries, in order: LaunchConfigurationName, LaunchTemplate and
        MixedInstancesPolicy.LaunchTemplate.LaunchTemplateSpecification.
        """
        properties = resource.properties

        launch_config = resolve_reference(properties.get("LaunchConfigurationName"), template_resources)
        if launch_config is not None and launch_config.type == "AWS::AutoScaling::LaunchConfiguration":
            instance_type = launch_config.properties.get("InstanceType")
            if instance_type:
                return instance_type

        launch_template = properties.get("LaunchTemplate")
        if isinstance(launch_template, dict):
            instance_type = _instance_type_from_launch_template(launch_template, template_resources)
            if instance_type:
                return instance_type

        mixed_policy = properties.get("MixedInstancesPolicy")
        if isinstance(mixed_policy, dict):
            spec = (mixed_policy.get("LaunchTemplate") or {}).get("LaunchTemplateSpecification")
            if isinstance(spec, dict):
                return _instance_type_from_launch_template(spec, template_resources)

        return None


def _instance_type_from_launch_template(
    spec: Dict[str, Any],
    template_resources: Optional[List[Resource]],
) -> Optional[str]:
    ref = spec.get("LaunchTemplateId") or spec.get("LaunchTemplateName")
    launch_template = resolve_reference(ref, template_resources)
    if launch_template is None or launch_template.type != "AWS::EC2::LaunchTemplate":
        return None
    return extract_launch_template_config(launch_template).instance_type
