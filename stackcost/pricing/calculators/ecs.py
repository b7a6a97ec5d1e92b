"""
ECS service cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator, to_int
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

# Smallest Fargate task size
DEFAULT_TASK_VCPU = 0.25
DEFAULT_TASK_MEMORY_GB = 0.5


class ECSCalculator(ResourceCostCalculator):
    """
    Prices AWS::ECS::Service.

    Fargate services are priced per task from vCPU and memory hours. EC2
    services carry no ECS charge of their own; their cost is the cost of the
    container instances.
    """

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::ECS::Service"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        desired_count = to_int(resource.properties.get("DesiredCount")) or 1
        launch_type = resource.properties.get("LaunchType") or "FARGATE"

        if launch_type == "EC2":
            return MonthlyCost(
                amount=0.0,
                confidence=Confidence.LOW,
                assumptions=[
                    f"{desired_count} task(s) running on EC2 launch type",
                    "EC2 launch type costs depend on underlying EC2 instances",
                    "Refer to EC2 instance costs for actual pricing",
                    "Does not include ECS task-specific costs (minimal for EC2 launch type)",
                ],
            )
        if launch_type != "FARGATE":
            return MonthlyCost.unknown(f"Unsupported launch type: {launch_type}")

        # Fargate usage types carry the raw region code
        try:
            vcpu_rate = await pricing_client.get_price(
                self.build_query("AmazonECS", region, {
                    "productFamily": "Compute",
                    "usagetype": f"{region}-Fargate-vCPU-Hours:perCPU",
                })
            )
            memory_rate = await pricing_client.get_price(
                self.build_query("AmazonECS", region, {
                    "productFamily": "Compute",
                    "usagetype": f"{region}-Fargate-GB-Hours:perGB",
                })
            )
        except Exception as error:
            logger.warning(f"ECS pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if vcpu_rate is None or memory_rate is None:
            return MonthlyCost.unknown("Pricing data not available for ECS Fargate")

        vcpu_cost = DEFAULT_TASK_VCPU * vcpu_rate * HOURS_PER_MONTH * desired_count
        memory_cost = DEFAULT_TASK_MEMORY_GB * memory_rate * HOURS_PER_MONTH * desired_count

        return MonthlyCost(
            amount=vcpu_cost + memory_cost,
            confidence=Confidence.MEDIUM,
            assumptions=[
                f"{desired_count} task(s) running",
                f"Assumes {DEFAULT_TASK_VCPU} vCPU per task",
                f"Assumes {DEFAULT_TASK_MEMORY_GB} GB memory per task",
                f"Assumes {HOURS_PER_MONTH} hours per month (24/7 operation)",
                "Fargate launch type",
                "Does not include data transfer or storage costs",
            ],
        )
