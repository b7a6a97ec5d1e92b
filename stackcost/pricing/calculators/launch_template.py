"""
Launch template cost calculator.
A launch template costs nothing by itself; it is priced as one instance
launched from it, including its EBS volumes.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.calculators.ec2 import ec2_instance_filters
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

DEFAULT_VOLUME_SIZE_GB = 8
DEFAULT_VOLUME_TYPE = "gp3"
DEFAULT_DEVICE_NAME = "/dev/xvda"
GP3_BASELINE_THROUGHPUT = 125


@dataclass
class EbsVolumeConfig:
    device_name: str
    volume_type: str
    volume_size_gb: float
    iops: Optional[int] = None
    throughput: Optional[int] = None
    delete_on_termination: bool = True


@dataclass
class LaunchTemplateConfig:
    """Pricing-relevant parts of ``LaunchTemplateData``."""
    instance_type: Optional[str] = None
    image_id: Optional[str] = None
    ebs_volumes: List[EbsVolumeConfig] = field(default_factory=list)


def extract_launch_template_config(resource: Resource) -> LaunchTemplateConfig:
    data = resource.properties.get("LaunchTemplateData")
    if not isinstance(data, dict):
        return LaunchTemplateConfig()
    return LaunchTemplateConfig(
        instance_type=data.get("InstanceType") or None,
        image_id=data.get("ImageId") or None,
        ebs_volumes=_extract_ebs_volumes(data),
    )


def _extract_ebs_volumes(data: Dict[str, Any]) -> List[EbsVolumeConfig]:
    mappings = data.get("BlockDeviceMappings")
    if not isinstance(mappings, list):
        return []

    volumes = []
    for mapping in mappings:
        if not isinstance(mapping, dict) or not isinstance(mapping.get("Ebs"), dict):
            continue
        ebs = mapping["Ebs"]
        delete_on_termination = ebs.get("DeleteOnTermination")
        volumes.append(EbsVolumeConfig(
            device_name=mapping.get("DeviceName") or DEFAULT_DEVICE_NAME,
            volume_type=ebs.get("VolumeType") or DEFAULT_VOLUME_TYPE,
            volume_size_gb=float(ebs.get("VolumeSize") or DEFAULT_VOLUME_SIZE_GB),
            iops=ebs.get("Iops"),
            throughput=ebs.get("Throughput"),
            delete_on_termination=True if delete_on_termination is None else bool(delete_on_termination),
        ))
    return volumes


class LaunchTemplateCalculator(ResourceCostCalculator):
    """Prices AWS::EC2::LaunchTemplate as the per-instance cost of using it."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::EC2::LaunchTemplate"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        template_config = extract_launch_template_config(resource)
        if not template_config.instance_type:
            return MonthlyCost.unknown(
                "LaunchTemplate does not specify an instance type",
                "LaunchTemplates have no direct cost; costs are incurred when instances are launched",
            )

        try:
            hourly_rate = await pricing_client.get_price(
                self.build_query("AmazonEC2", region, ec2_instance_filters(template_config.instance_type))
            )
            if hourly_rate is None:
                return MonthlyCost.unknown(
                    f"Pricing data not available for instance type {template_config.instance_type} "
                    f"in region {region}"
                )
            storage_cost = await self._storage_cost(template_config.ebs_volumes, region, pricing_client)
        except Exception as error:
            logger.warning(f"Launch template pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        assumptions = [
            "LaunchTemplates have no direct cost; this represents per-instance cost when used",
            f"Instance type: {template_config.instance_type}",
            f"Assumes {HOURS_PER_MONTH} hours per month (24/7 operation)",
            "Assumes Linux OS, shared tenancy, on-demand pricing",
        ]
        volumes = template_config.ebs_volumes
        if volumes:
            described = ", ".join(
                f"{v.device_name}: {v.volume_size_gb:g}GB {v.volume_type}" for v in volumes
            )
            assumptions.append(f"EBS volumes: {described}")
        if any(v.volume_type in ("io1", "io2") and v.iops for v in volumes):
            assumptions.append("Provisioned IOPS costs for io1/io2 volumes are not included")
        if any(v.volume_type == "gp3" and (v.throughput or 0) > GP3_BASELINE_THROUGHPUT for v in volumes):
            assumptions.append("Additional throughput costs for gp3 volumes are not included")
        if template_config.image_id:
            assumptions.append(f"AMI: {template_config.image_id}")

        return MonthlyCost(
            amount=hourly_rate * HOURS_PER_MONTH + storage_cost,
            confidence=Confidence.LOW,
            assumptions=assumptions,
        )

    async def _storage_cost(
        self,
        volumes: List[EbsVolumeConfig],
        region: str,
        pricing_client: PricingClient,
    ) -> float:
        # Volumes without a catalog price are left out of the total
        total = 0.0
        for volume in volumes:
            price_per_gb_month = await pricing_client.get_price(
                self.build_query("AmazonEC2", region, {
                    "productFamily": "Storage",
                    "volumeApiName": volume.volume_type.lower(),
                })
            )
            if price_per_gb_month is not None:
                total += price_per_gb_month * volume.volume_size_gb
        return total
