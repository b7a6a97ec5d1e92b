"""
EFS file system cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

DEFAULT_STORAGE_GB = 100
DEFAULT_IA_PERCENTAGE = 0
# Share of Infrequent Access data read back each month
IA_ACCESS_RATIO = 0.10

# us-east-1 list prices, used when the catalog has no match
FALLBACK_STANDARD_PRICE = 0.30  # per GB-month
FALLBACK_IA_STORAGE_PRICE = 0.016  # per GB-month
FALLBACK_IA_REQUEST_PRICE = 0.01  # per GB read
FALLBACK_PROVISIONED_THROUGHPUT_PRICE = 6.00  # per MiB/s-month


def has_ia_transition(resource: Resource) -> bool:
    policies = resource.properties.get("LifecyclePolicies") or []
    return any(isinstance(policy, dict) and "TransitionToIA" in policy for policy in policies)


class EFSCalculator(ResourceCostCalculator):
    """
    Prices AWS::EFS::FileSystem.

    Standard storage is always charged. Infrequent Access storage and reads
    apply only when a lifecycle policy moves data to IA, and provisioned
    throughput only in ``provisioned`` throughput mode. Each missing catalog
    price falls back to its list price and lowers confidence to low.
    """

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::EFS::FileSystem"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        storage_gb = self.usage.efs_storage_gb
        if storage_gb is None:
            storage_gb = DEFAULT_STORAGE_GB
        ia_percentage = self.usage.efs_infrequent_access_percentage
        if ia_percentage is None:
            ia_percentage = DEFAULT_IA_PERCENTAGE

        ia_transition = has_ia_transition(resource)
        uses_ia = ia_transition and ia_percentage > 0
        effective_ia_percentage = ia_percentage if ia_transition else 0
        standard_gb = storage_gb * (1 - effective_ia_percentage / 100)
        ia_gb = storage_gb * (effective_ia_percentage / 100)

        throughput_mode = resource.properties.get("ThroughputMode")
        throughput_mibps = resource.properties.get("ProvisionedThroughputInMibps")
        provisioned = throughput_mode == "provisioned" and throughput_mibps is not None

        prefix = get_region_prefix(region)
        ia_storage_price = ia_request_price = throughput_price = None
        try:
            standard_price = await pricing_client.get_price(
                self.build_query("AmazonEFS", region, {
                    "productFamily": "Storage",
                    "usagetype": f"{prefix}-TimedStorage-ByteHrs",
                })
            )
            if uses_ia:
                ia_storage_price = await pricing_client.get_price(
                    self.build_query("AmazonEFS", region, {
                        "productFamily": "Storage",
                        "usagetype": f"{prefix}-IATimedStorage-ByteHrs",
                    })
                )
                ia_request_price = await pricing_client.get_price(
                    self.build_query("AmazonEFS", region, {
                        "productFamily": "Storage",
                        "usagetype": f"{prefix}-IARequests-Bytes",
                    })
                )
            if provisioned:
                throughput_price = await pricing_client.get_price(
                    self.build_query("AmazonEFS", region, {
                        "productFamily": "Provisioned Throughput",
                        "usagetype": f"{prefix}-ProvisionedTP-MiBpsHrs",
                    })
                )
        except Exception as error:
            logger.warning(f"EFS pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        assumptions: List[str] = []
        confidence = Confidence.MEDIUM
        total = 0.0

        if standard_price is None:
            standard_price = FALLBACK_STANDARD_PRICE
            assumptions.append("Using fallback Standard storage pricing (API unavailable)")
            confidence = Confidence.LOW
        standard_cost = standard_gb * standard_price
        total += standard_cost
        assumptions.append(
            f"Standard storage: {standard_gb:.2f} GB x ${standard_price:.4f}/GB = ${standard_cost:.2f}/month"
        )

        if uses_ia:
            if ia_storage_price is None:
                ia_storage_price = FALLBACK_IA_STORAGE_PRICE
                assumptions.append("Using fallback Infrequent Access storage pricing (API unavailable)")
                confidence = Confidence.LOW
            ia_storage_cost = ia_gb * ia_storage_price
            total += ia_storage_cost
            assumptions.append(
                f"Infrequent Access storage: {ia_gb:.2f} GB x ${ia_storage_price:.4f}/GB "
                f"= ${ia_storage_cost:.2f}/month"
            )

            accessed_gb = ia_gb * IA_ACCESS_RATIO
            if ia_request_price is None:
                ia_request_price = FALLBACK_IA_REQUEST_PRICE
                assumptions.append("Using fallback Infrequent Access request pricing (API unavailable)")
                confidence = Confidence.LOW
            ia_request_cost = accessed_gb * ia_request_price
            total += ia_request_cost
            assumptions.append(
                f"IA requests (estimated {IA_ACCESS_RATIO:.0%} access): {accessed_gb:.2f} GB "
                f"x ${ia_request_price:.4f}/GB = ${ia_request_cost:.2f}/month"
            )

        if provisioned:
            if throughput_price is None:
                throughput_price = FALLBACK_PROVISIONED_THROUGHPUT_PRICE
                assumptions.append("Using fallback Provisioned Throughput pricing (API unavailable)")
                confidence = Confidence.LOW
            throughput_cost = float(throughput_mibps) * throughput_price
            total += throughput_cost
            assumptions.append(
                f"Provisioned Throughput: {throughput_mibps} MB/s x ${throughput_price:.2f}/MB/s "
                f"= ${throughput_cost:.2f}/month"
            )

        assumptions.append(f"Total storage: {storage_gb:g} GB")
        if self.usage.efs_storage_gb is not None:
            assumptions.append("Using custom storage size assumption from configuration")
        if ia_transition:
            assumptions.append(f"Lifecycle policy detected: {effective_ia_percentage:g}% in Infrequent Access")
            if self.usage.efs_infrequent_access_percentage is not None:
                assumptions.append("Using custom IA percentage assumption from configuration")
        if throughput_mode:
            assumptions.append(f"Throughput mode: {throughput_mode}")
        assumptions.append(f"Total: ${total:.2f}/month")

        return MonthlyCost(amount=total, confidence=confidence, assumptions=assumptions)
