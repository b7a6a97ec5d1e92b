"""
RDS database instance cost calculator.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import HOURS_PER_MONTH, ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient


logger = logging.getLogger(__name__)

STORAGE_GB = 100

# CloudFormation engine names to Price List databaseEngine values
ENGINE_NAMES = {
    "mysql": "MySQL",
    "postgres": "PostgreSQL",
    "mariadb": "MariaDB",
    "oracle-se2": "Oracle",
    "sqlserver-ex": "SQL Server",
    "aurora-mysql": "Aurora MySQL",
    "aurora-postgresql": "Aurora PostgreSQL",
}


def normalize_engine(engine: str) -> str:
    return ENGINE_NAMES.get(engine.lower(), engine)


class RDSCalculator(ResourceCostCalculator):
    """Prices AWS::RDS::DBInstance as a Single-AZ instance plus storage."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::RDS::DBInstance"

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        instance_class = resource.properties.get("DBInstanceClass")
        engine = resource.properties.get("Engine")
        if not instance_class or not engine:
            return MonthlyCost.unknown("DB instance class or engine not specified")

        database_engine = normalize_engine(str(engine))
        try:
            instance_rate = await pricing_client.get_price(
                self.build_query("AmazonRDS", region, {
                    "instanceType": instance_class,
                    "databaseEngine": database_engine,
                    "deploymentOption": "Single-AZ",
                })
            )
            storage_rate = await pricing_client.get_price(
                self.build_query("AmazonRDS", region, {
                    "volumeType": "General Purpose",
                    "databaseEngine": database_engine,
                })
            )
        except Exception as error:
            logger.warning(f"RDS pricing failed for {resource.logical_id}: {error}")
            return MonthlyCost.failed(error)

        if instance_rate is None:
            return MonthlyCost.unknown(
                f"Pricing data not available for {instance_class} with engine {engine} in region {region}"
            )

        instance_cost = instance_rate * HOURS_PER_MONTH
        storage_cost = (storage_rate or 0) * STORAGE_GB

        return MonthlyCost(
            amount=instance_cost + storage_cost,
            confidence=Confidence.HIGH,
            assumptions=[
                f"Assumes {HOURS_PER_MONTH} hours per month (24/7 operation)",
                f"Assumes {STORAGE_GB}GB of General Purpose (gp2) storage",
                "Assumes Single-AZ deployment",
                "Does not include backup storage, I/O, or data transfer costs",
            ],
        )
