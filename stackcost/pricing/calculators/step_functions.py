"""
Step Functions state machine cost calculator.
Standard workflows bill per state transition; express workflows bill per
request plus duration.
"""
import logging
from typing import List, Optional

from stackcost.domain.cost_models import Confidence, MonthlyCost, Resource
from stackcost.pricing.calculators.base import ResourceCostCalculator
from stackcost.pricing.pricing_client import PricingClient
from stackcost.pricing.region_map import get_region_prefix


logger = logging.getLogger(__name__)

DEFAULT_MONTHLY_EXECUTIONS = 10_000
DEFAULT_STATE_TRANSITIONS_PER_EXECUTION = 10
DEFAULT_AVERAGE_DURATION_MS = 1000
EXPRESS_MEMORY_MB = 64

# us-east-1 list prices, used only with caller-supplied usage
FALLBACK_STANDARD_STATE_TRANSITION_PRICE = 0.025 / 1000
FALLBACK_EXPRESS_REQUEST_PRICE = 1.0 / 1_000_000
FALLBACK_EXPRESS_DURATION_PRICE = 0.00001667  # per GB-second


class StepFunctionsCalculator(ResourceCostCalculator):
    """Prices AWS::StepFunctions::StateMachine."""

    def supports(self, resource_type: str) -> bool:
        return resource_type == "AWS::StepFunctions::StateMachine"

    def _has_custom_assumptions(self) -> bool:
        return any(value is not None for value in (
            self.usage.step_functions_monthly_executions,
            self.usage.step_functions_state_transitions_per_execution,
            self.usage.step_functions_average_duration_ms,
        ))

    def _query(self, region: str, base_usage_type: str):
        prefix = get_region_prefix(region)
        return self.build_query("AWSStepFunctions", region, {
            "productFamily": "AWS Step Functions",
            "usagetype": f"{prefix}-{base_usage_type}" if prefix else base_usage_type,
        })

    def _executions(self) -> int:
        executions = self.usage.step_functions_monthly_executions
        return DEFAULT_MONTHLY_EXECUTIONS if executions is None else executions

    async def calculate_cost(
        self,
        resource: Resource,
        region: str,
        pricing_client: PricingClient,
        template_resources: Optional[List[Resource]] = None,
    ) -> MonthlyCost:
        if resource.properties.get("Type") == "EXPRESS":
            return await self._express_cost(resource, region, pricing_client)
        return await self._standard_cost(resource, region, pricing_client)

    async def _standard_cost(self, resource: Resource, region: str, pricing_client: PricingClient) -> MonthlyCost:
        executions = self._executions()
        per_execution = self.usage.step_functions_state_transitions_per_execution
        if per_execution is None:
            per_execution = DEFAULT_STATE_TRANSITIONS_PER_EXECUTION
        transitions = executions * per_execution
        custom = self._has_custom_assumptions()

        assumptions = [
            "Standard workflow",
            f"Assumes {executions:,} executions per month",
            f"Assumes {per_execution:,} state transitions per execution ({transitions:,} total)",
        ]

        try:
            transition_price = await pricing_client.get_price(self._query(region, "StateTransition"))
        except Exception as error:
            logger.warning(f"Step Functions pricing failed for {resource.logical_id}: {error}")
            if custom:
                return MonthlyCost(
                    amount=transitions * FALLBACK_STANDARD_STATE_TRANSITION_PRICE,
                    confidence=Confidence.LOW,
                    assumptions=["Using fallback pricing (API error)", *assumptions],
                )
            return MonthlyCost.failed(error, *assumptions)

        if transition_price is None:
            if custom:
                return MonthlyCost(
                    amount=transitions * FALLBACK_STANDARD_STATE_TRANSITION_PRICE,
                    confidence=Confidence.LOW,
                    assumptions=["Using fallback state transition pricing (API unavailable)", *assumptions],
                )
            return MonthlyCost.unknown(
                f"Pricing data not available for Step Functions Standard workflow in region {region}",
                *assumptions,
            )

        return MonthlyCost(
            amount=transitions * transition_price,
            confidence=Confidence.MEDIUM,
            assumptions=assumptions,
        )

    async def _express_cost(self, resource: Resource, region: str, pricing_client: PricingClient) -> MonthlyCost:
        executions = self._executions()
        duration_ms = self.usage.step_functions_average_duration_ms
        if duration_ms is None:
            duration_ms = DEFAULT_AVERAGE_DURATION_MS
        gb_seconds = (EXPRESS_MEMORY_MB / 1024) * (duration_ms / 1000) * executions
        custom = self._has_custom_assumptions()

        assumptions = [
            "Express workflow",
            f"Assumes {executions:,} executions per month",
            f"Assumes {duration_ms:g}ms average duration at {EXPRESS_MEMORY_MB}MB ({gb_seconds:,.2f} GB-seconds)",
        ]

        try:
            request_price = await pricing_client.get_price(self._query(region, "ExpressRequest"))
            duration_price = await pricing_client.get_price(self._query(region, "ExpressDuration"))
        except Exception as error:
            logger.warning(f"Step Functions pricing failed for {resource.logical_id}: {error}")
            if custom:
                return MonthlyCost(
                    amount=executions * FALLBACK_EXPRESS_REQUEST_PRICE + gb_seconds * FALLBACK_EXPRESS_DURATION_PRICE,
                    confidence=Confidence.LOW,
                    assumptions=["Using fallback pricing (API error)", *assumptions],
                )
            return MonthlyCost.failed(error, *assumptions)

        if request_price is None or duration_price is None:
            if not custom:
                return MonthlyCost.unknown(
                    f"Pricing data not available for Step Functions Express workflow in region {region}",
                    *assumptions,
                )
            notes = []
            if request_price is None:
                notes.append("Using fallback request pricing (API unavailable)")
                request_price = FALLBACK_EXPRESS_REQUEST_PRICE
            if duration_price is None:
                notes.append("Using fallback duration pricing (API unavailable)")
                duration_price = FALLBACK_EXPRESS_DURATION_PRICE
            return MonthlyCost(
                amount=executions * request_price + gb_seconds * duration_price,
                confidence=Confidence.LOW,
                assumptions=[*notes, *assumptions],
            )

        return MonthlyCost(
            amount=executions * request_price + gb_seconds * duration_price,
            confidence=Confidence.MEDIUM,
            assumptions=assumptions,
        )
