"""
API routes for cost estimation.
"""
from typing import Dict, Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from stackcost.core.config import config
from stackcost.domain.cost_models import ModifiedResource, Resource, ResourceDiff
from stackcost.pricing.errors import UnsupportedResourceError
from stackcost.services.pricing_service import PricingService


logger = logging.getLogger(__name__)
router = APIRouter()

_pricing_service: Optional[PricingService] = None


def get_pricing_service() -> PricingService:
    """Shared pricing service, created on first use."""
    global _pricing_service
    if _pricing_service is None:
        _pricing_service = PricingService()
    return _pricing_service


async def shutdown_pricing_service() -> None:
    global _pricing_service
    if _pricing_service is not None:
        await _pricing_service.destroy()
        _pricing_service = None


class ResourceModel(BaseModel):
    """A template resource."""
    logicalId: str = Field(..., description="Logical id of the resource in the template")
    type: str = Field(..., description="Resource type tag (e.g. AWS::EC2::Instance)")
    properties: Dict[str, Any] = Field(default_factory=dict, description="Resource properties")

    def to_resource(self) -> Resource:
        return Resource(logical_id=self.logicalId, type=self.type, properties=self.properties)


class ModifiedResourceModel(BaseModel):
    """A resource whose properties changed."""
    logicalId: str = Field(..., description="Logical id of the resource in the template")
    type: str = Field(..., description="Resource type tag")
    oldProperties: Dict[str, Any] = Field(default_factory=dict, description="Properties before the change")
    newProperties: Dict[str, Any] = Field(default_factory=dict, description="Properties after the change")

    def to_modified_resource(self) -> ModifiedResource:
        return ModifiedResource(
            logical_id=self.logicalId,
            type=self.type,
            old_properties=self.oldProperties,
            new_properties=self.newProperties,
        )


class ResourceCostRequest(BaseModel):
    """Request model for pricing a single resource."""
    resource: ResourceModel = Field(..., description="Resource to price")
    region: Optional[str] = Field(None, description="AWS region code (defaults to DEFAULT_REGION)")
    template_resources: Optional[List[ResourceModel]] = Field(
        None, description="Other template resources, used to resolve references"
    )
    strict: bool = Field(False, description="Reject unsupported resource types with 422")


class CostDeltaRequest(BaseModel):
    """Request model for pricing a resource diff."""
    added: List[ResourceModel] = Field(default_factory=list)
    removed: List[ResourceModel] = Field(default_factory=list)
    modified: List[ModifiedResourceModel] = Field(default_factory=list)
    region: Optional[str] = Field(None, description="AWS region code (defaults to DEFAULT_REGION)")


@router.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/api/pricing/supported-types")
async def supported_types(service: PricingService = Depends(get_pricing_service)) -> Dict[str, Any]:
    return {"status": "ok", "types": service.registry.supported_types()}


@router.post("/api/pricing/resource-cost")
async def resource_cost(
    request: ResourceCostRequest,
    service: PricingService = Depends(get_pricing_service),
) -> Dict[str, Any]:
    """
    Estimate the monthly cost of one resource.

    Returns:
        {"status": "ok", "cost": MonthlyCost}

    Raises:
        HTTPException: 422 when ``strict`` is set and the type is unsupported
    """
    resource = request.resource.to_resource()
    region = request.region or config.DEFAULT_REGION

    if request.strict and not service.is_excluded(resource.type):
        try:
            service.registry.require_calculator(resource)
        except UnsupportedResourceError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error

    template_resources = None
    if request.template_resources is not None:
        template_resources = [item.to_resource() for item in request.template_resources]

    cost = await service.get_resource_cost(resource, region, template_resources)
    return {"status": "ok", "cost": cost.to_dict()}


@router.post("/api/pricing/cost-delta")
async def cost_delta(
    request: CostDeltaRequest,
    service: PricingService = Depends(get_pricing_service),
) -> Dict[str, Any]:
    """
    Estimate the net monthly cost change of a resource diff.

    Returns:
        {"status": "ok", "delta": CostDelta}
    """
    diff = ResourceDiff(
        added=[item.to_resource() for item in request.added],
        removed=[item.to_resource() for item in request.removed],
        modified=[item.to_modified_resource() for item in request.modified],
    )
    region = request.region or config.DEFAULT_REGION
    logger.info(
        "Pricing diff in %s: %d added, %d removed, %d modified",
        region, len(diff.added), len(diff.removed), len(diff.modified),
    )
    delta = await service.get_cost_delta(diff, region)
    return {"status": "ok", "delta": delta.to_dict()}
