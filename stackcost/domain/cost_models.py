"""
Domain models for cost resolution.
Defines resources, resource diffs, monthly costs and cost deltas.
"""
from typing import List, Dict, Any, Mapping
from dataclasses import dataclass, field
from enum import Enum


CURRENCY = "USD"


class Confidence(str, Enum):
    """How much a returned amount should be trusted."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"  # Could not determine the cost


@dataclass(frozen=True)
class Resource:
    """A single template resource."""
    logical_id: str
    type: str
    properties: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModifiedResource:
    """A resource present in both templates with changed properties."""
    logical_id: str
    type: str
    old_properties: Mapping[str, Any] = field(default_factory=dict)
    new_properties: Mapping[str, Any] = field(default_factory=dict)

    def old_resource(self) -> Resource:
        return Resource(self.logical_id, self.type, self.old_properties)

    def new_resource(self) -> Resource:
        return Resource(self.logical_id, self.type, self.new_properties)


@dataclass(frozen=True)
class ResourceDiff:
    """Three-way diff between a base and a target template."""
    added: List[Resource] = field(default_factory=list)
    removed: List[Resource] = field(default_factory=list)
    modified: List[ModifiedResource] = field(default_factory=list)

    def all_resources(self) -> List[Resource]:
        """
        Combined view of every resource in the diff.

        Modified resources are represented with their new properties. Used as
        reference-resolution context for calculators.
        """
        return (
            list(self.added)
            + list(self.removed)
            + [resource.new_resource() for resource in self.modified]
        )


@dataclass
class MonthlyCost:
    """Monthly cost estimate for one resource."""
    amount: float
    confidence: Confidence
    assumptions: List[str] = field(default_factory=list)
    currency: str = CURRENCY

    @classmethod
    def unknown(cls, *assumptions: str) -> "MonthlyCost":
        """Zero-cost result for anything that could not be priced."""
        return cls(amount=0.0, confidence=Confidence.UNKNOWN, assumptions=list(assumptions))

    @classmethod
    def failed(cls, error: BaseException, *assumptions: str) -> "MonthlyCost":
        """Zero-cost result for a calculation that raised."""
        return cls.unknown(f"Failed to fetch pricing: {error}", *assumptions)

    @classmethod
    def unsupported(cls, resource_type: str) -> "MonthlyCost":
        return cls.unknown(f"Resource type {resource_type} is not supported")

    @classmethod
    def excluded(cls, resource_type: str) -> "MonthlyCost":
        return cls(
            amount=0.0,
            confidence=Confidence.HIGH,
            assumptions=[f"Resource type {resource_type} excluded from cost analysis"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "amount": round(self.amount, 2),
            "currency": self.currency,
            "confidence": self.confidence.value,
            "assumptions": list(self.assumptions),
        }


@dataclass
class ResourceCost:
    """Cost of an added or removed resource."""
    logical_id: str
    type: str
    monthly_cost: MonthlyCost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logicalId": self.logical_id,
            "type": self.type,
            "monthlyCost": self.monthly_cost.to_dict(),
        }


@dataclass
class ModifiedResourceCost:
    """Old and new cost of a modified resource."""
    logical_id: str
    type: str
    old_monthly_cost: MonthlyCost
    new_monthly_cost: MonthlyCost
    cost_delta: float

    @property
    def monthly_cost(self) -> MonthlyCost:
        return self.new_monthly_cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logicalId": self.logical_id,
            "type": self.type,
            "monthlyCost": self.new_monthly_cost.to_dict(),
            "oldMonthlyCost": self.old_monthly_cost.to_dict(),
            "newMonthlyCost": self.new_monthly_cost.to_dict(),
            "costDelta": round(self.cost_delta, 2),
        }


@dataclass
class CostDelta:
    """
    Net monthly cost change of a diff.

    total_delta == sum(added) - sum(removed) + sum(modified.cost_delta)
    """
    total_delta: float
    added_costs: List[ResourceCost] = field(default_factory=list)
    removed_costs: List[ResourceCost] = field(default_factory=list)
    modified_costs: List[ModifiedResourceCost] = field(default_factory=list)
    currency: str = CURRENCY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "totalDelta": round(self.total_delta, 2),
            "currency": self.currency,
            "addedCosts": [cost.to_dict() for cost in self.added_costs],
            "removedCosts": [cost.to_dict() for cost in self.removed_costs],
            "modifiedCosts": [cost.to_dict() for cost in self.modified_costs],
        }
