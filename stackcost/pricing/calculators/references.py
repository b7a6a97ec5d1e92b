"""
Resolution of intrinsic references between template resources.
"""
from typing import Any, List, Optional

from stackcost.domain.cost_models import Resource


def resolve_reference(ref: Any, template_resources: Optional[List[Resource]]) -> Optional[Resource]:
    """
    Find the resource a property points at.

    Args:
        ref: Either ``{"Ref": "LogicalId"}`` or a plain logical id string
        template_resources: Resources to search

    Returns:
        The referenced resource, or None when it cannot be found
    """
    if not template_resources or not ref:
        return None

    if isinstance(ref, dict):
        logical_id = ref.get("Ref")
    elif isinstance(ref, str):
        logical_id = ref
    else:
        return None

    if not isinstance(logical_id, str):
        return None

    for resource in template_resources:
        if resource.logical_id == logical_id:
            return resource
    return None
