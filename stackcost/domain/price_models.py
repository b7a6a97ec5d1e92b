"""
Domain models for price lookups and cached prices.
"""
from typing import List, Dict, Optional, Tuple
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PriceFilter:
    """One attribute constraint of a price query."""
    field: str
    value: str
    match_kind: str = "TERM_MATCH"


@dataclass(frozen=True)
class PriceQuery:
    """
    Structured price lookup request.

    ``region`` must already be the catalog's location name (see
    ``stackcost.pricing.region_map.normalize_region``).
    """
    service_code: str
    region: str
    filters: Tuple[PriceFilter, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept lists from callers but keep the query hashable
        object.__setattr__(self, "filters", tuple(self.filters))

    def cache_key(self) -> str:
        """
        Deterministic cache key.

        Filters are sorted so that logically identical queries collide
        regardless of the order the caller listed them in.
        """
        filter_str = "|".join(sorted(f"{f.field}:{f.value}" for f in self.filters))
        return f"{self.service_code}:{self.region}:{filter_str}"

    def to_boto_filters(self) -> List[Dict[str, str]]:
        """Filters in the AWS Price List API request shape, location included."""
        boto_filters = [
            {"Type": f.match_kind, "Field": f.field, "Value": f.value}
            for f in self.filters
        ]
        boto_filters.append({"Type": "TERM_MATCH", "Field": "location", "Value": self.region})
        return boto_filters


@dataclass
class CacheEntry:
    """A cached unit price. ``value`` of None records a catalog miss."""
    key: str
    value: Optional[float]
    expires_at: int  # epoch milliseconds

    def is_expired(self, now_ms: int) -> bool:
        return now_ms >= self.expires_at

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {"value": self.value, "expires_at": self.expires_at}
