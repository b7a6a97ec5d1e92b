"""
Diagnostic logging for pricing lookups.
Emits structured debug events when enabled, otherwise does nothing.
"""
import json
import logging
from typing import Any, Dict, Optional


class PricingDebugLogger:
    """
    Structured diagnostic channel injected into pricing components.

    Each event is written as a single ``logger.debug`` record whose message is
    the event name followed by a JSON payload. When disabled every method
    returns immediately.
    """

    def __init__(self, enabled: bool = False, logger: Optional[logging.Logger] = None):
        self.enabled = enabled
        self._logger = logger or logging.getLogger(__name__)

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        if not self.enabled:
            return
        self._logger.debug("%s %s", event, json.dumps(payload, default=str, sort_keys=True))

    def log_price_query(self, service_code: str, region: str, filters: Any) -> None:
        self._emit("Pricing API Query", {
            "serviceCode": service_code,
            "region": region,
            "filters": filters,
        })

    def log_price_response(self, service_code: str, price: Optional[float], candidates: int = 0) -> None:
        self._emit("Pricing API Response", {
            "serviceCode": service_code,
            "price": price,
            "candidates": candidates,
        })

    def log_pricing_failure(self, service_code: str, region: str, error: BaseException) -> None:
        self._emit("Pricing Lookup Failed", {
            "serviceCode": service_code,
            "region": region,
            "error": str(error),
            "retryable": getattr(error, "retryable", False),
        })

    def log_region_normalization(self, region_code: str, location: str) -> None:
        self._emit("Region Normalization", {"regionCode": region_code, "location": location})

    def log_cache_status(self, key: str, hit: bool, source: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {"key": key}
        if source:
            payload["source"] = source
        self._emit("Cache HIT" if hit else "Cache MISS", payload)


# Shared disabled instance for components created without a logger
NULL_DEBUG_LOGGER = PricingDebugLogger(enabled=False)
