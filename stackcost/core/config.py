"""
Configuration module for loading environment variables.
Pricing, cache and diagnostic settings are read once at import time.
"""
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration loaded from environment variables."""

    # Pricing API Configuration
    AWS_PRICING_REGION: str = os.getenv("AWS_PRICING_REGION", "us-east-1")
    PRICING_API_TIMEOUT_SECONDS: int = int(os.getenv("PRICING_API_TIMEOUT_SECONDS", "10"))
    DEFAULT_REGION: str = os.getenv("DEFAULT_REGION", "us-east-1")

    # Price cache Configuration
    PRICING_CACHE_ENABLED: bool = _env_bool("PRICING_CACHE_ENABLED", "true")
    PRICING_CACHE_TTL_SECONDS: int = int(os.getenv("PRICING_CACHE_TTL_SECONDS", "86400"))  # 24 hours
    PRICING_CACHE_DIR: str = os.getenv("PRICING_CACHE_DIR", ".stackcost-cache")
    PRICING_CACHE_NAMESPACE: str = os.getenv("PRICING_CACHE_NAMESPACE", "pricing")

    # Diagnostics
    PRICING_DEBUG: bool = _env_bool("PRICING_DEBUG", "false")

    HOURS_PER_MONTH: int = 730  # Standard assumption: 24/7 operation

    @classmethod
    def validate(cls) -> None:
        """
        Validates pricing configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if cls.PRICING_CACHE_TTL_SECONDS <= 0:
            raise ValueError(
                f"PRICING_CACHE_TTL_SECONDS must be positive (got: {cls.PRICING_CACHE_TTL_SECONDS})"
            )
        if not cls.PRICING_CACHE_NAMESPACE:
            raise ValueError("PRICING_CACHE_NAMESPACE is required")
        if cls.PRICING_API_TIMEOUT_SECONDS <= 0:
            raise ValueError("PRICING_API_TIMEOUT_SECONDS must be positive")


config = Config()


@dataclass(frozen=True)
class CacheSettings:
    """Settings for one price cache instance."""
    enabled: bool = True
    ttl_seconds: int = 86400
    cache_dir: str = ".stackcost-cache"
    namespace: str = "pricing"

    @classmethod
    def from_config(cls, source: Config = config) -> "CacheSettings":
        return cls(
            enabled=source.PRICING_CACHE_ENABLED,
            ttl_seconds=source.PRICING_CACHE_TTL_SECONDS,
            cache_dir=source.PRICING_CACHE_DIR,
            namespace=source.PRICING_CACHE_NAMESPACE,
        )


# Nested camelCase keys accepted by UsageAssumptions.from_dict
_USAGE_KEY_MAP: Dict[str, Dict[str, str]] = {
    "s3": {"storageGB": "s3_storage_gb"},
    "lambda": {
        "invocationsPerMonth": "lambda_invocations_per_month",
        "averageDurationMs": "lambda_average_duration_ms",
    },
    "dynamodb": {
        "readRequestsPerMonth": "dynamodb_read_requests_per_month",
        "writeRequestsPerMonth": "dynamodb_write_requests_per_month",
    },
    "natGateway": {"dataProcessedGB": "nat_gateway_data_processed_gb"},
    "alb": {
        "newConnectionsPerSecond": "alb_new_connections_per_second",
        "activeConnectionsPerMinute": "alb_active_connections_per_minute",
        "processedBytesGB": "alb_processed_bytes_gb",
    },
    "nlb": {
        "newConnectionsPerSecond": "nlb_new_connections_per_second",
        "activeConnectionsPerMinute": "nlb_active_connections_per_minute",
        "processedBytesGB": "nlb_processed_bytes_gb",
    },
    "cloudfront": {
        "dataTransferGB": "cloudfront_data_transfer_gb",
        "requests": "cloudfront_requests",
    },
    "vpcEndpoint": {"dataProcessedGB": "vpc_endpoint_data_processed_gb"},
    "sqs": {"monthlyRequests": "sqs_monthly_requests"},
    "sns": {
        "monthlyPublishes": "sns_monthly_publishes",
        "httpDeliveries": "sns_http_deliveries",
    },
    "stepFunctions": {
        "monthlyExecutions": "step_functions_monthly_executions",
        "stateTransitionsPerExecution": "step_functions_state_transitions_per_execution",
        "averageDurationMs": "step_functions_average_duration_ms",
    },
    "secretsManager": {"monthlyApiCalls": "secrets_manager_monthly_api_calls"},
    "efs": {
        "storageSizeGb": "efs_storage_gb",
        "infrequentAccessPercentage": "efs_infrequent_access_percentage",
    },
}


@dataclass(frozen=True)
class UsageAssumptions:
    """
    Caller-supplied usage assumptions for usage-based calculators.

    A field left as None means "use the calculator default". A field that is
    set counts as a custom assumption, which allows calculators to fall back
    to approximate list prices when the catalog has no match.
    """
    s3_storage_gb: Optional[float] = None
    lambda_invocations_per_month: Optional[int] = None
    lambda_average_duration_ms: Optional[float] = None
    dynamodb_read_requests_per_month: Optional[int] = None
    dynamodb_write_requests_per_month: Optional[int] = None
    nat_gateway_data_processed_gb: Optional[float] = None
    alb_new_connections_per_second: Optional[float] = None
    alb_active_connections_per_minute: Optional[float] = None
    alb_processed_bytes_gb: Optional[float] = None
    nlb_new_connections_per_second: Optional[float] = None
    nlb_active_connections_per_minute: Optional[float] = None
    nlb_processed_bytes_gb: Optional[float] = None
    cloudfront_data_transfer_gb: Optional[float] = None
    cloudfront_requests: Optional[int] = None
    vpc_endpoint_data_processed_gb: Optional[float] = None
    sqs_monthly_requests: Optional[int] = None
    sns_monthly_publishes: Optional[int] = None
    sns_http_deliveries: Optional[int] = None
    step_functions_monthly_executions: Optional[int] = None
    step_functions_state_transitions_per_execution: Optional[int] = None
    step_functions_average_duration_ms: Optional[float] = None
    secrets_manager_monthly_api_calls: Optional[int] = None
    efs_storage_gb: Optional[float] = None
    efs_infrequent_access_percentage: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "UsageAssumptions":
        """
        Build assumptions from either flat snake_case keys or the nested
        camelCase shape used in configuration files, e.g.
        ``{"sqs": {"monthlyRequests": 5000000}}``.

        Raises:
            ValueError: If an unknown key is supplied.
        """
        if not data:
            return cls()

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in known:
                values[key] = value
            elif key in _USAGE_KEY_MAP and isinstance(value, dict):
                for nested_key, nested_value in value.items():
                    field_name = _USAGE_KEY_MAP[key].get(nested_key)
                    if field_name is None:
                        raise ValueError(f"Unknown usage assumption '{key}.{nested_key}'")
                    values[field_name] = nested_value
            else:
                raise ValueError(f"Unknown usage assumption '{key}'")
        return cls(**values)
