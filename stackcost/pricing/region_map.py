"""
AWS region code to Pricing API location string mapping.
AWS Pricing API uses human-readable location strings, not region codes,
and several usage types are prefixed with a short region code.
"""
from typing import Dict, Optional

from stackcost.utils.debug_logger import PricingDebugLogger


# Based on AWS Price List API location values
AWS_REGION_TO_LOCATION: Dict[str, str] = {
    # US
    "us-east-1": "US East (N. Virginia)",
    "us-east-2": "US East (Ohio)",
    "us-west-1": "US West (N. California)",
    "us-west-2": "US West (Oregon)",

    # Europe
    "eu-west-1": "EU (Ireland)",
    "eu-west-2": "EU (London)",
    "eu-west-3": "EU (Paris)",
    "eu-central-1": "EU (Frankfurt)",
    "eu-central-2": "EU (Zurich)",
    "eu-north-1": "EU (Stockholm)",
    "eu-south-1": "EU (Milan)",
    "eu-south-2": "EU (Spain)",

    # Asia Pacific
    "ap-south-1": "Asia Pacific (Mumbai)",
    "ap-south-2": "Asia Pacific (Hyderabad)",
    "ap-southeast-1": "Asia Pacific (Singapore)",
    "ap-southeast-2": "Asia Pacific (Sydney)",
    "ap-southeast-3": "Asia Pacific (Jakarta)",
    "ap-southeast-4": "Asia Pacific (Melbourne)",
    "ap-northeast-1": "Asia Pacific (Tokyo)",
    "ap-northeast-2": "Asia Pacific (Seoul)",
    "ap-northeast-3": "Asia Pacific (Osaka)",
    "ap-east-1": "Asia Pacific (Hong Kong)",

    # Canada
    "ca-central-1": "Canada (Central)",
    "ca-west-1": "Canada West (Calgary)",

    # South America
    "sa-east-1": "South America (Sao Paulo)",

    # Middle East
    "me-south-1": "Middle East (Bahrain)",
    "me-central-1": "Middle East (UAE)",

    # Africa
    "af-south-1": "Africa (Cape Town)",

    # Israel
    "il-central-1": "Israel (Tel Aviv)",
}


# Usage type prefixes, e.g. "USE1-LoadBalancerUsage"
AWS_REGION_TO_PREFIX: Dict[str, str] = {
    "us-east-1": "USE1",
    "us-east-2": "USE2",
    "us-west-1": "USW1",
    "us-west-2": "USW2",
    "eu-west-1": "EUW1",
    "eu-west-2": "EUW2",
    "eu-west-3": "EUW3",
    "eu-central-1": "EUC1",
    "eu-central-2": "EUC2",
    "eu-north-1": "EUN1",
    "eu-south-1": "EUS1",
    "eu-south-2": "EUS2",
    "ap-south-1": "APS1",
    "ap-south-2": "APS2",
    "ap-southeast-1": "APS3",
    "ap-southeast-2": "APS4",
    "ap-southeast-3": "APS5",
    "ap-southeast-4": "APS6",
    "ap-southeast-5": "APS7",
    "ap-northeast-1": "APN1",
    "ap-northeast-2": "APN2",
    "ap-northeast-3": "APN3",
    "ap-east-1": "APE1",
    "ca-central-1": "CAN1",
    "ca-west-1": "CAW1",
    "sa-east-1": "SAE1",
    "me-south-1": "MES1",
    "me-central-1": "MEC1",
    "af-south-1": "AFS1",
    "il-central-1": "ILC1",
    "us-gov-west-1": "UGW1",
    "us-gov-east-1": "UGE1",
    "eu-isoe-west-1": "EIW1",
}


def normalize_region(region_code: str, debug_logger: Optional[PricingDebugLogger] = None) -> str:
    """
    Get AWS Pricing API location string from region code.

    Args:
        region_code: AWS region code (e.g., 'eu-central-1')
        debug_logger: Optional diagnostic logger notified of the mapping

    Returns:
        Pricing API location string (e.g., 'EU (Frankfurt)'). Unknown codes
        are returned unchanged.
    """
    location = AWS_REGION_TO_LOCATION.get(region_code, region_code)
    if debug_logger is not None:
        debug_logger.log_region_normalization(region_code, location)
    return location


def get_region_prefix(region_code: str) -> str:
    """
    Get the usage type prefix for a region code.

    Lookup is exact: no case folding or trimming. Unknown or empty codes
    return an empty string.
    """
    return AWS_REGION_TO_PREFIX.get(region_code, "")
