"""
Tests for region code normalization.
"""

import logging
import pytest
from stackcost.pricing.region_map import AWS_REGION_TO_LOCATION, normalize_region, get_region_prefix
from stackcost.utils.debug_logger import PricingDebugLogger


@pytest.mark.parametrize("region_code,location", [
    ('us-east-1', 'US East (N. Virginia)'),
    ('us-west-2', 'US West (Oregon)'),
    ('eu-central-1', 'EU (Frankfurt)'),
    ('eu-west-1', 'EU (Ireland)'),
    ('ap-southeast-4', 'Asia Pacific (Melbourne)'),
    ('ca-west-1', 'Canada West (Calgary)'),
    ('il-central-1', 'Israel (Tel Aviv)'),
])
def test_normalize_known_regions(region_code, location):
    """Known region codes map to catalog location names."""
    assert normalize_region(region_code) == location


def test_normalize_unknown_region_returns_input():
    """Unknown codes pass through unchanged."""
    assert normalize_region('mars-north-1') == 'mars-north-1'
    assert normalize_region('') == ''


@pytest.mark.parametrize("region_code,prefix", [
    ('us-east-1', 'USE1'),
    ('eu-west-2', 'EUW2'),
    ('ap-south-1', 'APS1'),
    ('ap-southeast-1', 'APS3'),
    ('ap-southeast-5', 'APS7'),
    ('us-gov-west-1', 'UGW1'),
    ('eu-isoe-west-1', 'EIW1'),
])
def test_region_prefix(region_code, prefix):
    """Region codes map to usage type prefixes."""
    assert get_region_prefix(region_code) == prefix


def test_region_prefix_is_exact_match():
    """Prefix lookup does not fold case or trim whitespace."""
    assert get_region_prefix('US-EAST-1') == ''
    assert get_region_prefix(' us-east-1') == ''
    assert get_region_prefix('') == ''
    assert get_region_prefix('unknown-1') == ''


def test_all_regions_have_prefix():
    """Every normalized region also has a usage type prefix."""
    for region_code in AWS_REGION_TO_LOCATION:
        assert get_region_prefix(region_code) != ''


def test_normalization_emits_debug_event(caplog):
    """Region normalization is reported on the diagnostic channel."""
    test_logger = logging.getLogger('stackcost.tests.region')
    debug_logger = PricingDebugLogger(enabled=True, logger=test_logger)

    with caplog.at_level(logging.DEBUG, logger='stackcost.tests.region'):
        normalize_region('eu-central-1', debug_logger)

    assert any('Region Normalization' in record.getMessage() for record in caplog.records)
    assert any('EU (Frankfurt)' in record.getMessage() for record in caplog.records)
