"""REDEMET aerodrome status source."""

from adwarn.redemet.client import RedemetClient, extract_alert_list
from adwarn.redemet.models import AerodromeStatus, FlightRule, RawWarning, map_flight_rule_from_flag
from adwarn.redemet.rate_limit import FixedWindowRateLimiter

__all__ = [
    "AerodromeStatus",
    "FixedWindowRateLimiter",
    "FlightRule",
    "RawWarning",
    "RedemetClient",
    "extract_alert_list",
    "map_flight_rule_from_flag",
]
