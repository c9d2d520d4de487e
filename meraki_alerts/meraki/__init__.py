"""Meraki Dashboard API client."""

from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.exceptions import (
    MerakiAPIError,
    MerakiAuthError,
    MerakiConnectionError,
    MerakiError,
    MerakiNotFoundError,
    MerakiParseError,
    MerakiRateLimitError,
    error_kind_for_status,
)
from meraki_alerts.meraki.rate_limiter import RateLimiter

__all__ = [
    "MerakiAPIError",
    "MerakiAuthError",
    "MerakiClient",
    "MerakiConnectionError",
    "MerakiError",
    "MerakiNotFoundError",
    "MerakiParseError",
    "MerakiRateLimitError",
    "RateLimiter",
    "error_kind_for_status",
]
