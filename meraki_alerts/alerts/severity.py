"""Severity classification for raw Meraki alert types."""

from __future__ import annotations

import structlog

from meraki_alerts.core.types import Severity

logger = structlog.stdlib.get_logger()

# Alert type substrings (lowercase) that always mean an outage
_CRITICAL_TYPES: tuple[str, ...] = (
    "gateway_down",
    "switch_down",
    "ap_down",
    "device_down",
    "wan_down",
    "vpn_connectivity_change",
    "power_supply_down",
    "device_offline",
)

# Alert type substrings (lowercase) that indicate degradation
_WARNING_TYPES: tuple[str, ...] = (
    "high_cpu_usage",
    "high_memory_usage",
    "bandwidth_exceeded",
    "dhcp_no_leases_remaining",
    "rogue_ap_detected",
    "power_supply_redundancy_lost",
    "high_latency",
)

# Category substring → severity fallback, checked in order
_CATEGORY_HINTS: tuple[tuple[str, Severity], ...] = (
    ("critical", Severity.CRITICAL),
    ("error", Severity.CRITICAL),
    ("warn", Severity.WARNING),
)


def classify_severity(alert_type: str | None, category: str | None = None) -> Severity:
    """Map an alert type (and optional category) to a severity tier.

    The type is checked against the critical then warning keyword tables,
    then the category text. Anything unmatched is INFO and logged as
    ``severity_unclassified`` so the tables can be extended; unknown alerts
    are never promoted.
    """
    type_lower = (alert_type or "").lower()
    category_lower = (category or "").lower()

    if any(t in type_lower for t in _CRITICAL_TYPES):
        return Severity.CRITICAL
    if any(t in type_lower for t in _WARNING_TYPES):
        return Severity.WARNING

    for hint, severity in _CATEGORY_HINTS:
        if hint in category_lower:
            return severity

    logger.info("severity_unclassified", alert_type=alert_type, category=category)
    return Severity.INFO
