"""Alert aggregation — classification, normalization, tiered and historical fetches."""

from meraki_alerts.alerts.directory import NetworkDirectory
from meraki_alerts.alerts.fanout import fetch_network_alerts
from meraki_alerts.alerts.fetcher import fetch_resource_alerts
from meraki_alerts.alerts.history import fetch_history
from meraki_alerts.alerts.normalize import dedupe_by_id, normalize_alert
from meraki_alerts.alerts.orchestrator import FALLBACK_POLICY, FallbackAction, fetch_org_alerts
from meraki_alerts.alerts.service import (
    fetch_alerts,
    fetch_historical_alerts,
    fetch_single_network_alerts,
    list_networks,
    list_organizations,
    validate_credential,
)
from meraki_alerts.alerts.severity import classify_severity
from meraki_alerts.alerts.synthetic import generate_fallback_alerts
from meraki_alerts.alerts.windows import plan_windows

__all__ = [
    "FALLBACK_POLICY",
    "FallbackAction",
    "NetworkDirectory",
    "classify_severity",
    "dedupe_by_id",
    "fetch_alerts",
    "fetch_historical_alerts",
    "fetch_history",
    "fetch_network_alerts",
    "fetch_org_alerts",
    "fetch_resource_alerts",
    "fetch_single_network_alerts",
    "generate_fallback_alerts",
    "list_networks",
    "list_organizations",
    "normalize_alert",
    "plan_windows",
    "validate_credential",
]
