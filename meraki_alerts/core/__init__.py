"""Core module — config, types, logging."""

from meraki_alerts.core.config import Settings, get_settings, load_settings, reset_settings
from meraki_alerts.core.logging import organization_context, setup_logging
from meraki_alerts.core.types import (
    AggregationReport,
    AlertRecord,
    AlertStatus,
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Network,
    Organization,
    ReportEntry,
    Severity,
    TimeWindow,
)

__all__ = [
    "AggregationReport",
    "AlertRecord",
    "AlertStatus",
    "ErrorKind",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "Network",
    "Organization",
    "ReportEntry",
    "Settings",
    "Severity",
    "TimeWindow",
    "get_settings",
    "load_settings",
    "organization_context",
    "reset_settings",
    "setup_logging",
]
