"""Synthetic alert set for demo mode and empty-result fallbacks.

Only callers decide to use this; nothing in the fetch path invokes it, so
genuine upstream data (or a genuine failure) is never masked.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta

from pydantic import BaseModel

from meraki_alerts.core.types import AlertRecord, AlertStatus, Severity, utc_now


class _Template(BaseModel):
    type: str
    severity: Severity
    status: AlertStatus
    message: str
    network_slot: int
    network_name: str
    device_serial: str
    default_window_hours: int


_TEMPLATES: tuple[_Template, ...] = (
    _Template(
        type="gateway_down",
        severity=Severity.CRITICAL,
        status=AlertStatus.ACTIVE,
        message="Gateway MX84 disconnected - no Internet connectivity",
        network_slot=0,
        network_name="Main Network",
        device_serial="Q2XX-TEST-RND1",
        default_window_hours=2,
    ),
    _Template(
        type="high_cpu_usage",
        severity=Severity.WARNING,
        status=AlertStatus.ACKNOWLEDGED,
        message="High CPU usage on switch MS220-8P (85%)",
        network_slot=1,
        network_name="Branch Network",
        device_serial="Q2YY-TEST-RND2",
        default_window_hours=4,
    ),
    _Template(
        type="client_connection_failed",
        severity=Severity.INFO,
        status=AlertStatus.RESOLVED,
        message="Multiple client connection failures on AP MR36",
        network_slot=2,
        network_name="WiFi Network",
        device_serial="Q2ZZ-TEST-RND3",
        default_window_hours=6,
    ),
    _Template(
        type="bandwidth_exceeded",
        severity=Severity.WARNING,
        status=AlertStatus.ACTIVE,
        message="Bandwidth exceeded on WAN uplink (95% utilization)",
        network_slot=0,
        network_name="Main Network",
        device_serial="Q2AA-TEST-RND4",
        default_window_hours=8,
    ),
    _Template(
        type="vpn_connectivity_change",
        severity=Severity.CRITICAL,
        status=AlertStatus.ACTIVE,
        message="Site-to-site VPN tunnel disconnected",
        network_slot=1,
        network_name="Branch Network",
        device_serial="Q2DD-TEST-RND5",
        default_window_hours=12,
    ),
)

FALLBACK_ALERT_COUNT = len(_TEMPLATES)


def generate_fallback_alerts(
    organization_id: str,
    network_ids: list[str],
    span_secs: int | None = None,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[AlertRecord]:
    """Produce a fixed-shape set of representative alerts.

    Always five records covering every severity. Timestamps fall uniformly
    within the last *span_secs* seconds (per-template windows of 2–12 hours
    when omitted). Network ids cycle through *network_ids*, or use
    ``test_network_<n>_<org>`` placeholders when the list is empty. Ids are
    unique per call.
    """
    rng = rng or random.Random()
    now = now or utc_now()

    alerts: list[AlertRecord] = []
    for number, template in enumerate(_TEMPLATES, start=1):
        window_secs = span_secs if span_secs else template.default_window_hours * 3600
        offset = rng.uniform(0, window_secs)

        if network_ids:
            network_id = network_ids[template.network_slot % len(network_ids)]
        else:
            network_id = f"test_network_{template.network_slot + 1}_{organization_id}"

        alerts.append(AlertRecord(
            id=f"test_alert_{number}_{organization_id}_{rng.getrandbits(32):08x}",
            type=template.type,
            severity=template.severity,
            message=template.message,
            timestamp=now - timedelta(seconds=offset),
            network_id=network_id,
            network_name=template.network_name,
            device_serial=template.device_serial,
            status=template.status,
            raw={"synthetic": True},
        ))

    return alerts
