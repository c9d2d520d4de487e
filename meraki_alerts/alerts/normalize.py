"""Normalization of loosely-typed alert-history payloads into AlertRecord.

Default rules, applied per field (first non-empty source wins):

- ``id``: ``id``, ``alertId``; else ``alert_<resource>_<digest>_<index>``
- ``type``: ``type``, ``alertType``, ``alertTypeId``; else ``unknown``
- ``message``: ``message``, ``details``, ``description``; else ``No message``
- ``timestamp``: ``occurredAt``, ``timestamp``, ``time``; else the fetch time (UTC)
- ``network_id``: ``networkId``, ``network.id``; else the network resource id, else ``""``
- ``network_name``: ``networkName``, ``network.name``; else the enumeration
  lookup, else ``Unknown network``
- ``device_serial``: ``deviceSerial``, ``device.serial``, ``serial``; else ``""``
- ``device_name``: ``deviceName``, ``device.name``; else ``""``
- ``status``: ``dismissed``/``resolved``/``resolvedAt`` → resolved,
  ``acknowledged``/``acknowledgedAt`` → acknowledged, else active
- ``severity``: :func:`classify_severity` of the type and ``category``/``severity``
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import structlog

from meraki_alerts.alerts.severity import classify_severity
from meraki_alerts.core.types import AlertRecord, AlertStatus, ResourceKind

logger = structlog.stdlib.get_logger()

DEFAULT_TYPE = "unknown"
DEFAULT_MESSAGE = "No message"
DEFAULT_NETWORK_NAME = "Unknown network"


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first truthy value among *keys*; dotted keys descend one level."""
    for key in keys:
        if "." in key:
            outer, inner = key.split(".", 1)
            nested = raw.get(outer)
            value = nested.get(inner) if isinstance(nested, Mapping) else None
        else:
            value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch seconds into an aware UTC datetime."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _derive_status(raw: Mapping[str, Any]) -> AlertStatus:
    if raw.get("dismissed") or raw.get("resolved") or raw.get("resolvedAt"):
        return AlertStatus.RESOLVED
    if raw.get("acknowledged") or raw.get("acknowledgedAt"):
        return AlertStatus.ACKNOWLEDGED
    return AlertStatus.ACTIVE


def synthesize_alert_id(raw: Mapping[str, Any], resource_id: str, index: int) -> str:
    """Build a stable id for an entry the API returned without one.

    The id embeds *resource_id*, a digest of the identifying source fields
    and the entry's *index* in the response. It is stable only for the same
    entry at the same position of the same resource's response; the index
    keeps otherwise identical entries of one response apart.
    """
    parts = [
        str(_first(raw, "type", "alertType", "alertTypeId") or ""),
        str(_first(raw, "occurredAt", "timestamp", "time") or ""),
        str(_first(raw, "networkId", "network.id") or ""),
        str(_first(raw, "deviceSerial", "device.serial", "serial") or ""),
        str(_first(raw, "message", "details", "description") or ""),
    ]
    digest = hashlib.sha1("|".join(parts).encode()).hexdigest()[:12]
    return f"alert_{resource_id}_{digest}_{index}"


def normalize_alert(
    raw: Mapping[str, Any],
    index: int,
    kind: ResourceKind,
    resource_id: str,
    fetched_at: datetime,
    network_names: Mapping[str, str] | None = None,
) -> AlertRecord:
    """Map one raw alert-history entry onto the canonical AlertRecord shape."""
    alert_type = str(_first(raw, "type", "alertType", "alertTypeId") or DEFAULT_TYPE)

    network_id = _first(raw, "networkId", "network.id")
    if network_id is None and kind == ResourceKind.NETWORK:
        network_id = resource_id
    network_id = str(network_id or "")

    network_name = _first(raw, "networkName", "network.name")
    if network_name is None and network_names:
        network_name = network_names.get(network_id)

    timestamp = _parse_timestamp(_first(raw, "occurredAt", "timestamp", "time"))

    alert_id = _first(raw, "id", "alertId")
    category = _first(raw, "category", "severity")

    return AlertRecord(
        id=str(alert_id) if alert_id is not None else synthesize_alert_id(raw, resource_id, index),
        type=alert_type,
        severity=classify_severity(alert_type, str(category) if category is not None else None),
        message=str(_first(raw, "message", "details", "description") or DEFAULT_MESSAGE),
        timestamp=timestamp or fetched_at,
        network_id=network_id,
        network_name=str(network_name or DEFAULT_NETWORK_NAME),
        device_serial=str(_first(raw, "deviceSerial", "device.serial", "serial") or ""),
        device_name=str(_first(raw, "deviceName", "device.name") or ""),
        status=_derive_status(raw),
        raw=dict(raw),
    )


def normalize_alerts(
    entries: list[Any],
    kind: ResourceKind,
    resource_id: str,
    fetched_at: datetime,
    network_names: Mapping[str, str] | None = None,
) -> list[AlertRecord]:
    """Normalize a raw alert-history array, skipping entries that are not objects."""
    records: list[AlertRecord] = []
    skipped = 0
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            skipped += 1
            continue
        records.append(
            normalize_alert(entry, index, kind, resource_id, fetched_at, network_names)
        )
    if skipped:
        logger.warning(
            "alert_entries_skipped",
            resource_kind=kind,
            resource_id=resource_id,
            skipped=skipped,
        )
    return records


def dedupe_by_id(records: list[AlertRecord]) -> list[AlertRecord]:
    """Drop records whose id was already seen; the first occurrence wins."""
    seen: set[str] = set()
    unique: list[AlertRecord] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique
