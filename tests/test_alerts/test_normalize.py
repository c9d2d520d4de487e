"""Tests for alert-history payload normalization."""

from __future__ import annotations

from datetime import UTC, datetime

from structlog.testing import capture_logs

from meraki_alerts.alerts.normalize import (
    DEFAULT_NETWORK_NAME,
    dedupe_by_id,
    normalize_alert,
    normalize_alerts,
    synthesize_alert_id,
)
from meraki_alerts.core.types import AlertRecord, AlertStatus, ResourceKind, Severity

FETCHED_AT = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


# ── Helpers ──────────────────────────────────────────────────────


def _org(raw: dict, index: int = 0, names: dict[str, str] | None = None) -> AlertRecord:
    return normalize_alert(raw, index, ResourceKind.ORGANIZATION, "org1", FETCHED_AT, names)


def _record(alert_id: str, message: str = "m") -> AlertRecord:
    return AlertRecord(id=alert_id, message=message, timestamp=FETCHED_AT)


class TestNormalizeAlert:
    def test_full_entry(self) -> None:
        rec = _org({
            "id": "A1",
            "type": "gateway_down",
            "message": "MX offline",
            "occurredAt": "2025-05-31T10:00:00Z",
            "networkId": "N_1",
            "networkName": "HQ",
            "deviceSerial": "Q2XX-1",
            "deviceName": "mx-hq",
        })
        assert rec.id == "A1"
        assert rec.severity == Severity.CRITICAL
        assert rec.timestamp == datetime(2025, 5, 31, 10, 0, tzinfo=UTC)
        assert rec.network_name == "HQ"
        assert rec.device_serial == "Q2XX-1"
        assert rec.device_name == "mx-hq"
        assert rec.status == AlertStatus.ACTIVE

    def test_defaults_for_empty_entry(self) -> None:
        rec = _org({})
        assert rec.type == "unknown"
        assert rec.message == "No message"
        assert rec.timestamp == FETCHED_AT
        assert rec.network_id == ""
        assert rec.network_name == DEFAULT_NETWORK_NAME
        assert rec.severity == Severity.INFO
        assert rec.id.startswith("alert_org1_")

    def test_alternate_field_names(self) -> None:
        rec = _org({
            "alertId": 42,
            "alertType": "high_cpu_usage",
            "details": "CPU at 90%",
            "timestamp": "2025-05-30T08:00:00+02:00",
            "network": {"id": "N_2", "name": "Branch"},
            "device": {"serial": "Q2YY-2", "name": "ms-1"},
        })
        assert rec.id == "42"
        assert rec.severity == Severity.WARNING
        assert rec.message == "CPU at 90%"
        assert rec.timestamp == datetime(2025, 5, 30, 6, 0, tzinfo=UTC)
        assert rec.network_id == "N_2"
        assert rec.network_name == "Branch"
        assert rec.device_serial == "Q2YY-2"

    def test_epoch_timestamp(self) -> None:
        rec = _org({"occurredAt": 1_700_000_000})
        assert rec.timestamp == datetime.fromtimestamp(1_700_000_000, tz=UTC)

    def test_unparseable_timestamp_uses_fetch_time(self) -> None:
        assert _org({"occurredAt": "yesterday"}).timestamp == FETCHED_AT

    def test_network_resource_fills_network_id(self) -> None:
        rec = normalize_alert({"id": "A"}, 0, ResourceKind.NETWORK, "N_7", FETCHED_AT,
                              {"N_7": "Lab"})
        assert rec.network_id == "N_7"
        assert rec.network_name == "Lab"

    def test_category_used_for_severity(self) -> None:
        assert _org({"type": "custom", "category": "critical"}).severity == Severity.CRITICAL

    def test_status_derivation(self) -> None:
        assert _org({"dismissed": True}).status == AlertStatus.RESOLVED
        assert _org({"resolvedAt": "2025-01-01T00:00:00Z"}).status == AlertStatus.RESOLVED
        assert _org({"acknowledgedAt": "2025-01-01T00:00:00Z"}).status == AlertStatus.ACKNOWLEDGED

    def test_raw_preserved(self) -> None:
        assert _org({"id": "A", "extra": 1}).raw == {"id": "A", "extra": 1}


class TestSynthesizedIds:
    def test_same_entry_same_id(self) -> None:
        raw = {"type": "ap_down", "occurredAt": "2025-05-01T00:00:00Z"}
        assert synthesize_alert_id(raw, "org1", 0) == synthesize_alert_id(dict(raw), "org1", 0)

    def test_index_distinguishes_identical_entries(self) -> None:
        raw = {"type": "ap_down"}
        assert synthesize_alert_id(raw, "org1", 0) != synthesize_alert_id(raw, "org1", 1)

    def test_id_scoped_to_resource_and_position(self) -> None:
        raw = {"type": "ap_down", "occurredAt": "2025-05-01T00:00:00Z"}
        from_org = synthesize_alert_id(raw, "org1", 0)
        assert synthesize_alert_id(raw, "N_1", 0) != from_org
        assert synthesize_alert_id(raw, "org1", 3) != from_org
        assert from_org.startswith("alert_org1_") and from_org.endswith("_0")

    def test_content_changes_digest(self) -> None:
        a = synthesize_alert_id({"type": "ap_down"}, "org1", 0)
        b = synthesize_alert_id({"type": "switch_down"}, "org1", 0)
        assert a != b


class TestNormalizeAlerts:
    def test_non_mapping_entries_skipped(self) -> None:
        with capture_logs() as logs:
            records = normalize_alerts(
                [{"id": "A"}, "junk", None, {"id": "B"}],
                ResourceKind.ORGANIZATION, "org1", FETCHED_AT,
            )
        assert [r.id for r in records] == ["A", "B"]
        skipped = [e for e in logs if e["event"] == "alert_entries_skipped"]
        assert skipped and skipped[0]["skipped"] == 2


class TestDedupe:
    def test_first_occurrence_wins(self) -> None:
        records = [_record("A1", "first"), _record("B"), _record("A1", "second")]
        unique = dedupe_by_id(records)
        assert [r.id for r in unique] == ["A1", "B"]
        assert unique[0].message == "first"

    def test_empty(self) -> None:
        assert dedupe_by_id([]) == []
