"""Tests for alert severity classification."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from meraki_alerts.alerts.severity import classify_severity
from meraki_alerts.core.types import Severity


class TestClassifySeverity:
    @pytest.mark.parametrize("alert_type", [
        "gateway_down", "switch_down", "ap_down", "device_down", "wan_down",
        "vpn_connectivity_change", "power_supply_down", "device_offline",
    ])
    def test_critical_types(self, alert_type: str) -> None:
        assert classify_severity(alert_type) == Severity.CRITICAL

    @pytest.mark.parametrize("alert_type", [
        "high_cpu_usage", "high_memory_usage", "bandwidth_exceeded",
        "dhcp_no_leases_remaining", "rogue_ap_detected",
        "power_supply_redundancy_lost", "high_latency",
    ])
    def test_warning_types(self, alert_type: str) -> None:
        assert classify_severity(alert_type) == Severity.WARNING

    def test_match_is_case_insensitive_substring(self) -> None:
        assert classify_severity("Appliance_GATEWAY_DOWN_alert") == Severity.CRITICAL

    def test_category_error_is_critical(self) -> None:
        assert classify_severity("foo", "Error") == Severity.CRITICAL

    def test_category_warning(self) -> None:
        assert classify_severity("foo", "warning") == Severity.WARNING

    def test_type_beats_category(self) -> None:
        assert classify_severity("high_cpu_usage", "critical") == Severity.WARNING

    def test_unknown_is_info_and_logged(self) -> None:
        with capture_logs() as logs:
            assert classify_severity("settings_changed") == Severity.INFO
        assert any(
            e["event"] == "severity_unclassified" and e["alert_type"] == "settings_changed"
            for e in logs
        )

    def test_totally_unknown_type(self) -> None:
        with capture_logs() as logs:
            assert classify_severity("totally_unknown_type") == Severity.INFO
        assert [e["event"] for e in logs] == ["severity_unclassified"]

    def test_missing_type_is_info(self) -> None:
        assert classify_severity(None) == Severity.INFO
        assert classify_severity("") == Severity.INFO

    def test_known_type_not_logged(self) -> None:
        with capture_logs() as logs:
            classify_severity("ap_down")
        assert logs == []
