"""Tests for the credential-level service entry points."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from conftest import FakeMerakiAPI

from meraki_alerts.alerts.service import (
    fetch_alerts,
    fetch_historical_alerts,
    fetch_single_network_alerts,
    list_networks,
    list_organizations,
    validate_credential,
)
from meraki_alerts.core.types import ErrorKind, FetchFailure, FetchSuccess, TimeWindow
from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.exceptions import MerakiNotFoundError

KEY = "test-key"


class TestValidateCredential:
    async def test_empty_key_rejected_without_calls(self, meraki_api: FakeMerakiAPI) -> None:
        check = await validate_credential("   ")
        assert not check.valid
        assert check.error is not None
        assert check.error.kind == ErrorKind.UNAUTHORIZED
        assert meraki_api.count() == 0

    async def test_valid_key_lists_organizations(
        self, client: MerakiClient, meraki_api: FakeMerakiAPI
    ) -> None:
        meraki_api.route("/organizations", [{"id": "1", "name": "Acme"}])
        check = await validate_credential(KEY, client=client)
        assert check.valid
        assert [o.name for o in check.organizations] == ["Acme"]
        assert check.error is None

    @pytest.mark.parametrize(("status", "kind", "fragment"), [
        (401, ErrorKind.UNAUTHORIZED, "invalid"),
        (403, ErrorKind.UNAUTHORIZED, "permissions"),
        (429, ErrorKind.RATE_LIMITED, "rate limit"),
    ])
    async def test_rejections_get_friendly_messages(
        self,
        client: MerakiClient,
        meraki_api: FakeMerakiAPI,
        status: int,
        kind: ErrorKind,
        fragment: str,
    ) -> None:
        meraki_api.route("/organizations", {"errors": ["x"]}, status_code=status)
        check = await validate_credential(KEY, client=client)
        assert not check.valid
        assert check.error is not None
        assert check.error.kind == kind
        assert fragment in check.error.message

    async def test_supplied_client_left_open(
        self, client: MerakiClient, meraki_api: FakeMerakiAPI
    ) -> None:
        meraki_api.route("/organizations", [])
        await validate_credential(KEY, client=client)
        assert client.connected


class TestListing:
    async def test_list_organizations(
        self, client: MerakiClient, meraki_api: FakeMerakiAPI
    ) -> None:
        meraki_api.route("/organizations", [{"id": "1"}])
        orgs = await list_organizations(KEY, client=client)
        assert [o.id for o in orgs] == ["1"]

    async def test_list_networks_raises_on_failure(self, client: MerakiClient) -> None:
        with pytest.raises(MerakiNotFoundError):
            await list_networks(KEY, "missing", client=client)


class TestFetchEntryPoints:
    async def test_fetch_alerts(self, client: MerakiClient, meraki_api: FakeMerakiAPI) -> None:
        meraki_api.route("/organizations/org1/alerts/history", [{"id": "A1"}])
        outcome = await fetch_alerts(KEY, "org1", TimeWindow.relative(3600), client=client)
        assert isinstance(outcome, FetchSuccess)
        assert [r.id for r in outcome.records] == ["A1"]

    async def test_single_network_has_no_fallback(
        self, client: MerakiClient, meraki_api: FakeMerakiAPI
    ) -> None:
        outcome = await fetch_single_network_alerts(KEY, "N1", client=client)
        assert isinstance(outcome, FetchFailure)
        assert outcome.kind == ErrorKind.NOT_FOUND
        assert meraki_api.count() == 1

    async def test_fetch_historical_alerts(
        self, client: MerakiClient, meraki_api: FakeMerakiAPI
    ) -> None:
        meraki_api.route("/organizations/org1/alerts/history", [])
        result = await fetch_historical_alerts(
            KEY, "org1", 86400, now=datetime(2025, 6, 1, tzinfo=UTC), client=client
        )
        assert result.ok
        assert len(result.plan.windows) == 1
