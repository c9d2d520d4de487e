"""Credential-level entry points consumed by dashboards and scripts.

Each call opens its own MerakiClient for the supplied API key and closes it
afterwards; the key is never retained. Pass ``client`` to reuse an already
connected client instead (it is left open).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

import structlog

from meraki_alerts.alerts.fetcher import failure_from_error, fetch_resource_alerts
from meraki_alerts.alerts.history import fetch_history
from meraki_alerts.alerts.orchestrator import fetch_org_alerts
from meraki_alerts.alerts.synthetic import generate_fallback_alerts
from meraki_alerts.core.logging import organization_context
from meraki_alerts.core.types import (
    CredentialCheck,
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    HistoryResult,
    Network,
    Organization,
    ResourceKind,
    TimeWindow,
)
from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.exceptions import MerakiError

logger = structlog.stdlib.get_logger()

_CREDENTIAL_MESSAGES: dict[int, str] = {
    401: "API key is invalid or lacks permissions.",
    403: "API key lacks sufficient permissions.",
    429: "Meraki API rate limit exceeded. Please wait and retry.",
}

__all__ = [
    "fetch_alerts",
    "fetch_historical_alerts",
    "fetch_single_network_alerts",
    "generate_fallback_alerts",
    "list_networks",
    "list_organizations",
    "validate_credential",
]


@asynccontextmanager
async def _session(api_key: str, client: MerakiClient | None) -> AsyncIterator[MerakiClient]:
    if client is not None:
        yield client
        return
    async with MerakiClient(api_key=api_key) as owned:
        yield owned


async def validate_credential(
    api_key: str,
    client: MerakiClient | None = None,
) -> CredentialCheck:
    """Check an API key by listing its organizations."""
    if not api_key.strip():
        return CredentialCheck(
            valid=False,
            error=FetchFailure(kind=ErrorKind.UNAUTHORIZED, message="API key is empty."),
        )

    async with _session(api_key, client) as session:
        try:
            organizations = await session.get_organizations()
        except MerakiError as exc:
            failure = failure_from_error(exc)
            friendly = _CREDENTIAL_MESSAGES.get(failure.http_status or 0)
            if friendly:
                failure = failure.model_copy(update={"message": friendly})
            logger.warning(
                "credential_rejected",
                error_kind=failure.kind,
                http_status=failure.http_status,
            )
            return CredentialCheck(valid=False, error=failure)

    logger.info("credential_validated", organizations=len(organizations))
    return CredentialCheck(valid=True, organizations=organizations)


async def list_organizations(
    api_key: str,
    client: MerakiClient | None = None,
) -> list[Organization]:
    """List organizations; raises MerakiError on failure."""
    async with _session(api_key, client) as session:
        return await session.get_organizations()


async def list_networks(
    api_key: str,
    organization_id: str,
    client: MerakiClient | None = None,
) -> list[Network]:
    """List an organization's networks; raises MerakiError on failure."""
    async with _session(api_key, client) as session:
        return await session.get_networks(organization_id)


async def fetch_alerts(
    api_key: str,
    organization_id: str,
    window: TimeWindow | None = None,
    client: MerakiClient | None = None,
) -> FetchOutcome:
    """Alerts for one organization over one window (see :func:`fetch_org_alerts`)."""
    with organization_context(organization_id):
        async with _session(api_key, client) as session:
            return await fetch_org_alerts(session, organization_id, window)


async def fetch_single_network_alerts(
    api_key: str,
    network_id: str,
    window: TimeWindow | None = None,
    client: MerakiClient | None = None,
) -> FetchOutcome:
    """Alerts for a single network over one window, without any fallback."""
    async with _session(api_key, client) as session:
        return await fetch_resource_alerts(
            session, ResourceKind.NETWORK, network_id, window or TimeWindow()
        )


async def fetch_historical_alerts(
    api_key: str,
    organization_id: str,
    desired_span_secs: int,
    now: datetime | None = None,
    client: MerakiClient | None = None,
) -> HistoryResult:
    """Long-range history for one organization (see :func:`fetch_history`)."""
    with organization_context(organization_id):
        async with _session(api_key, client) as session:
            return await fetch_history(session, organization_id, desired_span_secs, now=now)
