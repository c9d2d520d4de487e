"""Tiered fetch orchestrator — organization endpoint first, network fan-out on demand."""

from __future__ import annotations

from enum import StrEnum

import structlog

from meraki_alerts.alerts.directory import NetworkDirectory
from meraki_alerts.alerts.fanout import fetch_network_alerts
from meraki_alerts.alerts.fetcher import fetch_resource_alerts
from meraki_alerts.alerts.normalize import DEFAULT_NETWORK_NAME, dedupe_by_id
from meraki_alerts.core.types import (
    AlertRecord,
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    ResourceKind,
    TimeWindow,
)
from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.exceptions import MerakiError

logger = structlog.stdlib.get_logger()


class FallbackAction(StrEnum):
    """What to do when the organization-level fetch fails."""

    FAIL = "fail"
    FAN_OUT = "fan_out"


# Fan out only where per-network calls could plausibly succeed; a rejected
# credential would be rejected identically by every network.
FALLBACK_POLICY: dict[ErrorKind, FallbackAction] = {
    ErrorKind.UNAUTHORIZED: FallbackAction.FAIL,
    ErrorKind.NOT_FOUND: FallbackAction.FAN_OUT,
    ErrorKind.RATE_LIMITED: FallbackAction.FAN_OUT,
    ErrorKind.UPSTREAM: FallbackAction.FAN_OUT,
    ErrorKind.NETWORK_IO: FallbackAction.FAN_OUT,
}


async def _fill_network_names(
    records: list[AlertRecord],
    directory: NetworkDirectory,
) -> list[AlertRecord]:
    """Resolve network names the organization endpoint left out."""
    if not any(r.network_id and r.network_name == DEFAULT_NETWORK_NAME for r in records):
        return records
    try:
        await directory.resolve()
    except MerakiError:
        return records

    names = directory.names
    filled: list[AlertRecord] = []
    for record in records:
        name = names.get(record.network_id)
        if record.network_name == DEFAULT_NETWORK_NAME and name:
            record = record.model_copy(update={"network_name": name})
        filled.append(record)
    return filled


async def fetch_org_alerts(
    client: MerakiClient,
    organization_id: str,
    window: TimeWindow | None = None,
    directory: NetworkDirectory | None = None,
    max_concurrency: int | None = None,
) -> FetchOutcome:
    """Fetch an organization's alerts for one window.

    1. Query the organization-level alert history.
    2. On success return it (``used_fallback=False``).
    3. On failure consult :data:`FALLBACK_POLICY`: UNAUTHORIZED is returned
       as-is without any further calls; every other kind falls back to the
       per-network fan-out for the same window. The fan-out's result,
       success or failure, is tagged ``used_fallback=True`` and keeps the
       organization-level failure as ``fallback_cause``.

    Records are unique by id in every success.
    """
    window = window or TimeWindow()
    directory = directory or NetworkDirectory(client, organization_id)

    outcome = await fetch_resource_alerts(
        client, ResourceKind.ORGANIZATION, organization_id, window, directory.names
    )

    if isinstance(outcome, FetchSuccess):
        records = await _fill_network_names(outcome.records, directory)
        logger.info(
            "org_alerts_fetched",
            org_id=organization_id,
            window=window.describe(),
            count=len(records),
        )
        return FetchSuccess(records=dedupe_by_id(records))

    action = FALLBACK_POLICY.get(outcome.kind, FallbackAction.FAIL)
    if action == FallbackAction.FAIL:
        logger.error(
            "org_alerts_failed",
            org_id=organization_id,
            error_kind=outcome.kind,
            http_status=outcome.http_status,
        )
        return outcome

    logger.warning(
        "org_alerts_fallback",
        org_id=organization_id,
        window=window.describe(),
        error_kind=outcome.kind,
        http_status=outcome.http_status,
        retry_after_secs=outcome.retry_after_secs,
    )
    fallback = await fetch_network_alerts(
        client, organization_id, window, directory, max_concurrency
    )

    if isinstance(fallback, FetchFailure):
        return fallback.model_copy(update={"used_fallback": True, "fallback_cause": outcome})

    return fallback.model_copy(update={
        "records": dedupe_by_id(fallback.records),
        "used_fallback": True,
        "fallback_cause": outcome,
    })
