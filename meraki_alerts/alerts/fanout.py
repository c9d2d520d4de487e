"""Network fan-out aggregator — per-network alert history with partial-failure reporting."""

from __future__ import annotations

import asyncio

import structlog

from meraki_alerts.alerts.directory import NetworkDirectory
from meraki_alerts.alerts.fetcher import failure_from_error, fetch_resource_alerts
from meraki_alerts.core.config import get_settings
from meraki_alerts.core.types import (
    AggregationReport,
    AlertRecord,
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Network,
    ReportEntry,
    ResourceKind,
    TimeWindow,
)
from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.exceptions import MerakiError

logger = structlog.stdlib.get_logger()


def _entry_for(network: Network, outcome: FetchFailure | BaseException) -> ReportEntry:
    if isinstance(outcome, FetchFailure):
        return ReportEntry(
            unit=network.id,
            unit_name=network.name,
            kind=outcome.kind,
            message=outcome.message,
            http_status=outcome.http_status,
        )
    return ReportEntry(
        unit=network.id,
        unit_name=network.name,
        kind=ErrorKind.UPSTREAM,
        message=f"Unexpected error: {outcome}",
    )


async def fetch_network_alerts(
    client: MerakiClient,
    organization_id: str,
    window: TimeWindow,
    directory: NetworkDirectory | None = None,
    max_concurrency: int | None = None,
) -> FetchOutcome:
    """Fetch alert history network by network and concatenate the results.

    Networks are enumerated through *directory* (created on demand); if that
    fails there is nothing to fan out over and the failure is returned.
    Otherwise every network is fetched concurrently, at most
    *max_concurrency* at a time, and all fetches are awaited to completion.
    Failed networks land in the report and never fail the call as a whole,
    even when every network failed; an organization without networks yields
    an empty success.
    """
    directory = directory or NetworkDirectory(client, organization_id)
    limit = max_concurrency or get_settings().fetch.max_concurrency

    try:
        networks = await directory.resolve()
    except MerakiError as exc:
        failure = failure_from_error(exc)
        return failure.model_copy(update={
            "message": f"Could not list networks for organization {organization_id}: "
            f"{failure.message}",
        })

    if not networks:
        logger.warning("fanout_no_networks", org_id=organization_id)
        return FetchSuccess(used_fallback=True)

    semaphore = asyncio.Semaphore(limit)
    names = directory.names

    async def _fetch_one(network: Network) -> FetchOutcome:
        async with semaphore:
            return await fetch_resource_alerts(
                client, ResourceKind.NETWORK, network.id, window, names
            )

    outcomes = await asyncio.gather(
        *(_fetch_one(n) for n in networks),
        return_exceptions=True,
    )

    # Merge only after every network has settled
    records: list[AlertRecord] = []
    report = AggregationReport()
    for network, outcome in zip(networks, outcomes, strict=True):
        if isinstance(outcome, FetchSuccess):
            records.extend(outcome.records)
            continue
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome
        report.add(_entry_for(network, outcome))
        logger.warning(
            "network_fetch_failed",
            org_id=organization_id,
            network_id=network.id,
            network_name=network.name,
            error=report.entries[-1].message,
        )

    succeeded = len(networks) - len(report)
    logger.info(
        "fanout_complete",
        org_id=organization_id,
        window=window.describe(),
        networks=len(networks),
        succeeded=succeeded,
        records=len(records),
    )

    return FetchSuccess(records=records, used_fallback=True, report=report)
