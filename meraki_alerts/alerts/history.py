"""Historical chunk walker — long alert histories assembled from API-sized windows."""

from __future__ import annotations

import asyncio
from datetime import datetime

import structlog

from meraki_alerts.alerts.directory import NetworkDirectory
from meraki_alerts.alerts.normalize import dedupe_by_id
from meraki_alerts.alerts.orchestrator import fetch_org_alerts
from meraki_alerts.alerts.windows import plan_windows
from meraki_alerts.core.config import get_settings
from meraki_alerts.core.types import (
    AggregationReport,
    AlertRecord,
    ErrorKind,
    FetchFailure,
    FetchSuccess,
    HistoryResult,
    ReportEntry,
    utc_now,
)
from meraki_alerts.meraki.client import MerakiClient

logger = structlog.stdlib.get_logger()


async def fetch_history(
    client: MerakiClient,
    organization_id: str,
    desired_span_secs: int,
    now: datetime | None = None,
    max_chunk_secs: int | None = None,
    max_chunks: int | None = None,
    max_concurrency: int | None = None,
) -> HistoryResult:
    """Fetch up to *desired_span_secs* of history ending at *now*.

    The span is split by :func:`plan_windows`; when the chunk ceiling cuts
    it short, ``result.plan.truncated`` is set and ``plan.covered_secs``
    reports the reach. Every chunk goes through the tiered orchestrator
    concurrently and independently, sharing one network enumeration.

    Records from all successful chunks are merged in chunk order (most
    recent first), deduplicated by id (first occurrence wins) and sorted by
    timestamp descending. Chunk failures and the networks that failed inside
    a chunk's fan-out are collected in ``result.report``, stamped with the
    chunk index. ``result.error`` is only set when no chunk succeeded.
    """
    cfg = get_settings().fetch
    now = now or utc_now()
    plan = plan_windows(
        desired_span_secs,
        now,
        max_chunk_secs=max_chunk_secs or cfg.max_chunk_secs,
        max_chunks=max_chunks or cfg.max_history_chunks,
    )
    if plan.truncated:
        logger.warning(
            "history_span_truncated",
            org_id=organization_id,
            requested_secs=plan.requested_secs,
            covered_secs=plan.covered_secs,
            max_chunks=len(plan.windows),
        )

    directory = NetworkDirectory(client, organization_id)
    outcomes = await asyncio.gather(
        *(
            fetch_org_alerts(client, organization_id, window, directory, max_concurrency)
            for window in plan.windows
        ),
        return_exceptions=True,
    )

    merged: list[AlertRecord] = []
    report = AggregationReport()
    failures: list[FetchFailure] = []
    succeeded = 0
    used_fallback = False

    for index, (window, outcome) in enumerate(zip(plan.windows, outcomes, strict=True)):
        if isinstance(outcome, FetchSuccess):
            succeeded += 1
            merged.extend(outcome.records)
            report.merge(outcome.report, chunk_index=index)
            used_fallback = used_fallback or outcome.used_fallback
            logger.debug(
                "history_chunk_ok",
                org_id=organization_id,
                chunk=index,
                window=window.describe(),
                count=len(outcome.records),
                used_fallback=outcome.used_fallback,
            )
            continue

        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FetchFailure):
            failure = outcome
        else:
            failure = FetchFailure(kind=ErrorKind.UPSTREAM, message=f"Unexpected error: {outcome}")
        failures.append(failure)
        used_fallback = used_fallback or failure.used_fallback
        report.add(ReportEntry(
            unit=f"chunk-{index}",
            unit_name=window.describe(),
            chunk_index=index,
            kind=failure.kind,
            message=failure.message,
            http_status=failure.http_status,
        ))
        logger.warning(
            "history_chunk_failed",
            org_id=organization_id,
            chunk=index,
            window=window.describe(),
            error_kind=failure.kind,
        )

    records = sorted(dedupe_by_id(merged), key=lambda r: r.timestamp, reverse=True)

    error: FetchFailure | None = None
    if succeeded == 0 and failures:
        error = next((f for f in failures if f.kind == ErrorKind.UNAUTHORIZED), failures[0])

    logger.info(
        "history_complete",
        org_id=organization_id,
        chunks=len(plan.windows),
        chunks_succeeded=succeeded,
        records=len(records),
        failures=len(report),
        truncated=plan.truncated,
    )
    return HistoryResult(
        records=records,
        report=report,
        plan=plan,
        chunks_succeeded=succeeded,
        used_fallback=used_fallback,
        error=error,
    )
