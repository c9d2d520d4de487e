"""Single-resource fetcher — one alert-history call, normalized, never raising."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from meraki_alerts.alerts.normalize import dedupe_by_id, normalize_alerts
from meraki_alerts.core.types import (
    ErrorKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    ResourceKind,
    TimeWindow,
    utc_now,
)
from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.exceptions import MerakiError, MerakiRateLimitError

logger = structlog.stdlib.get_logger()


def failure_from_error(exc: MerakiError) -> FetchFailure:
    """Convert a client exception into a FetchFailure value."""
    retry_after = exc.retry_after if isinstance(exc, MerakiRateLimitError) else None
    return FetchFailure(
        kind=exc.kind,
        message=str(exc),
        http_status=exc.status,
        retry_after_secs=retry_after,
    )


async def fetch_resource_alerts(
    client: MerakiClient,
    kind: ResourceKind,
    resource_id: str,
    window: TimeWindow,
    network_names: Mapping[str, str] | None = None,
) -> FetchOutcome:
    """Fetch and normalize alert history for one organization or network.

    All failure modes come back as a FetchFailure:
    401/403 → UNAUTHORIZED, 404 → NOT_FOUND, 429 → RATE_LIMITED,
    other statuses and malformed bodies → UPSTREAM, transport → NETWORK_IO.
    """
    try:
        entries = await client.get_alert_history(kind, resource_id, window)
        records = normalize_alerts(entries, kind, resource_id, utc_now(), network_names)
    except MerakiError as exc:
        failure = failure_from_error(exc)
        logger.warning(
            "alert_fetch_failed",
            resource_kind=kind,
            resource_id=resource_id,
            window=window.describe(),
            error_kind=failure.kind,
            http_status=failure.http_status,
        )
        return failure
    except Exception as exc:
        logger.exception(
            "alert_fetch_unexpected_error",
            resource_kind=kind,
            resource_id=resource_id,
        )
        return FetchFailure(kind=ErrorKind.UPSTREAM, message=f"Unexpected error: {exc}")

    logger.debug(
        "alert_fetch_ok",
        resource_kind=kind,
        resource_id=resource_id,
        window=window.describe(),
        count=len(records),
    )
    return FetchSuccess(records=dedupe_by_id(records))
