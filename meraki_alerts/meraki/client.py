"""Async client for the Meraki Dashboard API endpoints the alert fetchers need."""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx
import structlog

from meraki_alerts.core.config import get_settings
from meraki_alerts.core.types import Network, Organization, ResourceKind, TimeWindow
from meraki_alerts.meraki.exceptions import (
    MerakiConnectionError,
    MerakiParseError,
    api_error_for_status,
)
from meraki_alerts.meraki.rate_limiter import RateLimiter

logger = structlog.stdlib.get_logger()

API_KEY_HEADER = "X-Cisco-Meraki-API-Key"

_ALERT_HISTORY_PATHS: dict[ResourceKind, str] = {
    ResourceKind.ORGANIZATION: "/organizations/{id}/alerts/history",
    ResourceKind.NETWORK: "/networks/{id}/alerts/history",
}


def _parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds; HTTP-date values are ignored."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def _error_detail(response: httpx.Response) -> str:
    """Extract the API's error text (``{"errors": [...]}``) or a status phrase."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or response.text[:200]
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
    return response.reason_phrase or ""


def _parse_organization(raw: dict[str, Any]) -> Organization:
    return Organization(
        id=str(raw.get("id") or ""),
        name=raw.get("name") or "",
        url=raw.get("url") or "",
    )


def _parse_network(raw: dict[str, Any], organization_id: str) -> Network:
    """Convert a network payload; the API may return ``null`` for optional fields."""
    return Network(
        id=str(raw.get("id") or ""),
        name=raw.get("name") or "",
        organization_id=str(raw.get("organizationId") or organization_id),
        product_types=raw.get("productTypes") or [],
        time_zone=raw.get("timeZone") or "",
        tags=raw.get("tags") or [],
    )


class MerakiClient:
    """Thin async wrapper over the Dashboard API REST endpoints.

    Every request passes through a shared RateLimiter. Non-2xx responses are
    raised as the MerakiAPIError subclass matching their status; transport
    failures as MerakiConnectionError.

    Usage::

        async with MerakiClient(api_key="...") as client:
            orgs = await client.get_organizations()
            raw = await client.get_alert_history(ResourceKind.ORGANIZATION, orgs[0].id, window)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_secs: float | None = None,
        rate_limiter: RateLimiter | None = None,
        default_timespan_secs: int | None = None,
    ) -> None:
        settings = get_settings()
        mc = settings.meraki
        rl = settings.rate_limit

        self._api_key = api_key or mc.api_key.get_secret_value()
        self._base_url = (base_url or mc.base_url).rstrip("/")
        self._timeout_secs = timeout_secs or mc.timeout_secs
        self._default_timespan_secs = (
            default_timespan_secs or settings.fetch.default_timespan_secs
        )
        self._rate_limiter = rate_limiter or RateLimiter(
            requests_per_sec=rl.requests_per_sec,
            burst=rl.burst,
        )
        self._http: httpx.AsyncClient | None = None
        self._request_count = 0

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    @property
    def request_count(self) -> int:
        """Number of requests issued since construction."""
        return self._request_count

    @property
    def default_timespan_secs(self) -> int:
        return self._default_timespan_secs

    async def connect(self) -> None:
        """Create the httpx async client."""
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_secs),
            headers={
                API_KEY_HEADER: self._api_key,
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> MerakiClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET *path* and return the decoded JSON body."""
        if self._http is None:
            raise MerakiConnectionError("Client not connected. Call connect() first.")

        await self._rate_limiter.acquire()
        self._request_count += 1
        url = f"{self._base_url}{path}"

        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as exc:
            raise MerakiConnectionError(f"GET {path} failed: {exc}") from exc

        if not response.is_success:
            status = response.status_code
            raise api_error_for_status(
                status,
                f"GET {path} returned {status}: {_error_detail(response)}",
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            )

        try:
            return response.json()
        except ValueError as exc:
            raise MerakiParseError(f"GET {path} returned invalid JSON") from exc

    async def _get_list(self, path: str, params: dict[str, str] | None = None) -> list[Any]:
        body = await self._get_json(path, params)
        if not isinstance(body, list):
            raise MerakiParseError(
                f"GET {path} returned {type(body).__name__}, expected a JSON array"
            )
        return body

    # ── Organizations / Networks ─────────────────────────────────

    async def get_organizations(self) -> list[Organization]:
        """List the organizations the API key can access."""
        raw = await self._get_list("/organizations")
        return [_parse_organization(o) for o in raw if isinstance(o, dict)]

    async def get_networks(self, organization_id: str) -> list[Network]:
        """List the networks of an organization."""
        raw = await self._get_list(f"/organizations/{organization_id}/networks")
        networks = [_parse_network(n, organization_id) for n in raw if isinstance(n, dict)]
        logger.debug("networks_listed", org_id=organization_id, count=len(networks))
        return networks

    # ── Alert History ────────────────────────────────────────────

    async def get_alert_history(
        self,
        kind: ResourceKind,
        resource_id: str,
        window: TimeWindow,
    ) -> list[Any]:
        """Fetch raw alert-history entries for one organization or network."""
        path = _ALERT_HISTORY_PATHS[kind].format(id=resource_id)
        params = window.query_params(self._default_timespan_secs)
        return await self._get_list(path, params)
