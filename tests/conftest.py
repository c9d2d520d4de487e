"""Shared fixtures — a routed fake of the Meraki Dashboard API."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from meraki_alerts.core.config import reset_settings
from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.rate_limiter import RateLimiter

BASE_URL = "https://api.test.meraki.com/api/v1"

Responder = Callable[[dict[str, str]], httpx.Response | Exception]


def json_response(
    body: Any,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Build an httpx.Response carrying a JSON body."""
    return httpx.Response(
        status_code=status_code,
        json=body,
        headers=headers,
        request=httpx.Request("GET", BASE_URL),
    )


class FakeMerakiAPI:
    """Routes GET requests by path; unrouted paths answer 404.

    A route is a Response, an exception to raise (transport errors), or a
    callable taking the query params and returning either.
    """

    def __init__(self) -> None:
        self.routes: dict[str, httpx.Response | Exception | Responder] = {}
        self.calls: list[tuple[str, dict[str, str]]] = []

    def route(self, path: str, body: Any = None, status_code: int = 200,
              headers: dict[str, str] | None = None) -> None:
        self.routes[path] = json_response(body if body is not None else [], status_code, headers)

    def fail(self, path: str, exc: Exception) -> None:
        self.routes[path] = exc

    def respond(self, path: str, responder: Responder) -> None:
        self.routes[path] = responder

    async def get(self, url: str, params: dict[str, str] | None = None, **_: Any) -> httpx.Response:
        path = url.removeprefix(BASE_URL)
        query = dict(params or {})
        self.calls.append((path, query))

        route = self.routes.get(path)
        if route is None:
            return json_response({"errors": ["Not found"]}, status_code=404)
        if callable(route) and not isinstance(route, httpx.Response):
            route = route(query)
        if isinstance(route, Exception):
            raise route
        return route

    def count(self, path: str | None = None) -> int:
        """Number of calls, optionally only those to *path*."""
        if path is None:
            return len(self.calls)
        return sum(1 for p, _ in self.calls if p == path)


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


@pytest.fixture()
def fast_limiter() -> RateLimiter:
    """Rate limiter that doesn't actually throttle in tests."""
    return RateLimiter(requests_per_sec=10000, burst=10000)


@pytest.fixture()
def meraki_api() -> FakeMerakiAPI:
    return FakeMerakiAPI()


@pytest.fixture()
async def client(meraki_api: FakeMerakiAPI, fast_limiter: RateLimiter) -> AsyncIterator[MerakiClient]:
    """A connected MerakiClient whose HTTP GETs are served by *meraki_api*."""
    c = MerakiClient(api_key="test-key", base_url=BASE_URL, rate_limiter=fast_limiter)
    await c.connect()
    with patch.object(c._http, "get", new=meraki_api.get):  # type: ignore[union-attr]
        yield c
    await c.close()
