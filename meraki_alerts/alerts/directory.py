"""Per-fetch network enumeration cache shared by concurrent fan-outs."""

from __future__ import annotations

import asyncio

import structlog

from meraki_alerts.core.types import Network
from meraki_alerts.meraki.client import MerakiClient
from meraki_alerts.meraki.exceptions import MerakiError

logger = structlog.stdlib.get_logger()


class NetworkDirectory:
    """Enumerates an organization's networks at most once.

    One directory lives for one top-level fetch. Concurrent callers of
    :meth:`resolve` share a single upstream request; its result (or its
    error) is remembered, so every chunk of a history walk sees the same
    network list and a failed enumeration is not retried per chunk.

    Usage::

        directory = NetworkDirectory(client, org_id)
        networks = await directory.resolve()   # raises MerakiError on failure
    """

    def __init__(
        self,
        client: MerakiClient,
        organization_id: str,
        networks: list[Network] | None = None,
    ) -> None:
        self._client = client
        self._organization_id = organization_id
        self._networks: list[Network] | None = list(networks) if networks is not None else None
        self._error: MerakiError | None = None
        self._lock = asyncio.Lock()

    @property
    def organization_id(self) -> str:
        return self._organization_id

    @property
    def resolved(self) -> bool:
        """Whether the enumeration has completed successfully."""
        return self._networks is not None

    @property
    def names(self) -> dict[str, str]:
        """Network id → name for the enumerated networks (empty until resolved)."""
        return {n.id: n.name for n in self._networks or []}

    async def resolve(self) -> list[Network]:
        """Return the organization's networks, enumerating on first use."""
        if self._networks is not None:
            return list(self._networks)
        if self._error is not None:
            raise self._error

        async with self._lock:
            # Double-check after acquiring lock
            if self._networks is not None:
                return list(self._networks)
            if self._error is not None:
                raise self._error

            try:
                networks = await self._client.get_networks(self._organization_id)
            except MerakiError as exc:
                self._error = exc
                logger.warning(
                    "network_enumeration_failed",
                    org_id=self._organization_id,
                    error_kind=exc.kind,
                    http_status=exc.status,
                )
                raise

            self._networks = networks
            logger.info(
                "networks_enumerated",
                org_id=self._organization_id,
                count=len(networks),
            )
            return list(networks)
