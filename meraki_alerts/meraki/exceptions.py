"""Exception hierarchy for the Meraki Dashboard API client."""

from __future__ import annotations

from meraki_alerts.core.types import ErrorKind

# HTTP status → error kind; anything unlisted is an upstream error
_STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
}


def error_kind_for_status(status: int) -> ErrorKind:
    """Map a non-2xx HTTP status to an ErrorKind."""
    return _STATUS_KINDS.get(status, ErrorKind.UPSTREAM)


class MerakiError(Exception):
    """Base exception for all Meraki client errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM
    status: int | None = None


class MerakiConnectionError(MerakiError):
    """Transport-level failure (DNS, connect, timeout, reset)."""

    kind = ErrorKind.NETWORK_IO


class MerakiParseError(MerakiError):
    """The API answered 2xx but the body was not the expected JSON shape."""

    kind = ErrorKind.UPSTREAM


class MerakiAPIError(MerakiError):
    """The API answered with a non-2xx status."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status
        self.kind = error_kind_for_status(status)


class MerakiAuthError(MerakiAPIError):
    """Credential missing, invalid, or lacking permission (401/403)."""


class MerakiNotFoundError(MerakiAPIError):
    """Resource or endpoint absent (404)."""


class MerakiRateLimitError(MerakiAPIError):
    """Rate limited by the API (429)."""

    def __init__(self, message: str, status: int = 429, retry_after: float | None = None) -> None:
        super().__init__(message, status)
        self.retry_after = retry_after


def api_error_for_status(
    status: int, message: str, retry_after: float | None = None
) -> MerakiAPIError:
    """Build the most specific MerakiAPIError subclass for *status*."""
    kind = error_kind_for_status(status)
    if kind == ErrorKind.UNAUTHORIZED:
        return MerakiAuthError(message, status)
    if kind == ErrorKind.NOT_FOUND:
        return MerakiNotFoundError(message, status)
    if kind == ErrorKind.RATE_LIMITED:
        return MerakiRateLimitError(message, status, retry_after=retry_after)
    return MerakiAPIError(message, status)
