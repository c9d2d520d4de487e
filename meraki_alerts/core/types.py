"""Domain types for Meraki alert aggregation — all instants are timezone-aware UTC."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

# Upper bound the alert-history endpoints accept for a single query (90 days)
MAX_TIMESPAN_SECS = 7_776_000


def to_iso_z(value: datetime) -> str:
    """Render an instant as ISO-8601 UTC with a ``Z`` suffix (the upstream format)."""
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


# ── Alert Types ─────────────────────────────────────────────────


class Severity(StrEnum):
    """Alert severity tier."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class AlertStatus(StrEnum):
    """Alert lifecycle state, derived from upstream dismissal/resolution flags."""

    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class AlertRecord(BaseModel):
    """A normalized alert, identical in shape regardless of which endpoint produced it."""

    id: str
    type: str = "unknown"
    severity: Severity = Severity.INFO
    message: str = "No message"
    timestamp: datetime
    network_id: str = ""
    network_name: str = ""
    device_serial: str = ""
    device_name: str = ""
    status: AlertStatus = AlertStatus.ACTIVE
    raw: dict[str, Any] = Field(default_factory=dict)


# ── Resource Types ──────────────────────────────────────────────


class ResourceKind(StrEnum):
    """Which alert-history endpoint a fetch targets."""

    ORGANIZATION = "organization"
    NETWORK = "network"


class Organization(BaseModel):
    """A Meraki organization visible to the credential."""

    id: str
    name: str = ""
    url: str = ""


class Network(BaseModel):
    """A Meraki network within an organization."""

    id: str
    name: str = ""
    organization_id: str = ""
    product_types: list[str] = Field(default_factory=list)
    time_zone: str = ""
    tags: list[str] = Field(default_factory=list)


class TimeWindow(BaseModel):
    """Query window for an alert-history request.

    Either a relative ``timespan_secs`` or an explicit ``t0``/``t1`` pair.
    When both are present the explicit pair wins. When neither is present
    the caller's default timespan applies.
    """

    timespan_secs: int | None = None
    t0: datetime | None = None
    t1: datetime | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> TimeWindow:
        if (self.t0 is None) != (self.t1 is None):
            raise ValueError("t0 and t1 must be given together")
        if self.t0 is not None and self.t1 is not None:
            if self.t0.tzinfo is None or self.t1.tzinfo is None:
                raise ValueError("t0/t1 must be timezone-aware")
            span = (self.t1 - self.t0).total_seconds()
            if span <= 0:
                raise ValueError("t0 must be strictly before t1")
            if span > MAX_TIMESPAN_SECS:
                raise ValueError(f"window spans {span:.0f}s, max is {MAX_TIMESPAN_SECS}s")
        if self.timespan_secs is not None and not 0 < self.timespan_secs <= MAX_TIMESPAN_SECS:
            raise ValueError(f"timespan_secs must be in (0, {MAX_TIMESPAN_SECS}]")
        return self

    @classmethod
    def relative(cls, timespan_secs: int) -> TimeWindow:
        return cls(timespan_secs=timespan_secs)

    @classmethod
    def between(cls, t0: datetime, t1: datetime) -> TimeWindow:
        return cls(t0=t0, t1=t1)

    @property
    def is_explicit(self) -> bool:
        return self.t0 is not None and self.t1 is not None

    def query_params(self, default_timespan_secs: int) -> dict[str, str]:
        """Encode the window as alert-history query parameters."""
        if self.t0 is not None and self.t1 is not None:
            return {"t0": to_iso_z(self.t0), "t1": to_iso_z(self.t1)}
        return {"timespan": str(self.timespan_secs or default_timespan_secs)}

    def describe(self) -> str:
        if self.t0 is not None and self.t1 is not None:
            return f"{to_iso_z(self.t0)}..{to_iso_z(self.t1)}"
        if self.timespan_secs is not None:
            return f"last {self.timespan_secs}s"
        return "default timespan"


# ── Fetch Outcomes ──────────────────────────────────────────────


class ErrorKind(StrEnum):
    """Classified failure of a single upstream interaction."""

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UPSTREAM = "upstream"
    NETWORK_IO = "network_io"


class ReportEntry(BaseModel):
    """One failed unit (network or chunk) inside an otherwise usable result."""

    unit: str
    unit_name: str = ""
    chunk_index: int | None = None
    kind: ErrorKind
    message: str
    http_status: int | None = None


class AggregationReport(BaseModel):
    """Diagnostic list of per-unit failures; entries do not imply overall failure."""

    entries: list[ReportEntry] = Field(default_factory=list)

    def add(self, entry: ReportEntry) -> None:
        self.entries.append(entry)

    def merge(self, other: AggregationReport, chunk_index: int | None = None) -> None:
        """Append *other*'s entries, stamping them with *chunk_index* when given."""
        for entry in other.entries:
            if chunk_index is not None:
                entry = entry.model_copy(update={"chunk_index": chunk_index})
            self.entries.append(entry)

    @property
    def has_failures(self) -> bool:
        return bool(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class FetchFailure(BaseModel):
    """A fetch that produced no usable data."""

    ok: Literal[False] = False
    kind: ErrorKind
    message: str
    http_status: int | None = None
    retry_after_secs: float | None = None
    used_fallback: bool = False
    fallback_cause: FetchFailure | None = None


class FetchSuccess(BaseModel):
    """A fetch that produced a (possibly partial) record list."""

    ok: Literal[True] = True
    records: list[AlertRecord] = Field(default_factory=list)
    used_fallback: bool = False
    report: AggregationReport = Field(default_factory=AggregationReport)
    fallback_cause: FetchFailure | None = None


FetchOutcome = FetchSuccess | FetchFailure


# ── History / Credential Results ────────────────────────────────


class WindowPlan(BaseModel):
    """Backward-walking chunk plan covering (up to a ceiling) a requested span."""

    windows: list[TimeWindow] = Field(default_factory=list)
    requested_secs: int = 0
    covered_secs: int = 0
    truncated: bool = False


class HistoryResult(BaseModel):
    """Merged multi-chunk history.

    ``error`` is set only for a wholesale failure (no chunk could be fetched);
    a non-empty ``report`` alongside records means partial data with warnings.
    """

    records: list[AlertRecord] = Field(default_factory=list)
    report: AggregationReport = Field(default_factory=AggregationReport)
    plan: WindowPlan = Field(default_factory=WindowPlan)
    chunks_succeeded: int = 0
    used_fallback: bool = False
    error: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def partial(self) -> bool:
        return self.ok and self.report.has_failures


class CredentialCheck(BaseModel):
    """Result of validating an API key against the organizations endpoint."""

    valid: bool
    organizations: list[Organization] = Field(default_factory=list)
    error: FetchFailure | None = None


def utc_now() -> datetime:
    return datetime.now(UTC)
