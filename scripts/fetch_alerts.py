#!/usr/bin/env python3
"""Alert fetch CLI — pull Meraki alert history for an organization.

Usage::

    # List organizations visible to the key
    python scripts/fetch_alerts.py --api-key $KEY

    # Last 24 hours for one organization
    python scripts/fetch_alerts.py --org 123456 --hours 24

    # Full year of history (walked in 90-day chunks)
    python scripts/fetch_alerts.py --org 123456 --history-days 365

    # Fill in demo alerts when the API returns nothing
    python scripts/fetch_alerts.py --org 123456 --demo-fallback

    # JSON output
    python scripts/fetch_alerts.py --org 123456 --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys

from meraki_alerts.alerts.service import (
    fetch_alerts,
    fetch_historical_alerts,
    generate_fallback_alerts,
    list_networks,
    validate_credential,
)
from meraki_alerts.core.config import load_settings
from meraki_alerts.core.logging import setup_logging
from meraki_alerts.core.types import (
    MAX_TIMESPAN_SECS,
    AggregationReport,
    AlertRecord,
    FetchFailure,
    TimeWindow,
    to_iso_z,
)
from meraki_alerts.meraki.exceptions import MerakiError

# Longest window a single alert-history query accepts
MAX_HOURS = MAX_TIMESPAN_SECS // 3600


def _hours_arg(value: str) -> int:
    """argparse type for --hours: an integer in [1, MAX_HOURS]."""
    try:
        hours = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid hour count: {value!r}") from None
    if not 1 <= hours <= MAX_HOURS:
        raise argparse.ArgumentTypeError(
            f"must be between 1 and {MAX_HOURS} (90 days); use --history-days for longer"
        )
    return hours


def _days_arg(value: str) -> int:
    """argparse type for --history-days: a non-negative integer (0 disables)."""
    try:
        days = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid day count: {value!r}") from None
    if days < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return days


def _render_table(alerts: list[AlertRecord], top: int) -> str:
    """Render alerts as an ASCII table."""
    lines: list[str] = []
    header = (
        f"{'#':>3}  {'Time (UTC)':<20}  {'Severity':<8}  {'Status':<12}  "
        f"{'Network':<20}  {'Type':<26}  Message"
    )
    lines.append(header)
    lines.append("-" * len(header))

    for i, alert in enumerate(alerts[:top], 1):
        when = to_iso_z(alert.timestamp)[:19]
        lines.append(
            f"{i:>3}  {when:<20}  {alert.severity.value:<8}  {alert.status.value:<12}  "
            f"{alert.network_name[:20]:<20}  {alert.type[:26]:<26}  {alert.message[:60]}"
        )

    return "\n".join(lines)


def _render_report(report: AggregationReport) -> str:
    lines = [f"{len(report)} unit(s) failed:"]
    for entry in report.entries:
        unit = entry.unit_name or entry.unit
        chunk = f"[chunk {entry.chunk_index}] " if entry.chunk_index is not None else ""
        lines.append(f"  - {chunk}{unit} ({entry.kind.value}): {entry.message}")
    return "\n".join(lines)


async def run_fetch(args: argparse.Namespace) -> int:
    """Fetch alerts once and display the result."""
    settings = load_settings(args.config)
    setup_logging(level="WARNING")

    api_key = args.api_key or os.environ.get("MERAKI_API_KEY") or (
        settings.meraki.api_key.get_secret_value()
    )

    if not args.org:
        check = await validate_credential(api_key)
        if not check.valid:
            message = check.error.message if check.error else "unknown error"
            print(f"API key rejected: {message}", file=sys.stderr)
            return 1
        for org in check.organizations:
            print(f"{org.id}\t{org.name}")
        return 0

    report = AggregationReport()
    used_fallback = False
    failure: FetchFailure | None = None
    alerts: list[AlertRecord] = []

    if args.history_days:
        result = await fetch_historical_alerts(api_key, args.org, args.history_days * 86400)
        alerts, report, used_fallback, failure = (
            result.records, result.report, result.used_fallback, result.error
        )
        if result.plan.truncated:
            print(
                f"History limited to {result.plan.covered_secs // 86400} of "
                f"{args.history_days} days ({len(result.plan.windows)} chunks).",
                file=sys.stderr,
            )
    else:
        outcome = await fetch_alerts(api_key, args.org, TimeWindow.relative(args.hours * 3600))
        if isinstance(outcome, FetchFailure):
            failure = outcome
        else:
            alerts, report, used_fallback = outcome.records, outcome.report, outcome.used_fallback

    if failure is not None:
        print(f"Fetch failed ({failure.kind.value}): {failure.message}", file=sys.stderr)
        if not args.demo_fallback:
            return 1

    if not alerts and args.demo_fallback:
        try:
            network_ids = [n.id for n in await list_networks(api_key, args.org)]
        except MerakiError:
            network_ids = []
        span = args.history_days * 86400 if args.history_days else args.hours * 3600
        alerts = generate_fallback_alerts(args.org, network_ids, span)
        print("No alerts returned; showing demo data.", file=sys.stderr)

    if args.json:
        print(json.dumps(
            {
                "alerts": [a.model_dump(mode="json", exclude={"raw"}) for a in alerts],
                "used_fallback": used_fallback,
                "report": report.model_dump(mode="json")["entries"],
            },
            indent=2,
        ))
        return 0

    if not alerts:
        print("No alerts found.", file=sys.stderr)
    else:
        print(f"\nFound {len(alerts)} alerts{' (network fallback)' if used_fallback else ''}:\n")
        print(_render_table(alerts, args.top))
        print(f"\nShowing {min(args.top, len(alerts))} of {len(alerts)}")
    if report.has_failures:
        print(_render_report(report), file=sys.stderr)

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch Meraki alert history for an organization.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="Meraki API key (default: $MERAKI_API_KEY, then config)",
    )
    parser.add_argument(
        "--org",
        default=None,
        help="Organization ID; omit to list organizations",
    )
    parser.add_argument(
        "--hours",
        type=_hours_arg,
        default=24,
        help="Look-back window in hours (default: 24)",
    )
    parser.add_argument(
        "--history-days",
        type=_days_arg,
        default=0,
        help="Walk this many days of history in 90-day chunks instead of --hours",
    )
    parser.add_argument(
        "--demo-fallback",
        action="store_true",
        help="Show generated demo alerts when the API returns none",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=50,
        help="Number of rows to display (default: 50)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output raw JSON instead of table",
    )
    return parser


def main() -> None:
    args = build_parser().parse_args()

    code = asyncio.run(run_fetch(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
