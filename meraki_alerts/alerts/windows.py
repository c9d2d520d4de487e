"""Time-window planner — splits a long history request into API-sized chunks."""

from __future__ import annotations

from datetime import datetime, timedelta

from meraki_alerts.core.types import MAX_TIMESPAN_SECS, TimeWindow, WindowPlan


def plan_windows(
    requested_secs: int,
    now: datetime,
    max_chunk_secs: int = MAX_TIMESPAN_SECS,
    max_chunks: int = 4,
) -> WindowPlan:
    """Plan contiguous, non-overlapping windows walking backward from *now*.

    Window 0 is the most recent. Each window is at most *max_chunk_secs*
    long (clamped to the API maximum). Planning stops once *requested_secs*
    is covered or *max_chunks* windows exist; in the latter case the plan is
    marked ``truncated`` and ``covered_secs`` tells the caller how far back
    the history actually reaches.

    Raises:
        ValueError: If any argument is non-positive or *now* is naive.
    """
    if requested_secs <= 0:
        raise ValueError("requested_secs must be positive")
    if max_chunk_secs <= 0 or max_chunks <= 0:
        raise ValueError("max_chunk_secs and max_chunks must be positive")
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    chunk_secs = min(max_chunk_secs, MAX_TIMESPAN_SECS)
    windows: list[TimeWindow] = []
    remaining = requested_secs
    end = now

    while remaining > 0 and len(windows) < max_chunks:
        length = min(chunk_secs, remaining)
        start = end - timedelta(seconds=length)
        windows.append(TimeWindow.between(start, end))
        end = start
        remaining -= length

    return WindowPlan(
        windows=windows,
        requested_secs=requested_secs,
        covered_secs=requested_secs - remaining,
        truncated=remaining > 0,
    )
