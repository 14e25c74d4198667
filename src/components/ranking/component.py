"""
Ranking component - "hot" and "latest" ordering of forum threads.

Scores are recomputed on every request; nothing is cached or persisted.
Thread sets are small (one category), so the O(n log n) sort is fine.

Invariants:
- A thread with zero comments scores exactly 0
- Score is non-increasing in hours since last activity
- Equal scores are ordered by last activity, most recent first
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Protocol

from src.domain.dates import ensure_utc
from src.domain.entities import ThreadWithData

from .models import (
    SORT_MODES,
    RankedThread,
    RankingConfig,
    RankThreadsInput,
    RankThreadsOutput,
    SortMode,
)
from .ports import TimePort

SECONDS_PER_HOUR = 3600.0


class Rankable(Protocol):
    comment_count: int
    created_at: datetime
    latest_comment_at: datetime | None


# --- Pure Functions (Functional Core) ---


def last_activity(thread: Rankable) -> datetime:
    """Most recent comment time, or the thread creation time if uncommented."""
    if thread.latest_comment_at is not None:
        return ensure_utc(thread.latest_comment_at)
    return ensure_utc(thread.created_at)


def hours_since_activity(thread: Rankable, now: datetime) -> float:
    """Hours between last activity and now, clamped at 0 for clock skew."""
    delta = (ensure_utc(now) - last_activity(thread)).total_seconds() / SECONDS_PER_HOUR
    return max(0.0, delta)


def compute_hot_score(
    thread: Rankable,
    now: datetime,
    config: RankingConfig | None = None,
) -> float:
    """
    Compute the hot score for a thread.

    score = comment_count * recency_weight + log10(comment_count + 1) * 10

    where recency_weight decays linearly from 1 to 0 over decay_hours
    (7 days by default). Malformed counts are treated as 0 and a NaN
    result collapses to 0 so a bad row only costs sort position.

    Args:
        thread: Thread with comment_count, created_at, latest_comment_at
        now: Evaluation instant
        config: Optional ranking configuration

    Returns:
        Non-negative score, higher sorts first
    """
    config = config or RankingConfig()

    count = thread.comment_count or 0
    if isinstance(count, float) and math.isnan(count):
        count = 0
    count = max(0, count)

    hours = hours_since_activity(thread, now)
    recency_weight = max(0.0, 1.0 - hours / config.decay_hours)
    comment_weight = math.log10(count + 1)

    score = count * recency_weight + comment_weight * config.comment_weight_factor
    if math.isnan(score):
        return 0.0
    return score


def rank_hot(
    threads: list[ThreadWithData],
    now: datetime,
    config: RankingConfig | None = None,
) -> list[RankedThread]:
    """Order threads by descending hot score, ties by most recent activity."""
    scored = [
        RankedThread(thread=t, score=compute_hot_score(t, now, config)) for t in threads
    ]
    scored.sort(
        key=lambda r: (r.score, last_activity(r.thread).timestamp()),
        reverse=True,
    )
    return scored


def rank_latest(threads: list[ThreadWithData]) -> list[RankedThread]:
    """Order threads by creation time, newest first."""
    ordered = sorted(threads, key=lambda t: ensure_utc(t.created_at), reverse=True)
    return [RankedThread(thread=t) for t in ordered]


def normalize_sort_mode(mode: str | None) -> SortMode:
    """Unknown or missing modes fall back to 'latest'."""
    for known in SORT_MODES:
        if mode == known:
            return known
    return "latest"


def sort_threads(
    threads: list[ThreadWithData],
    mode: str | None,
    now: datetime,
    config: RankingConfig | None = None,
) -> list[ThreadWithData]:
    """Sort threads for display according to the requested mode."""
    if normalize_sort_mode(mode) == "hot":
        return [r.thread for r in rank_hot(threads, now, config)]
    return [r.thread for r in rank_latest(threads)]


# --- Component Entry Point ---


def run(
    inp: RankThreadsInput,
    *,
    config: RankingConfig | None = None,
    time_port: TimePort | None = None,
) -> RankThreadsOutput:
    """
    Rank a thread list.

    Args:
        inp: Threads, sort mode and optional evaluation instant
        config: Optional ranking configuration
        time_port: Clock used when inp.now is not given

    Returns:
        RankThreadsOutput with ordered threads (and scores for hot mode)
    """
    mode = normalize_sort_mode(inp.mode)

    if mode == "latest":
        return RankThreadsOutput(mode=mode, items=rank_latest(inp.threads))

    now = inp.now
    if now is None:
        now = time_port.now_utc() if time_port is not None else datetime.now(UTC)

    return RankThreadsOutput(mode=mode, items=rank_hot(inp.threads, now, config))
