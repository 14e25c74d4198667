"""
Forum component - Thread listing for the members' discussion board.

Joins threads with their comment activity, filters by category and
orders them through the ranking component. Also holds the plain-text
helpers used for previews and relative timestamps.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from src.components.ranking import RankingConfig, RankThreadsInput, last_activity
from src.components.ranking import run as run_ranking
from src.domain.dates import ensure_utc
from src.domain.entities import Comment, Thread, ThreadWithData

from .models import (
    ALL_CATEGORY,
    PREVIEW_LENGTH,
    CommentStats,
    ThreadListItem,
    ThreadListOutput,
)

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_STAR_RE = re.compile(r"\*(.+?)\*")
_ITALIC_UNDERSCORE_RE = re.compile(r"_(.+?)_")
_WHITESPACE_RE = re.compile(r"\s+")
_MENTION_RE = re.compile(r"@\[([^\]]+)\]\([^)]+\)")


# --- Text helpers ---


def strip_mention_format(text: str) -> str:
    """Convert @[Name](id) mentions to @Name."""
    return _MENTION_RE.sub(r"@\1", text)


def strip_markdown(text: str | None) -> str:
    """
    Reduce markdown to plain text for previews.

    Removes bold and italic markers, folds line breaks and whitespace runs
    into single spaces and trims the result.
    """
    if not text:
        return ""
    cleaned = _BOLD_RE.sub(r"\1", text)
    cleaned = _ITALIC_STAR_RE.sub(r"\1", cleaned)
    cleaned = _ITALIC_UNDERSCORE_RE.sub(r"\1", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


def content_preview(text: str | None, length: int = PREVIEW_LENGTH) -> str:
    """Plain-text excerpt, cut on a word boundary with an ellipsis."""
    plain = strip_markdown(strip_mention_format(text or ""))
    if len(plain) <= length:
        return plain
    cut = plain[:length].rsplit(" ", 1)[0] or plain[:length]
    return cut.rstrip() + "..."


def format_relative_date(dt: datetime, now: datetime) -> str:
    """
    Short relative timestamp for list views.

    "just now", "5m ago", "3h ago", "2d ago"; a week or older falls back
    to the month and day ("Mar 5").
    """
    dt = ensure_utc(dt)
    seconds = int((ensure_utc(now) - dt).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    return f"{dt.strftime('%b')} {dt.day}"


# --- Listing ---


def aggregate_comment_stats(comments: Iterable[Comment]) -> dict[UUID, CommentStats]:
    """Comment count and latest comment time per thread."""
    counts: dict[UUID, int] = {}
    latest: dict[UUID, datetime] = {}
    for comment in comments:
        counts[comment.thread_id] = counts.get(comment.thread_id, 0) + 1
        created = ensure_utc(comment.created_at)
        current = latest.get(comment.thread_id)
        if current is None or created > current:
            latest[comment.thread_id] = created
    return {
        thread_id: CommentStats(count=count, latest_created_at=latest.get(thread_id))
        for thread_id, count in counts.items()
    }


def join_comment_stats(
    threads: Iterable[Thread],
    stats: dict[UUID, CommentStats],
) -> list[ThreadWithData]:
    """Attach comment stats to each thread."""
    joined = []
    for thread in threads:
        entry = stats.get(thread.id, CommentStats())
        joined.append(
            ThreadWithData(
                **thread.model_dump(),
                comment_count=entry.count,
                latest_comment_at=entry.latest_created_at,
            )
        )
    return joined


def filter_by_category(
    threads: list[ThreadWithData],
    category: str | None,
) -> list[ThreadWithData]:
    """Keep threads in the category; None or "all" keeps everything."""
    if category is None or category == ALL_CATEGORY:
        return list(threads)
    return [t for t in threads if t.category == category]


def build_thread_list(
    threads: Iterable[Thread],
    comments: Iterable[Comment],
    category: str | None,
    sort: str | None,
    now: datetime,
    config: RankingConfig | None = None,
) -> ThreadListOutput:
    """
    Build the ordered thread listing.

    Args:
        threads: All threads
        comments: Comments for those threads
        category: Category to show (None or "all" for every category)
        sort: "hot" or "latest" (anything else is treated as latest)
        now: Evaluation instant for scores and relative dates
        config: Ranking configuration

    Returns:
        ThreadListOutput with rows in display order
    """
    joined = join_comment_stats(threads, aggregate_comment_stats(comments))
    selected = filter_by_category(joined, category)

    ranked = run_ranking(
        RankThreadsInput(threads=selected, mode=sort or "latest", now=now),
        config=config,
    )

    items = [
        ThreadListItem(
            thread=entry.thread,
            preview=content_preview(entry.thread.content),
            last_activity_label=format_relative_date(last_activity(entry.thread), now),
            hot_score=entry.score,
        )
        for entry in ranked.items
    ]
    return ThreadListOutput(
        sort=ranked.mode,
        category=category or ALL_CATEGORY,
        items=items,
    )
