"""
Forum component - Category catalogue and thread listing.
"""

from .component import (
    aggregate_comment_stats,
    build_thread_list,
    content_preview,
    filter_by_category,
    format_relative_date,
    join_comment_stats,
    strip_markdown,
    strip_mention_format,
)
from .models import (
    ALL_CATEGORIES,
    ALL_CATEGORY,
    CATEGORY_LABELS,
    CLASSIFIED_CATEGORIES,
    DISCUSSION_CATEGORIES,
    CommentStats,
    ThreadListItem,
    ThreadListOutput,
)

__all__ = [
    # Listing
    "aggregate_comment_stats",
    "build_thread_list",
    "filter_by_category",
    "join_comment_stats",
    # Text helpers
    "content_preview",
    "format_relative_date",
    "strip_markdown",
    "strip_mention_format",
    # Models
    "CommentStats",
    "ThreadListItem",
    "ThreadListOutput",
    # Constants
    "ALL_CATEGORIES",
    "ALL_CATEGORY",
    "CATEGORY_LABELS",
    "CLASSIFIED_CATEGORIES",
    "DISCUSSION_CATEGORIES",
]
