"""
Forum component models.

Category catalogue and listing input/output for the discussion board.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.components.ranking import SortMode
from src.domain.entities import DiscussionCategory, ThreadWithData

ALL_CATEGORY = "all"

CATEGORY_LABELS: dict[DiscussionCategory, str] = {
    "aircraft_shares": "Aircraft Shares / Block Time",
    "instructor_availability": "Instructor Availability",
    "gear_for_sale": "Gear for Sale",
    "flying_at_ytz": "Flying at YTZ",
    "general_aviation": "General Aviation",
    "training_safety_proficiency": "Training, Safety & Proficiency",
    "wanted": "Wanted",
    "other": "Other",
}

ALL_CATEGORIES: tuple[DiscussionCategory, ...] = tuple(CATEGORY_LABELS)

# For sale / rental listings
CLASSIFIED_CATEGORIES: tuple[DiscussionCategory, ...] = (
    "aircraft_shares",
    "instructor_availability",
    "gear_for_sale",
)

# General discussions
DISCUSSION_CATEGORIES: tuple[DiscussionCategory, ...] = (
    "flying_at_ytz",
    "general_aviation",
    "training_safety_proficiency",
    "wanted",
    "other",
)

PREVIEW_LENGTH = 200


@dataclass(frozen=True)
class CommentStats:
    """Per-thread comment aggregate."""

    count: int = 0
    latest_created_at: datetime | None = None


@dataclass(frozen=True)
class ThreadListItem:
    """
    One row of the thread listing.

    Attributes:
        thread: Thread joined with its comment stats
        preview: Plain-text excerpt of the content
        last_activity_label: Relative time of the latest activity
        hot_score: Score when listed in hot mode
    """

    thread: ThreadWithData
    preview: str
    last_activity_label: str
    hot_score: float | None = None


@dataclass(frozen=True)
class ThreadListOutput:
    """Ordered thread listing."""

    sort: SortMode
    category: str
    items: list[ThreadListItem] = field(default_factory=list)

    @property
    def threads(self) -> list[ThreadWithData]:
        return [item.thread for item in self.items]
