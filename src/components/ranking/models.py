"""
Ranking component models.

Data models for ordering forum thread lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

from src.domain.entities import ThreadWithData

SortMode = Literal["latest", "hot"]

SORT_MODES: tuple[SortMode, ...] = ("latest", "hot")


@dataclass(frozen=True)
class RankingConfig:
    """
    Hot ranking configuration from rules.

    Attributes:
        decay_hours: Hours over which recency weight decays linearly to zero
        comment_weight_factor: Multiplier applied to log10(comment_count + 1)
    """

    decay_hours: float = 168.0
    comment_weight_factor: float = 10.0


@dataclass(frozen=True)
class RankThreadsInput:
    """Input for ranking a thread list."""

    threads: list[ThreadWithData]
    mode: str = "latest"
    now: datetime | None = None


@dataclass(frozen=True)
class RankedThread:
    """A thread with its hot score (None when sorted by latest)."""

    thread: ThreadWithData
    score: float | None = None


@dataclass(frozen=True)
class RankThreadsOutput:
    """Output from ranking a thread list."""

    mode: SortMode
    items: list[RankedThread] = field(default_factory=list)

    @property
    def threads(self) -> list[ThreadWithData]:
        return [item.thread for item in self.items]

    @property
    def scores(self) -> dict[UUID, float]:
        return {
            item.thread.id: item.score for item in self.items if item.score is not None
        }
