"""
Ranking component - Hot/latest ordering of forum threads.
"""

from .component import (
    compute_hot_score,
    hours_since_activity,
    last_activity,
    normalize_sort_mode,
    rank_hot,
    rank_latest,
    run,
    sort_threads,
)
from .models import (
    SORT_MODES,
    RankedThread,
    RankingConfig,
    RankThreadsInput,
    RankThreadsOutput,
    SortMode,
)
from .ports import TimePort

__all__ = [
    # Component entry point
    "run",
    # Pure functions
    "compute_hot_score",
    "hours_since_activity",
    "last_activity",
    "normalize_sort_mode",
    "rank_hot",
    "rank_latest",
    "sort_threads",
    # Models
    "RankThreadsInput",
    "RankThreadsOutput",
    "RankedThread",
    "RankingConfig",
    "SortMode",
    "SORT_MODES",
    # Ports
    "TimePort",
]
