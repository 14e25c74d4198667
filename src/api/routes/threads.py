"""
Forum threads API.

Lists discussion threads for members with an active (or trial) membership,
sorted "latest" or "hot" and optionally filtered by category.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from src.api.deps import (
    get_clock,
    get_comment_repo,
    get_ranking_config,
    get_rules,
    get_thread_repo,
    require_member_access,
)
from src.components.forum import (
    ALL_CATEGORIES,
    CATEGORY_LABELS,
    CLASSIFIED_CATEGORIES,
    DISCUSSION_CATEGORIES,
    ThreadListItem,
    build_thread_list,
)
from src.components.ranking import RankingConfig
from src.domain.entities import Member
from src.rules.models import Rules

router = APIRouter()


# --- Response Models ---


class ThreadResponse(BaseModel):
    id: str
    title: str
    content: str
    preview: str
    category: str
    category_label: str
    created_by: str | None
    author_email: str | None
    image_urls: list[str]
    created_at: str
    updated_at: str
    comment_count: int
    latest_comment_at: str | None
    last_activity: str
    hot_score: float | None = None


class ThreadListResponse(BaseModel):
    sort: str
    category: str
    threads: list[ThreadResponse]


class CategoryResponse(BaseModel):
    value: str
    label: str


class CategoriesResponse(BaseModel):
    categories: list[CategoryResponse]
    classified: list[str]
    discussion: list[str]


def item_to_response(item: ThreadListItem) -> ThreadResponse:
    thread = item.thread
    return ThreadResponse(
        id=str(thread.id),
        title=thread.title,
        content=thread.content,
        preview=item.preview,
        category=thread.category,
        category_label=CATEGORY_LABELS.get(thread.category, thread.category),
        created_by=str(thread.created_by) if thread.created_by else None,
        author_email=thread.author_email,
        image_urls=thread.image_urls,
        created_at=thread.created_at.isoformat(),
        updated_at=thread.updated_at.isoformat(),
        comment_count=thread.comment_count,
        latest_comment_at=(
            thread.latest_comment_at.isoformat() if thread.latest_comment_at else None
        ),
        last_activity=item.last_activity_label,
        hot_score=item.hot_score,
    )


# --- Endpoints ---


@router.get("", response_model=ThreadListResponse)
def list_threads(
    sort: str | None = Query(None, description="latest or hot"),
    category: str | None = Query(None, description="Category value or 'all'"),
    member: Member = Depends(require_member_access),
    thread_repo: Any = Depends(get_thread_repo),
    comment_repo: Any = Depends(get_comment_repo),
    ranking_config: RankingConfig = Depends(get_ranking_config),
    rules: Rules = Depends(get_rules),
    clock: Any = Depends(get_clock),
) -> ThreadListResponse:
    """
    List threads with comment counts.

    Hot sorting is computed per request from comment activity. Unknown sort
    values fall back to latest. Requires an approved (or trialling) member.
    """
    threads = thread_repo.list_all()
    comments = comment_repo.list_for_threads([t.id for t in threads])

    listing = build_thread_list(
        threads,
        comments,
        category,
        sort or rules.forum.default_sort,
        clock.now_utc(),
        ranking_config,
    )

    return ThreadListResponse(
        sort=listing.sort,
        category=listing.category,
        threads=[item_to_response(item) for item in listing.items],
    )


@router.get("/categories", response_model=CategoriesResponse)
def list_categories() -> CategoriesResponse:
    """Category catalogue split into classifieds and discussions."""
    return CategoriesResponse(
        categories=[
            CategoryResponse(value=c, label=CATEGORY_LABELS[c]) for c in ALL_CATEGORIES
        ],
        classified=list(CLASSIFIED_CATEGORIES),
        discussion=list(DISCUSSION_CATEGORIES),
    )
