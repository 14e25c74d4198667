"""
Cron triggers.

GET /expire-members moves approved members whose membership_expires_at has
passed to expired. When a cron secret is configured the caller must send
"Authorization: Bearer <secret>".
"""

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from src.api.deps import get_clock, get_cron_secret, get_member_repo
from src.components.membership import run_expire_members

logger = logging.getLogger(__name__)

router = APIRouter()


class ExpiredMemberResponse(BaseModel):
    id: str
    email: str
    name: str | None


class ExpireMembersResponse(BaseModel):
    success: bool
    message: str
    members_checked: int
    members_expired: int
    expired_members: list[ExpiredMemberResponse]


def verify_cron_secret(
    authorization: str | None = Header(None),
    secret: str | None = Depends(get_cron_secret),
) -> None:
    if secret is None:
        return
    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        logger.warning("Rejected cron request with missing or wrong secret")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


@router.get(
    "/expire-members",
    response_model=ExpireMembersResponse,
    dependencies=[Depends(verify_cron_secret)],
)
def expire_members(
    member_repo: Any = Depends(get_member_repo),
    clock: Any = Depends(get_clock),
) -> ExpireMembersResponse:
    out = run_expire_members(repo=member_repo, time_port=clock)
    return ExpireMembersResponse(
        success=True,
        message=out.message,
        members_checked=out.members_checked,
        members_expired=out.members_expired,
        expired_members=[
            ExpiredMemberResponse(id=str(m.id), email=m.email, name=m.name)
            for m in out.expired_members
        ],
    )
