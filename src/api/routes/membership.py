"""
Membership API for the signed-in member.

GET  /status: resolved trial/expiry state and access flag
POST /sync:   reconcile the stored profile with the subscription provider
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.deps import get_billing_service, get_clock, get_current_member, get_trial_policy
from src.components.billing import BillingService
from src.components.membership import MembershipStatus, TrialPolicy, resolve_member
from src.domain.entities import Member

router = APIRouter()


class MembershipStatusResponse(BaseModel):
    member_id: str
    status: str
    membership_level: str
    level_display: str
    is_on_trial: bool
    is_expired: bool
    can_access: bool
    effective_expiry_date: str | None
    trial_end_date: str | None
    membership_expires_at: str | None


class SyncResponse(BaseModel):
    synced: bool
    changed: bool
    status: str
    membership_expires_at: str | None
    provider_status: str | None = None


def status_to_response(member: Member, resolved: MembershipStatus) -> MembershipStatusResponse:
    return MembershipStatusResponse(
        member_id=str(member.id),
        status=member.status,
        membership_level=member.membership_level,
        level_display=resolved.level_display,
        is_on_trial=resolved.is_on_trial,
        is_expired=resolved.is_expired,
        can_access=resolved.can_access,
        effective_expiry_date=(
            resolved.effective_expiry_date.isoformat()
            if resolved.effective_expiry_date
            else None
        ),
        trial_end_date=resolved.trial_end_date.isoformat() if resolved.trial_end_date else None,
        membership_expires_at=(
            member.membership_expires_at.isoformat() if member.membership_expires_at else None
        ),
    )


@router.get("/status", response_model=MembershipStatusResponse)
def get_status(
    member: Member = Depends(get_current_member),
    policy: TrialPolicy = Depends(get_trial_policy),
    clock: Any = Depends(get_clock),
) -> MembershipStatusResponse:
    """Resolve the caller's membership state (recomputed on every request)."""
    return status_to_response(member, resolve_member(member, clock.now_utc(), policy))


@router.post("/sync", response_model=SyncResponse)
def sync_subscription(
    member: Member = Depends(get_current_member),
    service: BillingService = Depends(get_billing_service),
) -> SyncResponse:
    """
    Sync the caller's subscription state.

    Members without a subscription keep their current state; the response
    then reports synced=False when there was nothing to decide.
    """
    decision = service.sync_member_subscription(member.id)
    if decision is None:
        return SyncResponse(
            synced=False,
            changed=False,
            status=member.status,
            membership_expires_at=(
                member.membership_expires_at.isoformat()
                if member.membership_expires_at
                else None
            ),
        )
    return SyncResponse(
        synced=True,
        changed=decision.changed,
        status=decision.status,
        membership_expires_at=(
            decision.membership_expires_at.isoformat()
            if decision.membership_expires_at
            else None
        ),
        provider_status=decision.provider_status,
    )
