"""
Membership component - Trial policy, status resolution and expiry sweeps.

Status resolution is a read-only projection over a member snapshot; it never
mutates the stored status. Status transitions happen in the admin and
billing services (pending -> approved/rejected, approved -> expired).

Invariants:
- Stored pending/rejected/expired status is authoritative for gating
- Explicit membership_expires_at always overrides a computed trial end
- An active Stripe subscription supersedes trial framing
- Cutoffs are compared as UTC calendar dates (timezone-stable)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime
from typing import Any

from src.domain.dates import add_months, ensure_utc, next_calendar_date, utc_date
from src.domain.entities import Member, MembershipLevel

from .models import (
    DEFAULT_TRIAL_CONFIG,
    DEFAULT_TRIAL_MONTHS,
    MAX_TRIAL_MONTHS,
    TRIAL_TYPES,
    ExpiredMemberSummary,
    ExpireMembersOutput,
    MembershipStatus,
    ResolveStatusInput,
    TrialConfig,
    TrialPolicy,
)
from .ports import MemberRepoPort, TimePort

logger = logging.getLogger(__name__)

GATED_STATUSES = frozenset({"pending", "rejected", "expired"})


# --- Trial Policy ---


def default_trial_policy() -> TrialPolicy:
    """Trial policy used when nothing is configured."""
    return TrialPolicy(levels=dict(DEFAULT_TRIAL_CONFIG))


def is_valid_trial_months(months: Any) -> bool:
    return (
        isinstance(months, int)
        and not isinstance(months, bool)
        and 1 <= months <= MAX_TRIAL_MONTHS
    )


def parse_trial_config_item(item: Any) -> TrialConfig | None:
    """
    Parse one level's trial config from an untyped mapping.

    Returns None when the item is not a mapping or names an unknown type.
    For type "months", a missing or invalid month count (including one
    outside 1..MAX_TRIAL_MONTHS) falls back to 12.
    """
    if not isinstance(item, Mapping):
        return None
    trial_type = item.get("type")
    if trial_type not in TRIAL_TYPES:
        return None
    if trial_type != "months":
        return TrialConfig(type=trial_type)

    months = item.get("months")
    if not is_valid_trial_months(months):
        months = DEFAULT_TRIAL_MONTHS
    return TrialConfig(type="months", months=months)


def trial_end_date(
    level: MembershipLevel | None,
    created_at: datetime | None,
    policy: TrialPolicy | None = None,
) -> date | None:
    """
    Trial end date for a membership level, if the level has a trial.

    - "sept1": first cutoff date (Sept 1 by default) strictly after signup
    - "months": N calendar months after signup
    - "none": no trial

    Args:
        level: Membership level
        created_at: Profile creation instant (signup)
        policy: Trial policy (defaults when omitted)

    Returns:
        Calendar date on which the trial ends, or None
    """
    if level is None or created_at is None:
        return None
    policy = policy or default_trial_policy()
    config = policy.for_level(level)
    signup = utc_date(created_at)

    if config.type == "sept1":
        return next_calendar_date(signup, policy.cutoff_month, policy.cutoff_day)
    if config.type == "months":
        try:
            return add_months(signup, config.months)
        except (OverflowError, ValueError):
            logger.warning("Trial of %s months for %s is out of range", config.months, level)
            return None
    return None


# --- Status Resolution ---


def level_display(level: MembershipLevel | None, is_on_trial: bool) -> str:
    """Label shown on the membership card."""
    if not level:
        return ""
    return f"{level} (trial)" if is_on_trial else level


def resolve_membership_status(
    inp: ResolveStatusInput,
    now: datetime,
    policy: TrialPolicy | None = None,
) -> MembershipStatus:
    """
    Resolve a member's effective trial/expiry state.

    Rules, in order:
    1. Stored pending/rejected/expired status gates access. Rejected and
       expired members are never reported as on trial; pending members
       still get the informational trial computation.
    2. Trial end comes from the level's trial policy.
    3. On trial = trial end in the future, no Stripe subscription, and no
       explicit expiry.
    4. Effective expiry = explicit membership_expires_at, else trial end
       (when the member has no subscription), else never.
    5. Expired = effective expiry date is before today.

    Total over well-formed input: all optional fields may be None.
    """
    today = utc_date(now)
    trial_end = trial_end_date(inp.membership_level, inp.created_at, policy)
    explicit_expiry = (
        utc_date(inp.membership_expires_at) if inp.membership_expires_at else None
    )

    if explicit_expiry is not None:
        effective_expiry = explicit_expiry
    elif trial_end is not None and not inp.has_stripe_subscription:
        effective_expiry = trial_end
    else:
        effective_expiry = None

    is_on_trial = (
        trial_end is not None
        and today < trial_end
        and not inp.has_stripe_subscription
        and explicit_expiry is None
    )
    is_expired = effective_expiry is not None and effective_expiry < today

    if inp.status in ("rejected", "expired"):
        is_on_trial = False
    if inp.status == "expired":
        is_expired = True

    can_access = inp.is_admin or (inp.status not in GATED_STATUSES and not is_expired)

    return MembershipStatus(
        is_on_trial=is_on_trial,
        is_expired=is_expired,
        effective_expiry_date=effective_expiry,
        trial_end_date=trial_end,
        can_access=can_access,
        level_display=level_display(inp.membership_level, is_on_trial),
    )


def status_input_from_member(member: Member) -> ResolveStatusInput:
    """Build the resolver snapshot from a stored profile."""
    return ResolveStatusInput(
        membership_level=member.membership_level,
        created_at=member.created_at,
        membership_expires_at=member.membership_expires_at,
        has_stripe_subscription=member.has_stripe_subscription,
        status=member.status,
        is_admin=member.is_admin,
    )


def resolve_member(
    member: Member,
    now: datetime,
    policy: TrialPolicy | None = None,
) -> MembershipStatus:
    """Resolve status directly from a Member entity."""
    return resolve_membership_status(status_input_from_member(member), now, policy)


def can_access_member_area(
    member: Member,
    now: datetime,
    policy: TrialPolicy | None = None,
) -> bool:
    """Gate for member-only pages (forum, directory, resources)."""
    return resolve_member(member, now, policy).can_access


# --- Expiry Sweep ---


def select_expired_members(members: Iterable[Member], now: datetime) -> list[Member]:
    """
    Pick approved, non-admin members whose explicit expiry has passed.

    Members on trial without an explicit expiry are never swept.
    """
    now = ensure_utc(now)
    return [
        m
        for m in members
        if m.status == "approved"
        and not m.is_admin
        and m.membership_expires_at is not None
        and ensure_utc(m.membership_expires_at) < now
    ]


def run_expire_members(
    *,
    repo: MemberRepoPort,
    now: datetime | None = None,
    time_port: TimePort | None = None,
) -> ExpireMembersOutput:
    """
    Move approved members with a past membership_expires_at to expired.

    Args:
        repo: Member repository port
        now: Evaluation instant (defaults to time_port or system clock)
        time_port: Optional time port

    Returns:
        ExpireMembersOutput with counts and the affected members
    """
    if now is None:
        now = time_port.now_utc() if time_port is not None else datetime.now(UTC)

    candidates = select_expired_members(repo.list_approved_with_expiry_before(now), now)
    if not candidates:
        return ExpireMembersOutput(members_checked=0, members_expired=0)

    updated = repo.set_status([m.id for m in candidates], "expired")
    summaries = [
        ExpiredMemberSummary(id=m.id, email=m.email, name=m.full_name) for m in candidates
    ]

    logger.info(
        "Expired %d member(s): %s",
        updated,
        ", ".join(str(m.id) for m in candidates),
    )

    return ExpireMembersOutput(
        members_checked=len(candidates),
        members_expired=updated,
        expired_members=summaries,
    )


# --- Component Entry Point ---


def run(
    inp: ResolveStatusInput,
    *,
    policy: TrialPolicy | None = None,
    time_port: TimePort | None = None,
    now: datetime | None = None,
) -> MembershipStatus:
    """
    Resolve membership status (atomic component entry point).

    Args:
        inp: Member snapshot
        policy: Trial policy (defaults when omitted)
        time_port: Clock used when now is not given
        now: Explicit evaluation instant

    Returns:
        MembershipStatus
    """
    if now is None:
        now = time_port.now_utc() if time_port is not None else datetime.now(UTC)
    return resolve_membership_status(inp, now, policy)
