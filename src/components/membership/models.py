"""
Membership component models.

Data models for trial policy, status resolution and expiry sweeps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal
from uuid import UUID

from src.domain.entities import MembershipLevel, MemberStatus

TrialType = Literal["none", "sept1", "months"]

TRIAL_TYPES: tuple[TrialType, ...] = ("none", "sept1", "months")

DEFAULT_TRIAL_MONTHS = 12
MAX_TRIAL_MONTHS = 120


class MembershipError(Exception):
    """Base error for membership operations."""


class MemberNotFoundError(MembershipError):
    """Raised when a member id does not resolve to a profile."""

    def __init__(self, member_id: UUID) -> None:
        super().__init__(f"Member not found: {member_id}")
        self.member_id = member_id


@dataclass(frozen=True)
class ValidationError:
    """Validation error with actionable message."""

    field: str
    code: str
    message: str


# --- Trial policy ---


@dataclass(frozen=True)
class TrialConfig:
    """
    Trial policy for one membership level.

    Attributes:
        type: "none" (no trial), "sept1" (until the calendar cutoff after
            signup) or "months" (N calendar months after signup)
        months: Trial length for type "months"
    """

    type: TrialType = "none"
    months: int = DEFAULT_TRIAL_MONTHS

    def to_dict(self) -> dict[str, object]:
        if self.type == "months":
            return {"type": self.type, "months": self.months}
        return {"type": self.type}


@dataclass(frozen=True)
class TrialPolicy:
    """Trial configuration for every level plus the calendar cutoff."""

    levels: dict[MembershipLevel, TrialConfig]
    cutoff_month: int = 9
    cutoff_day: int = 1

    def for_level(self, level: MembershipLevel | None) -> TrialConfig:
        if level is None:
            return TrialConfig()
        return self.levels.get(level, TrialConfig())


DEFAULT_TRIAL_CONFIG: dict[MembershipLevel, TrialConfig] = {
    "Full": TrialConfig(type="sept1"),
    "Student": TrialConfig(type="months", months=DEFAULT_TRIAL_MONTHS),
    "Associate": TrialConfig(type="sept1"),
    "Corporate": TrialConfig(type="none"),
    "Honorary": TrialConfig(type="none"),
}

# --- Status resolution ---


@dataclass(frozen=True)
class ResolveStatusInput:
    """
    Snapshot of the member fields the resolver reads.

    created_at and membership_expires_at are instants; they are reduced to
    UTC calendar dates before any comparison.
    """

    membership_level: MembershipLevel | None
    created_at: datetime | None
    membership_expires_at: datetime | None = None
    has_stripe_subscription: bool = False
    status: MemberStatus = "approved"
    is_admin: bool = False


@dataclass(frozen=True)
class MembershipStatus:
    """
    Resolved membership state for display and gating.

    Attributes:
        is_on_trial: Member is inside an unpaid trial window
        is_expired: Effective expiry date has passed
        effective_expiry_date: Explicit expiry, else trial end, else None
            (never expires)
        trial_end_date: Trial end computed from the level policy, if any
        can_access: Whether member-only areas should be served
        level_display: Level label, e.g. "Full (trial)"
    """

    is_on_trial: bool
    is_expired: bool
    effective_expiry_date: date | None
    trial_end_date: date | None = None
    can_access: bool = False
    level_display: str = ""


# --- Expiry sweep ---


@dataclass(frozen=True)
class ExpiredMemberSummary:
    """Member that was moved to expired by a sweep."""

    id: UUID
    email: str
    name: str | None


@dataclass(frozen=True)
class ExpireMembersOutput:
    """Output from an expiry sweep."""

    members_checked: int
    members_expired: int
    expired_members: list[ExpiredMemberSummary] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.members_checked == 0:
            return "No members found with expired memberships"
        return f"Successfully expired {self.members_expired} member(s)"
