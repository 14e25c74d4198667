"""
Billing component models.

Data models for subscription sync decisions and manual payment recording.
The payment providers themselves sit behind SubscriptionProviderPort.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

from src.components.membership import MembershipError, ValidationError
from src.domain.entities import Member, MemberStatus, Payment

ManualPaymentMethod = Literal["cash", "paypal", "wire"]

MANUAL_PAYMENT_METHODS: tuple[ManualPaymentMethod, ...] = ("cash", "paypal", "wire")

# Provider states that keep a membership active
ACTIVE_SUBSCRIPTION_STATES = frozenset({"active", "trialing", "past_due"})

# Provider states that end a membership once the paid period runs out
LAPSING_SUBSCRIPTION_STATES = frozenset({"canceled", "unpaid"})


class SubscriptionNotFound(MembershipError):
    """Raised by a provider when it has no record of the subscription."""

    def __init__(self, subscription_id: str) -> None:
        super().__init__(f"Subscription not found: {subscription_id}")
        self.subscription_id = subscription_id


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """
    Provider-side state of a recurring subscription.

    Attributes:
        id: Provider subscription id
        status: Provider status (active, trialing, past_due, canceled, ...)
        current_period_start: Start of the paid period
        current_period_end: End of the paid period
        cancel_at_period_end: Member asked to stop renewing
    """

    id: str
    status: str
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool = False


@dataclass(frozen=True)
class SyncDecision:
    """
    Outcome of reconciling a member with their subscription.

    Attributes:
        status: Resulting member status
        membership_expires_at: Resulting explicit expiry
        cancel_at_period_end: Mirrors the provider flag
        clear_subscription: Drop the stored subscription id
        provider_status: Provider status the decision was based on
        changed: Whether applying the decision alters the stored member
    """

    status: MemberStatus
    membership_expires_at: datetime | None
    cancel_at_period_end: bool = False
    clear_subscription: bool = False
    provider_status: str | None = None
    changed: bool = False


@dataclass(frozen=True)
class RecordPaymentInput:
    """Admin request to record an offline payment."""

    member_id: UUID
    payment_method: str
    membership_expires_at: datetime | None = None
    notes: str | None = None
    clear_stripe_subscription: bool = True
    paypal_subscription_id: str | None = None
    recorded_by: UUID | None = None


@dataclass(frozen=True)
class RecordPaymentOutput:
    """Output from recording a payment."""

    member: Member | None = None
    payment: Payment | None = None
    status_changed_to_approved: bool = False
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True
