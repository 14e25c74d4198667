"""
Billing component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.entities import Member, MembershipLevel, Payment

from .models import SubscriptionSnapshot


class SubscriptionProviderPort(Protocol):
    """
    Port for the recurring-payment provider.

    Implementations:
    - SubscriptionStubAdapter: In-memory snapshots (dev/tests)
    """

    def is_enabled(self) -> bool:
        """Whether the provider is configured."""
        ...

    def get_subscription(self, subscription_id: str) -> SubscriptionSnapshot:
        """
        Fetch subscription state.

        Raises:
            SubscriptionNotFound: Provider has no such subscription
        """
        ...


class MemberRepoPort(Protocol):
    """Member persistence used by billing."""

    def get_by_id(self, member_id: UUID) -> Member | None:
        ...

    def save(self, member: Member) -> Member:
        ...


class PaymentRepoPort(Protocol):
    """Payment ledger persistence."""

    def save(self, payment: Payment) -> Payment:
        ...

    def list_for_user(self, user_id: UUID) -> list[Payment]:
        ...


class FeePort(Protocol):
    """Source of the membership fee charged per level."""

    def get_fee(self, level: MembershipLevel) -> float:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
