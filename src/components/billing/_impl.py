"""
BillingService - Subscription sync and manual payments bound to adapters.

The API layer injects one service; the service forwards to the run_*
entry points with the repos, provider, fees and calendar cutoff it holds.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from .component import run_record_payment, run_sync_member
from .models import RecordPaymentInput, RecordPaymentOutput, SyncDecision
from .ports import (
    FeePort,
    MemberRepoPort,
    PaymentRepoPort,
    SubscriptionProviderPort,
    TimePort,
)


class BillingService:
    """Billing operations for one data store and provider."""

    def __init__(
        self,
        member_repo: MemberRepoPort,
        payment_repo: PaymentRepoPort,
        provider: SubscriptionProviderPort,
        fees: FeePort,
        *,
        currency: str = "CAD",
        validity_months: int = 12,
        cutoff_month: int = 9,
        cutoff_day: int = 1,
        time_port: TimePort | None = None,
    ) -> None:
        self.member_repo = member_repo
        self.payment_repo = payment_repo
        self.provider = provider
        self.fees = fees
        self.currency = currency
        self.validity_months = validity_months
        self.cutoff_month = cutoff_month
        self.cutoff_day = cutoff_day
        self.time_port = time_port

    def sync_member_subscription(
        self,
        member_id: UUID,
        subscription_id: str | None = None,
        now: datetime | None = None,
    ) -> SyncDecision | None:
        return run_sync_member(
            member_id,
            member_repo=self.member_repo,
            provider=self.provider,
            subscription_id=subscription_id,
            now=now,
            time_port=self.time_port,
            cutoff_month=self.cutoff_month,
            cutoff_day=self.cutoff_day,
        )

    def record_payment(
        self, inp: RecordPaymentInput, now: datetime | None = None
    ) -> RecordPaymentOutput:
        return run_record_payment(
            inp,
            member_repo=self.member_repo,
            payment_repo=self.payment_repo,
            fees=self.fees,
            currency=self.currency,
            validity_months=self.validity_months,
            now=now,
            time_port=self.time_port,
        )
