"""
Billing component - Subscription sync and manual payment recording.

Pure decision functions reconcile a member profile with provider state;
the run_* entry points fetch, decide and persist through ports.

Sync rules:
- No subscription anywhere: approved stays approved (trial mode); expired
  returns to approved only while membership_expires_at is in the future
- Provider disabled: keep current state
- active/trialing/past_due: approved, expiry from the paid period
- canceled/unpaid: approved until the computed expiry passes, then expired
- any other provider state: expired
- Provider no longer knows the subscription: expired unless the stored
  expiry is still in the future; the subscription id is cleared
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from src.components.membership import MemberNotFoundError, ValidationError
from src.domain.dates import add_months, ensure_utc
from src.domain.entities import Member, MemberStatus, Payment

from .models import (
    ACTIVE_SUBSCRIPTION_STATES,
    LAPSING_SUBSCRIPTION_STATES,
    MANUAL_PAYMENT_METHODS,
    RecordPaymentInput,
    RecordPaymentOutput,
    SubscriptionNotFound,
    SubscriptionSnapshot,
    SyncDecision,
)
from .ports import (
    FeePort,
    MemberRepoPort,
    PaymentRepoPort,
    SubscriptionProviderPort,
    TimePort,
)

logger = logging.getLogger(__name__)

DEFAULT_CUTOFF_MONTH = 9
DEFAULT_CUTOFF_DAY = 1
DEFAULT_PAYMENT_MONTHS = 12


# --- Pure Functions (Functional Core) ---


def expires_at_from_subscription(
    period_start: datetime,
    period_end: datetime,
    cutoff_month: int = DEFAULT_CUTOFF_MONTH,
    cutoff_day: int = DEFAULT_CUTOFF_DAY,
) -> datetime:
    """
    Membership expiry for a paid subscription period.

    A subscription started before the cutoff (Sept 1) of its start year
    pays for the trial remainder plus a full membership year, so it runs
    to the cutoff of the following year. Otherwise the provider's period
    end applies.
    """
    start = ensure_utc(period_start)
    cutoff = datetime(start.year, cutoff_month, cutoff_day, tzinfo=UTC)
    if start < cutoff:
        return datetime(start.year + 1, cutoff_month, cutoff_day, tzinfo=UTC)
    return ensure_utc(period_end)


def _same_instant(a: datetime | None, b: datetime | None) -> bool:
    if a is None or b is None:
        return a is b
    return ensure_utc(a) == ensure_utc(b)


def _with_changed(member: Member, decision: SyncDecision) -> SyncDecision:
    changed = (
        member.status != decision.status
        or not _same_instant(member.membership_expires_at, decision.membership_expires_at)
        or member.subscription_cancel_at_period_end != decision.cancel_at_period_end
        or (decision.clear_subscription and member.stripe_subscription_id is not None)
    )
    return SyncDecision(
        status=decision.status,
        membership_expires_at=decision.membership_expires_at,
        cancel_at_period_end=decision.cancel_at_period_end,
        clear_subscription=decision.clear_subscription,
        provider_status=decision.provider_status,
        changed=changed,
    )


def _stored_expiry_passed(member: Member, now: datetime) -> bool:
    if member.membership_expires_at is None:
        return True
    return ensure_utc(member.membership_expires_at) < ensure_utc(now)


def decide_without_subscription(member: Member, now: datetime) -> SyncDecision | None:
    """Decision for a member with no recurring subscription on record."""
    if member.status == "approved":
        return _with_changed(
            member,
            SyncDecision(
                status="approved",
                membership_expires_at=member.membership_expires_at,
                cancel_at_period_end=member.subscription_cancel_at_period_end,
            ),
        )
    if member.status == "expired":
        return _with_changed(
            member,
            SyncDecision(
                status="expired" if _stored_expiry_passed(member, now) else "approved",
                membership_expires_at=member.membership_expires_at,
                cancel_at_period_end=member.subscription_cancel_at_period_end,
            ),
        )
    return None


def decide_provider_disabled(member: Member) -> SyncDecision:
    """Keep current state when no provider is configured."""
    return _with_changed(
        member,
        SyncDecision(
            status="expired" if member.status == "expired" else "approved",
            membership_expires_at=member.membership_expires_at,
            cancel_at_period_end=member.subscription_cancel_at_period_end,
        ),
    )


def decide_from_snapshot(
    member: Member,
    snapshot: SubscriptionSnapshot,
    now: datetime,
    cutoff_month: int = DEFAULT_CUTOFF_MONTH,
    cutoff_day: int = DEFAULT_CUTOFF_DAY,
) -> SyncDecision:
    """Decision from the provider's view of the subscription."""
    expires_at = expires_at_from_subscription(
        snapshot.current_period_start,
        snapshot.current_period_end,
        cutoff_month,
        cutoff_day,
    )

    status: MemberStatus
    if snapshot.status in ACTIVE_SUBSCRIPTION_STATES:
        status = "approved"
    elif snapshot.status in LAPSING_SUBSCRIPTION_STATES:
        status = "expired" if expires_at < ensure_utc(now) else "approved"
    else:
        status = "expired"

    return _with_changed(
        member,
        SyncDecision(
            status=status,
            membership_expires_at=expires_at,
            cancel_at_period_end=snapshot.cancel_at_period_end,
            provider_status=snapshot.status,
        ),
    )


def decide_subscription_missing(member: Member, now: datetime) -> SyncDecision:
    """Decision when the provider no longer knows the stored subscription."""
    return _with_changed(
        member,
        SyncDecision(
            status="expired" if _stored_expiry_passed(member, now) else "approved",
            membership_expires_at=member.membership_expires_at,
            cancel_at_period_end=False,
            clear_subscription=True,
            provider_status="missing",
        ),
    )


def decide_subscription_sync(
    member: Member,
    snapshot: SubscriptionSnapshot | None,
    now: datetime,
    *,
    subscription_missing: bool = False,
    cutoff_month: int = DEFAULT_CUTOFF_MONTH,
    cutoff_day: int = DEFAULT_CUTOFF_DAY,
) -> SyncDecision | None:
    """
    Sync decision for a member given what the provider reported.

    snapshot is None with subscription_missing False means the member has
    no subscription to check.
    """
    if subscription_missing:
        return decide_subscription_missing(member, now)
    if snapshot is None:
        return decide_without_subscription(member, now)
    return decide_from_snapshot(member, snapshot, now, cutoff_month, cutoff_day)


def apply_sync_decision(member: Member, decision: SyncDecision, now: datetime) -> Member:
    """Return the member with the decision applied."""
    updates: dict[str, object] = {
        "status": decision.status,
        "membership_expires_at": decision.membership_expires_at,
        "subscription_cancel_at_period_end": decision.cancel_at_period_end,
        "updated_at": now,
    }
    if decision.clear_subscription:
        updates["stripe_subscription_id"] = None
    return member.model_copy(update=updates)


def default_payment_expiry(now: datetime, months: int = DEFAULT_PAYMENT_MONTHS) -> datetime:
    """Expiry for a manual payment with no explicit date: now + N months."""
    now = ensure_utc(now)
    target = add_months(now.date(), months)
    return now.replace(year=target.year, month=target.month, day=target.day)


def validate_record_payment(inp: RecordPaymentInput) -> list[ValidationError]:
    """Validate a manual payment request."""
    errors: list[ValidationError] = []
    if inp.payment_method not in MANUAL_PAYMENT_METHODS:
        errors.append(
            ValidationError(
                field="paymentMethod",
                code="invalid_value",
                message='Payment method must be "cash", "paypal", or "wire"',
            )
        )
    return errors


def plan_manual_payment(
    member: Member,
    inp: RecordPaymentInput,
    *,
    fee: float,
    currency: str,
    now: datetime,
    validity_months: int = DEFAULT_PAYMENT_MONTHS,
) -> tuple[Member, Payment]:
    """
    Member update and ledger entry for an offline payment.

    The member becomes approved with the new expiry. A Stripe subscription
    is cleared by default since the member is now paying another way; a
    PayPal subscription id is kept when one is supplied.
    """
    expires_at = (
        ensure_utc(inp.membership_expires_at)
        if inp.membership_expires_at is not None
        else default_payment_expiry(now, validity_months)
    )
    paypal_id = inp.paypal_subscription_id if inp.payment_method == "paypal" else None

    updates: dict[str, object] = {
        "status": "approved",
        "membership_expires_at": expires_at,
        "updated_at": now,
    }
    if paypal_id:
        updates["paypal_subscription_id"] = paypal_id
    if inp.clear_stripe_subscription and member.stripe_subscription_id:
        updates["stripe_subscription_id"] = None
        updates["stripe_customer_id"] = None

    payment = Payment(
        user_id=member.id,
        payment_method=inp.payment_method,  # type: ignore[arg-type]
        amount=fee,
        currency=currency,
        payment_date=now,
        membership_expires_at=expires_at,
        paypal_subscription_id=paypal_id,
        recorded_by=inp.recorded_by,
        notes=inp.notes or None,
        status="completed",
        created_at=now,
    )
    return member.model_copy(update=updates), payment


# --- Component Entry Points ---


def _resolve_now(now: datetime | None, time_port: TimePort | None) -> datetime:
    if now is not None:
        return now
    return time_port.now_utc() if time_port is not None else datetime.now(UTC)


def run_sync_member(
    member_id: UUID,
    *,
    member_repo: MemberRepoPort,
    provider: SubscriptionProviderPort,
    subscription_id: str | None = None,
    now: datetime | None = None,
    time_port: TimePort | None = None,
    cutoff_month: int = DEFAULT_CUTOFF_MONTH,
    cutoff_day: int = DEFAULT_CUTOFF_DAY,
) -> SyncDecision | None:
    """
    Reconcile a member's stored status with their subscription.

    Persists only when the decision changes something.

    Args:
        member_id: Member to sync
        member_repo: Member repository port
        provider: Subscription provider port
        subscription_id: Subscription to check (defaults to the stored id)
        now: Evaluation instant
        time_port: Clock used when now is not given
        cutoff_month: Calendar cutoff month for subscription expiry
        cutoff_day: Calendar cutoff day for subscription expiry

    Returns:
        The decision, or None when there is nothing to decide

    Raises:
        MemberNotFoundError: Unknown member id
    """
    now = _resolve_now(now, time_port)
    member = member_repo.get_by_id(member_id)
    if member is None:
        raise MemberNotFoundError(member_id)

    active_id = subscription_id or member.stripe_subscription_id

    decision: SyncDecision | None
    if active_id and not provider.is_enabled():
        decision = decide_provider_disabled(member)
    else:
        snapshot: SubscriptionSnapshot | None = None
        missing = False
        if active_id:
            try:
                snapshot = provider.get_subscription(active_id)
            except SubscriptionNotFound:
                logger.warning(
                    "Subscription %s for member %s no longer exists at provider",
                    active_id,
                    member.id,
                )
                missing = True
        decision = decide_subscription_sync(
            member,
            snapshot,
            now,
            subscription_missing=missing,
            cutoff_month=cutoff_month,
            cutoff_day=cutoff_day,
        )

    if decision is None or not decision.changed:
        return decision

    if subscription_id and not decision.clear_subscription:
        member = member.model_copy(update={"stripe_subscription_id": subscription_id})
    member_repo.save(apply_sync_decision(member, decision, now))
    logger.info(
        "Synced subscription for member %s: status %s -> %s, expires %s, provider %s",
        member.id,
        member.status,
        decision.status,
        decision.membership_expires_at,
        decision.provider_status,
    )
    return decision


def run_record_payment(
    inp: RecordPaymentInput,
    *,
    member_repo: MemberRepoPort,
    payment_repo: PaymentRepoPort,
    fees: FeePort,
    currency: str = "CAD",
    validity_months: int = DEFAULT_PAYMENT_MONTHS,
    now: datetime | None = None,
    time_port: TimePort | None = None,
) -> RecordPaymentOutput:
    """
    Record an offline (cash/PayPal/wire) payment for a member.

    Args:
        inp: Payment request
        member_repo: Member repository port
        payment_repo: Payment ledger port
        fees: Fee source (charged at the member's level)
        currency: Ledger currency
        validity_months: Default membership length when no expiry given
        now: Evaluation instant
        time_port: Clock used when now is not given

    Returns:
        RecordPaymentOutput with the updated member and payment, or errors

    Raises:
        MemberNotFoundError: Unknown member id
    """
    errors = validate_record_payment(inp)
    if errors:
        return RecordPaymentOutput(errors=errors, success=False)

    now = _resolve_now(now, time_port)
    member = member_repo.get_by_id(inp.member_id)
    if member is None:
        raise MemberNotFoundError(inp.member_id)

    updated, payment = plan_manual_payment(
        member,
        inp,
        fee=fees.get_fee(member.membership_level),
        currency=currency,
        now=now,
        validity_months=validity_months,
    )

    # Ledger row first; a member is never approved without a payment behind it
    saved_payment = payment_repo.save(payment)
    try:
        saved_member = member_repo.save(updated)
    except Exception:
        logger.exception(
            "Payment %s recorded but member %s was not updated", saved_payment.id, member.id
        )
        raise
    approved_now = member.status != "approved" and saved_member.status == "approved"

    logger.info(
        "Recorded %s payment of %.2f %s for member %s (expires %s)",
        payment.payment_method,
        payment.amount,
        payment.currency,
        member.id,
        payment.membership_expires_at.isoformat(),
    )
    if approved_now:
        logger.info("Member %s approved by payment (was %s)", member.id, member.status)

    return RecordPaymentOutput(
        member=saved_member,
        payment=saved_payment,
        status_changed_to_approved=approved_now,
    )
