"""
Billing component - Subscription sync and manual payment recording.
"""

from ._impl import BillingService
from .component import (
    apply_sync_decision,
    decide_from_snapshot,
    decide_provider_disabled,
    decide_subscription_missing,
    decide_subscription_sync,
    decide_without_subscription,
    default_payment_expiry,
    expires_at_from_subscription,
    plan_manual_payment,
    run_record_payment,
    run_sync_member,
    validate_record_payment,
)
from .models import (
    ACTIVE_SUBSCRIPTION_STATES,
    LAPSING_SUBSCRIPTION_STATES,
    MANUAL_PAYMENT_METHODS,
    ManualPaymentMethod,
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

__all__ = [
    # Service
    "BillingService",
    # Component entry points
    "run_record_payment",
    "run_sync_member",
    # Pure functions
    "apply_sync_decision",
    "decide_from_snapshot",
    "decide_provider_disabled",
    "decide_subscription_missing",
    "decide_subscription_sync",
    "decide_without_subscription",
    "default_payment_expiry",
    "expires_at_from_subscription",
    "plan_manual_payment",
    "validate_record_payment",
    # Models
    "ManualPaymentMethod",
    "RecordPaymentInput",
    "RecordPaymentOutput",
    "SubscriptionSnapshot",
    "SyncDecision",
    # Errors
    "SubscriptionNotFound",
    # Constants
    "ACTIVE_SUBSCRIPTION_STATES",
    "LAPSING_SUBSCRIPTION_STATES",
    "MANUAL_PAYMENT_METHODS",
    # Ports
    "FeePort",
    "MemberRepoPort",
    "PaymentRepoPort",
    "SubscriptionProviderPort",
    "TimePort",
]
