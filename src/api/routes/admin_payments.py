"""
Admin payments API.

POST /record-payment records an offline (cash, PayPal or wire) payment,
approves the member and extends their membership. Admin only.
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from src.api.deps import get_billing_service, require_admin
from src.components.billing import BillingService, RecordPaymentInput
from src.components.membership import MemberNotFoundError
from src.domain.entities import Member

logger = logging.getLogger(__name__)

router = APIRouter()


class RecordPaymentRequest(BaseModel):
    user_id: str | None = None
    payment_method: str | None = None
    membership_expires_at: datetime | None = None
    notes: str | None = None
    clear_stripe_subscription: bool = True
    paypal_subscription_id: str | None = None


class PaymentDetails(BaseModel):
    method: str
    amount: float
    currency: str
    expires_at: str
    notes: str | None


class RecordPaymentResponse(BaseModel):
    message: str
    member_id: str
    status: str
    membership_expires_at: str
    payment_id: str
    status_changed_to_approved: bool
    payment_details: PaymentDetails


@router.post("/record-payment", response_model=RecordPaymentResponse)
def record_payment(
    request: RecordPaymentRequest,
    admin: Member = Depends(require_admin),
    service: BillingService = Depends(get_billing_service),
) -> RecordPaymentResponse:
    if not request.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User ID is required",
        )
    try:
        member_id = UUID(request.user_id)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found",
        ) from err

    inp = RecordPaymentInput(
        member_id=member_id,
        payment_method=request.payment_method or "",
        membership_expires_at=request.membership_expires_at,
        notes=request.notes,
        clear_stripe_subscription=request.clear_stripe_subscription,
        paypal_subscription_id=request.paypal_subscription_id,
        recorded_by=admin.id,
    )

    try:
        out = service.record_payment(inp)
    except MemberNotFoundError as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found",
        ) from err

    if not out.success or out.member is None or out.payment is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=out.errors[0].message if out.errors else "Invalid payment",
        )

    payment = out.payment
    logger.info("Admin %s recorded payment %s for member %s", admin.id, payment.id, member_id)
    return RecordPaymentResponse(
        message="Payment recorded successfully",
        member_id=str(out.member.id),
        status=out.member.status,
        membership_expires_at=payment.membership_expires_at.isoformat(),
        payment_id=str(payment.id),
        status_changed_to_approved=out.status_changed_to_approved,
        payment_details=PaymentDetails(
            method=payment.payment_method,
            amount=payment.amount,
            currency=payment.currency,
            expires_at=payment.membership_expires_at.isoformat(),
            notes=payment.notes,
        ),
    )
