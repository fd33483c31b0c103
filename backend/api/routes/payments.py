"""
Payment routes: Razorpay checkout, verification and refunds.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.payments.razorpay_adapter import RazorpayAdapter, get_razorpay_adapter
from api.dependencies import AdminUser, CurrentUser
from api.schemas.common import success
from api.schemas.payment import (
    CreateOrderRequest,
    NewspaperRef,
    PaymentListItem,
    PaymentResponse,
    RefundRequest,
    VerifyPaymentRequest,
)
from api.schemas.subscription import SubscriptionResponse
from api.schemas.user import UserSummary
from infrastructure.database.connection import get_db
from infrastructure.database.models import Payment
from services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    gateway: RazorpayAdapter = Depends(get_razorpay_adapter),
) -> PaymentService:
    return PaymentService(db, gateway)


Payments = Annotated[PaymentService, Depends(get_payment_service)]


def _ledger_row(payment: Payment) -> PaymentListItem:
    newspaper = payment.subscription.newspaper if payment.subscription else None
    return PaymentListItem(
        id=payment.id,
        payment_id=payment.payment_id,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        subscription_id=payment.subscription_id,
        user=UserSummary.model_validate(payment.user),
        newspaper=NewspaperRef(id=newspaper.id, name=newspaper.name) if newspaper else None,
        paid_at=payment.paid_at,
    )


@router.post("/create-order")
async def create_order(
    body: CreateOrderRequest,
    current_user: CurrentUser,
    payments: Payments,
) -> dict:
    """
    Create a gateway order for a subscription's plan price.

    Returns the order and the public key the checkout widget needs.
    """
    result = await payments.create_order(body.subscription_id, current_user)
    return success(**result)


@router.post("/verify")
async def verify_payment(
    body: VerifyPaymentRequest,
    current_user: CurrentUser,
    payments: Payments,
) -> dict:
    """
    Verify the checkout signature and activate the subscription.
    """
    subscription = await payments.verify_payment(
        order_id=body.razorpay_order_id,
        payment_id=body.razorpay_payment_id,
        signature=body.razorpay_signature,
    )
    return success(subscription=SubscriptionResponse.model_validate(subscription))


@router.post("/refund")
async def refund_payment(
    body: RefundRequest,
    admin: AdminUser,
    payments: Payments,
) -> dict:
    payment = await payments.refund(
        body.payment_id, admin, amount=body.amount, reason=body.reason
    )
    return success(
        refund=PaymentResponse.model_validate(payment).refund,
        payment=PaymentResponse.model_validate(payment),
    )


@router.get("")
async def list_payments(admin: AdminUser, payments: Payments) -> dict:
    rows = [_ledger_row(p) for p in await payments.list_payments()]
    return success(results=len(rows), payments=rows)


@router.get("/{subscription_id}")
async def get_payment_details(
    subscription_id: str,
    current_user: CurrentUser,
    payments: Payments,
) -> dict:
    """Payment recorded for a subscription, or ``null`` before checkout."""
    payment = await payments.get_payment_for_subscription(subscription_id, current_user)
    return success(payment=PaymentResponse.model_validate(payment) if payment else None)
