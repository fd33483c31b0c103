"""
Payment service for subscription checkout and refunds.

Sits between the payment routes and the Razorpay adapter: it prices the
subscription, records the gateway outcome and moves the subscription
through its lifecycle.
"""

import logging
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.payments.razorpay_adapter import (
    RazorpayAdapter,
    RazorpayAPIError,
    RazorpayNotConfiguredError,
    from_minor_units,
    to_minor_units,
)
from core.exceptions import BadRequest, Forbidden, NotFound, PaymentGatewayError
from infrastructure.database.models import (
    Payment,
    PaymentStatus,
    Subscription,
    SubscriptionStatus,
    User,
)
from infrastructure.database.models.base import utcnow
from services import notifications

logger = logging.getLogger(__name__)

DEFAULT_REFUND_REASON = "Customer request"

# A closed subscription is never reopened by a payment
_CLOSED_STATUSES = (SubscriptionStatus.EXPIRED.value, SubscriptionStatus.CANCELLED.value)


class PaymentService:
    """
    Checkout and refund workflow.

    Args:
        db: Async database session
        gateway: Razorpay adapter
    """

    def __init__(self, db: AsyncSession, gateway: RazorpayAdapter):
        self.db = db
        self.gateway = gateway

    async def create_order(self, subscription_id: str, user: User) -> dict:
        """
        Create a gateway order for the subscription's plan price.

        Returns:
            ``{"order": ..., "key": ...}`` for the checkout client

        Raises:
            NotFound: Unknown subscription
            Forbidden: A customer paying for someone else's subscription
            BadRequest: Subscription already active, expired or cancelled
            PaymentGatewayError: The gateway rejected the order
        """
        subscription = await self.db.get(Subscription, subscription_id)
        if not subscription:
            raise NotFound("No subscription found with that ID")

        if user.is_customer and subscription.user_id != user.id:
            raise Forbidden("You do not have permission to pay for this subscription")

        if subscription.status == SubscriptionStatus.ACTIVE.value:
            raise BadRequest("This subscription is already active")
        if subscription.status in _CLOSED_STATUSES:
            raise BadRequest(f"This subscription is {subscription.status} and cannot be paid for")

        price = subscription.newspaper.price_for(subscription.subscription_type)
        receipt = f"sub_{subscription.id}_{int(time.time() * 1000)}"

        try:
            order = await self.gateway.create_order(
                amount=to_minor_units(price),
                receipt=receipt,
                notes={"subscriptionId": subscription.id, "userId": user.id},
            )
        except RazorpayAPIError as e:
            logger.error(f"Order creation failed for subscription {subscription.id}: {e}")
            raise PaymentGatewayError("Error creating payment order", e.status_code)

        subscription.payment_order_id = order.id
        await self.db.commit()

        logger.info(f"Order {order.id} created for subscription {subscription.id}")
        return {"order": order.to_dict(), "key": self.gateway.public_key}

    async def verify_payment(
        self, order_id: str, payment_id: str, signature: str
    ) -> Subscription:
        """
        Verify the checkout signature and activate the subscription.

        Repeating the verification of an already captured payment returns
        the subscription unchanged.

        Raises:
            NotFound: No subscription carries ``order_id``
            BadRequest: Signature mismatch, a refunded payment, a closed
                subscription, or a second payment for a paid subscription;
                the subscription is left untouched
        """
        result = await self.db.execute(
            select(Subscription).where(Subscription.payment_order_id == order_id)
        )
        subscription = result.scalar_one_or_none()
        if not subscription:
            raise NotFound("No subscription found for this payment")

        if not self.gateway.verify_payment_signature(order_id, payment_id, signature):
            raise BadRequest("Invalid payment signature")

        payment = subscription.payment
        if payment is not None and payment.status == PaymentStatus.REFUNDED.value:
            raise BadRequest("This payment has been refunded")
        if subscription.status in _CLOSED_STATUSES:
            raise BadRequest(f"This subscription is {subscription.status} and cannot be paid for")
        if payment is not None and payment.status == PaymentStatus.CAPTURED.value:
            if payment.payment_id == payment_id:
                logger.info(f"Payment {payment_id} already captured; nothing to do")
                return subscription
            raise BadRequest("This subscription has already been paid for")

        amount = subscription.newspaper.price_for(subscription.subscription_type)
        if payment is None:
            payment = Payment(subscription_id=subscription.id, user_id=subscription.user_id)
            self.db.add(payment)
        payment.payment_id = payment_id
        payment.order_id = order_id
        payment.signature = signature
        payment.amount = amount
        payment.currency = self.gateway.currency
        payment.status = PaymentStatus.CAPTURED.value
        payment.paid_at = utcnow()

        subscription.status = SubscriptionStatus.ACTIVE.value
        await self.db.commit()
        await self.db.refresh(subscription)

        logger.info(f"Payment {payment_id} captured for subscription {subscription.id}")

        await notifications.notify_payment_received(subscription, payment)
        return subscription

    async def get_payment_for_subscription(self, subscription_id: str, user: User) -> Payment | None:
        subscription = await self.db.get(Subscription, subscription_id)
        if not subscription:
            raise NotFound("No subscription found with that ID")
        if user.is_customer and subscription.user_id != user.id:
            raise Forbidden("You do not have permission to view these payment details")
        return subscription.payment

    async def list_payments(self) -> list[Payment]:
        result = await self.db.execute(select(Payment).order_by(Payment.paid_at.desc()))
        return list(result.scalars().all())

    async def refund(
        self,
        payment_id: str,
        admin: User,
        amount: float | None = None,
        reason: str | None = None,
    ) -> Payment:
        """
        Refund a captured payment through the gateway.

        Raises:
            NotFound: Unknown payment id
            PaymentGatewayError: Gateway unconfigured or refund rejected
        """
        result = await self.db.execute(select(Payment).where(Payment.payment_id == payment_id))
        payment = result.scalar_one_or_none()
        if not payment:
            raise NotFound("No payment found with that ID")

        reason = reason or DEFAULT_REFUND_REASON
        refund_amount = amount if amount is not None else payment.amount

        try:
            refund = await self.gateway.refund_payment(
                payment_id,
                amount=to_minor_units(refund_amount),
                notes={"reason": reason, "initiatedBy": admin.id},
            )
        except RazorpayNotConfiguredError as e:
            raise PaymentGatewayError(str(e), 500)
        except RazorpayAPIError as e:
            raise PaymentGatewayError(e.message or "Error processing refund", e.status_code)

        payment.refund_id = refund.id
        payment.refund_amount = from_minor_units(refund.amount)
        payment.refund_currency = refund.currency
        payment.refund_status = refund.status
        payment.refund_speed = refund.speed_processed
        payment.refund_receipt = refund.receipt
        payment.refund_reason = reason
        payment.refunded_at = utcnow()
        payment.status = PaymentStatus.REFUNDED.value

        subscription = payment.subscription
        subscription.status = SubscriptionStatus.CANCELLED.value
        await self.db.commit()
        await self.db.refresh(payment)

        logger.info(f"Refund {refund.id} recorded for payment {payment_id} by admin {admin.id}")

        await notifications.notify_refund_processed(subscription, payment)
        return payment
