"""
Customer and distributor notifications.

Every function here is fire-and-report: a failing SMS or email is logged
and never propagates to the request that triggered it.
"""

import logging

from adapters.email.resend_adapter import ResendEmailService, email_service
from adapters.sms.twilio_adapter import TwilioAdapter, get_twilio_adapter
from infrastructure.database.models import Payment, Subscription

logger = logging.getLogger(__name__)


def _rupees(amount: float | None) -> str:
    return f"₹{amount:g}" if amount is not None else "₹0"


async def _sms(sms: TwilioAdapter, phone: str | None, body: str) -> bool:
    if not phone:
        return False
    try:
        await sms.send_sms(phone, body)
        return True
    except Exception as e:
        logger.error(f"Error sending SMS to {phone}: {e}")
        return False


async def notify_payment_received(
    subscription: Subscription,
    payment: Payment,
    sms: TwilioAdapter | None = None,
    email: ResendEmailService | None = None,
) -> None:
    """Tell the customer their payment landed and the distributor about the new drop."""
    sms = sms or get_twilio_adapter()
    email = email or email_service
    customer = subscription.user
    newspaper = subscription.newspaper

    await _sms(
        sms,
        customer.phone,
        f"Your payment of {_rupees(payment.amount)} for {newspaper.name} subscription "
        "has been received. Thank you!",
    )

    try:
        await email.send_payment_confirmation_email(
            to_email=customer.email,
            user_name=customer.name,
            newspaper_name=newspaper.name,
            amount=payment.amount,
            currency=payment.currency,
            end_date=subscription.end_date.date().isoformat(),
        )
    except Exception as e:
        logger.error(f"Error sending payment confirmation email to {customer.email}: {e}")

    distributor = subscription.distributor
    if distributor:
        where = subscription.address or ", ".join(
            part for part in (subscription.street, subscription.city) if part
        )
        await _sms(
            sms,
            distributor.phone,
            f"New subscription for {newspaper.name} at {where}. "
            f"Customer: {customer.name}, Phone: {customer.phone or 'n/a'}",
        )


async def notify_refund_processed(
    subscription: Subscription,
    payment: Payment,
    sms: TwilioAdapter | None = None,
) -> None:
    sms = sms or get_twilio_adapter()
    await _sms(
        sms,
        subscription.user.phone,
        f"A refund of {_rupees(payment.refund_amount)} for your "
        f"{subscription.newspaper.name} subscription has been processed. "
        f"Refund ID: {payment.refund_id}",
    )
