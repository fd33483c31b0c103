"""
Service layer for business logic.
"""

from .payment_service import PaymentService
from .subscription_service import (
    SubscriptionService,
    ensure_can_view,
    expire_lapsed_subscriptions,
)

__all__ = [
    "PaymentService",
    "SubscriptionService",
    "ensure_can_view",
    "expire_lapsed_subscriptions",
]
