"""
SQLAlchemy database models.
"""

from .base import Base, TimestampMixin
from .newspaper import Newspaper, NewspaperCategory
from .payment import Payment, PaymentMethod, PaymentStatus
from .subscription import Subscription, SubscriptionStatus, SubscriptionType
from .user import User, UserRole

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "UserRole",
    "Newspaper",
    "NewspaperCategory",
    "Subscription",
    "SubscriptionStatus",
    "SubscriptionType",
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
]
