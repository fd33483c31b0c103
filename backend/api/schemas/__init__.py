"""
API request and response schemas.
"""

from .auth import (
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    UpdatePasswordRequest,
)
from .common import CamelModel, GeoPoint, success
from .newspaper import NewspaperCreate, NewspaperResponse, NewspaperStats, NewspaperUpdate
from .payment import (
    CreateOrderRequest,
    PaymentListItem,
    PaymentResponse,
    RefundRequest,
    VerifyPaymentRequest,
)
from .subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionStat,
    SubscriptionUpdate,
)
from .user import AdminUserCreate, AdminUserUpdate, UpdateMeRequest, UserResponse, UserSummary

__all__ = [
    "CamelModel",
    "GeoPoint",
    "success",
    "SignupRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UpdatePasswordRequest",
    "UserResponse",
    "UserSummary",
    "UpdateMeRequest",
    "AdminUserCreate",
    "AdminUserUpdate",
    "NewspaperCreate",
    "NewspaperUpdate",
    "NewspaperResponse",
    "NewspaperStats",
    "SubscriptionCreate",
    "SubscriptionUpdate",
    "SubscriptionResponse",
    "SubscriptionStat",
    "CreateOrderRequest",
    "VerifyPaymentRequest",
    "RefundRequest",
    "PaymentResponse",
    "PaymentListItem",
]
