"""
Payment request and response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .common import CamelModel
from .user import UserSummary


class CreateOrderRequest(CamelModel):
    subscription_id: str


class VerifyPaymentRequest(BaseModel):
    """Checkout callback payload; field names are the gateway's own."""

    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class RefundRequest(CamelModel):
    payment_id: str
    amount: Optional[float] = Field(default=None, gt=0)
    reason: Optional[str] = Field(default=None, max_length=500)


class RefundResponse(CamelModel):
    id: str
    amount: Optional[float] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    speed: Optional[str] = None
    receipt: Optional[str] = None
    reason: Optional[str] = None
    processed_at: Optional[datetime] = None


class PaymentResponse(CamelModel):
    id: str
    subscription_id: str
    payment_id: str
    order_id: str
    amount: float
    currency: str
    status: str
    payment_method: Optional[str] = None
    paid_at: datetime
    refund: Optional[RefundResponse] = None


class NewspaperRef(CamelModel):
    id: str
    name: str


class PaymentListItem(CamelModel):
    """Admin payments ledger row."""

    id: str
    payment_id: str
    amount: float
    currency: str
    status: str
    subscription_id: str
    user: UserSummary
    newspaper: Optional[NewspaperRef] = None
    paid_at: datetime
