"""
Subscription request and response schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from infrastructure.database.models.subscription import SubscriptionStatus, SubscriptionType

from .common import CamelModel, GeoPoint
from .newspaper import NewspaperSummary
from .user import UserSummary


class DeliveryAddress(CamelModel):
    street: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    pincode: Optional[str] = Field(default=None, max_length=20)
    location: GeoPoint

    def to_columns(self) -> dict[str, Any]:
        columns = self.model_dump(include={"street", "city", "state", "pincode"})
        columns.update(self.location.to_columns())
        return columns


class DeliveryAddressUpdate(DeliveryAddress):
    location: Optional[GeoPoint] = None

    def to_columns(self) -> dict[str, Any]:
        columns = self.model_dump(
            include={"street", "city", "state", "pincode"}, exclude_unset=True
        )
        if self.location is not None:
            columns.update(self.location.to_columns())
        return columns


class SubscriptionCreate(CamelModel):
    newspaper_id: str
    subscription_type: SubscriptionType = SubscriptionType.MONTHLY
    delivery_address: DeliveryAddress
    delivery_time: str = Field(..., min_length=1, max_length=50)


class SubscriptionUpdate(CamelModel):
    """Only these fields may change after creation; anything else is ignored."""

    delivery_address: Optional[DeliveryAddressUpdate] = None
    delivery_time: Optional[str] = Field(default=None, min_length=1, max_length=50)
    status: Optional[SubscriptionStatus] = None


class DeliveryAddressOut(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    location: Optional[GeoPoint] = None


class SubscriptionResponse(CamelModel):
    id: str
    user: UserSummary
    newspaper: NewspaperSummary
    distributor: Optional[UserSummary] = None
    subscription_type: str
    start_date: datetime
    end_date: datetime
    status: str
    delivery_address: DeliveryAddressOut
    delivery_time: str
    payment_order_id: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class SubscriptionStat(CamelModel):
    newspaper: str
    n_subscriptions: int
    avg_duration: Optional[float] = None  # days
    min_duration: Optional[int] = None
    max_duration: Optional[int] = None
