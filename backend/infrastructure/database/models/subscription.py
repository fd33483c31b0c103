"""
Delivery subscription model.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .newspaper import Newspaper
    from .payment import Payment
    from .user import User


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle states."""

    PENDING_PAYMENT = "pending_payment"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class SubscriptionType(str, Enum):
    """Billing plans; each maps to a calendar interval."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Subscription(Base, TimestampMixin):
    """A customer's delivery order for one newspaper."""

    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    newspaper_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("newspapers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    distributor_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    subscription_type: Mapped[str] = mapped_column(
        String(20),
        default=SubscriptionType.MONTHLY.value,
        nullable=False,
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Stored so aggregate statistics stay a plain SQL AVG/MIN/MAX
    duration_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    status: Mapped[str] = mapped_column(
        String(50),
        default=SubscriptionStatus.PENDING_PAYMENT.value,
        nullable=False,
        index=True,
    )

    # Delivery address
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pincode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    delivery_time: Mapped[str] = mapped_column(String(50), nullable=False)

    payment_order_id: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships (eager-loaded; async sessions cannot lazy-load)
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id], lazy="selectin")
    newspaper: Mapped["Newspaper"] = relationship("Newspaper", lazy="selectin")
    distributor: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[distributor_id], lazy="selectin"
    )
    payment: Mapped[Optional["Payment"]] = relationship(
        "Payment",
        back_populates="subscription",
        uselist=False,
        lazy="selectin",
        # Payment history outlives its subscription; the database refuses the delete
        cascade="save-update, merge",
        passive_deletes="all",
    )

    __table_args__ = (
        Index("ix_subscriptions_user_status", "user_id", "status"),
        Index("ix_subscriptions_distributor_status", "distributor_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, status={self.status})>"

    @property
    def delivery_address(self) -> dict:
        """Delivery address in the nested shape clients send."""
        location = None
        if self.latitude is not None and self.longitude is not None:
            location = {
                "type": "Point",
                "coordinates": [self.longitude, self.latitude],
                "address": self.address,
            }
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
            "location": location,
        }
