"""
Payment database model.

One row per captured gateway payment. Refund details, when a refund is
issued, are stored on the same row.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .subscription import Subscription
    from .user import User


class PaymentStatus(str, Enum):
    """Gateway payment states."""

    PENDING = "pending"
    CAPTURED = "captured"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CARD = "card"
    NETBANKING = "netbanking"
    UPI = "upi"
    WALLET = "wallet"


class Payment(Base, TimestampMixin):
    """Captured gateway payment for a subscription."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    subscription_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("subscriptions.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Gateway identifiers
    payment_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    order_id: Mapped[str] = mapped_column(String(255), nullable=False)
    signature: Mapped[str] = mapped_column(String(255), nullable=False)

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="INR", nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.PENDING.value,
        nullable=False,
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    paid_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Refund record
    refund_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    refund_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    refund_currency: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    refund_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    refund_speed: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    refund_receipt: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    refund_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    subscription: Mapped["Subscription"] = relationship(
        "Subscription", back_populates="payment", lazy="selectin"
    )
    user: Mapped["User"] = relationship("User", lazy="selectin")

    __table_args__ = (
        Index("ix_payments_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, payment_id={self.payment_id}, status={self.status})>"

    @property
    def refund(self) -> Optional[dict]:
        if not self.refund_id:
            return None
        return {
            "id": self.refund_id,
            "amount": self.refund_amount,
            "currency": self.refund_currency,
            "status": self.refund_status,
            "speed": self.refund_speed,
            "receipt": self.refund_receipt,
            "reason": self.refund_reason,
            "processed_at": self.refunded_at,
        }
