"""
Newspaper catalogue model.
"""

import math
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, CheckConstraint, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, validates

from .base import Base, TimestampMixin


class NewspaperCategory(str, Enum):
    """Categories a newspaper can be tagged with."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    BUSINESS = "business"
    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    TECHNOLOGY = "technology"
    POLITICS = "politics"


RATING_MIN = 1.0
RATING_MAX = 5.0
DEFAULT_RATING = 4.5


class Newspaper(Base, TimestampMixin):
    """A newspaper available for home delivery, with three pricing tiers."""

    __tablename__ = "newspapers"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    publisher: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    languages: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    categories: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Pricing tiers (major currency units)
    price_monthly: Mapped[float] = mapped_column(Float, nullable=False)
    price_quarterly: Mapped[float] = mapped_column(Float, nullable=False)
    price_yearly: Mapped[float] = mapped_column(Float, nullable=False)

    cover_image: Mapped[str] = mapped_column(String(500), nullable=False)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    ratings_average: Mapped[float] = mapped_column(
        Float, default=DEFAULT_RATING, nullable=False
    )
    ratings_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        CheckConstraint(
            f"ratings_average >= {RATING_MIN} AND ratings_average <= {RATING_MAX}",
            name="ck_newspapers_rating_bounds",
        ),
        CheckConstraint(
            "price_monthly >= 0 AND price_quarterly >= 0 AND price_yearly >= 0",
            name="ck_newspapers_price_non_negative",
        ),
        Index("ix_newspapers_price_rating", "price_monthly", "ratings_average"),
    )

    def __repr__(self) -> str:
        return f"<Newspaper(id={self.id}, name={self.name})>"

    @validates("name")
    def _strip_name(self, key: str, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @validates("ratings_average")
    def _round_rating(self, key: str, value: Optional[float]) -> Optional[float]:
        # 4.6666 -> 4.7
        if value is None:
            return value
        return math.floor(float(value) * 10 + 0.5) / 10

    def price_for(self, plan: str) -> float:
        """Price of the given subscription plan; unknown plans bill monthly."""
        return {
            "monthly": self.price_monthly,
            "quarterly": self.price_quarterly,
            "yearly": self.price_yearly,
        }.get(plan, self.price_monthly)
