"""
Newspaper catalogue schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, computed_field

from infrastructure.database.models.newspaper import (
    DEFAULT_RATING,
    RATING_MAX,
    RATING_MIN,
    NewspaperCategory,
)

from .common import CamelModel


class NewspaperCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    publisher: str = Field(..., min_length=1, max_length=255)
    languages: list[str] = Field(..., min_length=1)
    categories: list[NewspaperCategory] = Field(..., min_length=1)
    price_monthly: float = Field(..., ge=0)
    price_quarterly: float = Field(..., ge=0)
    price_yearly: float = Field(..., ge=0)
    cover_image: str = Field(..., min_length=1, max_length=500)
    images: list[str] = Field(default_factory=list)
    is_active: bool = True
    ratings_average: float = Field(default=DEFAULT_RATING, ge=RATING_MIN, le=RATING_MAX)
    ratings_quantity: int = Field(default=0, ge=0)


class NewspaperUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    publisher: Optional[str] = Field(default=None, min_length=1, max_length=255)
    languages: Optional[list[str]] = Field(default=None, min_length=1)
    categories: Optional[list[NewspaperCategory]] = Field(default=None, min_length=1)
    price_monthly: Optional[float] = Field(default=None, ge=0)
    price_quarterly: Optional[float] = Field(default=None, ge=0)
    price_yearly: Optional[float] = Field(default=None, ge=0)
    cover_image: Optional[str] = Field(default=None, min_length=1, max_length=500)
    images: Optional[list[str]] = None
    is_active: Optional[bool] = None
    ratings_average: Optional[float] = Field(default=None, ge=RATING_MIN, le=RATING_MAX)
    ratings_quantity: Optional[int] = Field(default=None, ge=0)


class NewspaperSummary(CamelModel):
    """Compact newspaper embedded in subscriptions and payments."""

    id: str
    name: str
    price_monthly: float
    price_quarterly: float
    price_yearly: float


class NewspaperResponse(CamelModel):
    id: str
    name: str
    description: str
    publisher: str
    languages: list[str]
    categories: list[str]
    price_monthly: float
    price_quarterly: float
    price_yearly: float
    cover_image: str
    images: list[str]
    is_active: bool
    ratings_average: float
    ratings_quantity: int
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def price(self) -> dict[str, float]:
        return {
            "monthly": self.price_monthly,
            "quarterly": self.price_quarterly,
            "yearly": self.price_yearly,
        }


class NewspaperStats(CamelModel):
    num_newspapers: int
    avg_rating: Optional[float] = None
    avg_monthly_price: Optional[float] = None
    min_monthly_price: Optional[float] = None
    max_monthly_price: Optional[float] = None
