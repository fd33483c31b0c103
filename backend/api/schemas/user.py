"""
User profile schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, EmailStr, Field, computed_field

from infrastructure.database.models.user import UserRole

from .common import CamelModel, GeoPoint, point_or_none

_PASSWORD_KEYS = ("password", "passwordConfirm", "password_confirm")


class UserSummary(CamelModel):
    """Contact details embedded in subscriptions and payments."""

    id: str
    name: str
    email: str
    phone: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    photo: Optional[str] = None
    role: str
    active: bool
    created_at: datetime
    last_login: Optional[datetime] = None

    latitude: Optional[float] = Field(default=None, exclude=True)
    longitude: Optional[float] = Field(default=None, exclude=True)
    address: Optional[str] = Field(default=None, exclude=True)

    @computed_field
    @property
    def location(self) -> Optional[dict]:
        return point_or_none(self.latitude, self.longitude, self.address)


class UpdateMeRequest(CamelModel):
    """Profile update. Unknown keys are kept so password fields can be rejected."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=32)
    photo: Optional[str] = Field(default=None, max_length=500)
    location: Optional[GeoPoint] = None

    @property
    def touches_password(self) -> bool:
        return any(key in (self.model_extra or {}) for key in _PASSWORD_KEYS)


class AdminUserCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=32)
    role: UserRole = UserRole.CUSTOMER
    active: bool = True
    location: Optional[GeoPoint] = None


class AdminUserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=32)
    photo: Optional[str] = Field(default=None, max_length=500)
    role: Optional[UserRole] = None
    active: Optional[bool] = None
    location: Optional[GeoPoint] = None
