"""
Authentication request schemas.
"""

from typing import Literal, Optional

from pydantic import EmailStr, Field, model_validator

from .common import CamelModel, GeoPoint


class _PasswordPair(CamelModel):
    password: str = Field(..., min_length=8, max_length=100)
    password_confirm: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Passwords are not the same")
        return self


class SignupRequest(_PasswordPair):
    """Self-service signup. Admin accounts are created by admins only."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=32)
    role: Literal["customer", "distributor"] = "customer"
    location: Optional[GeoPoint] = None

    @model_validator(mode="after")
    def distributor_needs_location(self):
        if self.role == "distributor" and self.location is None:
            raise ValueError("Distributors must provide a location")
        return self


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(_PasswordPair):
    pass


class UpdatePasswordRequest(_PasswordPair):
    password_current: str = Field(..., min_length=1)
