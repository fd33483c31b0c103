"""
Authentication API routes.

Mounted under ``/users`` next to the profile routes, so clients keep a
single user resource for signup, login and password recovery.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.email.resend_adapter import email_service
from api.middleware.rate_limit import get_rate_limit, limiter
from api.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from api.schemas.user import UserResponse
from core.exceptions import BadRequest, Forbidden, Unauthorized
from core.security.password import password_hasher
from core.security.tokens import TokenService
from infrastructure.config.settings import settings
from infrastructure.database.connection import get_db
from infrastructure.database.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Authentication"])

AUTH_COOKIE = "jwt"

token_service = TokenService(
    secret_key=settings.jwt_secret_key,
    algorithm=settings.jwt_algorithm,
    access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
    password_reset_expire_minutes=settings.password_reset_expire_minutes,
)


def _cookie_kwargs() -> dict:
    return dict(
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )


def issue_token_response(user: User, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Issue an access token as both the JSON body and an HttpOnly cookie."""
    token = token_service.create_access_token(user.id, role=user.role)
    body = {
        "status": "success",
        "token": token,
        "data": {"user": UserResponse.model_validate(user)},
    }
    response = JSONResponse(content=jsonable_encoder(body), status_code=status_code)
    response.set_cookie(
        AUTH_COOKIE, token, max_age=token_service.access_token_max_age, **_cookie_kwargs()
    )
    return response


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to get the current authenticated user.

    Reads a Bearer token from the Authorization header, falling back to the
    HttpOnly ``jwt`` cookie.
    """
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip() or None

    if not token:
        token = request.cookies.get(AUTH_COOKIE)

    if not token:
        raise Unauthorized("You are not logged in! Please log in to get access.")

    payload = token_service.verify_access_token(token)
    if not payload:
        raise Unauthorized("Invalid or expired token. Please log in again.")

    result = await db.execute(select(User).where(User.id == payload.sub))
    user = result.scalar_one_or_none()

    if not user:
        raise Unauthorized("The user belonging to this token no longer exists.")

    if not user.is_active:
        raise Unauthorized("This account has been deactivated.")

    if payload.issued_before(user.password_changed_at):
        raise Unauthorized("User recently changed password! Please log in again.")

    return user


@router.post("/signup", status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("signup"))
async def signup(
    request: Request,
    body: SignupRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Register a customer or distributor account.
    """
    email = body.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise BadRequest("An account with this email already exists")

    user = User(
        name=body.name,
        email=email,
        phone=body.phone,
        password_hash=password_hasher.hash(body.password),
        role=body.role,
    )
    if body.location:
        for key, value in body.location.to_columns().items():
            setattr(user, key, value)

    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"New {user.role} account {user.id}")

    try:
        await email_service.send_welcome_email(to_email=user.email, user_name=user.name)
    except Exception as email_err:
        logger.error(f"Failed to send welcome email to {user.email}: {email_err}")

    return issue_token_response(user, status.HTTP_201_CREATED)


@router.post("/login")
@limiter.limit(get_rate_limit("login"))
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Authenticate with email and password.
    """
    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    # Always run bcrypt so response timing does not reveal unknown emails
    password_ok = password_hasher.verify(body.password, user.password_hash if user else None)
    if not user or not password_ok:
        raise Unauthorized("Incorrect email or password")

    if not user.is_active:
        raise Forbidden("This account has been deactivated")

    user.last_login = datetime.now(timezone.utc)
    user.login_count += 1
    await db.commit()
    await db.refresh(user)

    return issue_token_response(user)


@router.get("/logout")
async def logout() -> JSONResponse:
    """Clear the auth cookie. Bearer tokens are discarded client-side."""
    response = JSONResponse(content={"status": "success"})
    response.delete_cookie(AUTH_COOKIE, **_cookie_kwargs())
    return response


@router.post("/forgotPassword")
@limiter.limit(get_rate_limit("forgot_password"))
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Email a password reset link.

    The response is identical whether or not the account exists.
    """
    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if user and user.is_active:
        reset_token = token_service.create_password_reset_token(user.id, user.password_hash)
        try:
            await email_service.send_password_reset_email(
                to_email=user.email,
                user_name=user.name,
                reset_token=reset_token,
            )
        except Exception as email_err:
            logger.error(f"Failed to send password reset email to {user.email}: {email_err}")

    return {
        "status": "success",
        "message": "If that email is registered, a reset link has been sent",
    }


@router.patch("/resetPassword/{token}")
async def reset_password(
    token: str,
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Set a new password from an emailed reset token and log the user in.
    """
    user_id = token_service.password_reset_subject(token)
    user = await db.get(User, user_id) if user_id else None

    if (
        not user
        or not user.is_active
        or not token_service.verify_password_reset_token(token, user.password_hash)
    ):
        raise BadRequest("Token is invalid or has expired")

    user.password_hash = password_hasher.hash(body.password)
    user.password_changed_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    logger.info(f"Password reset for user {user.id}")
    return issue_token_response(user)

