"""
User profile and admin user management routes.
"""

import logging
from datetime import datetime, timezone
from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import AdminUser, CurrentUser, DistributorUser
from api.routes.auth import issue_token_response
from api.schemas.auth import UpdatePasswordRequest
from api.schemas.common import success
from api.schemas.subscription import SubscriptionResponse
from api.schemas.user import AdminUserCreate, AdminUserUpdate, UpdateMeRequest, UserResponse
from api.utils import escape_like
from core.exceptions import BadRequest, NotFound, Unauthorized
from core.security.password import password_hasher
from infrastructure.database.connection import get_db
from infrastructure.database.models import Payment, Subscription, User, UserRole
from services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: str | None = None) -> None:
    query = select(User.id).where(User.email == email)
    if exclude_id:
        query = query.where(User.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise BadRequest("An account with this email already exists")


# ============================================================================
# Current user
# ============================================================================


@router.get("/me")
async def get_me(current_user: CurrentUser) -> dict:
    return success(user=UserResponse.model_validate(current_user))


@router.patch("/updateMyPassword")
async def update_my_password(
    body: UpdatePasswordRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """
    Change password after confirming the current one; returns a fresh token.
    """
    if not password_hasher.verify(body.password_current, current_user.password_hash):
        raise Unauthorized("Your current password is wrong")

    current_user.password_hash = password_hasher.hash(body.password)
    current_user.password_changed_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(current_user)

    logger.info(f"User {current_user.id} changed password")
    return issue_token_response(current_user)


@router.patch("/updateMe")
async def update_me(
    body: UpdateMeRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Update profile fields. Passwords go through ``/updateMyPassword``.
    """
    if body.touches_password:
        raise BadRequest("This route is not for password updates. Please use /updateMyPassword.")

    if body.email is not None:
        email = body.email.lower()
        await _ensure_email_free(db, email, exclude_id=current_user.id)
        current_user.email = email
    for field in ("name", "phone", "photo"):
        value = getattr(body, field)
        if value is not None:
            setattr(current_user, field, value)
    if body.location is not None:
        for key, value in body.location.to_columns().items():
            setattr(current_user, key, value)

    await db.commit()
    await db.refresh(current_user)
    return success(user=UserResponse.model_validate(current_user))


@router.delete("/deleteMe", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Deactivate the account. The row is kept for subscription history."""
    current_user.active = False
    await db.commit()
    logger.info(f"User {current_user.id} deactivated their account")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/my-subscriptions")
async def get_my_subscriptions(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    result = await db.execute(
        select(Subscription)
        .where(Subscription.user_id == current_user.id)
        .order_by(Subscription.created_at.desc())
    )
    subscriptions = result.scalars().all()
    return success(
        results=len(subscriptions),
        subscriptions=[SubscriptionResponse.model_validate(s) for s in subscriptions],
    )


@router.get("/my-distribution-list")
async def get_my_distribution_list(
    current_user: DistributorUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Active subscriptions this distributor delivers, ordered by delivery time."""
    subscriptions = await SubscriptionService(db).distribution_list(current_user)
    return success(
        results=len(subscriptions),
        subscriptions=[SubscriptionResponse.model_validate(s) for s in subscriptions],
    )


# ============================================================================
# Admin
# ============================================================================


@router.get("")
async def list_users(
    admin: AdminUser,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="limit"),
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    List users with pagination, role filter and name/email search.
    """
    query = select(User)
    if role:
        query = query.where(User.role == role.value)
    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.where(
            or_(
                User.name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            )
        )

    total = (
        await db.execute(select(func.count()).select_from(query.subquery()))
    ).scalar_one()

    offset = (page - 1) * page_size
    result = await db.execute(
        query.order_by(User.created_at.desc(), User.id).limit(page_size).offset(offset)
    )
    users = result.scalars().all()

    return success(
        results=len(users),
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        totalPages=ceil(total / page_size) if total > 0 else 0,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: AdminUserCreate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    email = body.email.lower()
    await _ensure_email_free(db, email)

    if body.role == UserRole.DISTRIBUTOR and body.location is None:
        raise BadRequest("Distributors must provide a location")

    user = User(
        name=body.name,
        email=email,
        phone=body.phone,
        password_hash=password_hasher.hash(body.password),
        role=body.role.value,
        active=body.active,
    )
    if body.location:
        for key, value in body.location.to_columns().items():
            setattr(user, key, value)

    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"Admin {admin.id} created {user.role} account {user.id}")
    return success(user=UserResponse.model_validate(user))


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("No user found with that ID")
    return user


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await _get_user_or_404(db, user_id)
    return success(user=UserResponse.model_validate(user))


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    body: AdminUserUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Admin edit. Passwords are not changed here."""
    user = await _get_user_or_404(db, user_id)

    changes = body.model_dump(exclude_unset=True, exclude={"location"})
    if "email" in changes and changes["email"] is not None:
        changes["email"] = changes["email"].lower()
        await _ensure_email_free(db, changes["email"], exclude_id=user.id)
    if changes.get("role") is not None:
        changes["role"] = UserRole(changes["role"]).value

    for key, value in changes.items():
        if value is not None:
            setattr(user, key, value)
    if body.location is not None:
        for key, value in body.location.to_columns().items():
            setattr(user, key, value)

    await db.commit()
    await db.refresh(user)

    logger.info(f"Admin {admin.id} updated user {user.id}")
    return success(user=UserResponse.model_validate(user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> Response:
    user = await _get_user_or_404(db, user_id)
    # Subscriptions and payments keep their customer; deactivate instead
    subscribed = await db.scalar(
        select(func.count()).select_from(Subscription).where(Subscription.user_id == user.id)
    )
    paid = await db.scalar(
        select(func.count()).select_from(Payment).where(Payment.user_id == user.id)
    )
    if subscribed or paid:
        raise BadRequest(
            "This user has subscriptions and cannot be deleted; deactivate the account instead"
        )
    await db.delete(user)
    await db.commit()

    logger.info(f"Admin {admin.id} deleted user {user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
