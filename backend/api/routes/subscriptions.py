"""
Subscription routes.

Every route requires authentication. Listing and reads are scoped by role:
customers see their own subscriptions, distributors the ones assigned to
them, admins everything.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import AdminUser, CurrentUser, CustomerUser, restrict_to
from api.schemas.common import success
from api.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionStat,
    SubscriptionUpdate,
)
from infrastructure.database.connection import get_db
from infrastructure.database.models import User, UserRole
from services.subscription_service import SubscriptionService, ensure_can_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])

CustomerOrAdmin = Annotated[User, Depends(restrict_to(UserRole.CUSTOMER, UserRole.ADMIN))]


def _out(subscription) -> SubscriptionResponse:
    return SubscriptionResponse.model_validate(subscription)


@router.get("")
async def list_subscriptions(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    subscriptions = await SubscriptionService(db).list_for(current_user)
    return success(
        results=len(subscriptions),
        subscriptions=[_out(s) for s in subscriptions],
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subscription(
    body: SubscriptionCreate,
    current_user: CustomerUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Subscribe to a newspaper.

    The nearest distributor to the delivery location is assigned and the
    subscription waits in ``pending_payment`` until checkout completes.
    """
    subscription = await SubscriptionService(db).create_subscription(
        user=current_user,
        newspaper_id=body.newspaper_id,
        subscription_type=body.subscription_type.value,
        delivery_address=body.delivery_address.to_columns(),
        delivery_time=body.delivery_time,
    )
    return success(subscription=_out(subscription))


@router.get("/stats/subscription-stats")
async def get_subscription_stats(
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Per-newspaper subscription counts and durations in days."""
    rows = await SubscriptionService(db).stats_by_newspaper()
    return success(stats=[SubscriptionStat(**row) for row in rows])


@router.get("/{subscription_id}")
async def get_subscription(
    subscription_id: str,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> dict:
    subscription = await SubscriptionService(db).get_subscription(subscription_id)
    ensure_can_view(subscription, current_user)
    return success(subscription=_out(subscription))


@router.patch("/{subscription_id}")
async def update_subscription(
    subscription_id: str,
    body: SubscriptionUpdate,
    current_user: CustomerOrAdmin,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """
    Change delivery address, delivery time or status.

    Customers may only move their own subscription to ``cancelled``.
    """
    service = SubscriptionService(db)
    subscription = await service.get_subscription(subscription_id)
    ensure_can_view(subscription, current_user, action="update")

    subscription = await service.update_subscription(
        subscription,
        current_user,
        delivery_address=(
            body.delivery_address.to_columns() if body.delivery_address else None
        ),
        delivery_time=body.delivery_time,
        status=body.status.value if body.status else None,
    )
    return success(subscription=_out(subscription))


@router.delete("/{subscription_id}")
async def cancel_subscription(
    subscription_id: str,
    current_user: CustomerOrAdmin,
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = SubscriptionService(db)
    subscription = await service.get_subscription(subscription_id)
    ensure_can_view(subscription, current_user, action="cancel")

    subscription = await service.cancel_subscription(subscription)
    return success(subscription=_out(subscription))
