"""
Subscription service.

Owns the rules shared by the subscription and payment routes: distributor
matching, end-date calculation, role-scoped access and the expiry sweep.
"""

import logging
from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import BadRequest, Forbidden, NotFound
from core.geo import bounding_box, haversine_meters, longitude_ranges
from core.plans import calculate_end_date, duration_days
from infrastructure.config.settings import settings
from infrastructure.database.models import (
    Newspaper,
    Subscription,
    SubscriptionStatus,
    User,
    UserRole,
)
from infrastructure.database.models.base import utcnow

logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Subscription business logic.

    Args:
        db: Async database session
        search_radius_meters: Maximum distance to a matching distributor
    """

    def __init__(self, db: AsyncSession, search_radius_meters: float | None = None):
        self.db = db
        self.search_radius_meters = (
            search_radius_meters
            if search_radius_meters is not None
            else settings.distributor_search_radius_meters
        )

    async def find_nearest_distributor(self, latitude: float, longitude: float) -> User | None:
        """
        Find the closest active distributor within the search radius.

        Candidates are narrowed with a bounding box in SQL, then ranked by
        great-circle distance.

        Returns:
            The nearest distributor, or None when nobody is in range
        """
        min_lat, max_lat, min_lng, max_lng = bounding_box(
            latitude, longitude, self.search_radius_meters
        )
        result = await self.db.execute(
            select(User).where(
                User.role == UserRole.DISTRIBUTOR.value,
                User.active.is_(True),
                User.latitude.is_not(None),
                User.longitude.is_not(None),
                User.latitude.between(min_lat, max_lat),
                or_(
                    *(
                        User.longitude.between(low, high)
                        for low, high in longitude_ranges(min_lng, max_lng)
                    )
                ),
            )
        )

        nearest: User | None = None
        nearest_distance = float("inf")
        for candidate in result.scalars().all():
            distance = haversine_meters(
                latitude, longitude, candidate.latitude, candidate.longitude
            )
            if distance <= self.search_radius_meters and distance < nearest_distance:
                nearest, nearest_distance = candidate, distance

        if nearest:
            logger.info(f"Matched distributor {nearest.id} at {nearest_distance:.0f}m")
        return nearest

    async def get_newspaper(self, newspaper_id: str) -> Newspaper:
        newspaper = await self.db.get(Newspaper, newspaper_id)
        if not newspaper:
            raise NotFound("No newspaper found with that ID")
        return newspaper

    async def get_subscription(self, subscription_id: str) -> Subscription:
        subscription = await self.db.get(Subscription, subscription_id)
        if not subscription:
            raise NotFound("No subscription found with that ID")
        return subscription

    async def create_subscription(
        self,
        user: User,
        newspaper_id: str,
        subscription_type: str,
        delivery_address: dict,
        delivery_time: str,
    ) -> Subscription:
        """
        Create a pending-payment subscription assigned to the nearest distributor.

        Raises:
            NotFound: If the newspaper does not exist
            BadRequest: If no distributor covers the delivery location
        """
        newspaper = await self.get_newspaper(newspaper_id)

        start_date = utcnow()
        end_date = calculate_end_date(start_date, subscription_type)

        latitude, longitude = delivery_address["latitude"], delivery_address["longitude"]
        distributor = await self.find_nearest_distributor(latitude, longitude)
        if not distributor:
            raise BadRequest("No distributor available in your area")

        subscription = Subscription(
            user_id=user.id,
            newspaper_id=newspaper.id,
            distributor_id=distributor.id,
            subscription_type=subscription_type,
            start_date=start_date,
            end_date=end_date,
            duration_days=duration_days(start_date, end_date),
            status=SubscriptionStatus.PENDING_PAYMENT.value,
            delivery_time=delivery_time,
        )
        self._apply_address(subscription, delivery_address)
        self.db.add(subscription)
        await self.db.commit()
        await self.db.refresh(subscription)

        logger.info(
            f"Subscription {subscription.id} created for user {user.id} "
            f"({subscription_type}, distributor {distributor.id})"
        )
        return subscription

    async def update_subscription(
        self,
        subscription: Subscription,
        actor: User,
        *,
        delivery_address: dict | None = None,
        delivery_time: str | None = None,
        status: str | None = None,
    ) -> Subscription:
        """
        Apply a customer or admin update.

        A new delivery location re-runs distributor matching; the current
        distributor is kept when nobody is in range.

        Raises:
            Forbidden: If a customer sets any status other than cancelled
        """
        if status is not None:
            if actor.is_customer and status != SubscriptionStatus.CANCELLED.value:
                raise Forbidden("Customers can only cancel a subscription")
            subscription.status = status

        if delivery_time is not None:
            subscription.delivery_time = delivery_time

        if delivery_address is not None:
            self._apply_address(subscription, delivery_address)
            lat, lng = delivery_address.get("latitude"), delivery_address.get("longitude")
            if lat is not None and lng is not None:
                distributor = await self.find_nearest_distributor(lat, lng)
                if distributor:
                    subscription.distributor_id = distributor.id

        await self.db.commit()
        await self.db.refresh(subscription)
        return subscription

    async def cancel_subscription(self, subscription: Subscription) -> Subscription:
        subscription.status = SubscriptionStatus.CANCELLED.value
        await self.db.commit()
        await self.db.refresh(subscription)
        logger.info(f"Subscription {subscription.id} cancelled")
        return subscription

    async def list_for(self, user: User) -> list[Subscription]:
        """Subscriptions visible to ``user``: own, assigned, or all for admins."""
        query = select(Subscription).order_by(Subscription.created_at.desc())
        if user.is_customer:
            query = query.where(Subscription.user_id == user.id)
        elif user.is_distributor:
            query = query.where(Subscription.distributor_id == user.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def distribution_list(self, distributor: User) -> list[Subscription]:
        result = await self.db.execute(
            select(Subscription)
            .where(
                Subscription.distributor_id == distributor.id,
                Subscription.status == SubscriptionStatus.ACTIVE.value,
            )
            .order_by(Subscription.delivery_time)
        )
        return list(result.scalars().all())

    async def stats_by_newspaper(self) -> list[dict]:
        """Per-newspaper counts and durations (days), excluding cancellations."""
        result = await self.db.execute(
            select(
                Newspaper.name,
                func.count(Subscription.id),
                func.avg(Subscription.duration_days),
                func.min(Subscription.duration_days),
                func.max(Subscription.duration_days),
            )
            .join(Newspaper, Newspaper.id == Subscription.newspaper_id)
            .where(Subscription.status != SubscriptionStatus.CANCELLED.value)
            .group_by(Newspaper.id, Newspaper.name)
            .order_by(func.count(Subscription.id).desc())
        )
        return [
            {
                "newspaper": name,
                "n_subscriptions": count,
                "avg_duration": float(avg) if avg is not None else None,
                "min_duration": minimum,
                "max_duration": maximum,
            }
            for name, count, avg, minimum, maximum in result.all()
        ]

    @staticmethod
    def _apply_address(subscription: Subscription, address: dict) -> None:
        for field in ("street", "city", "state", "pincode", "address", "latitude", "longitude"):
            if field in address:
                setattr(subscription, field, address[field])


def ensure_can_view(subscription: Subscription, user: User, action: str = "view") -> None:
    """
    Enforce role-scoped access to a single subscription.

    Raises:
        Forbidden: For a customer who does not own it, or a distributor
            it is not assigned to
    """
    if user.is_customer and subscription.user_id != user.id:
        raise Forbidden(f"You do not have permission to {action} this subscription")
    if user.is_distributor and subscription.distributor_id != user.id:
        raise Forbidden(f"You do not have permission to {action} this subscription")


async def expire_lapsed_subscriptions(db: AsyncSession, now: datetime | None = None) -> int:
    """Mark active subscriptions past their end date as expired.

    Returns:
        Number of subscriptions expired
    """
    now = now or utcnow()
    result = await db.execute(
        update(Subscription)
        .where(
            Subscription.status == SubscriptionStatus.ACTIVE.value,
            Subscription.end_date < now,
        )
        .values(status=SubscriptionStatus.EXPIRED.value)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount:
        logger.info(f"Expired {result.rowcount} lapsed subscription(s)")
    return result.rowcount or 0
