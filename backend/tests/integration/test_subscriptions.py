"""Integration tests for subscription endpoints."""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.models import Subscription, SubscriptionStatus, User
from services.subscription_service import expire_lapsed_subscriptions

pytestmark = pytest.mark.asyncio

# Carter Road, Bandra: inside the distributor's radius
NEARBY = [72.8347, 19.0728]
# Pune: ~120 km away
FAR_AWAY = [73.8567, 18.5204]


def create_payload(newspaper_id: str, coordinates=NEARBY, **overrides) -> dict:
    payload = {
        "newspaperId": newspaper_id,
        "subscriptionType": "quarterly",
        "deliveryAddress": {
            "street": "14 Carter Road",
            "city": "Mumbai",
            "state": "Maharashtra",
            "pincode": "400050",
            "location": {"type": "Point", "coordinates": coordinates},
        },
        "deliveryTime": "06:30",
    }
    payload.update(overrides)
    return payload


class TestCreateSubscription:
    async def test_create(
        self, async_client: AsyncClient, customer_headers, newspaper, distributor: User
    ):
        response = await async_client.post(
            "/api/v1/subscriptions", headers=customer_headers, json=create_payload(newspaper.id)
        )

        assert response.status_code == 201
        subscription = response.json()["data"]["subscription"]
        assert subscription["status"] == "pending_payment"
        assert subscription["subscriptionType"] == "quarterly"
        assert subscription["distributor"]["id"] == distributor.id
        assert subscription["newspaper"]["id"] == newspaper.id
        assert subscription["deliveryAddress"]["location"]["coordinates"] == NEARBY
        assert subscription["deliveryAddress"]["pincode"] == "400050"

        start = datetime.fromisoformat(subscription["startDate"])
        end = datetime.fromisoformat(subscription["endDate"])
        assert 89 <= (end - start).days <= 92

    async def test_nearest_distributor_wins(
        self,
        async_client: AsyncClient,
        customer_headers,
        newspaper,
        distributor: User,
        db_session: AsyncSession,
    ):
        # ~100 m from the delivery point
        closer = User(
            name="Carter Road Deliveries",
            email="carter@example.com",
            password_hash="x",
            role="distributor",
            latitude=19.0737,
            longitude=72.8349,
        )
        inactive = User(
            name="Closed Stall",
            email="closed@example.com",
            password_hash="x",
            role="distributor",
            latitude=NEARBY[1],
            longitude=NEARBY[0],
            active=False,
        )
        db_session.add_all([closer, inactive])
        await db_session.commit()

        response = await async_client.post(
            "/api/v1/subscriptions", headers=customer_headers, json=create_payload(newspaper.id)
        )
        assert response.json()["data"]["subscription"]["distributor"]["id"] == closer.id

    async def test_no_distributor_in_range(
        self, async_client: AsyncClient, customer_headers, newspaper, distributor
    ):
        response = await async_client.post(
            "/api/v1/subscriptions",
            headers=customer_headers,
            json=create_payload(newspaper.id, coordinates=FAR_AWAY),
        )

        assert response.status_code == 400
        assert response.json() == {
            "status": "fail",
            "message": "No distributor available in your area",
        }

    async def test_distributor_across_antimeridian(
        self,
        async_client: AsyncClient,
        customer_headers,
        newspaper,
        db_session: AsyncSession,
    ):
        # About 4 km away, on the other side of the 180th meridian
        taveuni = User(
            name="Taveuni Deliveries",
            email="taveuni@example.com",
            password_hash="x",
            role="distributor",
            latitude=-17.0,
            longitude=-179.98,
        )
        db_session.add(taveuni)
        await db_session.commit()

        response = await async_client.post(
            "/api/v1/subscriptions",
            headers=customer_headers,
            json=create_payload(newspaper.id, coordinates=[179.98, -17.0]),
        )

        assert response.status_code == 201
        assert response.json()["data"]["subscription"]["distributor"]["id"] == taveuni.id

    async def test_unknown_newspaper(self, async_client: AsyncClient, customer_headers, distributor):
        response = await async_client.post(
            "/api/v1/subscriptions",
            headers=customer_headers,
            json=create_payload("00000000-0000-0000-0000-000000000000"),
        )
        assert response.status_code == 404

    async def test_customers_only(
        self, async_client: AsyncClient, distributor_headers, newspaper, distributor
    ):
        response = await async_client.post(
            "/api/v1/subscriptions",
            headers=distributor_headers,
            json=create_payload(newspaper.id),
        )
        assert response.status_code == 403

    async def test_invalid_coordinates(
        self, async_client: AsyncClient, customer_headers, newspaper
    ):
        response = await async_client.post(
            "/api/v1/subscriptions",
            headers=customer_headers,
            json=create_payload(newspaper.id, coordinates=[200, 19]),
        )
        assert response.status_code == 422


class TestListAndRead:
    async def test_list_is_role_scoped(
        self,
        async_client: AsyncClient,
        headers_for,
        customer,
        other_customer,
        distributor,
        admin,
        newspaper,
        subscription_factory,
    ):
        mine = await subscription_factory(customer, newspaper, distributor)
        theirs = await subscription_factory(other_customer, newspaper, None)

        async def listed(user):
            response = await async_client.get("/api/v1/subscriptions", headers=headers_for(user))
            assert response.status_code == 200
            return {s["id"] for s in response.json()["data"]["subscriptions"]}

        assert await listed(customer) == {mine.id}
        assert await listed(distributor) == {mine.id}
        assert await listed(admin) == {mine.id, theirs.id}

    async def test_owner_can_read(
        self, async_client: AsyncClient, customer_headers, subscription: Subscription
    ):
        response = await async_client.get(
            f"/api/v1/subscriptions/{subscription.id}", headers=customer_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["subscription"]["id"] == subscription.id

    async def test_other_customer_forbidden(
        self, async_client: AsyncClient, other_customer_headers, subscription: Subscription
    ):
        response = await async_client.get(
            f"/api/v1/subscriptions/{subscription.id}", headers=other_customer_headers
        )
        assert response.status_code == 403

    async def test_unassigned_distributor_forbidden(
        self,
        async_client: AsyncClient,
        headers_for,
        db_session: AsyncSession,
        subscription: Subscription,
    ):
        other = User(
            name="Elsewhere Deliveries",
            email="elsewhere@example.com",
            password_hash="x",
            role="distributor",
            latitude=18.52,
            longitude=73.85,
        )
        db_session.add(other)
        await db_session.commit()

        response = await async_client.get(
            f"/api/v1/subscriptions/{subscription.id}", headers=headers_for(other)
        )
        assert response.status_code == 403

    async def test_assigned_distributor_can_read(
        self, async_client: AsyncClient, distributor_headers, subscription: Subscription
    ):
        response = await async_client.get(
            f"/api/v1/subscriptions/{subscription.id}", headers=distributor_headers
        )
        assert response.status_code == 200

    async def test_not_found(self, async_client: AsyncClient, admin_headers):
        response = await async_client.get(
            "/api/v1/subscriptions/00000000-0000-0000-0000-000000000000", headers=admin_headers
        )
        assert response.status_code == 404


class TestUpdateAndCancel:
    async def test_customer_changes_delivery_time(
        self, async_client: AsyncClient, customer_headers, subscription: Subscription
    ):
        response = await async_client.patch(
            f"/api/v1/subscriptions/{subscription.id}",
            headers=customer_headers,
            json={"deliveryTime": "07:15", "startDate": "2000-01-01T00:00:00Z"},
        )

        assert response.status_code == 200
        body = response.json()["data"]["subscription"]
        assert body["deliveryTime"] == "07:15"
        assert not body["startDate"].startswith("2000")

    async def test_customer_cannot_activate(
        self, async_client: AsyncClient, customer_headers, subscription: Subscription
    ):
        response = await async_client.patch(
            f"/api/v1/subscriptions/{subscription.id}",
            headers=customer_headers,
            json={"status": "active"},
        )
        assert response.status_code == 403

    async def test_customer_can_cancel_via_update(
        self, async_client: AsyncClient, customer_headers, subscription: Subscription
    ):
        response = await async_client.patch(
            f"/api/v1/subscriptions/{subscription.id}",
            headers=customer_headers,
            json={"status": "cancelled"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["subscription"]["status"] == "cancelled"

    async def test_admin_sets_any_status(
        self, async_client: AsyncClient, admin_headers, subscription: Subscription
    ):
        response = await async_client.patch(
            f"/api/v1/subscriptions/{subscription.id}",
            headers=admin_headers,
            json={"status": "active"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["subscription"]["status"] == "active"

    async def test_distributor_cannot_update(
        self, async_client: AsyncClient, distributor_headers, subscription: Subscription
    ):
        response = await async_client.patch(
            f"/api/v1/subscriptions/{subscription.id}",
            headers=distributor_headers,
            json={"deliveryTime": "09:00"},
        )
        assert response.status_code == 403

    async def test_move_out_of_range_keeps_distributor(
        self,
        async_client: AsyncClient,
        customer_headers,
        subscription: Subscription,
        distributor: User,
    ):
        response = await async_client.patch(
            f"/api/v1/subscriptions/{subscription.id}",
            headers=customer_headers,
            json={"deliveryAddress": {"location": {"type": "Point", "coordinates": FAR_AWAY}}},
        )

        assert response.status_code == 200
        body = response.json()["data"]["subscription"]
        assert body["distributor"]["id"] == distributor.id
        assert body["deliveryAddress"]["location"]["coordinates"] == FAR_AWAY
        assert body["deliveryAddress"]["city"] == "Mumbai"

    async def test_move_reassigns_distributor(
        self,
        async_client: AsyncClient,
        customer_headers,
        subscription: Subscription,
        db_session: AsyncSession,
    ):
        pune = User(
            name="Pune Deliveries",
            email="pune@example.com",
            password_hash="x",
            role="distributor",
            latitude=FAR_AWAY[1],
            longitude=FAR_AWAY[0],
        )
        db_session.add(pune)
        await db_session.commit()

        response = await async_client.patch(
            f"/api/v1/subscriptions/{subscription.id}",
            headers=customer_headers,
            json={"deliveryAddress": {"location": {"type": "Point", "coordinates": FAR_AWAY}}},
        )
        assert response.json()["data"]["subscription"]["distributor"]["id"] == pune.id

    async def test_cancel(
        self, async_client: AsyncClient, customer_headers, subscription: Subscription
    ):
        response = await async_client.delete(
            f"/api/v1/subscriptions/{subscription.id}", headers=customer_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["subscription"]["status"] == "cancelled"

    async def test_cancel_someone_elses(
        self, async_client: AsyncClient, other_customer_headers, subscription: Subscription
    ):
        response = await async_client.delete(
            f"/api/v1/subscriptions/{subscription.id}", headers=other_customer_headers
        )
        assert response.status_code == 403


class TestStatsAndExpiry:
    async def test_subscription_stats(
        self,
        async_client: AsyncClient,
        admin_headers,
        customer,
        newspaper,
        distributor,
        subscription_factory,
    ):
        await subscription_factory(
            customer, newspaper, distributor, plan="monthly", status="active"
        )
        await subscription_factory(
            customer, newspaper, distributor, plan="yearly", status="active"
        )
        await subscription_factory(
            customer, newspaper, distributor, plan="quarterly", status="cancelled"
        )

        response = await async_client.get(
            "/api/v1/subscriptions/stats/subscription-stats", headers=admin_headers
        )

        assert response.status_code == 200
        stats = response.json()["data"]["stats"]
        assert len(stats) == 1
        row = stats[0]
        assert row["newspaper"] == newspaper.name
        assert row["nSubscriptions"] == 2
        assert 28 <= row["minDuration"] <= 31
        assert 365 <= row["maxDuration"] <= 366

    async def test_stats_admin_only(self, async_client: AsyncClient, customer_headers):
        response = await async_client.get(
            "/api/v1/subscriptions/stats/subscription-stats", headers=customer_headers
        )
        assert response.status_code == 403

    async def test_expiry_sweep(
        self, db_session: AsyncSession, customer, newspaper, distributor, subscription_factory
    ):
        past = datetime.now(UTC) - timedelta(days=60)
        lapsed = await subscription_factory(
            customer,
            newspaper,
            distributor,
            status=SubscriptionStatus.ACTIVE.value,
            start_date=past,
            end_date=past + timedelta(days=30),
        )
        current = await subscription_factory(
            customer, newspaper, distributor, status=SubscriptionStatus.ACTIVE.value
        )
        pending = await subscription_factory(
            customer,
            newspaper,
            distributor,
            start_date=past,
            end_date=past + timedelta(days=30),
        )

        expired = await expire_lapsed_subscriptions(db_session)

        assert expired == 1
        for sub in (lapsed, current, pending):
            await db_session.refresh(sub)
        assert lapsed.status == SubscriptionStatus.EXPIRED.value
        assert current.status == SubscriptionStatus.ACTIVE.value
        assert pending.status == SubscriptionStatus.PENDING_PAYMENT.value
