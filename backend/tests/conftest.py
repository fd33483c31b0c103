"""
Pytest configuration and shared fixtures for backend tests.
"""

import sys
from pathlib import Path

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from datetime import UTC, datetime
from typing import AsyncGenerator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from adapters.payments.razorpay_adapter import RazorpayAdapter, get_razorpay_adapter
from api.routes.auth import token_service
from core.plans import calculate_end_date, duration_days
from core.security import PasswordHasher
from infrastructure.database.connection import get_db
from infrastructure.database.models import (
    Base,
    Newspaper,
    Payment,
    PaymentStatus,
    Subscription,
    SubscriptionStatus,
    User,
    UserRole,
)
from infrastructure.database.models.base import json_serializer

# Low rounds keep the suite fast; hashes still verify with the app's hasher
password_hasher = PasswordHasher(rounds=4)

TEST_PASSWORD = "testpassword123"
TEST_KEY_SECRET = "test_secret"

# Database URL for testing (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Bandra, Mumbai
DISTRIBUTOR_LAT, DISTRIBUTOR_LNG = 19.0596, 72.8295
# ~1.5 km from the distributor
CUSTOMER_LAT, CUSTOMER_LNG = 19.0728, 72.8347


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        json_serializer=json_serializer,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()


async def _create_user(db: AsyncSession, **fields) -> User:
    fields.setdefault("id", str(uuid4()))
    fields.setdefault("password_hash", password_hasher.hash(TEST_PASSWORD))
    user = User(**fields)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def customer(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session,
        name="Asha Customer",
        email="customer@example.com",
        phone="+919800000001",
        role=UserRole.CUSTOMER.value,
    )


@pytest.fixture
async def other_customer(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session,
        name="Ravi Customer",
        email="other@example.com",
        phone="+919800000002",
        role=UserRole.CUSTOMER.value,
    )


@pytest.fixture
async def distributor(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session,
        name="Bandra Deliveries",
        email="distributor@example.com",
        phone="+919800000003",
        role=UserRole.DISTRIBUTOR.value,
        latitude=DISTRIBUTOR_LAT,
        longitude=DISTRIBUTOR_LNG,
        address="Hill Road, Bandra West",
    )


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _create_user(
        db_session,
        name="Admin",
        email="admin@example.com",
        role=UserRole.ADMIN.value,
    )


def make_newspaper(**overrides) -> Newspaper:
    fields = dict(
        name="The Morning Ledger",
        description="Daily city and business news",
        publisher="Ledger Media",
        languages=["English"],
        categories=["daily", "business"],
        price_monthly=300,
        price_quarterly=850,
        price_yearly=3200,
        cover_image="https://example.com/ledger.jpg",
        images=[],
        ratings_average=4.5,
        ratings_quantity=120,
    )
    fields.update(overrides)
    return Newspaper(**fields)


@pytest.fixture
def newspaper_factory(db_session: AsyncSession):
    """Persist a newspaper; keyword arguments override the defaults."""

    async def _create(**overrides) -> Newspaper:
        paper = make_newspaper(**overrides)
        db_session.add(paper)
        await db_session.commit()
        await db_session.refresh(paper)
        return paper

    return _create


@pytest.fixture
async def newspaper(db_session: AsyncSession) -> Newspaper:
    paper = make_newspaper()
    db_session.add(paper)
    await db_session.commit()
    await db_session.refresh(paper)
    return paper


async def create_subscription(
    db: AsyncSession,
    user: User,
    newspaper: Newspaper,
    distributor: User | None,
    plan: str = "monthly",
    status: str = SubscriptionStatus.PENDING_PAYMENT.value,
    **overrides,
) -> Subscription:
    start = overrides.pop("start_date", datetime.now(UTC))
    end = overrides.pop("end_date", calculate_end_date(start, plan))
    subscription = Subscription(
        user_id=user.id,
        newspaper_id=newspaper.id,
        distributor_id=distributor.id if distributor else None,
        subscription_type=plan,
        start_date=start,
        end_date=end,
        duration_days=duration_days(start, end),
        status=status,
        street="14 Carter Road",
        city="Mumbai",
        state="Maharashtra",
        pincode="400050",
        latitude=CUSTOMER_LAT,
        longitude=CUSTOMER_LNG,
        delivery_time=overrides.pop("delivery_time", "06:30"),
        **overrides,
    )
    db.add(subscription)
    await db.commit()
    await db.refresh(subscription)
    return subscription


@pytest.fixture
async def subscription(db_session, customer, newspaper, distributor) -> Subscription:
    """Pending-payment monthly subscription owned by ``customer``."""
    return await create_subscription(db_session, customer, newspaper, distributor)


@pytest.fixture
async def paid_subscription(db_session, customer, newspaper, distributor) -> Subscription:
    """Active subscription with a captured payment."""
    subscription = await create_subscription(
        db_session,
        customer,
        newspaper,
        distributor,
        status=SubscriptionStatus.ACTIVE.value,
        payment_order_id="order_test_1",
    )
    db_session.add(
        Payment(
            subscription_id=subscription.id,
            user_id=customer.id,
            payment_id="pay_test_1",
            order_id="order_test_1",
            signature="signature",
            amount=300,
            currency="INR",
            status=PaymentStatus.CAPTURED.value,
        )
    )
    await db_session.commit()
    await db_session.refresh(subscription)
    return subscription


def auth_headers_for(user: User) -> dict:
    access_token = token_service.create_access_token(user.id, role=user.role)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def customer_headers(customer: User) -> dict:
    return auth_headers_for(customer)


@pytest.fixture
def other_customer_headers(other_customer: User) -> dict:
    return auth_headers_for(other_customer)


@pytest.fixture
def distributor_headers(distributor: User) -> dict:
    return auth_headers_for(distributor)


@pytest.fixture
def admin_headers(admin: User) -> dict:
    return auth_headers_for(admin)


@pytest.fixture
def razorpay_adapter() -> RazorpayAdapter:
    """Unconfigured gateway: mock orders, signatures keyed with TEST_KEY_SECRET."""
    return RazorpayAdapter(key_id="", key_secret=TEST_KEY_SECRET, currency="INR")


@pytest.fixture
async def async_client(
    db_session: AsyncSession, razorpay_adapter: RazorpayAdapter
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    from main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_razorpay_adapter] = lambda: razorpay_adapter

    # Reset rate limiter state between tests to prevent cross-test 429s
    app.state.limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def subscription_factory(db_session: AsyncSession):
    """Persist a subscription; see ``create_subscription`` for arguments."""

    async def _create(user, newspaper, distributor, **kwargs) -> Subscription:
        return await create_subscription(db_session, user, newspaper, distributor, **kwargs)

    return _create


@pytest.fixture
def headers_for():
    """Bearer headers for any user."""
    return auth_headers_for
