"""
Shared test fixtures for the IronFlow scheduling test suite.

Async throughout (aiosqlite + AsyncSession); every test gets fresh tables.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_current_active_user, get_db
from app.db.base import Base
from app.main import app
from app.models.booking import Booking
from app.models.plan import Plan, Subscription
from app.models.user import User

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


# ── Auth Overrides ──────────────────────────────────────────────────
ADMIN_ID = 999


def _admin() -> User:
    return User(
        id=ADMIN_ID,
        email="admin@example.com",
        name="Admin",
        is_active=True,
        role="SUPER_ADMIN",
        branch_id="ALL",
        shifts=[],
        week_off_day=0,
    )


async def _override_get_current_active_user():
    return _admin()


app.dependency_overrides[get_current_active_user] = _override_get_current_active_user


@pytest.fixture
def act_as():
    """Make subsequent requests run as *user* instead of the default admin."""

    def _act_as(user: User) -> None:
        async def _current():
            return user

        app.dependency_overrides[get_current_active_user] = _current

    yield _act_as
    app.dependency_overrides[get_current_active_user] = _override_get_current_active_user


# ── Seeding helpers ─────────────────────────────────────────────────
@pytest.fixture
def make_user(db_session: AsyncSession):
    counter = {"n": 0}

    async def _make_user(role: str = "TRAINER", **fields) -> User:
        counter["n"] += 1
        fields.setdefault("email", f"{role.lower()}{counter['n']}@example.com")
        fields.setdefault("name", f"{role.title()} {counter['n']}")
        fields.setdefault("branch_id", "B1")
        fields.setdefault("shifts", [])
        user = User(role=role, hashed_password="", **fields)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_subscription(db_session: AsyncSession):
    async def _make_subscription(
        member: User,
        plan_type: str,
        *,
        max_sessions: int | None = None,
        group_capacity: int | None = None,
        start_date: str = "2025-01-01",
        end_date: str = "2025-12-31",
        status: str = "ACTIVE",
    ) -> Subscription:
        plan = Plan(
            name=f"{plan_type} plan",
            type=plan_type,
            price=1000.0,
            duration_days=30,
            branch_id="B1",
            max_sessions=max_sessions,
            group_capacity=group_capacity,
        )
        db_session.add(plan)
        await db_session.flush()
        sub = Subscription(
            member_id=member.id,
            plan_id=plan.id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            branch_id="B1",
        )
        db_session.add(sub)
        await db_session.commit()
        await db_session.refresh(sub)
        return sub

    return _make_subscription


@pytest.fixture
def make_booking(db_session: AsyncSession):
    async def _make_booking(
        member: User,
        trainer: User,
        *,
        type: str = "PT",
        date: str = "2025-03-10",
        time_slot: str = "10:00 AM",
        status: str = "BOOKED",
    ) -> Booking:
        booking = Booking(
            member_id=member.id,
            trainer_id=trainer.id,
            type=type,
            date=date,
            time_slot=time_slot,
            branch_id="B1",
            status=status,
        )
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking

    return _make_booking


@pytest.fixture
def session_factory():
    """The test sessionmaker, for driving services without the HTTP layer."""
    return TestingSessionLocal
