"""
Shared fixtures: in-memory SQLite database, seeded users, ledger factories
and an HTTP client authenticated as a chosen user.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_KEY", "test-jwt-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("COOKIE_SECURE", "false")

import datetime as dt
from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src import app
from src.db.main import get_Session
from src.utils.auth import get_current_user, generate_password_hash
from src.auth.models import User
from src.customers.models import Customer
from src.sales.models import Sale
from src.expenses.models import Expense
from src.daily_summaries.models import DailySummary


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def user(session):
    """Owner of the ledger under test"""
    user = User(
        username="owner",
        full_name="Shop Owner",
        password_hash=generate_password_hash("secret-pass"),
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def other_user(session):
    """A second owner (isolation tests)"""
    user = User(username="other", full_name="Other Owner", password_hash="not-a-real-hash")
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
def login_as():
    def _login_as(user):
        app.dependency_overrides[get_current_user] = lambda: {"user_id": str(user.user_id)}

    yield _login_as
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
async def client(session, user, login_as):
    """HTTP client logged in as `user`"""
    async def override_session():
        yield session

    app.dependency_overrides[get_Session] = override_session
    login_as(user)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.pop(get_Session, None)


@pytest.fixture
def make_sale(session):
    """Insert a sale straight into the ledger, bypassing summary sync."""
    async def _make_sale(owner, day, total, product="Widget", quantity=1, price=None):
        sale = Sale(
            date=dt.date.fromisoformat(day) if isinstance(day, str) else day,
            product=product,
            quantity=quantity,
            price=Decimal(price if price is not None else total),
            total=Decimal(total),
            user_id=owner.user_id,
        )
        session.add(sale)
        await session.commit()
        await session.refresh(sale)
        return sale

    return _make_sale


@pytest.fixture
def make_expense(session):
    """Insert an expense straight into the ledger, bypassing summary sync."""
    async def _make_expense(owner, day, amount, category="Rent"):
        expense = Expense(
            date=dt.date.fromisoformat(day) if isinstance(day, str) else day,
            category=category,
            amount=Decimal(amount),
            user_id=owner.user_id,
        )
        session.add(expense)
        await session.commit()
        await session.refresh(expense)
        return expense

    return _make_expense


@pytest.fixture
def make_customer(session):
    async def _make_customer(owner, name="Ada"):
        customer = Customer(name=name, user_id=owner.user_id)
        session.add(customer)
        await session.commit()
        await session.refresh(customer)
        return customer

    return _make_customer


@pytest.fixture
def get_summary(session):
    """Fetch the stored DailySummary for (owner, date), or None."""
    async def _get_summary(owner, day):
        day = dt.date.fromisoformat(day) if isinstance(day, str) else day
        result = await session.exec(
            select(DailySummary).where(
                DailySummary.user_id == owner.user_id,
                DailySummary.date == day,
            )
        )
        return result.first()

    return _get_summary
