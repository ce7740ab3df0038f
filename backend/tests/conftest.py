import os

# 测试不写日志文件，应用引擎指向内存库（测试用例通过依赖覆盖使用独立引擎）
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUDIT_LOG_ENABLED", "true")

import itertools
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.core.database import Base, enable_sqlite_foreign_keys, get_db
from backoffice.main import app
from backoffice.models import (
    MembershipPlan,
    Order,
    OrderStatus,
    PaymentChannel,
    SubscriptionStatus,
    User,
    UserRole,
    UserSubscription,
)
from backoffice.services.auth_service import create_access_token, get_password_hash

TEST_PASSWORD = "secret123"
_order_seq = itertools.count(1)
# bcrypt 较慢，只算一次
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make(email="user@example.com", role=UserRole.USER, name=None):
        user = User(email=email, name=name, password_hash=TEST_PASSWORD_HASH, role=role.value)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_plan(db):
    async def _make(name="Pro", price="99", currency="USD", is_active=True):
        plan = MembershipPlan(name=name, price=Decimal(price), currency=currency, billing_cycle="MONTHLY", is_active=is_active)
        db.add(plan)
        await db.commit()
        await db.refresh(plan)
        return plan
    return _make


@pytest.fixture
def make_order(db):
    async def _make(user, plan, status=OrderStatus.PENDING, order_no=None):
        paid = status in (OrderStatus.PAID, OrderStatus.REFUND_REQUESTED, OrderStatus.REFUNDED)
        order = Order(
            order_no=order_no or f"ORDTEST{next(_order_seq):06d}",
            user_id=user.id,
            plan_id=plan.id,
            amount=plan.price,
            currency=plan.currency,
            status=status.value,
            payment_channel=PaymentChannel.STRIPE.value,
            paid_at=datetime.now(timezone.utc) if paid else None,
        )
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order
    return _make


@pytest.fixture
def make_subscription(db):
    async def _make(user, plan, status=SubscriptionStatus.ACTIVE, days_left=30):
        now = datetime.now(timezone.utc)
        sub = UserSubscription(
            user_id=user.id,
            plan_id=plan.id,
            status=status.value,
            start_at=now - timedelta(days=30),
            end_at=now + timedelta(days=days_left),
        )
        db.add(sub)
        await db.commit()
        await db.refresh(sub)
        return sub
    return _make


@pytest.fixture
async def user(make_user):
    return await make_user("alice@example.com", name="Alice")


@pytest.fixture
async def other_user(make_user):
    return await make_user("bob@example.com", name="Bob")


@pytest.fixture
async def admin(make_user):
    return await make_user("admin@example.com", role=UserRole.ADMIN, name="Admin")


@pytest.fixture
async def plan(make_plan):
    return await make_plan()


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


async def order_status(db, order_id: int) -> str:
    """直接查库读取状态，绕过会话缓存"""
    return (await db.execute(select(Order.status).where(Order.id == order_id))).scalar_one()


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def read_status(db):
    async def _read(order_id: int) -> str:
        return await order_status(db, order_id)
    return _read
