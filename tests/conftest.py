"""Test configuration and fixtures."""

import os
import time
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from app.core.config import settings
from app.core.database import Base, get_db
from app.core.deps import get_session_factory
from app.core.errors import AuthenticationError, IdentityProviderError
from app.core.permissions import Role
from app.core.security import Identity
from app.models.profile import Profile
from app.models.student import Student, StudentPayment
from app.models.tariff import Tariff, TariffPrice
from app.services.identity import AuthSession
from app.services.session import SessionRegistry
from main import app

# In-memory SQLite by default; point TEST_DATABASE_URL at PostgreSQL to run there
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

PASSWORD = "password123"

if TEST_DATABASE_URL.startswith("sqlite"):
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

else:
    test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def make_token(identity_id: UUID, email: str, *, expires_in: int = 3600, **claims: Any) -> str:
    """Sign an access token the way the identity provider does."""
    payload = {
        "sub": str(identity_id),
        "email": email,
        "aud": settings.AUTH_JWT_AUDIENCE,
        "exp": int(time.time()) + expires_in,
        "role": "authenticated",
        **claims,
    }
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


class FakeIdentityProvider:
    """In-process stand-in for the identity provider."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.signed_out: list[str] = []
        self.deleted: list[UUID] = []
        self.delete_error: IdentityProviderError | None = None

    def add_user(self, email: str, password: str = PASSWORD, user_id: UUID | None = None, **metadata: Any) -> Identity:
        identity = Identity(id=user_id or uuid4(), email=email, metadata=metadata)
        self.users[email] = {"identity": identity, "password": password}
        return identity

    async def aclose(self) -> None:
        pass

    async def sign_in(self, email: str, password: str) -> AuthSession:
        user = self.users.get(email)
        if user is None or user["password"] != password:
            raise AuthenticationError("Invalid login credentials")
        identity = user["identity"]
        return AuthSession(
            access_token=make_token(identity.id, identity.email),
            refresh_token="refresh",
            identity=identity,
        )

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> Identity:
        if email in self.users:
            raise AuthenticationError("User already registered")
        return self.add_user(email, password, **metadata)

    async def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)

    async def create_identity(self, email: str, password: str, metadata: dict[str, Any]) -> Identity:
        return self.add_user(email, password, **metadata)

    async def delete_identity(self, user_id: UUID) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        for email, user in list(self.users.items()):
            if user["identity"].id == user_id:
                del self.users[email]
                self.deleted.append(user_id)
                return
        raise IdentityProviderError("User not found", 404)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    """Override database dependency for tests."""
    async with test_session_maker() as session:
        yield session


def override_get_session_factory() -> async_sessionmaker[AsyncSession]:
    return test_session_maker


@pytest_asyncio.fixture(scope="function")
async def setup_database() -> AsyncGenerator[None, None]:
    """Create test database tables before each test that needs it."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = override_get_session_factory

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_session_factory, None)


@pytest_asyncio.fixture
async def db(setup_database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for tests."""
    async with test_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest_asyncio.fixture
async def client(setup_database: None, provider: FakeIdentityProvider) -> AsyncGenerator[AsyncClient, None]:
    """Get async HTTP client. HTTPS so the secure session cookie is sent back."""
    app.state.identity_provider = provider
    app.state.session_registry = SessionRegistry()
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="https://test",
    ) as ac:
        yield ac


async def create_profile(
    db: AsyncSession,
    provider: FakeIdentityProvider,
    email: str,
    role: Role,
    *,
    is_approved: bool = True,
    full_name: str | None = None,
    sales_id: str | None = None,
) -> Profile:
    """Create an identity in the fake provider and its profile."""
    identity = provider.add_user(email)
    profile = Profile(
        id=identity.id,
        email=email,
        full_name=full_name or email.split("@")[0].title(),
        role=role,
        is_approved=is_approved,
        sales_id=sales_id,
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


@pytest_asyncio.fixture
async def superadmin(db: AsyncSession, provider: FakeIdentityProvider) -> Profile:
    return await create_profile(db, provider, "admin@example.com", Role.SUPERADMIN)


@pytest_asyncio.fixture
async def head_sales(db: AsyncSession, provider: FakeIdentityProvider) -> Profile:
    return await create_profile(db, provider, "head.sales@example.com", Role.HEAD_SALES, sales_id="HS-1")


@pytest_asyncio.fixture
async def sales(db: AsyncSession, provider: FakeIdentityProvider) -> Profile:
    return await create_profile(db, provider, "sales@example.com", Role.SALES, sales_id="S-1")


@pytest_asyncio.fixture
async def other_sales(db: AsyncSession, provider: FakeIdentityProvider) -> Profile:
    return await create_profile(db, provider, "sales2@example.com", Role.SALES, sales_id="S-2")


@pytest_asyncio.fixture
async def teacher(db: AsyncSession, provider: FakeIdentityProvider) -> Profile:
    return await create_profile(db, provider, "teacher@example.com", Role.TEACHER)


@pytest_asyncio.fixture
async def pending_teacher(db: AsyncSession, provider: FakeIdentityProvider) -> Profile:
    return await create_profile(
        db, provider, "pending@example.com", Role.TEACHER, is_approved=False
    )


def auth_header(profile: Profile) -> dict[str, str]:
    """Create authorization header carrying a provider access token for the profile."""
    return {"Authorization": f"Bearer {make_token(profile.id, profile.email)}"}


@pytest_asyncio.fixture
async def tariff(db: AsyncSession) -> Tariff:
    """Create a tariff with two price options."""
    tariff = Tariff(
        name="General English",
        description="Group course",
        prices=[
            TariffPrice(name="Monthly", price=Decimal("500000.00")),
            TariffPrice(name="Full course", price=Decimal("2500000.00")),
        ],
    )
    db.add(tariff)
    await db.commit()
    await db.refresh(tariff, ["prices"])
    return tariff


async def create_student(
    db: AsyncSession,
    manager: Profile,
    tariff: Tariff,
    student_code: str,
    *,
    full_name: str = "Student Name",
) -> Student:
    """Create a student owned by `manager` on the tariff's first price."""
    student = Student(
        manager_id=manager.id,
        student_code=student_code,
        full_name=full_name,
        phone="+998901234567",
        tariff_id=tariff.id,
        tariff_price_id=tariff.prices[0].id,
        group_code="G-1",
    )
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


async def create_payment(db: AsyncSession, student: Student, amount: str = "500000.00") -> StudentPayment:
    payment = StudentPayment(
        student_id=student.id,
        payment_date=date(2026, 9, 1),
        payment_type="cash",
        amount=Decimal(amount),
        receipt_url="/static/receipts/receipt.jpg",
    )
    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    return payment
