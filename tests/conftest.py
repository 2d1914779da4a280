"""Shared test fixtures."""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AsyncExitStack
from dataclasses import dataclass
from pathlib import Path

# Must be set before foome reads its settings
os.environ.update(
    {
        "DATABASE_URL": "sqlite+aiosqlite://",
        "SECRET_KEY": "test-secret-key",
        "COOKIE_SECURE": "false",
        "REQUIRE_EMAIL_CONFIRMATION": "true",
        "PASSWORD_HASH_ITERATIONS": "1000",
        "RATE_LIMIT_PER_MINUTE": "0",
        "LOG_LEVEL": "WARNING",
    }
)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from foome.access.identity import SessionAuth  # noqa: E402
from foome.config.settings import get_settings  # noqa: E402
from foome.models.database import Company, Employee, User, _utc_now  # noqa: E402
from foome.services.accounts import hash_password  # noqa: E402
from foome.storage.database import get_session, init_db  # noqa: E402
from foome.storage.local_store import LocalObjectStore  # noqa: E402
from foome.web.app import create_app  # noqa: E402
from foome.web.dependencies import get_object_store  # noqa: E402

PASSWORD = "correct-horse-battery"


def _cnpj() -> str:
    return f"{uuid.uuid4().int % 10**14:014d}"


@dataclass
class Member:
    """A seeded employee with a login and an HTTP client carrying their session."""

    user: User
    employee: Employee
    client: AsyncClient

    @property
    def id(self) -> str:
        return self.employee.id


@pytest.fixture(autouse=True)
def _fresh_settings() -> None:
    get_settings.cache_clear()


@pytest.fixture()
async def engine() -> AsyncIterator[AsyncEngine]:
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture()
def store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "files")


@pytest.fixture()
def app(engine: AsyncEngine, store: LocalObjectStore):
    """A fresh app wired to the test engine and file store."""
    app = create_app()

    async def _session() -> AsyncIterator[AsyncSession]:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_object_store] = lambda: store
    return app


@pytest.fixture()
async def open_client(app) -> AsyncIterator[Callable[[str | None], Awaitable[AsyncClient]]]:
    """Factory for clients, optionally pre-authenticated with a session token."""
    async with AsyncExitStack() as stack:

        async def _open(token: str | None = None) -> AsyncClient:
            client = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
            if token:
                client.cookies.set(get_settings().session_cookie_name, token)
            return await stack.enter_async_context(client)

        yield _open


@pytest.fixture()
async def client(open_client) -> AsyncClient:
    """Anonymous client."""
    return await open_client()


class Seeder:
    """Creates users, companies and employees directly in the database."""

    def __init__(self, engine: AsyncEngine, open_client: Callable[..., Awaitable[AsyncClient]]):
        self._engine = engine
        self._open_client = open_client

    async def user(self, email: str | None = None, *, confirmed: bool = True) -> User:
        async with AsyncSession(self._engine, expire_on_commit=False) as session:
            user = User(
                email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
                password_hash=hash_password(PASSWORD, iterations=1000),
                full_name="Test User",
                email_confirmed_at=_utc_now() if confirmed else None,
            )
            session.add(user)
            await session.commit()
            return user

    async def company(self, name: str = "Acme") -> Company:
        async with AsyncSession(self._engine, expire_on_commit=False) as session:
            company = Company(name=name, cnpj=_cnpj())
            session.add(company)
            await session.commit()
            return company

    async def employee(
        self,
        company: Company,
        *,
        full_name: str = "Jane Doe",
        email: str | None = None,
        is_admin: bool = False,
        user_id: str | None = None,
        department: str | None = None,
    ) -> Employee:
        async with AsyncSession(self._engine, expire_on_commit=False) as session:
            employee = Employee(
                company_id=company.id,
                user_id=user_id,
                full_name=full_name,
                email=email or f"emp-{uuid.uuid4().hex[:8]}@example.com",
                is_admin=is_admin,
                department=department,
            )
            session.add(employee)
            await session.commit()
            return employee

    async def login(self, user: User) -> AsyncClient:
        settings = get_settings()
        async with AsyncSession(self._engine, expire_on_commit=False) as session:
            token = await SessionAuth(
                session, settings.secret_key, settings.session_max_age
            ).create_session(user.id)
        return await self._open_client(token)

    async def member(
        self,
        company: Company,
        *,
        is_admin: bool = False,
        full_name: str = "Jane Doe",
        department: str | None = None,
    ) -> Member:
        user = await self.user()
        employee = await self.employee(
            company,
            full_name=full_name,
            email=user.email,
            is_admin=is_admin,
            user_id=user.id,
            department=department,
        )
        return Member(user=user, employee=employee, client=await self.login(user))


@pytest.fixture()
def seed(engine: AsyncEngine, open_client) -> Seeder:
    return Seeder(engine, open_client)


@pytest.fixture()
async def acme(seed: Seeder) -> Company:
    return await seed.company("Acme")


@pytest.fixture()
async def globex(seed: Seeder) -> Company:
    return await seed.company("Globex")


@pytest.fixture()
async def admin(seed: Seeder, acme: Company) -> Member:
    return await seed.member(acme, is_admin=True, full_name="Alice Admin")


@pytest.fixture()
async def worker(seed: Seeder, acme: Company) -> Member:
    return await seed.member(acme, full_name="Bob Worker")


@pytest.fixture()
async def outsider(seed: Seeder, globex: Company) -> Member:
    """Admin of a different company."""
    return await seed.member(globex, is_admin=True, full_name="Olga Outsider")


@pytest.fixture()
def password() -> str:
    """Plain-text password of every seeded user."""
    return PASSWORD
