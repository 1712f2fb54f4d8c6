"""
Fixtures compartidos: SQLite (aiosqlite) en archivo, override de get_db y un
outbox en memoria en lugar de aiosmtplib.send.
"""
import os
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from faker import Faker

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_member_admin.db"

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["SMTP_HOST"] = "smtp.example.com"
os.environ["LOG_LEVEL"] = "DEBUG"

from app.main import app
from app.core import security
from app.core.db import Base, get_db
from app.models.admin import Admin
from app.models.member import Member
from app.services import mailer

fake = Faker()

ADMIN_PASSWORD = "adminpassword123"
MEMBER_PASSWORD = "memberpassword123"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


class Outbox(list):
    """Mensajes 'enviados' por aiosmtplib.send durante el test."""

    def bodies_to(self, address: str) -> list[str]:
        return [m.get_content() for m in self if m["To"] == address]

    def subjects_to(self, address: str) -> list[str]:
        return [m["Subject"] for m in self if m["To"] == address]


@pytest.fixture(autouse=True)
def outbox(monkeypatch) -> Outbox:
    box = Outbox()

    async def fake_send(message, **kwargs):
        box.append(message)
        return ({}, "OK")

    monkeypatch.setattr(mailer.aiosmtplib, "send", fake_send)
    return box


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_admin(db: AsyncSession, two_factor_enabled: bool = False, email: str | None = None) -> Admin:
    admin = Admin(
        name=fake.name(),
        email=(email or fake.email()).lower(),
        hashed_password=security.hash_password(ADMIN_PASSWORD),
        two_factor_enabled=two_factor_enabled,
    )
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    return admin


@pytest.fixture
async def admin(db_session: AsyncSession) -> Admin:
    return await make_admin(db_session)


@pytest.fixture
async def admin_2fa(db_session: AsyncSession) -> Admin:
    return await make_admin(db_session, two_factor_enabled=True)


@pytest.fixture
async def auth_headers(client: AsyncClient, admin: Admin) -> dict:
    res = await client.post("/admin/login", json={"email": admin.email, "password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
async def member(db_session: AsyncSession) -> Member:
    m = Member(
        username=fake.user_name(),
        email=fake.email().lower(),
        hashed_password=security.hash_password(MEMBER_PASSWORD),
        image="https://cdn.example.com/avatar.png",
    )
    db_session.add(m)
    await db_session.commit()
    await db_session.refresh(m)
    return m
