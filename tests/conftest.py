import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENV"] = "test"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ["THANK_YOU_DELAY_HOURS"] = "24"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.core.db import get_session
from app.main import app
from app.services import email_service


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    # Take the write lock when a transaction starts so concurrent requests
    # queue on the busy timeout instead of failing on lock upgrade.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def client(session_maker):
    async def _get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Captures every email instead of talking to SMTP."""
    sent = []

    def _fake_send(to_email, subject, html_body):
        sent.append({"to": to_email, "subject": subject, "html": html_body})
        return True

    monkeypatch.setattr(email_service, "_send_email_sync", _fake_send)
    return sent


@pytest.fixture
def signup(client):
    async def _signup(slug="alice", password="secret123", name=None):
        resp = await client.post(
            "/api/auth/signup",
            json={
                "name": name or slug.title(),
                "email": f"{slug}@example.com",
                "password": password,
                "notification_email": f"{slug}-notify@example.com",
                "unique_link_slug": slug,
            },
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return {
            "id": data["admin"]["id"],
            "slug": slug,
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _signup


@pytest.fixture
def create_page(client):
    async def _create_page(admin, slug="intro-call", fields=None):
        resp = await client.post(
            "/api/slugs",
            json={"slug": slug, "fields": fields or []},
            headers=admin["headers"],
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create_page


@pytest.fixture
def book(client):
    async def _book(admin, page_slug="intro-call", when="2025-06-01 10:00", tz="UTC", **extra):
        payload = {
            "client_name": "Bob",
            "client_email": "bob@example.com",
            "appointment_date": when,
            "client_timezone": tz,
        }
        payload.update(extra)
        return await client.post(f"/api/public/{admin['slug']}/{page_slug}/book", json=payload)

    return _book
