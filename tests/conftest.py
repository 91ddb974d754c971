import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

sys.path.append(str(Path(__file__).resolve().parents[1]))

import donation_api.models  # noqa: F401
from donation_api.core.config import Settings
from donation_api.core.dependencies import get_payment_gateway
from donation_api.db import session
from donation_api.db.base_class import Base
from donation_api.main import create_app
from donation_api.services.payment_gateway import MidtransClient

ADMIN_PASSWORD = "rahasia-admin"
SERVER_KEY = "SB-Mid-server-test"


class FakeGateway(MidtransClient):
    """Records Snap requests instead of sending them."""

    def __init__(self, response=None):
        super().__init__(SERVER_KEY)
        self.response = response
        self.calls = []

    async def create_transaction(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


def setup_test_db(path):
    # NullPool: the app's event loop and the seeding loops never share a connection
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    TestingSessionLocal = async_sessionmaker(
        bind=engine, expire_on_commit=False, class_=AsyncSession
    )

    async def init_models():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_models())
    return engine, TestingSessionLocal


def seed(SessionLocal, *objects):
    async def _seed():
        async with SessionLocal() as db:
            db.add_all(objects)
            await db.commit()

    asyncio.run(_seed())
    return objects


def fetch_all(SessionLocal, statement):
    async def _fetch():
        async with SessionLocal() as db:
            result = await db.execute(statement)
            return result.scalars().all()

    return asyncio.run(_fetch())


def count_queries(engine, func):
    queries = {"count": 0}

    def before_cursor_execute(*args, **kwargs):
        queries["count"] += 1

    event.listen(engine.sync_engine, "before_cursor_execute", before_cursor_execute)
    try:
        func()
    finally:
        event.remove(engine.sync_engine, "before_cursor_execute", before_cursor_execute)
    return queries["count"]


@pytest.fixture
def test_db(tmp_path, monkeypatch):
    engine, TestingSessionLocal = setup_test_db(tmp_path / "test.db")
    monkeypatch.setattr(session, "engine", engine)
    monkeypatch.setattr(session, "SessionLocal", TestingSessionLocal)
    yield engine, TestingSessionLocal
    asyncio.run(engine.dispose())


@pytest.fixture
def SessionLocal(test_db):
    return test_db[1]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        db_auto_create=False,
        admin_password=ADMIN_PASSWORD,
        midtrans_server_key=SERVER_KEY,
        midtrans_verify_signature=False,
        site_url="https://donasi.example.org",
        donations_open=True,
        upload_dir=str(tmp_path / "uploads"),
        public_files_base_url=None,
        grafana_otlp_endpoint=None,
        grafana_otlp_auth=None,
        environment="test",
        log_level="INFO",
    )


@pytest.fixture
def gateway():
    return FakeGateway(
        {
            "token": "snap-token",
            "redirect_url": "https://app.sandbox.midtrans.com/snap/v4/redirection/snap-token",
        }
    )


@pytest.fixture
def app(test_db, settings, gateway):
    app = create_app(settings)
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
