"""Test fixtures for the pet manager backend."""
from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault(
    "STORAGE_ROOT", str(Path(tempfile.gettempdir()) / "petmanager-test-storage")
)

from petmanager.api import deps
from petmanager.core.config import get_settings
from petmanager.db.base import Base
from petmanager.db.session import dispose_engine, get_sessionmaker
from petmanager.integrations import S3Client
from petmanager.main import app
from petmanager.models import User
from petmanager.services import user_service

OWNER_EMAIL = "owner@example.com"
OWNER_PASSWORD = "Passw0rd!"
OTHER_EMAIL = "neighbour@example.com"
OTHER_PASSWORD = "Neighb0ur!"


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def db_session(reset_database: None, db_url: str) -> AsyncIterator[AsyncSession]:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        yield session


@pytest.fixture()
def storage(tmp_path: Path) -> S3Client:
    """A bucket rooted in the test's temporary directory."""
    return S3Client(get_settings().s3_bucket, root=tmp_path / "storage")


@pytest_asyncio.fixture()
async def owner(db_session: AsyncSession) -> User:
    return await user_service.create_user(
        db_session, email=OWNER_EMAIL, password=OWNER_PASSWORD
    )


@pytest_asyncio.fixture()
async def other_owner(db_session: AsyncSession) -> User:
    return await user_service.create_user(
        db_session, email=OTHER_EMAIL, password=OTHER_PASSWORD
    )


@pytest_asyncio.fixture()
async def app_context(
    owner: User, other_owner: User, storage: S3Client
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client plus two seeded owners."""
    app.dependency_overrides[deps.get_s3_client] = lambda: storage
    context: dict[str, object] = {
        "owner_id": owner.id,
        "owner_email": OWNER_EMAIL,
        "owner_password": OWNER_PASSWORD,
        "other_email": OTHER_EMAIL,
        "other_password": OTHER_PASSWORD,
        "storage": storage,
    }
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            context["client"] = client
            yield context
    finally:
        app.dependency_overrides.pop(deps.get_s3_client, None)
