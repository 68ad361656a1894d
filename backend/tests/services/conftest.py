"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - app.state.db_manager points at the test engine for readiness checks

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (row locks are a no-op there; FOR UPDATE is not exercised)
    - StaticPool: one shared connection so every session sees the same in-memory DB
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

import control_plane.models  # noqa: F401
from control_plane.db.base import Base
from control_plane.infrastructure.database import DatabaseSessionManager, get_db
from control_plane.main import app
from control_plane.models.client import Client as ClientModel
from control_plane.models.connection import Connection as ConnectionModel
from control_plane.models.workspace import Workspace as WorkspaceModel


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    app.state.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    del app.state.db_manager


@pytest.fixture
async def seed_workspace(test_db):
    """Workspace `ws-1` with code `acme`."""
    workspace = WorkspaceModel(
        id="ws-1", code="acme", name="Acme", description="",
        status="active", allowed_origins=[],
    )
    test_db.add(workspace)
    await test_db.commit()
    return workspace


@pytest.fixture
async def seed_references(test_db):
    """Client `client-1` and connection `conn-1`."""
    test_db.add(ClientModel(
        id="client-1", name="Web Shop", workspace_id="ws-1",
        description="", status="active",
    ))
    test_db.add(ConnectionModel(
        id="conn-1", name="Data Lake", type="S3",
        config={"bucket": "lake"}, description="", status="active",
    ))
    await test_db.commit()
