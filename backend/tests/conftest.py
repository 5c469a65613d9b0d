"""Pytest configuration and fixtures for PackTrack tests.

Each test gets its own file-backed SQLite database (aiosqlite), so two
sessions can see each other's commits the way two API requests would.
"""

from dataclasses import dataclass
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.auth.jwt import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models import PackagingType, Site
from app.services.inventory import record_manual_movement
from app.services.timing import TimingDefaults

ACTOR_ID = "user-clerk-1"


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'packtrack.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def timing() -> TimingDefaults:
    return TimingDefaults()


# ── Seed data ────────────────────────────────────────────────────

@dataclass
class Seed:
    farm: Site
    other_farm: Site
    depot: Site
    crate: PackagingType
    bin: PackagingType


@pytest_asyncio.fixture
async def seed(db_session: AsyncSession) -> Seed:
    """Two farms, one depot, two packaging types; 500 crates at the farm."""
    farm = Site(code="BV1", name="Bellevue Farm 1", site_type="farm")
    other_farm = Site(code="BV2", name="Bellevue Farm 2", site_type="farm")
    depot = Site(code="DEP", name="Central Depot", site_type="depot")
    crate = PackagingType(code="CRATE", name="Plastic crate")
    bin_type = PackagingType(code="BIN", name="Bulk bin")
    db_session.add_all([farm, other_farm, depot, crate, bin_type])
    await db_session.flush()

    await record_manual_movement(
        db_session,
        site_id=farm.id,
        packaging_type_id=crate.id,
        movement_type="purchase",
        quantity=500,
        actor_id=ACTOR_ID,
    )
    await db_session.commit()
    return Seed(farm=farm, other_farm=other_farm, depot=depot, crate=crate, bin=bin_type)


# ── HTTP client ──────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose requests each get their own committing session."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    token = create_access_token(ACTOR_ID, role="clerk")
    return {"Authorization": f"Bearer {token}"}
