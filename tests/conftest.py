import os

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

import ceasefire.models  # noqa: F401
from ceasefire.main import app
from ceasefire.db.database import Base, create_engine_for, get_db
from ceasefire.models.profile import Profile
from ceasefire.services.errors import store_errors
from ceasefire.services.identity import Identity


# Test database URL
TEST_DATABASE_URL = os.environ.get('TEST_DATABASE_URL', 'sqlite+aiosqlite:///:memory:')


@pytest.fixture
async def engine():
    """Fresh schema per test."""
    engine = create_engine_for(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory):
    """Async HTTP client for testing."""

    async def override_get_db():
        """Override database dependency for tests."""
        async with session_factory() as session:
            try:
                yield session
                with store_errors('commit request'):
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(session_factory):
    """Database session for direct service tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


async def make_identity(db: AsyncSession, username: str, role: str = 'fighter') -> Identity:
    profile = Profile(username=username, email=f'{username}@x.com', role=role)
    db.add(profile)
    await db.flush()
    return Identity(id=profile.id, email=profile.email, username=profile.username)


@pytest.fixture
async def alice(db_session):
    return await make_identity(db_session, 'alice')


@pytest.fixture
async def bob(db_session):
    return await make_identity(db_session, 'bob')


@pytest.fixture
async def carol(db_session):
    return await make_identity(db_session, 'carol', role='trump')


@pytest.fixture
async def dave(db_session):
    return await make_identity(db_session, 'dave')
