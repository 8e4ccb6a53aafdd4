# conftest.py

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from main import app
from database import build_engine, create_tables, get_db, make_session_factory


# Each test gets its own database file
@pytest_asyncio.fixture
async def test_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_posts.db'}")
    await create_tables(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(test_engine) -> AsyncSession:
    async with make_session_factory(test_engine)() as session:
        yield session


# Fixture for the async HTTP client, with get_db pointed at the test database
@pytest_asyncio.fixture
async def client(test_engine) -> AsyncClient:
    TestingSessionLocal = make_session_factory(test_engine)

    async def override_get_db() -> AsyncSession:
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    # Use ASGITransport to test the FastAPI app with httpx.AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
