# database.py

from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from config import get_settings


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, echo=echo)


def make_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Session factory whose objects stay readable after commit."""
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


settings = get_settings()

# Application engine and "Session" class; tests build their own with the helpers above
engine = build_engine(settings.database_url, echo=settings.database_echo)
AsyncSessionLocal = make_session_factory(engine)

# Dependency to get DB session, one per request
async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session

# Function to create tables (run once at startup)
async def create_tables(bind: Optional[AsyncEngine] = None) -> None:
    from models import Base # Import Base here to avoid circular imports
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def dispose_engine() -> None:
    await engine.dispose()
