from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from sqlalchemy import MetaData
import logging

from .settings import settings

logger = logging.getLogger(__name__)

def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite connections are not shared between event loops (tests, TestClient)
        return {"echo": settings.DEBUG, "poolclass": NullPool}
    return {"echo": settings.DEBUG, "pool_pre_ping": True, "pool_recycle": 300}

# Create async engine
engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URL,
    **_engine_options(settings.SQLALCHEMY_DATABASE_URL),
)

# Create async session maker
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

class Base(DeclarativeBase):
    """Base class for SQLAlchemy models"""
    metadata = MetaData()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

async def init_db():
    """Initialize database"""
    # Imported for its side effect of registering the tables on Base.metadata
    from . import models  # noqa: F401

    async with engine.begin() as conn:
        # No migrations yet; create any missing tables
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connection established")
