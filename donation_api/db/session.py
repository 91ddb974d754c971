"""Database session and engine setup using SQLAlchemy's async API."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from donation_api.core.config import get_settings
from donation_api.db.base_class import Base

DATABASE_URL = get_settings().database_url

engine = create_async_engine(DATABASE_URL, echo=False)
SessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
    class_=AsyncSession,
)


async def get_db():
    async with SessionLocal() as db:
        yield db


async def init_models() -> None:
    """Create missing tables. Migrations remain the source of truth for changes."""
    # Registers every model on Base.metadata.
    import donation_api.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
