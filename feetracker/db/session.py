from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def build_engine(database_url: str) -> AsyncEngine:
    # Server databases drop idle connections; SQLite needs no pool tuning.
    options = {"echo": False, "future": True}
    if not database_url.startswith("sqlite"):
        options.update(pool_pre_ping=True, pool_recycle=300)
    return create_async_engine(database_url, **options)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables known to the metadata (idempotent)."""
    # Import for side effect: registers tables on Base.metadata.
    from feetracker.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
