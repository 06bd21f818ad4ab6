from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool, StaticPool
from floodline.core.config import settings


def build_engine(db_url: str):
    """
    SQLite (local/dev/tests) shares one connection across sessions;
    PostgreSQL via asyncpg opens a connection per session.
    """
    if db_url.startswith("sqlite"):
        return create_async_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        db_url,
        echo=False,
        future=True,
        poolclass=NullPool,  # Fixes asyncpg concurrency/connection issues
    )


def build_session_factory(bind) -> async_sessionmaker:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = build_session_factory(engine)


def get_session_factory() -> async_sessionmaker:
    """
    Dependency for code that manages its own sessions (reconciliation runs).
    """
    return AsyncSessionLocal


async def get_db() -> AsyncSession:
    """
    Dependency for getting an async database session.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
