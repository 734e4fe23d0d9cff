"""
Database configuration.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from editorial_review.infrastructure.config.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Создать асинхронный engine для PostgreSQL."""
    return create_async_engine(
        settings.get_async_database_url(),
        echo=settings.debug,
        pool_size=20,
        max_overflow=10,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Фабрика асинхронных сессий."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Создать таблицы, если их нет."""
    from editorial_review.infrastructure.persistence.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
