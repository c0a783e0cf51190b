from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.platform.db.base import Base


class Database:
    """
    Engine + session factory pair with an explicit lifecycle.

    Built once in the application lifespan, handed to whoever needs sessions
    (request dependencies, the scan orchestrator) and disposed at shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {"echo": echo, "future": True, "pool_pre_ping": True}
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_recycle=1800,
                pool_size=20,
                max_overflow=30,  # (burst capacity)
                pool_timeout=30,
            )
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False, autocommit=False
        )

    async def create_all(self) -> None:
        # Make sure every model is registered on the metadata first
        import app.platform.db.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.db.sessionmaker() as session:
        yield session
