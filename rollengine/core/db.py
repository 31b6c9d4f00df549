from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from rollengine.core.config import settings

engine = create_async_engine(settings.db_url)


async def create_tables(db_engine: AsyncEngine = engine) -> None:
    # Table modules register themselves on SQLModel.metadata when imported
    from rollengine.models import (  # noqa: F401
        card,
        event_log,
        owned_card,
        pity_counter,
        player,
        wallet,
    )

    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession]:
    async with AsyncSession(
        engine, autocommit=False, autoflush=False, expire_on_commit=False
    ) as session:
        yield session
