"""
数据库引擎与会话（SQLite + aiosqlite）

The file only holds the token cache and the gateway id mappings; tables are
created at startup, there are no migrations.
"""
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from core.config import settings
from infrastructure.models import Base


engine = create_async_engine(settings.DATABASE_URL, echo=False)

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)


async def create_tables() -> None:
    """CREATE TABLE IF NOT EXISTS for every model."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    await engine.dispose()
