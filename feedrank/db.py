# feedrank/db.py
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from feedrank.config import settings

# sync-style URLs from .env mapped onto the async drivers we ship with
ASYNC_DRIVERS = {
    "sqlite+sqlite:///": "sqlite+aiosqlite:///",
    "sqlite:///": "sqlite+aiosqlite:///",
    "postgresql://": "postgresql+asyncpg://",
}

def to_async_url(url: str) -> str:
    for prefix, async_prefix in ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    return url

def make_engine(url: str) -> AsyncEngine:
    return create_async_engine(to_async_url(url), echo=False)

engine = make_engine(settings.DATABASE_URL)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

class Base(DeclarativeBase):
    pass

async def init_db(db_engine: AsyncEngine | None = None) -> None:
    """Create the item, tag and view tables if missing and check the connection."""
    from feedrank.models import ItemRow, ItemTag, ItemView  # noqa: F401
    db_engine = db_engine or engine
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("SELECT 1"))
