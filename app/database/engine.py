# app/database/engine.py
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from app.core.config import settings
from app.models.base import Base
from app.models import snapshot  # noqa: F401  registers the table on Base.metadata

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

async_session = sessionmaker(
    engine, expire_on_commit=False, class_=AsyncSession
)

async def initialize_db(db_engine=None):
    """
    Initialize the database by creating all tables defined in SQLAlchemy models.
    This method is idempotent and safe to run at startup.
    """
    async with (db_engine or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
