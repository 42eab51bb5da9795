import functools

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from changemakers_api.core.config import settings
from changemakers_api.core.exceptions import StoreFailure
from changemakers_api.db.models.base import BaseORM
from changemakers_api.db.models import event, joined_event, users  # noqa: F401  (register tables)


class DataBaseHelper:

    def __init__(self):
        # Process-wide engine, shared by every request handler
        self.engine: AsyncEngine = create_async_engine(
            url=str(settings.db.url),
            echo=settings.db.echo,
            echo_pool=settings.db.echo_pool,
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.max_overflow,
        )
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )
        logger.info("DataBaseHelper initialized with default engine.")

    async def ping(self) -> None:
        """Liveness probe against the store, run once at startup."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            raise StoreFailure(str(e)) from e
        logger.info("Database ping succeeded.")

    async def create_tables(self) -> None:
        """Create users, events and joined_events if they do not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(BaseORM.metadata.create_all)
        except Exception as e:
            logger.error(f"Table creation failed: {e}")
            raise StoreFailure(str(e)) from e
        logger.info("Database tables are in place.")

    async def dispose(self):
        await self.engine.dispose()
        logger.info("Disposed default engine.")

    def connection(self, method):
        """Decorator to automatically create session.

        Any store error (SQLAlchemy or driver level) is rolled back, logged
        and re-raised as ``StoreFailure`` carrying the driver message.
        """
        @functools.wraps(method)
        async def wrapper(*args, **kwargs):
            async with self.session_factory() as session:
                try:
                    return await method(*args, session=session, **kwargs)
                except Exception as e:
                    if session.in_transaction():
                        await session.rollback()
                    logger.error(f"Error in {method.__name__}: {e}")
                    raise StoreFailure(str(e)) from e

        return wrapper


# Global helper
db_helper = DataBaseHelper()
