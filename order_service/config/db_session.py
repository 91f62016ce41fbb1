from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from order_service.config.logger import get_logger
from order_service.config.settings import PostgresSettings
from order_service.shared.database import Base


def _logger():
    return get_logger("DBSession")


# ----------------------------
# Global engine & session factory
# ----------------------------
engine: Optional[AsyncEngine] = None
async_session: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine(database_url: str, pg: Optional[PostgresSettings] = None) -> AsyncEngine:
    """
    Initialize or return the global SQLAlchemy async engine with pooling options.
    """
    global engine
    if engine is None:
        pg = pg or PostgresSettings()
        engine = create_async_engine(
            str(database_url),
            echo=pg.echo,
            pool_size=pg.pool_size,
            max_overflow=pg.max_overflow,
            pool_timeout=pg.pool_timeout,
            pool_recycle=pg.pool_recycle,
            pool_pre_ping=True,
        )
        _logger().info("Async engine created", extra={"host": engine.url.host, "database": engine.url.database})
    return engine


def get_sessionmaker(database_url: str, pg: Optional[PostgresSettings] = None) -> async_sessionmaker[AsyncSession]:
    """
    Return the async session factory bound to the global engine.
    """
    global async_session
    if async_session is None:
        async_session = async_sessionmaker(
            bind=get_engine(database_url, pg),
            expire_on_commit=False,
            class_=AsyncSession,
        )
        _logger().debug("AsyncSession factory created")
    return async_session


async def init_db(database_url: str, pg: Optional[PostgresSettings] = None):
    """
    Create every table registered on Base (the orders table) if it does not exist.
    """
    # Registers the ORM models on Base.metadata
    from order_service.orders import models  # noqa: F401

    _logger().info("Starting database initialization...")
    try:
        async with get_engine(database_url, pg).begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        _logger().exception("Failed to initialize database", extra={"error": str(e)})
        raise
    _logger().info("Database tables created or already exist")


async def dispose_engine():
    """Close pooled connections and forget the global engine."""
    global engine, async_session
    if engine is not None:
        await engine.dispose()
        _logger().info("Async engine disposed")
    engine = None
    async_session = None
