# =============================================
# workhub/config/database.py
# =============================================
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import MetaData, event, text
from typing import AsyncGenerator
import logging
from workhub.config.settings import get_settings

logger = logging.getLogger(__name__)

# Get settings instance
settings = get_settings()

# =============================================
# ENGINE FACTORY
# =============================================

def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with driver-appropriate pool options"""
    if url.startswith("sqlite"):
        sqlite_engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"timeout": 30},
        )
        _enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=10,
        max_overflow=20
    )

def _enable_sqlite_foreign_keys(sqlite_engine: AsyncEngine) -> None:
    @event.listens_for(sqlite_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# Async Engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session Factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base Model with metadata
metadata = MetaData()

class Base(DeclarativeBase):
    metadata = metadata

# =============================================
# DATABASE FUNCTIONS
# =============================================

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields a database session per request"""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()

async def create_tables():
    """
    Create all tables directly from the model metadata.

    Only used when AUTO_CREATE_TABLES is enabled; deployments run
    `alembic upgrade head` instead.
    """
    # Import models so they are registered on Base.metadata
    import workhub.database.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created from metadata")
    except Exception as e:
        logger.error(f"Error creating tables: {e}")
        raise

async def check_database_health() -> bool:
    """Check if database is accessible"""
    try:
        async with async_session() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False

# =============================================
# CONNECTION MANAGEMENT
# =============================================

async def init_database():
    """Initialize database connection and verify setup"""
    logger.info("Initializing database connection...")

    is_healthy = await check_database_health()
    if not is_healthy:
        raise RuntimeError("Could not connect to the database")

    if settings.AUTO_CREATE_TABLES:
        await create_tables()

    logger.info("Database initialized")
    return True

async def close_database():
    """Close database connections"""
    try:
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")
