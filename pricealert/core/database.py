"""Database setup with async SQLAlchemy."""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase
from pricealert.core.config import settings
import logging
import os
import re

logger = logging.getLogger(__name__)


# Mask password in database URL for logging
def mask_db_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:****@', url)


def build_engine_args(database_url: str, timeout: float = None) -> dict:
    """Engine keyword arguments for the given URL.

    SQLite pools do not accept sizing arguments, so pooling options are
    only applied to server databases. Every driver gets a bounded
    connect/statement timeout.
    """
    timeout = settings.db_timeout_seconds if timeout is None else timeout
    engine_args = {
        "echo": settings.log_level == "DEBUG",  # Log all SQL if DEBUG
    }
    backend = make_url(database_url).get_backend_name()
    if backend == "sqlite":
        engine_args["connect_args"] = {"timeout": timeout}
    elif "asyncpg" in database_url:
        engine_args["connect_args"] = {"timeout": timeout, "command_timeout": timeout}
    if not database_url.startswith("sqlite"):
        engine_args.update({
            "pool_pre_ping": True,  # Verify connections before using
            "pool_size": 10,
            "max_overflow": 20,
            "pool_timeout": 30,
            "pool_recycle": 3600,
        })
    return engine_args


logger.info(f"Connecting to database: {mask_db_url(settings.database_url)}")

engine = create_async_engine(
    settings.database_url,
    **build_engine_args(settings.database_url)
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def ensure_sqlite_dir(database_url: str):
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        directory = os.path.dirname(url.database)
        if directory:
            os.makedirs(directory, exist_ok=True)


async def init_db():
    """Initialize database tables."""
    logger.info("Initializing database tables...")

    # Import models so they are registered on Base.metadata
    import pricealert.models  # noqa: F401

    ensure_sqlite_dir(settings.database_url)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✓ Database tables initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database tables: {str(e)}", exc_info=True)
        logger.debug(f"Database URL (masked): {mask_db_url(settings.database_url)}")
        raise
