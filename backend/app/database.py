"""
RedSocial Backend — Database Session Management
=================================================

What:  The async engine, the session factory, the declarative Base and the
       per-request session dependency.
Who:   Routes and the authentication gate receive sessions via Depends();
       the lifespan probes and disposes the engine.

Transaction Boundary:
    One session == one request == one transaction. Services only flush;
    get_db_session() commits after the handler returns. Multi-statement
    operations (publication delete + comment cascade) therefore land atomically.

Pooling:
    Server databases get DB_POOL_SIZE persistent connections plus
    DB_MAX_OVERFLOW on bursts, pre-ping and hourly recycling. SQLite URLs
    (tests, local runs) keep the driver defaults.
"""

import logging
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import DateTime, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator
from tenacity import (
    before_sleep_log,
    retry,
    stop_after_attempt,
    wait_exponential,
)

from app.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> Dict[str, Any]:
    """Pool configuration for server databases; SQLite gets defaults only."""
    options: Dict[str, Any] = {
        # SQL echo follows LOG_LEVEL=DEBUG
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response schemas read ORM attributes after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Declarative base of users, follows, publications and comments.

    All models inherit from this class so that they share one metadata
    object, which Alembic reads for migrations and tests use for create_all().
    """
    pass


# ── Column Types ──────────────────────────────────────────────────────────
class UTCDateTime(TypeDecorator):
    """
    Timestamp column that always reads back as an aware UTC datetime.

    SQLite stores DateTime(timezone=True) without its offset and returns
    naive values; those are UTC by construction (every write goes through
    process_bind_param) and get their tzinfo back here. PostgreSQL values
    are converted from the session time zone.
    """

    impl = DateTime
    cache_ok = True

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("timezone", True)
        super().__init__(*args, **kwargs)

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield one AsyncSession per request.

    The session is committed after the handler returns and rolled back if
    the handler (or any dependency) raised. FastAPI caches dependencies
    per request, so the authentication gate and the route handler share
    the same session.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            # Roll back for ANY failure, including typed service errors
            # raised after a partial flush (e.g. IntegrityError → ConflictError)
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
@retry(
    stop=stop_after_attempt(settings.db_connect_attempts),
    wait=wait_exponential(
        multiplier=1,
        min=settings.db_connect_min_wait,
        max=settings.db_connect_max_wait,
    ),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def wait_for_database() -> None:
    """
    What:  Probes the database with SELECT 1 until it answers.
    When:  Called during application startup (lifespan handler).
    How:   Tenacity retries with exponential backoff; the last error is
           re-raised once attempts are exhausted.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database connection established")


async def dispose_engine() -> None:
    """Close every pooled connection; called from the lifespan on shutdown."""
    await engine.dispose()
