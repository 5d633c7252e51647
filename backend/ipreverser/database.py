"""
IP Reverser: Database Engine and Session Factory
==================================================

What:  Builds the async SQLAlchemy engine and session factory for the SQL record store.
How:   create_db_engine() turns Settings into a pooled async engine;
       create_session_factory() wraps it in an async_sessionmaker.
Who:   SqlRecordStore.from_settings() and the Alembic environment.
When:  Once per process, when the app factory builds its record store.

Connection Pooling Strategy:
    pool_size=20:      Bounded pool, the maximum concurrent connections
    max_overflow=0:    No temporary connections above the bound
    pool_timeout=2:    Waiters give up after 2s (surfaced as StorageError)
    pool_recycle=30:   Connections older than 30s are replaced on checkout
    pool_pre_ping:     Stale connections are detected before use

    The engine is created lazily: no connection is opened until the first
    query, so building the app never blocks on the database.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ipreverser.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the record store
    (`initialize()` calls create_all on it) and Alembic autogenerate.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def create_db_engine(settings: Settings) -> AsyncEngine:
    """
    Create the pooled async engine described by `settings`.

    Echoes SQL when LOG_LEVEL is DEBUG.
    """
    return create_async_engine(
        settings.sqlalchemy_url,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
        echo=settings.log_level == "DEBUG",
    )


# ── Session Factory ───────────────────────────────────────────────────────
def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps attributes readable after commit, so a
    stored row can be copied into a response model outside the session.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
