"""
IP Reverser: Record Store Interface and Implementations
=========================================================

What:  Persistence contract for IP records plus its two implementations.
How:   RecordStore is the abstract interface. SqlRecordStore is the production
       implementation over a pooled async SQLAlchemy engine; InMemoryRecordStore
       is a process-local double used by tests and local runs.
Who:   ReversalService writes and lists through it; the lifespan handler
       initializes and closes it; GET /health/store probes it.

Connection Handling (SqlRecordStore):
    Every operation opens its own session inside `async with`. The session
    checks a connection out of the pool on first use and returns it when the
    block exits, whether the body succeeded or raised. When all connections
    are busy, the checkout waits up to DB_POOL_TIMEOUT seconds and then
    fails; that failure surfaces as StorageError like any other.

Error Translation:
    Any driver or pool exception becomes StorageError (store, list_recent)
    or StartupError (initialize). health_check() never raises.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List

from pydantic import ValidationError
from sqlalchemy import desc, select, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ipreverser.config import Settings
from ipreverser.database import Base, create_db_engine, create_session_factory
from ipreverser.exceptions import InvalidInputError, StartupError, StorageError
from ipreverser.models.ip_record import IPRecordRow
from ipreverser.schemas.ip_record import IPRecord

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise InvalidInputError(message="limit must be a positive integer", value=limit)


class RecordStore(ABC):
    """
    Abstract persistence interface for IP records.

    Contract:
        - initialize() is idempotent and safe on every process start
        - store() returns a copy including the store-assigned id and timestamp
        - list_recent() returns newest first, at most `limit` records
        - health_check() returns a bool and never raises
        - close() releases pooled resources
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Ensure the persistent schema exists.

        Raises:
            StartupError: The schema could not be created.
        """
        ...

    @abstractmethod
    async def store(self, original_ip: str, reversed_ip: str) -> IPRecord:
        """
        Persist one record.

        Raises:
            StorageError: Connectivity, pool exhaustion, or constraint failure.
        """
        ...

    @abstractmethod
    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[IPRecord]:
        """
        Most recent records first, bounded by `limit`.

        Raises:
            InvalidInputError: limit < 1.
            StorageError: The query failed.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the store answers a trivial round trip."""
        ...

    async def close(self) -> None:
        """Release resources. No-op unless the implementation holds any."""
        return None


# ══════════════════════════════════════════════════════════════════════════
# SQL Implementation
# ══════════════════════════════════════════════════════════════════════════


class SqlRecordStore(RecordStore):
    """
    Record store backed by PostgreSQL (or any async SQLAlchemy backend).

    Args:
        engine:              Async engine owning the connection pool.
        init_retry_attempts: Schema creation attempts before StartupError.
        init_retry_max_wait: Ceiling in seconds for the backoff between attempts.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        init_retry_attempts: int = 1,
        init_retry_max_wait: float = 10.0,
    ):
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = create_session_factory(engine)
        self._init_retry_attempts = init_retry_attempts
        self._init_retry_max_wait = init_retry_max_wait

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqlRecordStore":
        """Build a store with a pooled engine configured from `settings`."""
        return cls(
            engine=create_db_engine(settings),
            init_retry_attempts=settings.db_init_retry_attempts,
            init_retry_max_wait=settings.db_init_retry_max_wait,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def initialize(self) -> None:
        """
        Create `ip_records` and its indexes when missing.

        create_all() checks for each table first, so repeated calls are
        no-ops. Transient connection failures are retried with exponential
        backoff and jitter; the last failure becomes StartupError.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._init_retry_attempts),
                wait=wait_exponential_jitter(initial=1, max=self._init_retry_max_wait, jitter=1),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    async with self._engine.begin() as conn:
                        await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            logger.error("Database initialization failed: %s", str(e), exc_info=True)
            raise StartupError(
                context={
                    "error_type": type(e).__name__,
                    "attempts": self._init_retry_attempts,
                },
            ) from e

        logger.info("Database initialized successfully")

    async def store(self, original_ip: str, reversed_ip: str) -> IPRecord:
        """
        INSERT one row and return its copy.

        The id comes back from the flush; created_at is set on the row before
        insert, so no extra SELECT is needed.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = IPRecordRow(original_ip=original_ip, reversed_ip=reversed_ip)
                    session.add(row)
                    await session.flush()
                    # Inside the transaction so a rejected copy rolls the insert back
                    record = IPRecord.model_validate(row)
        except Exception as e:
            logger.error(
                "Failed to store IP record %s -> %s: %s",
                original_ip,
                reversed_ip,
                str(e),
                exc_info=True,
            )
            raise StorageError(
                message="Could not store the IP record",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Stored IP record: %s -> %s", original_ip, reversed_ip)
        return record

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[IPRecord]:
        """
        Query plan:
            SELECT ... FROM ip_records ORDER BY created_at DESC, id DESC LIMIT :limit
            → idx_ip_records_created_at backward scan
        """
        _check_limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(IPRecordRow)
                    .order_by(desc(IPRecordRow.created_at), desc(IPRecordRow.id))
                    .limit(limit)
                )
                return [IPRecord.model_validate(row) for row in result.scalars().all()]
        except Exception as e:
            logger.error("Failed to fetch records: %s", str(e), exc_info=True)
            raise StorageError(
                message="Could not fetch IP records",
                context={"error_type": type(e).__name__, "limit": limit},
            ) from e

    async def health_check(self) -> bool:
        """Run SELECT 1 on a pooled connection; any failure means False."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed: %s", str(e))
            return False

    async def close(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Implementation
# ══════════════════════════════════════════════════════════════════════════


class InMemoryRecordStore(RecordStore):
    """
    Process-local record store.

    Records live in a list guarded by an asyncio.Lock. Setting `healthy`
    to False makes every operation behave as if the database were down,
    which lets handler tests cover the failure paths.
    """

    def __init__(self, healthy: bool = True):
        self.healthy = healthy
        self.initialized = False
        self._records: List[IPRecord] = []
        self._next_id = 1
        self._lock = asyncio.Lock()

    def _ensure_reachable(self, operation: str) -> None:
        if not self.healthy:
            raise StorageError(
                message="In-memory store is marked unavailable",
                context={"operation": operation},
            )

    async def initialize(self) -> None:
        if not self.healthy:
            raise StartupError(context={"store": "memory"})
        self.initialized = True

    async def store(self, original_ip: str, reversed_ip: str) -> IPRecord:
        self._ensure_reachable("store")
        async with self._lock:
            try:
                record = IPRecord(
                    id=self._next_id,
                    original_ip=original_ip,
                    reversed_ip=reversed_ip,
                    created_at=datetime.now(timezone.utc),
                )
            except ValidationError as e:
                raise StorageError(
                    message="Could not store the IP record",
                    context={"operation": "store", "error_type": type(e).__name__},
                ) from e
            self._next_id += 1
            self._records.append(record)
        return record

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[IPRecord]:
        _check_limit(limit)
        self._ensure_reachable("list_recent")
        async with self._lock:
            ordered = sorted(
                self._records,
                key=lambda r: (r.created_at, r.id),
                reverse=True,
            )
        return ordered[:limit]

    async def health_check(self) -> bool:
        return self.healthy

    def __len__(self) -> int:
        return len(self._records)
