"""Durable store: transactional access to the SQLite database.

Writes run under ``BEGIN IMMEDIATE`` so concurrent ingestions serialize on the
database write lock instead of failing at commit time. Reads run under a
deferred transaction and see one consistent WAL snapshot.

Driver errors never leave this module raw: contention becomes
``StoreBusyError`` (retried with backoff, then surfaced as 503) and anything
else becomes ``StoreFatalError``.
"""
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from claudiator.domain.common.errors import DomainError, StoreBusyError, StoreFatalError
from claudiator.infra.db.base import BEGIN_MODE_OPTION, Base, build_engine
from claudiator.infra.db import models  # noqa: F401  (registers tables on Base.metadata)
from claudiator.infra.db.repositories import SqlRepositories

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BUSY_MARKERS = (
    "database is locked",
    "database is busy",
    "database table is locked",
)


def translate_error(error: Exception) -> DomainError:
    """Map a SQLAlchemy/driver error onto the store's error taxonomy."""
    if isinstance(error, sa_exc.TimeoutError):
        # Connection pool exhausted.
        return StoreBusyError()
    if isinstance(error, sa_exc.OperationalError):
        text = str(error.orig if error.orig is not None else error).lower()
        if any(marker in text for marker in _BUSY_MARKERS):
            return StoreBusyError()
    return StoreFatalError()


def _log_retry(retry_state):
    attempt = retry_state.attempt_number
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning("Store busy. Retrying in %.2fs (attempt %d)...", wait, attempt)


class DurableStore:
    """SQLite-backed implementation of the telemetry store."""

    def __init__(
        self,
        engine: AsyncEngine,
        retry_attempts: int = 5,
        retry_min_wait: float = 0.05,
        retry_max_wait: float = 1.0,
    ):
        self.engine = engine
        self.retry_attempts = max(1, retry_attempts)
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings) -> "DurableStore":
        engine = build_engine(
            settings.database_path,
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_pool_timeout,
            busy_timeout_ms=settings.db_busy_timeout_ms,
            echo=settings.database_echo,
        )
        return cls(
            engine,
            retry_attempts=settings.store_retry_attempts,
            retry_min_wait=settings.store_retry_min_wait,
            retry_max_wait=settings.store_retry_max_wait,
        )

    async def init_schema(self) -> None:
        """Create any missing tables and indexes. Safe to run on every start."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except sa_exc.SQLAlchemyError as e:
            logger.error("Schema initialization failed: %s", e, exc_info=True)
            raise StoreFatalError("Schema initialization failed") from e
        logger.info("Database schema ready (%s)", self.engine.url.database)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def transaction(self, work: Callable[[SqlRepositories], Awaitable[T]]) -> T:
        """Run ``work`` in one write transaction; all of it commits or none of it does."""
        return await self._with_retry(work, write=True)

    async def read(self, work: Callable[[SqlRepositories], Awaitable[T]]) -> T:
        """Run ``work`` against one consistent snapshot."""
        return await self._with_retry(work, write=False)

    async def _with_retry(self, work, write: bool):
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(StoreBusyError),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(
                multiplier=self.retry_min_wait,
                min=self.retry_min_wait,
                max=self.retry_max_wait,
            ),
            before_sleep=_log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._run(work, write)

    async def _run(self, work, write: bool):
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    if write:
                        await session.connection(
                            execution_options={BEGIN_MODE_OPTION: "IMMEDIATE"}
                        )
                    return await work(SqlRepositories.bind(session))
        except DomainError:
            raise
        except sa_exc.SQLAlchemyError as e:
            error = translate_error(e)
            if isinstance(error, StoreFatalError):
                logger.error("Store operation failed: %s", e, exc_info=True)
            else:
                logger.debug("Store contention: %s", e)
            raise error from e
