"""Database base configuration."""
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import AsyncAdaptedQueuePool

# Execution option read by the BEGIN hook: "DEFERRED" (reads) or "IMMEDIATE" (writes).
BEGIN_MODE_OPTION = "sqlite_begin_mode"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def sqlite_url(database_path: str) -> str:
    """Build the aiosqlite URL for a database file, creating its directory."""
    if database_path == ":memory:":
        raise ValueError("database_path must be a file; WAL mode needs one")
    path = Path(database_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{path}"


def _install_sqlite_hooks(engine: AsyncEngine, busy_timeout_ms: int) -> None:
    """Per-connection pragmas, and SQLAlchemy-controlled BEGIN.

    The driver's own implicit BEGIN is disabled so each transaction can choose
    between a deferred read snapshot and an up-front write lock.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        finally:
            cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get(BEGIN_MODE_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def build_engine(
    database_path: str,
    pool_size: int = 4,
    pool_timeout: float = 10.0,
    busy_timeout_ms: int = 5000,
    echo: bool = False,
) -> AsyncEngine:
    """Async SQLite engine with a bounded pool (no overflow connections)."""
    engine = create_async_engine(
        sqlite_url(database_path),
        echo=echo,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=pool_size,
        max_overflow=0,
        pool_timeout=pool_timeout,
        connect_args={"timeout": busy_timeout_ms / 1000},
    )
    _install_sqlite_hooks(engine, busy_timeout_ms)
    return engine


# Note: models are imported by infra/db/store.py so they register with Base
# before schema creation; importing them here would be circular.
