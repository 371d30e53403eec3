"""Database access layer using SQLAlchemy Core with raw SQL.

Provides:
- create_db_engine(): engine for SQLite (default) or PostgreSQL (psycopg2)
- txn(): Context manager for short, safe transactions
- fetchone: Query helper returning a row mapping
- migrate(): apply the packaged alembic migrations
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine, RowMapping

_MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"

# Seconds a SQLite writer waits for a concurrent writer to finish
_SQLITE_BUSY_TIMEOUT = 30


def create_db_engine(url: str) -> Engine:
    """Create an engine for the given SQLAlchemy URL.

    SQLite databases get WAL journaling and a busy timeout so concurrent
    request threads queue on the write lock instead of failing.
    """
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT},
        )

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

        return engine

    return create_engine(url, pool_pre_ping=True)


@contextmanager
def txn(engine: Engine) -> Iterator[Connection]:
    """Context manager for a short, safe transaction.

    Commits on successful exit, rolls back on exception.

    Example:
        with txn(engine) as conn:
            conn.execute(text("UPDATE t SET x = :x"), {"x": 1})
    """
    with engine.begin() as conn:
        yield conn


def fetchone(
    conn: Connection,
    query: str,
    params: Mapping[str, Any] | None = None,
) -> RowMapping | None:
    """Execute query and fetch one row as a mapping, or None."""
    return conn.execute(text(query), params or {}).mappings().first()


def migrate(engine: Engine, revision: str = "head") -> None:
    """Upgrade the database schema to `revision`.

    Runs the alembic scripts shipped with the package on a connection
    borrowed from `engine`.
    """
    config = Config()
    config.set_main_option("script_location", str(_MIGRATIONS_DIR))
    with engine.begin() as conn:
        config.attributes["connection"] = conn
        command.upgrade(config, revision)
