"""Database engine and session lifecycle."""

import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lostfound.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None
# Held for the lifetime of each session when every session shares one connection
_shared_connection_lock = None

logger = get_logger(__name__, component="database")


def init_database(database_url: str) -> None:
    """Create the engine and session factory, then create the schema.

    Call once at startup. For SQLite files the parent directory is created
    if needed, and every transaction takes the write lock up front so
    concurrent matching runs queue on the busy timeout instead of failing.
    ``sqlite:///:memory:`` lives on a single connection: sessions on it are
    serialized, so background runs against it execute one at a time.

    Args:
        database_url: SQLAlchemy URL, e.g. ``sqlite:///./data/lostfound.db``

    Raises:
        DatabaseConnectionError: If initialization fails
    """
    global _engine, _session_factory, _shared_connection_lock

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    try:
        logger.info(
            "Initializing database",
            extra={"event": "database.initializing", "database_url": _redact_url(database_url)},
        )

        is_sqlite = database_url.startswith("sqlite")
        engine_kwargs = {"echo": False, "pool_pre_ping": True}
        shared_connection = False

        if is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if _is_memory_url(database_url):
                engine_kwargs["poolclass"] = StaticPool
                shared_connection = True
            else:
                db_file = Path(make_url(database_url).database)
                if not db_file.parent.exists():
                    logger.info(f"Creating database directory: {db_file.parent}")
                    db_file.parent.mkdir(parents=True, exist_ok=True)

        _engine = create_engine(database_url, **engine_kwargs)

        if is_sqlite:
            _configure_sqlite(_engine)

        _validate_connection(_engine)

        _session_factory = sessionmaker(
            bind=_engine,
            autoflush=True,
            expire_on_commit=False,
        )
        _shared_connection_lock = threading.RLock() if shared_connection else None

        from .schema import create_schema

        create_schema(_engine)

        logger.info(
            "Database initialized successfully",
            extra={"event": "database.initialised", "database_url": _redact_url(database_url)},
        )

    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True)
        raise DatabaseConnectionError(error_msg) from e


def _is_memory_url(database_url: str) -> bool:
    database = make_url(database_url).database
    return not database or database == ":memory:"


def _configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys and let SQLAlchemy own BEGIN so SAVEPOINTs behave.

    pysqlite defers BEGIN until the first DML statement, which breaks
    nested transactions; disabling its own handling and emitting BEGIN on
    the engine "begin" event is the recipe from the SQLAlchemy docs.

    BEGIN IMMEDIATE takes the write lock when the transaction starts. A run
    reads candidates before writing notifications, and with a deferred BEGIN
    two such runs deadlock on the lock upgrade and SQLite fails the write at
    once without honouring the busy timeout.
    """

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _validate_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def _redact_url(url: str) -> str:
    """Hide the password of a database URL for logging."""
    if url.startswith("sqlite"):
        return url
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return "<unparseable url>"


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Provide a session that commits on success and rolls back on error.

    Raises:
        DatabaseConnectionError: If init_database() has not been called

    Example:
        >>> with get_session() as session:
        ...     repo = ItemRepository(session)
        ...     item = repo.get_by_id("item-1")
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    with _shared_connection_lock or nullcontext():
        session = _session_factory()
        try:
            yield session
            session.commit()
            logger.debug(
                "Database session committed", extra={"event": "database.session.committed"}
            )
        except Exception as e:
            session.rollback()
            logger.warning(
                f"Database session rolled back due to exception: {e}",
                extra={"event": "database.session.rolled_back", "error_type": type(e).__name__},
            )
            raise
        finally:
            session.close()


def get_engine() -> Engine:
    """Return the engine created by init_database().

    Raises:
        DatabaseConnectionError: If the database is not initialized
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )
    return _engine


def close_database() -> None:
    """Dispose of the engine. Safe to call when not initialized."""
    global _engine, _session_factory, _shared_connection_lock

    if _engine is not None:
        _engine.dispose()
        _engine = None
        _session_factory = None
        _shared_connection_lock = None
        logger.info("Database connections closed", extra={"event": "database.closed"})
