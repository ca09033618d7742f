"""Database configuration and session management.

SQLite is the default backend. Every connection is configured with:

    - **WAL (Write-Ahead Logging)**: readers are not blocked while an RSVP
      or check-in write is in progress.

    - **Foreign Keys**: SQLite ignores FOREIGN KEY clauses unless this is
      enabled, so an Rsvp or Attendance could otherwise point at a session
      that does not exist.

    - **BEGIN IMMEDIATE**: SQLite has no row locks and ignores
      ``SELECT ... FOR UPDATE``, and pysqlite defers BEGIN until the first
      write. Transactions therefore take the database write lock when they
      start, so a capacity count and the insert that depends on it cannot
      interleave with another writer.

Uniqueness of (session_id, user_id) for Rsvp and Attendance is enforced by
table constraints, not by application code. Writers must expect
``IntegrityError`` on commit and translate it (see ``app.scheduling``).
"""

from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

SQLITE_BUSY_TIMEOUT_SECONDS = 15


def create_app_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine, applying the SQLite connection setup when needed."""
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", SQLITE_BUSY_TIMEOUT_SECONDS)
        kwargs["connect_args"] = connect_args

    engine = create_engine(database_url, **kwargs)
    if is_sqlite:
        configure_sqlite(engine)
    return engine


def configure_sqlite(engine: Engine) -> None:
    """Register the pragma and BEGIN IMMEDIATE listeners on a SQLite engine."""

    @sa_event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        """Configure SQLite pragmas on each new connection.

        These settings are connection-level, not database-level, so they must
        be set each time a new connection is established from the pool.
        """
        # Hand transaction control to the "begin" listener below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @sa_event.listens_for(engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_app_engine(
    settings.database_url,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
