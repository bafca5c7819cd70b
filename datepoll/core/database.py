"""Database engine configuration for the SQL storage backend.

SQLite is the default backend; any SQLAlchemy URL works. For SQLite the
engine enables WAL mode so the background sweep can write while requests
read, and turns on foreign key enforcement so a response can never point at
a missing event.
"""

from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine


def build_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine for ``database_url``.

    Extra keyword arguments go straight to ``create_engine`` (tests pass a
    ``StaticPool`` for in-memory SQLite).
    """
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        # Sessions are used from the request thread pool and the scheduler
        # thread alike.
        kwargs.setdefault("connect_args", {"check_same_thread": False})

    engine = create_engine(database_url, echo=echo, **kwargs)

    if is_sqlite:
        sa_event.listen(engine, "connect", set_sqlite_pragma)

    return engine


def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables(engine: Engine) -> None:
    """Create all database tables."""
    # Import for side effect: registers the tables on SQLModel.metadata.
    import datepoll.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
