"""SQLite engine, session factory and commit helper."""

from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from fintrack.config.settings import get_settings
from fintrack.core.exceptions import StoreWriteFailed

Base = declarative_base()

# Milliseconds a writer waits on a locked database before failing
SQLITE_BUSY_TIMEOUT_MS = 5000

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _configure_sqlite(dbapi_connection, connection_record) -> None:
    # The API and a timer-driven refresh may write at the same time
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
    cursor.close()


def build_engine(url: str) -> Engine:
    """Create an engine for a database URL; file-backed SQLite gets WAL and a busy timeout."""
    is_sqlite = url.startswith("sqlite")
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=False,
    )
    if is_sqlite and ":memory:" not in url:
        event.listen(engine, "connect", _configure_sqlite)
    return engine


def _install(engine: Engine) -> None:
    global _engine, _SessionLocal
    _engine = engine
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_engine() -> Engine:
    """Engine for the configured database, created on first use."""
    if _engine is None:
        _install(build_engine(get_settings().get_database_url()))
    return _engine


def get_session_factory() -> sessionmaker:
    get_engine()
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def get_session() -> Session:
    """A new session the caller must close."""
    return get_session_factory()()


def create_tables(engine: Engine) -> None:
    from fintrack.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def init_db() -> None:
    """Create missing tables in the configured database."""
    create_tables(get_engine())


def init_db_with_path(db_path: Path) -> None:
    """Point the module at a SQLite file and create missing tables."""
    reset_database()
    _install(build_engine(f"sqlite:///{db_path}"))
    create_tables(_engine)


def reset_database() -> None:
    """Dispose the engine so the next use reconnects with current settings."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def commit_or_raise(db: Session, action: str) -> None:
    """Commit the session; roll back and raise StoreWriteFailed on any database error."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreWriteFailed(f"Failed to {action}: {exc}") from exc


def flush_or_raise(db: Session, action: str) -> None:
    """Flush pending writes into the open transaction without committing."""
    try:
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreWriteFailed(f"Failed to {action}: {exc}") from exc


def write_or_raise(db: Session, action: str, commit: bool = True) -> None:
    """Commit, or only flush when the caller owns the transaction."""
    if commit:
        commit_or_raise(db, action)
    else:
        flush_or_raise(db, action)
