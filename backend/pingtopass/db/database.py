import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pingtopass.core.config import settings

logger = logging.getLogger(__name__)


def create_db_engine(url: str, **kwargs) -> Engine:
    """
    Create an engine for a SQLite-compatible URL.

    Local SQLite connections get ``check_same_thread=False`` so a session can
    be used from FastAPI's threadpool, and every connection enables foreign
    key enforcement.
    """
    connect_args = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    engine = create_engine(url, connect_args=connect_args, echo=settings.DATABASE_ECHO, **kwargs)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


# Engine and session factory for the configured database
engine = create_db_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a block as one atomic unit.

    Commits when the block finishes and rolls everything back if it raises.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def check_connection(db: Session) -> bool:
    """Run ``SELECT 1`` and report whether a row came back."""
    row = db.execute(text("SELECT 1 AS test")).first()
    return row is not None and row[0] == 1
