"""
Engine and session factory.
The lease engine itself only ever receives a Session; this module is the
wiring the embedding application uses to obtain one.
"""
import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from leasedesk.core.config import get_settings
from leasedesk.db.base import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create an engine; SQLite gets foreign keys switched on."""
    url = database_url or get_settings().DATABASE_URL
    is_sqlite = url.lower().startswith("sqlite")

    engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {"connect_timeout": 10},
        echo=echo,
        pool_pre_ping=not is_sqlite,
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create every lease-engine table that does not exist yet."""
    # Import models so they're registered with Base
    import leasedesk.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("[DB] Lease engine tables initialized")


def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Yield a session and always close it (generator dependency style)."""
    db = factory()
    try:
        yield db
    finally:
        db.close()
