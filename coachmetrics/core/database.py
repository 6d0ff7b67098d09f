"""
Database connection management.

Builds the engine from settings.DATABASE_URL. Pool settings apply to server
databases only; SQLite uses SQLAlchemy's default pool.
"""
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from coachmetrics.core.config import settings
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine, applying pool settings for non-SQLite URLs."""
    url = database_url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG,
        )

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # Verify connections before using
        echo=settings.DEBUG,
    )


engine = build_engine()


@event.listens_for(engine, "connect")
def on_connect(dbapi_conn, connection_record):
    """Log new connections."""
    logger.debug("New database connection established")


def init_db(bind: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    from coachmetrics import models  # noqa: F401  registers tables on Base

    Base.metadata.create_all(bind=bind or engine)
