"""
Output database connection and session management.
"""

import logging
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from plaincompare.core.models import Base

logger = logging.getLogger(__name__)


def create_output_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine for the output mapping database.

    For file-backed SQLite the parent directory is created and WAL journaling
    is enabled so readers keep the old snapshot until a publish commits.
    """
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"

    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,  # Set to True for SQL debugging
    )

    if is_sqlite and url.database and url.database != ":memory:":
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def create_tables(engine: Engine) -> None:
    """
    Create all output tables if they don't exist.

    Idempotent - safe to call multiple times.
    """
    logger.info("Creating output tables if they don't exist...")
    Base.metadata.create_all(bind=engine)
    logger.info("Output tables ready")


def get_session_factory(engine: Engine) -> sessionmaker:
    """Build a session factory bound to the given engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
