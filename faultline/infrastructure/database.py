"""
Database connection bootstrap.

Builds the SQLAlchemy engine from settings and verifies the connection
at startup. A failed connection is reported as a DATABASE_CONNECTION
fault; query-time driver errors are left for the error handler.
"""

import logging

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import OperationalError

from faultline.shared.errors import AppError, FaultKind

logger = logging.getLogger(__name__)


def connect_database(url: str) -> Engine:
    """Create an engine for ``url`` and check that it can connect.

    Args:
        url: SQLAlchemy database URL.

    Returns:
        A connected engine.

    Raises:
        AppError: DATABASE_CONNECTION when the database is unreachable.
    """
    engine = create_engine(url, pool_pre_ping=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as exc:
        engine.dispose()
        logger.error("Error connecting to database: %s", type(exc).__name__)
        raise AppError(FaultKind.DATABASE_CONNECTION) from exc
    logger.info("Connected to database %s", engine.url.render_as_string(hide_password=True))
    return engine
