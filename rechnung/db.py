import logging

from sqlalchemy import Connection, create_engine
from sqlalchemy.engine import Engine

from rechnung.settings import settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_connection: Connection | None = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(settings.db_url, pool_pre_ping=True)
        logger.info("Database engine created")
    return _engine


def get_connection() -> Connection:
    """Return the process-wide connection; the CLI is the only writer."""
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Singleton DB connection created")
    return _connection
