import logging

from rechnung.gateway.base import PersistenceGateway
from rechnung.settings import settings

logger = logging.getLogger(__name__)


def get_gateway() -> PersistenceGateway:
    backend = settings.store_backend

    if backend == "local":
        from rechnung.gateway.local import JsonFileGateway

        logger.info("Using store backend: local path=%s", settings.store_local_path)
        return JsonFileGateway(settings.store_local_path)

    if backend == "sqlalchemy":
        from rechnung.db import get_connection
        from rechnung.gateway.sqlalchemy import SQLAlchemyGateway

        logger.info("Using store backend: sqlalchemy")
        return SQLAlchemyGateway(get_connection())

    if backend == "memory":
        from rechnung.gateway.memory import InMemoryGateway

        logger.info("Using store backend: memory (nothing is persisted)")
        return InMemoryGateway()

    raise ValueError(f"Unsupported store backend: {backend}")
