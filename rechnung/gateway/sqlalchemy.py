from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import Connection, text
from sqlalchemy.exc import SQLAlchemyError

from rechnung.errors import PersistenceError
from rechnung.gateway.base import PersistenceGateway

logger = logging.getLogger(__name__)

SCHEMA_DDL = "CREATE TABLE IF NOT EXISTS kv_store (store_key VARCHAR(255) PRIMARY KEY, store_value TEXT NOT NULL)"


class SQLAlchemyGateway(PersistenceGateway):
    """Key-value rows in a single ``kv_store`` table; one commit per write."""

    def __init__(self, conn: Connection) -> None:
        self.conn = conn
        try:
            self.conn.execute(text(SCHEMA_DDL))
            self.conn.commit()
        except SQLAlchemyError as exc:
            self.conn.rollback()
            logger.exception("Failed to create kv_store table")
            raise PersistenceError(f"Cannot initialize store: {exc}") from exc

    def get(self, key: str) -> Any | None:
        try:
            row = (
                self.conn.execute(text("SELECT store_value FROM kv_store WHERE store_key = :key"), {"key": key})
                .mappings()
                .fetchone()
            )
        except SQLAlchemyError as exc:
            self.conn.rollback()
            logger.exception("Failed to read %s", key)
            raise PersistenceError(f"Cannot read {key}: {exc}") from exc
        if row is None:
            return None
        try:
            return json.loads(row["store_value"])
        except ValueError as exc:
            logger.exception("Stored value for %s is not valid JSON", key)
            raise PersistenceError(f"Cannot read {key}: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.exception("Value for %s is not JSON-serializable", key)
            raise PersistenceError(f"Cannot store {key}: {exc}") from exc
        try:
            self.conn.execute(text("DELETE FROM kv_store WHERE store_key = :key"), {"key": key})
            self.conn.execute(
                text("INSERT INTO kv_store (store_key, store_value) VALUES (:key, :value)"),
                {"key": key, "value": raw},
            )
            self.conn.commit()
        except SQLAlchemyError as exc:
            self.conn.rollback()
            logger.exception("Failed to write %s", key)
            raise PersistenceError(f"Cannot store {key}: {exc}") from exc
        logger.debug("Stored %s (%d bytes)", key, len(raw))

    def delete(self, key: str) -> None:
        try:
            self.conn.execute(text("DELETE FROM kv_store WHERE store_key = :key"), {"key": key})
            self.conn.commit()
        except SQLAlchemyError as exc:
            self.conn.rollback()
            logger.exception("Failed to delete %s", key)
            raise PersistenceError(f"Cannot delete {key}: {exc}") from exc

    def keys(self) -> list[str]:
        rows = self.conn.execute(text("SELECT store_key FROM kv_store ORDER BY store_key")).fetchall()
        return [row[0] for row in rows]
