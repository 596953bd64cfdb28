import json
import logging
from typing import Any

from rechnung.errors import PersistenceError
from rechnung.gateway.base import PersistenceGateway

logger = logging.getLogger(__name__)


class InMemoryGateway(PersistenceGateway):
    """Dict-backed gateway. Values are kept serialized so callers never share state with the store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.exception("Value for %s is not JSON-serializable", key)
            raise PersistenceError(f"Cannot store {key}: {exc}") from exc
        self._data[key] = raw
        logger.debug("Stored %s (%d bytes) in memory", key, len(raw))

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
