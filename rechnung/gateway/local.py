import json
import logging
import os
from pathlib import Path
from typing import Any

from rechnung.errors import PersistenceError
from rechnung.gateway.base import PersistenceGateway

logger = logging.getLogger(__name__)

SUFFIX = ".json"


class JsonFileGateway(PersistenceGateway):
    """One JSON file per key inside ``base_dir``."""

    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}{SUFFIX}"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            value = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.exception("Failed to read %s from %s", key, path)
            raise PersistenceError(f"Cannot read {key}: {exc}") from exc
        logger.debug("Read %s from %s", key, path)
        return value

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(SUFFIX + ".tmp")
        try:
            raw = json.dumps(value, ensure_ascii=False, indent=2)
            tmp.write_text(raw, encoding="utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.exception("Failed to write %s to %s", key, path)
            tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot store {key}: {exc}") from exc
        logger.debug("Saved %s (%d bytes) to %s", key, len(raw), path)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.exception("Failed to delete %s", path)
            raise PersistenceError(f"Cannot delete {key}: {exc}") from exc
        logger.debug("Deleted %s", path)

    def keys(self) -> list[str]:
        return sorted(p.name[: -len(SUFFIX)] for p in self.base_dir.glob(f"*{SUFFIX}"))
