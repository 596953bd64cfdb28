from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from rechnung.constants import (
    CLIENTS_KEY,
    DATA_KEYS,
    DATA_VERSION,
    INVOICES_KEY,
    LOCAL_TZ,
    SETTINGS_KEY,
    VERSION_KEY,
)
from rechnung.errors import ImportDataError, PersistenceError
from rechnung.gateway.base import PersistenceGateway
from rechnung.models.business_settings import BusinessSettings, default_business_settings
from rechnung.models.client import Client
from rechnung.models.invoice import Invoice
from rechnung.services.settings_service import read_settings

logger = logging.getLogger(__name__)


class DataService:
    """Whole-store operations: version check, export, import and clear."""

    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    def ensure_schema_version(self) -> bool:
        """Wipe all data when the stored version marker differs. Returns True if a reset happened."""
        stored = self.gateway.get(VERSION_KEY)
        if stored == DATA_VERSION:
            return False
        for key in DATA_KEYS:
            self.gateway.delete(key)
        self.gateway.set(VERSION_KEY, DATA_VERSION)
        logger.warning("Data version %r != %r, store reset", stored, DATA_VERSION)
        return True

    def export_data(self) -> str:
        data = {
            "settings": read_settings(self.gateway).to_json(),
            "invoices": self.gateway.get(INVOICES_KEY) or [],
            "clients": self.gateway.get(CLIENTS_KEY) or [],
            "exportedAt": datetime.now(LOCAL_TZ).isoformat(),
        }
        logger.info(
            "Exported %d invoices and %d clients",
            len(data["invoices"]),
            len(data["clients"]),
        )
        return json.dumps(data, indent=2, ensure_ascii=False)

    @staticmethod
    def _validate(payload: dict[str, Any]) -> dict[str, Any]:
        """Turn the payload into the exact values to store, or raise ImportDataError."""
        writes: dict[str, Any] = {}
        try:
            if payload.get("settings") is not None:
                if not isinstance(payload["settings"], dict):
                    raise ImportDataError("'settings' must be an object")
                merged = {**default_business_settings().to_json(), **payload["settings"]}
                writes[SETTINGS_KEY] = BusinessSettings.model_validate(merged).to_json()
            if payload.get("invoices") is not None:
                if not isinstance(payload["invoices"], list):
                    raise ImportDataError("'invoices' must be a list")
                writes[INVOICES_KEY] = [Invoice.model_validate(i).to_json() for i in payload["invoices"]]
            if payload.get("clients") is not None:
                if not isinstance(payload["clients"], list):
                    raise ImportDataError("'clients' must be a list")
                writes[CLIENTS_KEY] = [Client.model_validate(c).to_json() for c in payload["clients"]]
        except ValidationError as exc:
            raise ImportDataError(f"Invalid import data: {exc.error_count()} validation error(s)") from exc
        return writes

    def import_data(self, text: str) -> list[str]:
        """Apply an export document. Returns the keys that were written.

        Only the sections present are replaced. Nothing is written unless the
        whole payload validates; if a write fails midway the previous values
        are put back.
        """
        try:
            payload = json.loads(text)
        except ValueError as exc:
            logger.warning("Import failed: malformed JSON (%s)", exc)
            raise ImportDataError(f"Malformed JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ImportDataError("Import data must be a JSON object")

        writes = self._validate(payload)
        previous = {key: self.gateway.get(key) for key in writes}
        written: list[str] = []
        try:
            for key, value in writes.items():
                self.gateway.set(key, value)
                written.append(key)
        except PersistenceError as exc:
            logger.exception("Import failed while writing, restoring %d key(s)", len(written))
            for key in written:
                if previous[key] is None:
                    self.gateway.delete(key)
                else:
                    self.gateway.set(key, previous[key])
            raise ImportDataError(f"Could not store imported data: {exc}") from exc

        logger.info("Imported sections: %s", ", ".join(written) or "none")
        return written

    def clear_data(self) -> None:
        for key in DATA_KEYS:
            self.gateway.delete(key)
        logger.info("All data cleared")
