from __future__ import annotations

import logging

from pydantic import ValidationError

from rechnung.constants import SETTINGS_KEY
from rechnung.gateway.base import PersistenceGateway
from rechnung.models.business_settings import BusinessSettings, default_business_settings

logger = logging.getLogger(__name__)


def read_settings(gateway: PersistenceGateway) -> BusinessSettings:
    """Read the stored settings, filling missing top-level keys from the defaults."""
    defaults = default_business_settings()
    stored = gateway.get(SETTINGS_KEY)
    if not isinstance(stored, dict):
        return defaults
    try:
        return BusinessSettings.model_validate({**defaults.to_json(), **stored})
    except ValidationError:
        logger.exception("Stored settings are invalid, falling back to defaults")
        return defaults


class SettingsService:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway
        self._settings = default_business_settings()

    def load(self) -> BusinessSettings:
        self._settings = read_settings(self.gateway)
        logger.debug("Settings loaded: name=%r", self._settings.name)
        return self._settings

    def get(self) -> BusinessSettings:
        return self._settings

    def update(self, new_settings: BusinessSettings) -> BusinessSettings:
        self.gateway.set(SETTINGS_KEY, new_settings.to_json())
        self._settings = new_settings
        logger.info("Settings saved: name=%r", new_settings.name)
        return new_settings

    def reset(self) -> BusinessSettings:
        defaults = default_business_settings()
        self.gateway.set(SETTINGS_KEY, defaults.to_json())
        self._settings = defaults
        logger.info("Settings reset to defaults")
        return defaults
