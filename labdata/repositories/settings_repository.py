"""Repository for the app settings object ({"primaryColor": ..., ...})."""
import logging

from ..entities import AppSettings, decode_settings, encode_settings
from ..errors import DecodeError
from .key_value_repository import KeyValueRepository

SETTINGS_KEY = 'appSettings'

logger = logging.getLogger('labkit.repository.SettingsRepository')


class SettingsRepository:
    """Persists :class:`~labdata.entities.AppSettings` under ``appSettings``.

    :meth:`load` never raises: an absent slot or one that fails to decode
    yields :meth:`AppSettings.default`.
    """

    def __init__(self, store: KeyValueRepository, key: str = SETTINGS_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> AppSettings:
        raw = self._store.load(self._key)
        if raw is None:
            return AppSettings.default()
        try:
            return decode_settings(raw)
        except DecodeError as exc:
            logger.warning("Stored settings are invalid, using defaults: %s", exc)
            return AppSettings.default()

    def save(self, settings: AppSettings) -> None:
        self._store.save(self._key, encode_settings(settings))
