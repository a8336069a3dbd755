"""Repository package - expose all concrete repositories from one import."""
from .base import BaseRepository
from .key_value_repository import KeyValueRepository
from .favorites_repository import FavoritesRepository
from .settings_repository import SettingsRepository
from .collection_repository import CollectionRepository

__all__ = [
    'BaseRepository',
    'KeyValueRepository',
    'FavoritesRepository',
    'SettingsRepository',
    'CollectionRepository',
]
