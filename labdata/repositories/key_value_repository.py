"""Repository for the process-wide key-value store ({key: json_value})."""
import json
from typing import Any, Dict

from ..errors import StorageError
from .base import BaseRepository

_ABSENT = object()


class KeyValueRepository(BaseRepository):
    """Persists small named values (favorite IDs, settings) in one JSON file.

    Schema::

        {
            "favoriteCocktails": ["11007", "17222"],
            "appSettings":       {"primaryColor": "blue", ...}
        }

    The file is read once at construction.  Every :meth:`save` rewrites the
    whole mapping; a failed write keeps the new value in memory (unless it
    cannot be serialised) and raises :class:`~labdata.errors.StorageError`.
    """

    def __init__(self, file_path: str = 'defaults.json') -> None:
        super().__init__(file_path)
        raw = self._load({})
        if not isinstance(raw, dict):
            self._log.warning("Ignoring %s: expected a JSON object", file_path)
            raw = {}
        self.data: Dict[str, Any] = raw

    def contains(self, key: str) -> bool:
        return key in self.data

    def load(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*, or *default* when absent."""
        return self.data.get(key, default)

    def save(self, key: str, value: Any) -> None:
        """Store *value* under *key* and persist the whole mapping.

        A value that cannot be serialised is not kept, so it cannot poison
        later writes of other keys.
        """
        previous = self.data.get(key, _ABSENT)
        self.data[key] = value
        try:
            self._save(self.data)
        except StorageError:
            if self._is_serialisable(value):
                raise
            if previous is _ABSENT:
                del self.data[key]
            else:
                self.data[key] = previous
            raise

    @staticmethod
    def _is_serialisable(value: Any) -> bool:
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            return False
        return True

    def delete(self, key: str) -> bool:
        """Remove *key*.  Returns ``True`` if it was present."""
        if key not in self.data:
            return False
        del self.data[key]
        self._save(self.data)
        return True
