"""Repository for the favorite cocktail IDs (["<id>", ...])."""
from typing import Set

from .key_value_repository import KeyValueRepository

FAVORITES_KEY = 'favoriteCocktails'


class FavoritesRepository:
    """Persists the favorite set as a JSON array of strings under
    ``favoriteCocktails`` in the shared key-value store.

    IDs stored as integers by older builds are normalised to strings on load.
    A slot that is not an array is treated as empty.
    """

    def __init__(self, store: KeyValueRepository, key: str = FAVORITES_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> Set[str]:
        raw = self._store.load(self._key, [])
        if not isinstance(raw, list):
            return set()
        return {str(x) for x in raw if isinstance(x, (str, int)) and not isinstance(x, bool)}

    def save(self, favorites: Set[str]) -> None:
        """Persist *favorites* (sorted, so the file diff is stable)."""
        self._store.save(self._key, sorted(favorites))

    def clear(self) -> bool:
        return self._store.delete(self._key)
