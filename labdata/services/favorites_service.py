"""Business logic for the favorite-cocktail set."""
import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional

from ..errors import StorageError
from ..repositories.favorites_repository import FavoritesRepository
from ..state import StateContainer


@dataclass(frozen=True)
class FavoritesState:
    ids: FrozenSet[str] = frozenset()
    last_error: Optional[str] = None


class FavoritesService:
    """Manages the favorite set, delegating persistence to
    :class:`~labdata.repositories.favorites_repository.FavoritesRepository`.

    The set is loaded once at construction and written back after every
    mutation.  A failed write keeps the in-memory change, logs a warning and
    records the message in ``last_error``.
    """

    def __init__(self, repository: FavoritesRepository) -> None:
        self._repo = repository
        self._log = logging.getLogger('labkit.service.favorites')
        self._state = StateContainer(FavoritesState(ids=frozenset(repository.load())))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(self, ids: FrozenSet[str]) -> None:
        try:
            self._repo.save(set(ids))
        except StorageError as exc:
            self._log.warning("Could not save favorites: %s", exc)
            self._state.update(ids=ids, last_error=str(exc))
            return
        self._state.update(ids=ids, last_error=None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def last_error(self) -> Optional[str]:
        return self._state.snapshot().last_error

    def snapshot(self) -> FavoritesState:
        return self._state.snapshot()

    def subscribe(self, callback: Callable[[FavoritesState], None]) -> Callable[[], None]:
        return self._state.subscribe(callback)

    def toggle(self, cocktail_id: str) -> bool:
        """Add *cocktail_id* if absent, remove it if present.

        Returns:
            ``True`` if the ID is a favorite after the call.
        """
        key = str(cocktail_id)
        with self._state.transaction():
            ids = self._state.snapshot().ids
            ids = ids - {key} if key in ids else ids | {key}
            self._persist(ids)
        return key in ids

    def add(self, cocktail_id: str) -> bool:
        """Returns ``True`` if added; ``False`` if already a favorite."""
        key = str(cocktail_id)
        with self._state.transaction():
            ids = self._state.snapshot().ids
            if key in ids:
                return False
            self._persist(ids | {key})
        return True

    def remove(self, cocktail_id: str) -> bool:
        """Returns ``True`` if removed; ``False`` if not a favorite."""
        key = str(cocktail_id)
        with self._state.transaction():
            ids = self._state.snapshot().ids
            if key not in ids:
                return False
            self._persist(ids - {key})
        return True

    def contains(self, cocktail_id: str) -> bool:
        return str(cocktail_id) in self._state.snapshot().ids

    def get_all(self) -> List[str]:
        """Return the favorite IDs, sorted."""
        return sorted(self._state.snapshot().ids)

    def clear(self) -> None:
        """Drop every favorite and remove the stored slot."""
        with self._state.transaction():
            try:
                self._repo.clear()
            except StorageError as exc:
                self._log.warning("Could not clear favorites: %s", exc)
                self._state.update(ids=frozenset(), last_error=str(exc))
                return
            self._state.update(ids=frozenset(), last_error=None)
