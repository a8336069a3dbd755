"""Facade for the cocktail search screen and the favorites screen."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from ..entities import Cocktail
from ..errors import ClientError
from ..state import FeedStatus, RequestSequencer, StateContainer
from .favorites_service import FavoritesService

NOT_FOUND_MESSAGE = "No cocktails found"


@dataclass(frozen=True)
class CocktailSearchState:
    status: FeedStatus = FeedStatus.IDLE
    search_text: str = ''
    cocktails: Tuple[Cocktail, ...] = ()
    error_message: Optional[str] = None
    not_found: bool = False

    @property
    def is_loading(self) -> bool:
        return self.status is FeedStatus.LOADING

    @property
    def display_message(self) -> Optional[str]:
        """Error text, or the not-found notice for an empty result."""
        if self.error_message:
            return self.error_message
        return NOT_FOUND_MESSAGE if self.not_found else None


class CocktailSearchService:
    """Searches drinks by name and resolves the favorite set to drinks.

    An empty result is a successful load (``LOADED`` with ``not_found``),
    not an error.  A failed search keeps the previous results on screen.

    Args:
        client:      A :class:`api_clients.CocktailAPIClient` (or any object
                     with ``search``, ``lookup`` and ``lookup_many``).
        favorites:   The favorite-set service shared with other screens.
        max_workers: Bound on concurrent lookups when resolving favorites.
    """

    def __init__(self, client: Any, favorites: FavoritesService,
                 max_workers: Optional[int] = None) -> None:
        self._client = client
        self._favorites = favorites
        self._max_workers = max_workers
        self._requests = RequestSequencer()
        self._state: StateContainer[CocktailSearchState] = StateContainer(CocktailSearchState())
        self._log = logging.getLogger('labkit.service.cocktails')

    def snapshot(self) -> CocktailSearchState:
        return self._state.snapshot()

    def subscribe(self, callback: Callable[[CocktailSearchState], None]) -> Callable[[], None]:
        return self._state.subscribe(callback)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def set_search_text(self, text: str) -> None:
        self._state.update(search_text=text or '')

    def search(self, text: Optional[str] = None) -> List[Cocktail]:
        """Run a name search for *text* (default: the current search text).

        Blank text clears the results without a request.

        Returns:
            The results shown after the call.
        """
        if text is not None:
            self.set_search_text(text)
        term = self._state.snapshot().search_text.strip()

        if not term:
            with self._state.transaction():
                # Invalidate any search still in flight
                self._requests.begin()
                self._state.update(status=FeedStatus.IDLE, cocktails=(),
                                   error_message=None, not_found=False)
            return []

        with self._state.transaction():
            self._state.update(status=FeedStatus.LOADING, error_message=None, not_found=False)
            token = self._requests.begin()
        try:
            results = self._client.search(term)
        except ClientError as exc:
            self._log.warning("Search for %r failed: %s", term, exc)
            with self._state.transaction():
                if self._requests.is_current(token):
                    self._state.update(status=FeedStatus.ERRORED,
                                       error_message=f"Search failed: {exc.message}")
                return list(self._state.snapshot().cocktails)

        with self._state.transaction():
            if not self._requests.is_current(token):
                self._log.debug("Dropping stale results for %r", term)
                return list(self._state.snapshot().cocktails)
            self._state.update(status=FeedStatus.LOADED, cocktails=tuple(results),
                               error_message=None, not_found=not results)
        self._log.debug("Search for %r returned %d drink(s)", term, len(results))
        return list(results)

    def clear_search(self) -> None:
        with self._state.transaction():
            self._requests.begin()
            self._state.set(CocktailSearchState())

    # ------------------------------------------------------------------
    # Lookup & favorites
    # ------------------------------------------------------------------

    def lookup(self, cocktail_id: str) -> Optional[Cocktail]:
        """Return one drink by ID, or ``None`` when it is unknown or the request fails."""
        try:
            return self._client.lookup(cocktail_id)
        except ClientError as exc:
            self._log.warning("Lookup of cocktail %s failed: %s", cocktail_id, exc)
            return None

    def toggle_favorite(self, cocktail_id: str) -> bool:
        return self._favorites.toggle(cocktail_id)

    def is_favorite(self, cocktail_id: str) -> bool:
        return self._favorites.contains(cocktail_id)

    def favorite_cocktails(self) -> List[Cocktail]:
        """Resolve every favorite ID to a drink, sorted by name.

        IDs that fail to resolve are skipped.
        """
        ids = self._favorites.get_all()
        if not ids:
            return []
        drinks = self._client.lookup_many(ids, max_workers=self._max_workers)
        return sorted(drinks, key=lambda d: d.name)
