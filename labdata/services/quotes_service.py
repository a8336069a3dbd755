"""Facade for the quotes browser: random quote, paged list, filters and saved quotes."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..entities import Quote
from ..errors import ClientError
from ..repositories.collection_repository import CollectionRepository
from ..state import FeedStatus, RequestSequencer, StateContainer

SAVED_QUOTES_FILE = 'saved_quotes.json'
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class QuotesState:
    random_status: FeedStatus = FeedStatus.IDLE
    list_status: FeedStatus = FeedStatus.IDLE
    current_quote: Optional[Quote] = None
    quotes: Tuple[Quote, ...] = ()
    saved_quotes: Tuple[Quote, ...] = ()
    error_message: Optional[str] = None
    current_page: int = 0
    search_text: str = ''
    selected_author: Optional[str] = None
    storage_warning: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return FeedStatus.LOADING in (self.random_status, self.list_status)


def filter_quotes(quotes: Iterable[Quote], search_text: str = '',
                  author: Optional[str] = None) -> List[Quote]:
    """Case-insensitive substring match on text or author, AND exact author."""
    needle = (search_text or '').casefold()
    result = []
    for quote in quotes:
        if needle and needle not in quote.quote.casefold() \
                and needle not in quote.author.casefold():
            continue
        if author is not None and quote.author != author:
            continue
        result.append(quote)
    return result


class QuotesService:
    """Owns the quotes screens' state.

    Rules
    -----
    * Pages are appended, never replaced; ``current_page`` is zero-based.
      Quotes repeated across pages are kept unless *dedupe_pages* is set.
    * A failed request sets ``error_message`` and leaves the current quote
      and the accumulated list untouched.
    * A response that completes after a newer request of the same feed was
      issued is discarded.
    * Saved quotes are unique by ID and rewritten to *saved_file_name* after
      every change; a failed write is reported in ``storage_warning``.

    Args:
        client:          A :class:`api_clients.QuotesAPIClient` (or any
                         object with ``random_quote`` and ``get_quotes``).
        collection:      Store for the saved-quotes file.
        page_size:       Quotes per page.
        saved_file_name: File name of the saved collection.
        dedupe_pages:    Skip quotes whose ID is already in the list.
    """

    def __init__(self, client: Any, collection: CollectionRepository,
                 page_size: int = DEFAULT_PAGE_SIZE,
                 saved_file_name: str = SAVED_QUOTES_FILE,
                 dedupe_pages: bool = False) -> None:
        self._client = client
        self._collection = collection
        self.page_size = page_size
        self.saved_file_name = saved_file_name
        self.dedupe_pages = dedupe_pages
        self._random_requests = RequestSequencer()
        self._list_requests = RequestSequencer()
        self._log = logging.getLogger('labkit.service.quotes')
        self._state: StateContainer[QuotesState] = StateContainer(
            QuotesState(saved_quotes=tuple(collection.load(saved_file_name)))
        )

    def snapshot(self) -> QuotesState:
        return self._state.snapshot()

    def subscribe(self, callback: Callable[[QuotesState], None]) -> Callable[[], None]:
        return self._state.subscribe(callback)

    # ------------------------------------------------------------------
    # Remote feeds
    # ------------------------------------------------------------------

    def load_random_quote(self) -> Optional[Quote]:
        """Fetch a random quote into ``current_quote``.

        Returns:
            The current quote after the call (the previous one on failure).
        """
        with self._state.transaction():
            self._state.update(random_status=FeedStatus.LOADING, error_message=None)
            token = self._random_requests.begin()
        try:
            quote = self._client.random_quote()
        except ClientError as exc:
            self._log.warning("Error loading random quote: %s", exc)
            with self._state.transaction():
                if self._random_requests.is_current(token):
                    self._state.update(random_status=FeedStatus.ERRORED,
                                       error_message=f"Could not load a quote: {exc.message}")
                return self._state.snapshot().current_quote

        with self._state.transaction():
            if not self._random_requests.is_current(token):
                self._log.debug("Dropping stale random quote %s", quote.id)
                return self._state.snapshot().current_quote
            self._state.update(random_status=FeedStatus.LOADED, current_quote=quote)
        return quote

    def load_quotes(self) -> List[Quote]:
        """Fetch the page at ``current_page`` and append it to the list.

        Returns:
            The quotes appended by this call (``[]`` on failure or when the
            source is exhausted).
        """
        with self._state.transaction():
            page = self._state.snapshot().current_page
            self._state.update(list_status=FeedStatus.LOADING, error_message=None)
            token = self._list_requests.begin()
        try:
            result = self._client.get_quotes(limit=self.page_size, skip=page * self.page_size)
        except ClientError as exc:
            self._log.warning("Error loading quotes page %d: %s", page, exc)
            with self._state.transaction():
                if self._list_requests.is_current(token):
                    self._state.update(list_status=FeedStatus.ERRORED,
                                       error_message=f"Could not load quotes: {exc.message}")
            return []

        with self._state.transaction():
            if not self._list_requests.is_current(token):
                self._log.debug("Dropping stale quotes page %d", page)
                return []
            existing = self._state.snapshot().quotes
            new_items = list(result.quotes)
            if self.dedupe_pages:
                seen = {q.id for q in existing}
                unique = []
                for quote in new_items:
                    if quote.id not in seen:
                        seen.add(quote.id)
                        unique.append(quote)
                new_items = unique
            self._state.update(list_status=FeedStatus.LOADED,
                               quotes=existing + tuple(new_items))
        self._log.debug("Page %d: appended %d quote(s)", page, len(new_items))
        return new_items

    def load_next_page(self) -> List[Quote]:
        with self._state.transaction():
            self._state.update(current_page=self._state.snapshot().current_page + 1)
        return self.load_quotes()

    def reset_quotes(self) -> List[Quote]:
        """Drop the accumulated list and reload the first page."""
        with self._state.transaction():
            self._list_requests.begin()
            self._state.update(current_page=0, quotes=())
        return self.load_quotes()

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_search_text(self, text: str) -> None:
        self._state.update(search_text=text or '')

    def select_author(self, author: Optional[str]) -> None:
        """Filter by *author*; selecting the active author again clears it."""
        with self._state.transaction():
            if author is not None and author == self._state.snapshot().selected_author:
                author = None
            self._state.update(selected_author=author)

    def clear_filters(self) -> None:
        self._state.update(search_text='', selected_author=None)

    def filtered_quotes(self) -> List[Quote]:
        """The list with search text and author filters applied (not cached)."""
        state = self._state.snapshot()
        return filter_quotes(state.quotes, state.search_text, state.selected_author)

    def unique_authors(self) -> List[str]:
        return sorted({q.author for q in self._state.snapshot().quotes})

    # ------------------------------------------------------------------
    # Saved quotes
    # ------------------------------------------------------------------

    def _write_saved(self, saved: Tuple[Quote, ...]) -> None:
        if self._collection.save(saved, self.saved_file_name):
            self._state.update(saved_quotes=saved, storage_warning=None)
        else:
            self._state.update(saved_quotes=saved,
                               storage_warning="Saved quotes could not be written to disk")

    def is_quote_saved(self, quote_id: int) -> bool:
        return any(q.id == quote_id for q in self._state.snapshot().saved_quotes)

    def save_quote(self, quote: Quote) -> bool:
        """Add *quote* to the saved collection.  ``False`` if already saved."""
        with self._state.transaction():
            saved = self._state.snapshot().saved_quotes
            if any(q.id == quote.id for q in saved):
                return False
            self._write_saved(saved + (quote,))
        return True

    def save_current_quote(self) -> bool:
        """Save ``current_quote``; a no-op when there is none or it is already saved."""
        current = self._state.snapshot().current_quote
        if current is None:
            return False
        return self.save_quote(current)

    def remove_saved_quote(self, quote_id: int) -> bool:
        return self.remove_saved_quotes([quote_id]) > 0

    def remove_saved_quotes(self, quote_ids: Iterable[int]) -> int:
        """Remove several saved quotes with a single write.  Returns the count removed."""
        ids = set(quote_ids)
        with self._state.transaction():
            saved = self._state.snapshot().saved_quotes
            kept = tuple(q for q in saved if q.id not in ids)
            removed = len(saved) - len(kept)
            if removed:
                self._write_saved(kept)
        return removed

    def clear_saved_quotes(self) -> None:
        """Empty the saved collection and delete its file."""
        with self._state.transaction():
            deleted = True
            if self._collection.exists(self.saved_file_name):
                deleted = self._collection.delete(self.saved_file_name)
            self._state.update(
                saved_quotes=(),
                storage_warning=None if deleted else "Saved quotes file could not be deleted",
            )

    def load_saved_quotes(self) -> List[Quote]:
        """Reload the saved collection from disk."""
        saved = tuple(self._collection.load(self.saved_file_name))
        self._state.update(saved_quotes=saved)
        return list(saved)

    def persist_saved_quotes(self) -> bool:
        """Write the saved collection to disk explicitly."""
        with self._state.transaction():
            saved = self._state.snapshot().saved_quotes
            self._write_saved(saved)
            return self._state.snapshot().storage_warning is None
