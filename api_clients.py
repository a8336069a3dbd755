"""
api_clients.py
==============
HTTP clients for the two public JSON APIs behind the apps:

* **TheCocktailDB** - ``search.php?s=<term>`` and ``lookup.php?i=<id>``,
  both answering ``{"drinks": [...] | null}``
* **DummyJSON quotes** - ``/random``, ``?limit=&skip=`` and ``/<id>``

Both clients extend :class:`JSONAPIClient`, which issues exactly one plain
GET per call (no retries) and maps every failure onto the
:mod:`labdata.errors` taxonomy:

* :class:`BadURLError`           - the URL could not be built or parsed
* :class:`TransportError`        - no HTTP response at all
* :class:`InvalidResponseError`  - status code outside 200-299
* :class:`DecodeError`           - body is not JSON or has the wrong shape

Usage
-----
::

    from api_clients import CocktailAPIClient

    client = CocktailAPIClient(timeout=10)
    for drink in client.search('margarita'):
        print(drink.name, list(drink.pairs()))
"""
from __future__ import annotations

import logging
import threading
import urllib.parse
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional

import requests

from labdata.entities import (
    Cocktail, Quote, QuotesPage,
    decode_drinks_envelope, decode_quote, decode_quotes_page,
)
from labdata.errors import (
    BadURLError, ClientError, DecodeError, InvalidResponseError, TransportError,
)

__all__ = [
    'JSONAPIClient', 'CocktailAPIClient', 'QuotesAPIClient',
    'ClientError', 'BadURLError', 'InvalidResponseError', 'DecodeError',
    'TransportError',
]

COCKTAIL_BASE_URL = "https://www.thecocktaildb.com/api/json/v1/1"
QUOTES_BASE_URL = "https://dummyjson.com/quotes"

_DEFAULT_LOOKUP_WORKERS = 4


class JSONAPIClient:
    """Minimal GET-and-decode client over a shared :class:`requests.Session`.

    Args:
        base_url: Scheme + host (+ optional path prefix) every request is
                  resolved against.
        timeout:  Request timeout in seconds; ``None`` keeps the library
                  default.
        session:  Optional pre-built session (tests inject a mock here).
    """

    def __init__(self, base_url: str, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self._log = logging.getLogger(f'labkit.{self.get_api_name()}')

    def get_api_name(self) -> str:
        return 'http'

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    def build_url(self, path: str = '', params: Optional[Dict[str, Any]] = None) -> str:
        """Return the absolute request URL for *path* and *params*.

        Query values are UTF-8 percent-encoded.  *path* is taken verbatim, so
        unencoded user input in it is rejected rather than silently escaped.

        Raises:
            BadURLError: If the result is not an absolute http(s) URL or
                contains characters that are illegal in a URL.
        """
        url = self.base_url
        if path:
            url = f"{url}/{path.lstrip('/')}"
        if params:
            query = urllib.parse.urlencode(
                {k: v for k, v in params.items() if v is not None},
                quote_via=urllib.parse.quote,
            )
            url = f"{url}?{query}" if query else url

        if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7f for ch in url):
            raise BadURLError(f"Invalid request URL: {url!r}")
        try:
            parts = urllib.parse.urlsplit(url)
        except ValueError as exc:
            raise BadURLError(f"Invalid request URL {url!r}: {exc}") from exc
        if parts.scheme not in ('http', 'https') or not parts.netloc:
            raise BadURLError(f"Invalid request URL: {url!r}")
        return url

    def get_json(self, path: str = '', params: Optional[Dict[str, Any]] = None) -> Any:
        """GET *path* and return the decoded JSON body.

        Raises:
            BadURLError, TransportError, InvalidResponseError, DecodeError
        """
        url = self.build_url(path, params)
        self._log.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except (requests.exceptions.InvalidURL,
                requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema) as exc:
            raise BadURLError(f"Invalid request URL {url!r}: {exc}") from exc
        except requests.RequestException as exc:
            self._log.warning("Request to %s failed: %s", url, exc)
            raise TransportError(f"Network request failed: {exc}") from exc

        status = response.status_code
        if not 200 <= status <= 299:
            self._log.warning("GET %s returned HTTP %s", url, status)
            raise InvalidResponseError(status)

        try:
            return response.json()
        except ValueError as exc:
            self._log.warning("GET %s returned a non-JSON body: %s", url, exc)
            raise DecodeError(f"Could not parse the response from {url}") from exc


# ---------------------------------------------------------------------------
# TheCocktailDB
# ---------------------------------------------------------------------------

class CocktailAPIClient(JSONAPIClient):
    """Client for TheCocktailDB search and lookup endpoints.

    Successful lookups are kept in an in-process ``details_cache`` keyed by
    drink ID for the lifetime of the client.
    """

    def __init__(self, base_url: str = COCKTAIL_BASE_URL,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 max_workers: int = _DEFAULT_LOOKUP_WORKERS) -> None:
        super().__init__(base_url, timeout=timeout, session=session)
        self.max_workers = max(1, int(max_workers))
        self.details_cache: Dict[str, Cocktail] = {}
        self._cache_lock = threading.Lock()

    def get_api_name(self) -> str:
        return 'cocktails'

    def search(self, term: str) -> List[Cocktail]:
        """Search drinks by name.  An unmatched term returns ``[]``."""
        payload = self.get_json('search.php', {'s': term})
        return decode_drinks_envelope(payload)

    def lookup(self, cocktail_id: str) -> Optional[Cocktail]:
        """Return the drink with *cocktail_id*, or ``None`` if it does not exist."""
        key = str(cocktail_id)
        with self._cache_lock:
            cached = self.details_cache.get(key)
        if cached is not None:
            return cached

        drinks = decode_drinks_envelope(self.get_json('lookup.php', {'i': key}))
        if not drinks:
            return None
        drink = drinks[0]
        with self._cache_lock:
            self.details_cache[key] = drink
        return drink

    def lookup_many(self, ids: Iterable[str],
                    max_workers: Optional[int] = None) -> List[Cocktail]:
        """Resolve several IDs with a bounded worker pool.

        Failed and unknown IDs are logged and skipped; the result keeps the
        order of *ids*.

        Args:
            ids:         Drink IDs to resolve.
            max_workers: Upper bound on concurrent requests (defaults to the
                         client's ``max_workers``).
        """
        id_list = [str(i) for i in ids]
        if not id_list:
            return []

        workers = min(len(id_list), max_workers or self.max_workers)
        results: Dict[int, Optional[Cocktail]] = {}
        with ThreadPoolExecutor(max_workers=max(1, workers),
                                thread_name_prefix='labkit_lookup') as executor:
            future_map = {executor.submit(self.lookup, cid): idx
                          for idx, cid in enumerate(id_list)}
            for future in as_completed(future_map):
                idx = future_map[future]
                try:
                    results[idx] = future.result()
                except ClientError as exc:
                    self._log.warning("Lookup of cocktail %s failed: %s",
                                      id_list[idx], exc)
                    results[idx] = None

        return [results[idx] for idx in range(len(id_list))
                if results.get(idx) is not None]


# ---------------------------------------------------------------------------
# DummyJSON quotes
# ---------------------------------------------------------------------------

class QuotesAPIClient(JSONAPIClient):
    """Client for the DummyJSON quotes API."""

    def __init__(self, base_url: str = QUOTES_BASE_URL,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None) -> None:
        super().__init__(base_url, timeout=timeout, session=session)

    def get_api_name(self) -> str:
        return 'quotes'

    def random_quote(self) -> Quote:
        return decode_quote(self.get_json('random'))

    def get_quotes(self, limit: int = 10, skip: int = 0) -> QuotesPage:
        """Fetch one page of quotes.

        Args:
            limit: Page size.
            skip:  Number of quotes to skip (``page * limit``).
        """
        return decode_quotes_page(self.get_json('', {'limit': limit, 'skip': skip}))

    def get_quote(self, quote_id: int) -> Quote:
        return decode_quote(self.get_json(str(quote_id)))
