"""Domain records and the codec between wire JSON and those records.

Two remote shapes are handled:

* TheCocktailDB drinks::

      {"drinks": [{"idDrink": "11007", "strDrink": "Margarita",
                   "strIngredient1": "Tequila", "strMeasure1": "1 1/2 oz", ...}]}

  ``drinks`` is ``null`` when nothing matched.

* DummyJSON quotes::

      {"id": 1, "quote": "...", "author": "..."}
      {"quotes": [...], "total": 1454, "skip": 0, "limit": 10}

Decoding is richer than encoding for cocktails: the numbered
``strIngredientN`` / ``strMeasureN`` fields are folded into the ``ingredients``
and ``measures`` tuples on decode and are never written back by
:func:`encode_cocktail`.
"""
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import DecodeError

MAX_INGREDIENTS = 10

_COCKTAIL_FIELDS = (
    ('category', 'strCategory'),
    ('alcoholic', 'strAlcoholic'),
    ('glass', 'strGlass'),
    ('instructions', 'strInstructions'),
    ('thumbnail', 'strDrinkThumb'),
)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class Cocktail:
    """A drink from TheCocktailDB.

    ``measures`` is sized independently of ``ingredients``; a present
    ingredient may have no measure, so use :meth:`pairs` rather than
    indexing both tuples in lockstep.
    """

    id: str
    name: str
    category: Optional[str] = None
    alcoholic: Optional[str] = None
    glass: Optional[str] = None
    instructions: Optional[str] = None
    thumbnail: Optional[str] = None
    ingredients: Tuple[str, ...] = ()
    measures: Tuple[str, ...] = ()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Cocktail):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(('cocktail', self.id))

    def pairs(self) -> Iterator[Tuple[str, Optional[str]]]:
        """Yield ``(ingredient, measure)`` with ``None`` for a missing measure."""
        for idx, ingredient in enumerate(self.ingredients):
            measure = self.measures[idx] if idx < len(self.measures) else None
            yield ingredient, measure


@dataclass(frozen=True)
class Quote:
    id: int
    quote: str
    author: str

    def share_text(self) -> str:
        """Plain-text form used when a quote is shared outside the app."""
        return f"{self.quote}\n— {self.author}"


@dataclass(frozen=True)
class QuotesPage:
    """One page of the ``/quotes?limit=&skip=`` listing."""

    quotes: Tuple[Quote, ...] = ()
    total: int = 0
    skip: int = 0
    limit: int = 0


@dataclass(frozen=True)
class AppSettings:
    """User preferences for the quotes app.

    :meth:`default` is the single canonical default value; instances are
    immutable, so changes go through :func:`dataclasses.replace`.
    """

    primary_color: str = 'blue'
    background_color: str = 'white'
    font_size: float = 16.0
    font_name: str = 'System'
    show_author_icons: bool = True
    dark_mode: bool = False

    @classmethod
    def default(cls) -> 'AppSettings':
        return cls()

    def with_changes(self, **changes) -> 'AppSettings':
        return replace(self, **changes)


# Persisted camelCase key for each AppSettings attribute.
SETTINGS_KEYS: Dict[str, str] = {
    'primary_color': 'primaryColor',
    'background_color': 'backgroundColor',
    'font_size': 'fontSize',
    'font_name': 'fontName',
    'show_author_icons': 'showAuthorIcons',
    'dark_mode': 'darkMode',
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_object(raw: Any, what: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(raw).__name__}")
    return raw


def _require_str(raw: Dict[str, Any], key: str, what: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"{what}: field '{key}' is missing or not a string")
    return value


def _require_int(raw: Dict[str, Any], key: str, what: str) -> int:
    value = raw.get(key)
    # bool is an int subclass; JSON true/false is not a valid id or count
    if not isinstance(value, int) or isinstance(value, bool):
        raise DecodeError(f"{what}: field '{key}' is missing or not an integer")
    return value


def _optional_str(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def _non_empty(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


# ---------------------------------------------------------------------------
# Cocktails
# ---------------------------------------------------------------------------

def decode_cocktail(raw: Any) -> Cocktail:
    """Build a :class:`Cocktail` from one element of the ``drinks`` array.

    Raises:
        DecodeError: If the payload is not an object or lacks ``idDrink`` /
            ``strDrink``.
    """
    raw = _require_object(raw, 'cocktail')
    drink_id = raw.get('idDrink')
    if isinstance(drink_id, int) and not isinstance(drink_id, bool):
        drink_id = str(drink_id)
    if not isinstance(drink_id, str) or not drink_id:
        raise DecodeError("cocktail: field 'idDrink' is missing")
    name = _require_str(raw, 'strDrink', 'cocktail')

    ingredients: List[str] = []
    measures: List[str] = []
    for i in range(1, MAX_INGREDIENTS + 1):
        ingredient = _non_empty(raw, f'strIngredient{i}')
        if ingredient is not None:
            ingredients.append(ingredient)
        measure = _non_empty(raw, f'strMeasure{i}')
        if measure is not None:
            measures.append(measure)

    optional = {attr: _optional_str(raw, key) for attr, key in _COCKTAIL_FIELDS}
    return Cocktail(
        id=drink_id,
        name=name,
        ingredients=tuple(ingredients),
        measures=tuple(measures),
        **optional,
    )


def decode_drinks_envelope(raw: Any) -> List[Cocktail]:
    """Decode ``{"drinks": [...] | null}``; ``null`` or a missing key gives ``[]``."""
    raw = _require_object(raw, 'drinks envelope')
    drinks = raw.get('drinks')
    if drinks is None:
        return []
    if not isinstance(drinks, list):
        raise DecodeError("drinks envelope: 'drinks' is neither a list nor null")
    return [decode_cocktail(item) for item in drinks]


def encode_cocktail(cocktail: Cocktail) -> Dict[str, Any]:
    """Encode the display fields only; ingredients and measures are not emitted."""
    data: Dict[str, Any] = {'idDrink': cocktail.id, 'strDrink': cocktail.name}
    for attr, key in _COCKTAIL_FIELDS:
        value = getattr(cocktail, attr)
        if value is not None:
            data[key] = value
    return data


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------

def decode_quote(raw: Any) -> Quote:
    raw = _require_object(raw, 'quote')
    return Quote(
        id=_require_int(raw, 'id', 'quote'),
        quote=_require_str(raw, 'quote', 'quote'),
        author=_require_str(raw, 'author', 'quote'),
    )


def encode_quote(quote: Quote) -> Dict[str, Any]:
    return {'id': quote.id, 'quote': quote.quote, 'author': quote.author}


def decode_quotes(raw: Any) -> List[Quote]:
    """Decode a JSON array of quotes (a page body or the saved-quotes file)."""
    if not isinstance(raw, list):
        raise DecodeError(f"Expected a JSON array of quotes, got {type(raw).__name__}")
    return [decode_quote(item) for item in raw]


def decode_quotes_page(raw: Any) -> QuotesPage:
    raw = _require_object(raw, 'quotes page')
    items = raw.get('quotes')
    if not isinstance(items, list):
        raise DecodeError("quotes page: field 'quotes' is missing or not a list")
    return QuotesPage(
        quotes=tuple(decode_quotes(items)),
        total=_require_int(raw, 'total', 'quotes page'),
        skip=_require_int(raw, 'skip', 'quotes page'),
        limit=_require_int(raw, 'limit', 'quotes page'),
    )


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def encode_settings(settings: AppSettings) -> Dict[str, Any]:
    return {key: getattr(settings, attr) for attr, key in SETTINGS_KEYS.items()}


def decode_settings(raw: Any) -> AppSettings:
    """Decode a persisted settings object.

    Unknown keys are ignored and missing keys keep their default. A value of
    the wrong type raises :class:`DecodeError`.
    """
    raw = _require_object(raw, 'settings')
    defaults = AppSettings.default()
    values: Dict[str, Any] = {}
    for f in fields(AppSettings):
        key = SETTINGS_KEYS[f.name]
        if key not in raw:
            continue
        value = raw[key]
        expected = type(getattr(defaults, f.name))
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
            raise DecodeError(f"settings: field '{key}' has the wrong type")
        values[f.name] = value
    return AppSettings(**values)
