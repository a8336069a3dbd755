"""Services package - expose all concrete services from one import."""
from .favorites_service import FavoritesService, FavoritesState
from .cocktail_search_service import CocktailSearchService, CocktailSearchState
from .quotes_service import QuotesService, QuotesState, filter_quotes
from .settings_service import SettingsService

__all__ = [
    'FavoritesService',
    'FavoritesState',
    'CocktailSearchService',
    'CocktailSearchState',
    'QuotesService',
    'QuotesState',
    'filter_quotes',
    'SettingsService',
]
