"""
LabKit - data-access layer for the cocktail and quotes apps.

Wires the HTTP clients, the local stores and the facades together.  A UI
creates one :class:`LabKit` at startup and talks to its services::

    kit = LabKit(load_config('labkit.json'))
    kit.cocktails.search('margarita')
    kit.quotes.load_random_quote()
    kit.quotes.save_current_quote()
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from api_clients import CocktailAPIClient, QuotesAPIClient, COCKTAIL_BASE_URL, QUOTES_BASE_URL
from labdata.entities import decode_quote, encode_quote
from labdata.repositories import (
    CollectionRepository, FavoritesRepository, KeyValueRepository, SettingsRepository,
)
from labdata.services import (
    CocktailSearchService, FavoritesService, QuotesService, SettingsService,
)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root LabKit logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, str(level).upper(), logging.WARNING)
    logger = logging.getLogger('labkit')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = setup_logging()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# None leaves the timeout to requests (no override).
DEFAULT_API_TIMEOUT: Optional[float] = None

DEFAULT_CONFIG: Dict[str, Any] = {
    'data_dir': os.path.join(os.path.expanduser('~'), '.labkit'),
    'log_level': 'WARNING',
    'api_timeout_seconds': DEFAULT_API_TIMEOUT,
    'cocktail_base_url': COCKTAIL_BASE_URL,
    'quotes_base_url': QUOTES_BASE_URL,
    'quotes_page_size': 10,
    'lookup_max_workers': 4,
    'dedupe_pages': False,
    'defaults_file': 'defaults.json',
    'saved_quotes_file': 'saved_quotes.json',
}

# Environment variable -> (config key, converter)
_ENV_OVERRIDES = {
    'LABKIT_DATA_DIR': ('data_dir', str),
    'LABKIT_LOG_LEVEL': ('log_level', str),
    'LABKIT_API_TIMEOUT': ('api_timeout_seconds', float),
    'LABKIT_COCKTAIL_BASE_URL': ('cocktail_base_url', str),
    'LABKIT_QUOTES_BASE_URL': ('quotes_base_url', str),
}


def _positive_int(value: Any) -> int:
    if isinstance(value, bool) or int(value) != value or value < 1:
        raise ValueError(value)
    return int(value)


def _timeout(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not float(value) > 0:
        raise ValueError(value)
    return float(value)


def _flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(value)
    return value


# Config key -> validator; a rejected value falls back to DEFAULT_CONFIG
_VALIDATORS = {
    'api_timeout_seconds': _timeout,
    'quotes_page_size': _positive_int,
    'lookup_max_workers': _positive_int,
    'dedupe_pages': _flag,
}


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of *config* with invalid typed values reset to defaults.

    Each rejected value is logged as a warning.
    """
    checked = dict(config)
    for key, validate in _VALIDATORS.items():
        if key not in checked:
            continue
        try:
            checked[key] = validate(checked[key])
        except (TypeError, ValueError, OverflowError):
            logger.warning("Ignoring %s=%r: invalid value, using %r",
                           key, checked[key], DEFAULT_CONFIG[key])
            checked[key] = DEFAULT_CONFIG[key]
    return checked


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration with environment variable support.

    The optional JSON file at *config_path* is merged over
    :data:`DEFAULT_CONFIG`; environment variables take precedence over both:

    - LABKIT_DATA_DIR overrides data_dir
    - LABKIT_LOG_LEVEL overrides log_level
    - LABKIT_API_TIMEOUT overrides api_timeout_seconds
    - LABKIT_COCKTAIL_BASE_URL overrides cocktail_base_url
    - LABKIT_QUOTES_BASE_URL overrides quotes_base_url

    A missing file is not an error; an unreadable one is logged and ignored,
    and so is any value rejected by :func:`validate_config`.
    """
    config = dict(DEFAULT_CONFIG)
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict):
                config.update(data)
            else:
                logger.warning("Ignoring config %s: expected a JSON object", config_path)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load config %s: %s", config_path, e)

    for env_name, (key, convert) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        try:
            config[key] = convert(value)
        except ValueError:
            logger.warning("Ignoring %s=%r: not a valid %s", env_name, value, convert.__name__)
    return validate_config(config)


# ---------------------------------------------------------------------------
# Composition root
# ---------------------------------------------------------------------------

class LabKit:
    """Builds one instance of every client, store and service.

    Args:
        config:  Configuration dict (see :func:`load_config`); missing keys
                 take their :data:`DEFAULT_CONFIG` value.
        session: Optional HTTP session shared by both clients.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, session=None):
        self._log = logging.getLogger('labkit.kit')
        merged = dict(DEFAULT_CONFIG)
        merged.update(config or {})
        self.config = validate_config(merged)
        setup_logging(self.config.get('log_level', 'WARNING'))

        data_dir = self.config['data_dir']
        timeout = self.config['api_timeout_seconds']
        max_workers = self.config['lookup_max_workers']

        self.cocktail_client = CocktailAPIClient(
            self.config['cocktail_base_url'], timeout=timeout,
            session=session, max_workers=max_workers,
        )
        self.quotes_client = QuotesAPIClient(
            self.config['quotes_base_url'], timeout=timeout, session=session,
        )

        self.defaults = KeyValueRepository(
            os.path.join(data_dir, self.config['defaults_file'])
        )
        self.collections = CollectionRepository(data_dir, encode_quote, decode_quote)

        self.favorites = FavoritesService(FavoritesRepository(self.defaults))
        self.settings = SettingsService(SettingsRepository(self.defaults))
        self.cocktails = CocktailSearchService(
            self.cocktail_client, self.favorites, max_workers=max_workers,
        )
        self.quotes = QuotesService(
            self.quotes_client, self.collections,
            page_size=self.config['quotes_page_size'],
            saved_file_name=self.config['saved_quotes_file'],
            dedupe_pages=self.config['dedupe_pages'],
        )
        self._log.debug("LabKit ready (data dir: %s)", data_dir)
