"""Business logic for the user's app settings."""
import logging
from dataclasses import fields
from typing import Callable, Dict, Optional

from ..entities import AppSettings
from ..errors import StorageError
from ..repositories.settings_repository import SettingsRepository
from ..state import StateContainer

COLORS = ('blue', 'red', 'green', 'orange', 'purple', 'pink', 'black', 'white', 'gray')
FONTS = ('System', 'Rounded', 'Serif', 'Monospaced')
MIN_FONT_SIZE = 12.0
MAX_FONT_SIZE = 24.0


def clamp_font_size(size: float) -> float:
    """Clamp to the supported range and snap to whole points."""
    return float(round(max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, float(size)))))


class SettingsService:
    """Holds the process-wide :class:`~labdata.entities.AppSettings` and
    persists it through
    :class:`~labdata.repositories.settings_repository.SettingsRepository`
    after every change.

    Rules
    -----
    * Colors must come from :data:`COLORS`, fonts from :data:`FONTS`.
    * ``font_size`` is clamped to 12-24 and rounded to whole points.
    * A failed write keeps the new settings in memory and records the
      message in ``last_error``.
    """

    def __init__(self, repository: SettingsRepository) -> None:
        self._repo = repository
        self._log = logging.getLogger('labkit.service.settings')
        self._state: StateContainer[AppSettings] = StateContainer(repository.load())
        self.last_error: Optional[str] = None

    @property
    def settings(self) -> AppSettings:
        return self._state.snapshot()

    def subscribe(self, callback: Callable[[AppSettings], None]) -> Callable[[], None]:
        return self._state.subscribe(callback)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(changes: Dict) -> Dict:
        known = {f.name for f in fields(AppSettings)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        for key in ('primary_color', 'background_color'):
            if key in changes and changes[key] not in COLORS:
                raise ValueError(f"Unsupported color for {key}: {changes[key]!r}")
        if 'font_name' in changes and changes['font_name'] not in FONTS:
            raise ValueError(f"Unsupported font: {changes['font_name']!r}")
        if 'font_size' in changes:
            size = changes['font_size']
            if isinstance(size, bool) or not isinstance(size, (int, float)) or size != size:
                raise ValueError(f"Unsupported font size: {size!r}")
            changes['font_size'] = clamp_font_size(size)
        for key in ('show_author_icons', 'dark_mode'):
            if key in changes and not isinstance(changes[key], bool):
                raise ValueError(f"{key} must be True or False, got {changes[key]!r}")
        return changes

    def _persist(self, settings: AppSettings) -> None:
        self._state.set(settings)
        try:
            self._repo.save(settings)
        except StorageError as exc:
            self._log.warning("Could not save settings: %s", exc)
            self.last_error = str(exc)
            return
        self.last_error = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def update(self, **changes) -> AppSettings:
        """Apply *changes* and persist.

        Raises:
            ValueError: For an unknown field or an unsupported value.
        """
        changes = self._validate(dict(changes))
        with self._state.transaction():
            settings = self._state.snapshot().with_changes(**changes)
            self._persist(settings)
        return settings

    def reset(self) -> AppSettings:
        """Restore the defaults and persist them."""
        settings = AppSettings.default()
        with self._state.transaction():
            self._persist(settings)
        return settings

    def theme(self) -> Dict[str, object]:
        """Resolved presentation values; unknown stored names fall back to defaults."""
        s = self.settings
        defaults = AppSettings.default()
        return {
            'primary_color': s.primary_color if s.primary_color in COLORS else defaults.primary_color,
            'background_color': s.background_color if s.background_color in COLORS else defaults.background_color,
            'font_name': s.font_name if s.font_name in FONTS else defaults.font_name,
            'font_size': clamp_font_size(s.font_size),
            'dark_mode': s.dark_mode,
            'show_author_icons': s.show_author_icons,
        }
