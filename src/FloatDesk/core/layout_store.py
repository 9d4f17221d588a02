import logging
from typing import Callable, Optional

from ..config import DEFAULT_CONFIG, OverlayConfig
from ..model.overlay_model import LayoutSnapshot
from .errors import StoreUnavailableError
from .key_value_store import KeyValueStore

logger = logging.getLogger(__name__)


class LayoutStore:
    """
    Loads and saves one site's layout snapshot and the overlay preferences
    through an external KeyValueStore.

    Once the store reports that its host is gone, every later call is a no-op:
    the overlay keeps working in memory and only durability is lost.
    """

    def __init__(self, store: Optional[KeyValueStore], site: str, config: OverlayConfig = DEFAULT_CONFIG):
        self.store = store
        self.site = site
        self.config = config
        self._available = store is not None

    def is_available(self) -> bool:
        return self._available

    def _mark_unavailable(self, error: Exception):
        if self._available:
            logger.warning("Persistence unavailable, continuing in memory only: %s", error)
        self._available = False

    def load(self, callback: Callable[[Optional[LayoutSnapshot]], None]):
        """Delivers the stored snapshot for this site, or None when nothing is stored."""
        if not self._available:
            callback(None)
            return

        layouts_key = self.config.layouts_key

        def on_result(result: dict):
            layouts = result.get(layouts_key) or {}
            data = layouts.get(self.site) if isinstance(layouts, dict) else None
            callback(LayoutSnapshot.from_dict(data) if data is not None else None)

        try:
            self.store.get([layouts_key], on_result)
        except StoreUnavailableError as e:
            self._mark_unavailable(e)
            callback(None)

    def save(self, snapshot: LayoutSnapshot, callback: Optional[Callable[[], None]] = None):
        """
        Writes the snapshot into the per-site layouts map.

        This is a read-modify-write of the whole map with no versioning, so
        concurrent writers resolve as last write wins.
        """
        self.set_entry(self.config.layouts_key, self.site, snapshot.to_dict(), callback)

    def set_entry(self, map_key: str, entry_key: str, value, callback: Optional[Callable[[], None]] = None):
        """
        Read-modify-write of one entry in a stored map. A value of None
        removes the entry.
        """
        if not self._available:
            return

        def on_result(result: dict):
            entries = result.get(map_key)
            entries = dict(entries) if isinstance(entries, dict) else {}
            if value is None:
                entries.pop(entry_key, None)
            else:
                entries[entry_key] = value
            try:
                self.store.set({map_key: entries}, callback)
            except StoreUnavailableError as e:
                self._mark_unavailable(e)

        try:
            self.store.get([map_key], on_result)
        except StoreUnavailableError as e:
            self._mark_unavailable(e)

    def load_preferences(self, callback: Callable[[dict], None]):
        """Delivers {'blur_mode': str, 'auto_hide': bool}, defaulting any missing key."""
        defaults = {
            'blur_mode': self.config.default_blur_mode,
            'auto_hide': self.config.default_auto_hide,
        }
        if not self._available:
            callback(defaults)
            return

        def on_result(result: dict):
            prefs = dict(defaults)
            if result.get(self.config.blur_mode_key):
                prefs['blur_mode'] = result[self.config.blur_mode_key]
            if self.config.auto_hide_key in result:
                prefs['auto_hide'] = bool(result[self.config.auto_hide_key])
            callback(prefs)

        try:
            self.store.get([self.config.blur_mode_key, self.config.auto_hide_key], on_result)
        except StoreUnavailableError as e:
            self._mark_unavailable(e)
            callback(defaults)

    def save_preference(self, key: str, value):
        if not self._available:
            return
        try:
            self.store.set({key: value})
        except StoreUnavailableError as e:
            self._mark_unavailable(e)

    def load_values(self, keys: list[str], callback: Callable[[dict], None]):
        """Delivers whichever of `keys` are stored; an empty dict once the store is gone."""
        if not self._available:
            callback({})
            return
        try:
            self.store.get(keys, callback)
        except StoreUnavailableError as e:
            self._mark_unavailable(e)
            callback({})
