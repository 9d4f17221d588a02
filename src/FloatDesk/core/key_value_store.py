"""
Key-value persistence backends.

The overlay treats persistence as an untyped bag of values addressed by string
keys. Reads and writes are asynchronous in the general case: results arrive
through callbacks, and writers never block on the store.
"""

import copy
import json
import logging
from typing import Any, Callable, Iterable, Optional

from PySide6.QtCore import QObject, QSettings, QTimer, Signal

from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)

GetCallback = Callable[[dict], None]
SetCallback = Callable[[], None]


class KeyValueStore(QObject):
    """
    Interface for the external persistence service.

    Subclasses implement get() and set(). Whenever a stored value changes the
    store emits `changed` with a {key: new_value} mapping.
    """
    changed = Signal(dict)

    def get(self, keys: Iterable[str], callback: GetCallback) -> None:
        raise NotImplementedError

    def set(self, values: dict, callback: Optional[SetCallback] = None) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """
    In-process store that answers synchronously.

    Used for tests and for hosts without durable storage. It can be switched
    unavailable to reproduce a host that disappeared mid-session.
    """

    def __init__(self, initial: Optional[dict] = None, parent=None):
        super().__init__(parent)
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._available = True
        self.get_count = 0
        self.set_count = 0

    def set_available(self, available: bool):
        self._available = available

    def is_available(self) -> bool:
        return self._available

    def get(self, keys: Iterable[str], callback: GetCallback) -> None:
        if not self._available:
            raise StoreUnavailableError("Memory store is unavailable")
        self.get_count += 1
        result = {key: copy.deepcopy(self._data[key]) for key in keys if key in self._data}
        callback(result)

    def set(self, values: dict, callback: Optional[SetCallback] = None) -> None:
        if not self._available:
            raise StoreUnavailableError("Memory store is unavailable")
        self.set_count += 1
        for key, value in values.items():
            self._data[key] = copy.deepcopy(value)
        if callback:
            callback()
        self.changed.emit(copy.deepcopy(values))

    def peek(self, key: str, default=None):
        """Returns a stored value without counting it as a read."""
        return copy.deepcopy(self._data.get(key, default))


class SettingsKeyValueStore(KeyValueStore):
    """
    Durable store backed by QSettings.

    Values are JSON encoded. Callbacks are delivered on the next turn of the
    Qt event loop so callers observe the same ordering as a remote store.
    """

    def __init__(self, organization: str = "FloatDesk", application: str = "Overlay", parent=None):
        super().__init__(parent)
        self._settings = QSettings(organization, application)

    def get(self, keys: Iterable[str], callback: GetCallback) -> None:
        result = {}
        for key in keys:
            raw = self._settings.value(key)
            if raw is None:
                continue
            try:
                result[key] = json.loads(raw)
            except (TypeError, ValueError):
                logger.warning("Discarding unreadable stored value for '%s'", key)
        QTimer.singleShot(0, lambda: callback(result))

    def set(self, values: dict, callback: Optional[SetCallback] = None) -> None:
        for key, value in values.items():
            self._settings.setValue(key, json.dumps(value))
        self._settings.sync()
        if self._settings.status() != QSettings.Status.NoError:
            raise StoreUnavailableError(f"QSettings write failed: {self._settings.status()}")

        changes = copy.deepcopy(values)

        def deliver():
            if callback:
                callback()
            self.changed.emit(changes)

        QTimer.singleShot(0, deliver)

    def clear(self):
        self._settings.clear()
        self._settings.sync()
