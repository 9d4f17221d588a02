"""
Widget registry for the FloatDesk overlay.

Maps a closed set of widget tags to their constructors. Tags are resolved at
initialization time; asking for a tag nobody registered is an explicit error
rather than a dynamic import.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from .errors import UnknownWidgetError, WidgetLoadError

logger = logging.getLogger(__name__)


class WidgetType(str, Enum):
    EMPTY = "empty"
    CLOCK = "clock"
    TODO = "todo"
    STATS = "stats"
    WEBVIEW = "webview"


WINDOW_TITLES = {
    WidgetType.EMPTY.value: "New Window",
    WidgetType.CLOCK.value: "Clock",
    WidgetType.TODO.value: "To-Do List",
    WidgetType.STATS.value: "Stats Counter",
    WidgetType.WEBVIEW.value: "Web View",
}


def window_title(window_type: str) -> str:
    return WINDOW_TITLES.get(window_type, "Window")


@dataclass
class WidgetRegistration:
    """Information package for a registered widget type."""
    factory_func: Callable[[QWidget], Any]
    default_title: str


class WidgetRegistry:
    """Central registry of widget constructors keyed by type tag."""

    def __init__(self):
        self._registry: Dict[str, WidgetRegistration] = {}

    def register(self, key: str, factory_func: Callable[[QWidget], Any], default_title: Optional[str] = None) -> None:
        """
        Registers a constructor `(container) -> widget` where widget exposes render().
        """
        key = key.value if isinstance(key, WidgetType) else key
        if key in self._registry:
            raise ValueError(f"Widget key '{key}' is already registered")
        self._registry[key] = WidgetRegistration(
            factory_func=factory_func,
            default_title=default_title or window_title(key),
        )

    def get_registration(self, key: str) -> Optional[WidgetRegistration]:
        return self._registry.get(key)

    def is_registered(self, key: str) -> bool:
        return key in self._registry

    def get_all_keys(self) -> list[str]:
        return list(self._registry.keys())

    def create(self, key: str, container: QWidget):
        """
        Constructs and renders the widget for `key` inside `container`.

        Raises:
            UnknownWidgetError: no factory is registered for the tag
            WidgetLoadError: the factory or render() failed
        """
        registration = self._registry.get(key)
        if registration is None:
            raise UnknownWidgetError(key)
        widget = None
        try:
            widget = registration.factory_func(container)
            widget.render()
        except Exception as e:
            if isinstance(widget, QWidget):
                widget.setParent(None)
                widget.deleteLater()
            raise WidgetLoadError(key, f"Failed to load {key} widget: {e}") from e
        return widget


class WidgetHost:
    """
    Loads widgets into window content containers.

    A failure is confined to the window it happened in: the container gets an
    inline error label and the caller carries on with its other windows.
    """

    def __init__(self, registry: Optional[WidgetRegistry] = None):
        self.registry = registry or get_registry()
        self.loaded: Dict[str, Any] = {}

    def load_into(self, window_id: str, widget_type: str, container: QWidget) -> bool:
        self._clear(container)
        try:
            widget = self.registry.create(widget_type, container)
        except WidgetLoadError as e:
            logger.warning("Widget load failed for window %s: %s", window_id, e)
            self._show_error(container, widget_type)
            self.loaded.pop(window_id, None)
            return False
        self.loaded[window_id] = widget
        return True

    def unload(self, window_id: str):
        widget = self.loaded.pop(window_id, None)
        if widget is not None and hasattr(widget, "teardown"):
            widget.teardown()

    @staticmethod
    def _clear(container: QWidget):
        layout = container.layout()
        if layout is None:
            layout = QVBoxLayout(container)
            layout.setContentsMargins(5, 5, 5, 5)
        while layout.count():
            item = layout.takeAt(0)
            if item.widget() is not None:
                item.widget().setParent(None)
                item.widget().deleteLater()

    @staticmethod
    def _show_error(container: QWidget, widget_type: str):
        label = QLabel(f"Failed to load {widget_type} widget")
        label.setObjectName("WidgetError")
        label.setStyleSheet("color: #f87171; background: transparent;")
        container.layout().addWidget(label)


_global_registry = WidgetRegistry()


def get_registry() -> WidgetRegistry:
    """Get the global widget registry instance."""
    return _global_registry
