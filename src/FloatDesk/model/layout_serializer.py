import logging
from typing import Callable, Optional

from PySide6.QtCore import QPoint, QSize

from .overlay_model import LayoutSnapshot, PaneRecord, WindowEntity, WindowRecord
from ..core.layout_store import LayoutStore
from ..core.window_registry import WindowRegistry
from ..core.widget_registry import WidgetType

logger = logging.getLogger(__name__)

WidgetLoader = Callable[[WindowEntity], None]


class LayoutSerializer:
    """
    Converts registry state to and from LayoutSnapshot values and keeps the
    store in step with the registry.
    """

    def __init__(self, registry: WindowRegistry, store: Optional[LayoutStore] = None,
                 widget_loader: Optional[WidgetLoader] = None):
        """
        Initialize with the registry whose state is persisted.

        Args:
            registry: The WindowRegistry to snapshot and restore into
            store: Layout store adapter; without one, save() and restore() do nothing
            widget_loader: Called with each restored non-empty window to load its widget
        """
        self.registry = registry
        self.store = store
        self.widget_loader = widget_loader
        self.save_count = 0

        self.registry.persist_requested.connect(self.save)

    def to_snapshot(self, registry: Optional[WindowRegistry] = None) -> LayoutSnapshot:
        """
        Captures every live window (integer geometry) and every pane direction.

        Args:
            registry: Registry to read; defaults to the bound one

        Returns:
            LayoutSnapshot: Value safe to persist
        """
        registry = registry or self.registry
        return LayoutSnapshot(
            windows=tuple(WindowRecord.from_window(window) for window in registry.windows()),
            panes=tuple(PaneRecord(pane.direction) for pane in registry.panes()),
        )

    def apply_snapshot(self, snapshot: LayoutSnapshot, registry: Optional[WindowRegistry] = None) -> list[WindowEntity]:
        """
        Replaces all windows with the ones recorded in the snapshot, in order.

        Panes are not touched. Restoring writes nothing back to the store.
        A widget that fails to load affects only its own window.

        Args:
            snapshot: The layout to restore
            registry: Registry to restore into; defaults to the bound one

        Returns:
            list[WindowEntity]: The restored windows in snapshot order
        """
        registry = registry or self.registry
        restored = []

        with registry.batch(persist=False):
            registry.clear_windows()
            for record in snapshot.windows:
                window = registry.create_window(record.type)
                registry.set_geometry(window.id, position=QPoint(record.x, record.y),
                                      size=QSize(record.width, record.height))
                registry.set_flags(window.id, minimized=record.minimized, maximized=record.maximized)
                restored.append(window)

                if record.type != WidgetType.EMPTY.value:
                    self._request_widget(window)

        logger.debug("Restored %d window(s) from snapshot", len(restored))
        return restored

    def _request_widget(self, window: WindowEntity):
        if self.widget_loader is None:
            return
        try:
            self.widget_loader(window)
        except Exception as e:
            logger.warning("Widget load request for %s (%s) failed: %s", window.id, window.type, e)

    def save(self):
        if self.store is None:
            return
        self.save_count += 1
        self.store.save(self.to_snapshot())

    def restore(self, callback: Optional[Callable[[list], None]] = None):
        """
        Loads this site's snapshot from the store and applies it.
        Nothing is cleared when no snapshot is stored.
        """
        if self.store is None:
            if callback:
                callback([])
            return

        def on_loaded(snapshot: Optional[LayoutSnapshot]):
            restored = self.apply_snapshot(snapshot) if snapshot is not None else []
            if callback:
                callback(restored)

        self.store.load(on_loaded)
