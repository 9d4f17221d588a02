import logging
import random
from contextlib import contextmanager
from typing import Optional

from PySide6.QtCore import QObject, QPoint, QSize, Signal

from ..config import DEFAULT_CONFIG, OverlayConfig
from ..model.overlay_model import PANE_DIRECTIONS, PaneEntity, WindowEntity
from .license_gate import Admission, LicenseGate

logger = logging.getLogger(__name__)


class WindowRegistry(QObject):
    """
    The live collection of windows and panes for one overlay.

    All state changes go through the named operations below. Every committed
    mutation ends with a `persist_requested` emission, so callers never have
    to ask for a save themselves.
    """
    # Args: window (WindowEntity)
    window_added = Signal(object)
    # Args: window_id (str)
    window_removed = Signal(str)
    # Emitted after geometry or flags of a window were committed.
    # Args: window_id (str)
    window_changed = Signal(str)
    # Args: pane (PaneEntity)
    pane_added = Signal(object)
    persist_requested = Signal()

    def __init__(self, license_gate: Optional[LicenseGate] = None, config: OverlayConfig = DEFAULT_CONFIG,
                 rng: Optional[random.Random] = None, parent=None):
        super().__init__(parent)
        self.license_gate = license_gate
        self.config = config
        self._rng = rng or random.Random()
        self._windows: dict[str, WindowEntity] = {}
        self._panes: list[PaneEntity] = []
        self._batch_depth = 0
        self._batch_dirty = False
        self._batch_persist = True

    # --- Queries ---

    def windows(self) -> list[WindowEntity]:
        """Windows in creation order."""
        return list(self._windows.values())

    def get(self, window_id: str) -> Optional[WindowEntity]:
        return self._windows.get(window_id)

    def __contains__(self, window_id) -> bool:
        return window_id in self._windows

    def window_count(self) -> int:
        return len(self._windows)

    def panes(self) -> list[PaneEntity]:
        return list(self._panes)

    def pane_count(self) -> int:
        return len(self._panes)

    # --- Admission ---

    def check_window_admission(self) -> Admission:
        if self.license_gate is None:
            return Admission(True, "window", self.window_count(), float("inf"), "unlimited")
        return self.license_gate.check_window(self.window_count())

    def check_pane_admission(self) -> Admission:
        if self.license_gate is None:
            return Admission(True, "pane", self.pane_count(), float("inf"), "unlimited")
        return self.license_gate.check_pane(self.pane_count())

    # --- Window lifecycle ---

    def create_window(self, window_type: str = "empty", content: Optional[str] = None) -> WindowEntity:
        """
        Creates a window at a jittered spawn point with the default size.
        Admission is the caller's responsibility (see check_window_admission).
        """
        cfg = self.config
        x = cfg.spawn_origin_x + self._rng.randint(0, cfg.spawn_jitter_x)
        y = cfg.spawn_origin_y + self._rng.randint(0, cfg.spawn_jitter_y)

        window = WindowEntity(
            type=window_type or "empty",
            position=QPoint(x, y),
            size=QSize(cfg.default_width, cfg.default_height),
            content=content,
        )
        self._windows[window.id] = window
        logger.debug("Window created: %s (%s) at (%d, %d)", window.id, window.type, x, y)

        self.window_added.emit(window)
        self._request_persist()
        return window

    def remove_window(self, window_id: str) -> bool:
        if window_id not in self._windows:
            logger.debug("remove_window: unknown id %s", window_id)
            return False
        del self._windows[window_id]
        logger.debug("Window removed: %s", window_id)

        self.window_removed.emit(window_id)
        self._request_persist()
        return True

    def clear_windows(self):
        """Removes every window. Panes are left untouched."""
        if not self._windows:
            return
        with self.batch():
            for window_id in list(self._windows):
                self.remove_window(window_id)

    # --- Geometry and flags ---

    def clamp_size(self, size: QSize) -> QSize:
        return QSize(max(self.config.min_width, size.width()), max(self.config.min_height, size.height()))

    def set_geometry(self, window_id: str, position: Optional[QPoint] = None, size: Optional[QSize] = None,
                     live: bool = False) -> bool:
        """
        Updates position and/or size; size is clamped to the configured minimum.

        A live write only updates the logical value: no change signal and no
        persistence request. Interactions use it between frames and commit
        with a normal write at the end.
        """
        window = self._windows.get(window_id)
        if window is None:
            logger.debug("set_geometry: unknown id %s", window_id)
            return False

        if position is not None:
            window.position = QPoint(position)
        if size is not None:
            window.size = self.clamp_size(size)

        if not live:
            self.window_changed.emit(window_id)
            self._request_persist()
        return True

    def set_flags(self, window_id: str, minimized: Optional[bool] = None, maximized: Optional[bool] = None) -> bool:
        window = self._windows.get(window_id)
        if window is None:
            logger.debug("set_flags: unknown id %s", window_id)
            return False

        if minimized is not None:
            window.minimized = bool(minimized)
        if maximized is not None:
            window.maximized = bool(maximized)

        self.window_changed.emit(window_id)
        self._request_persist()
        return True

    def toggle_minimized(self, window_id: str) -> bool:
        window = self._windows.get(window_id)
        if window is None:
            return False
        return self.set_flags(window_id, minimized=not window.minimized)

    def toggle_maximized(self, window_id: str) -> bool:
        window = self._windows.get(window_id)
        if window is None:
            return False
        return self.set_flags(window_id, maximized=not window.maximized)

    # --- Panes ---

    def create_pane(self, direction: str) -> PaneEntity:
        """Appends a pane. Panes cannot be removed within a session."""
        if direction not in PANE_DIRECTIONS:
            raise ValueError(f"Unknown pane direction '{direction}'")
        pane = PaneEntity(direction=direction, index=len(self._panes))
        self._panes.append(pane)

        self.pane_added.emit(pane)
        self._request_persist()
        return pane

    # --- Persistence requests ---

    @contextmanager
    def batch(self, persist: bool = True):
        """
        Groups several mutations into a single persistence request.
        With persist=False the grouped mutations request no save at all.
        """
        outermost = self._batch_depth == 0
        if outermost:
            self._batch_dirty = False
            self._batch_persist = persist
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if outermost:
                dirty, self._batch_dirty = self._batch_dirty, False
                if dirty and self._batch_persist:
                    self.persist_requested.emit()

    def _request_persist(self):
        if self._batch_depth:
            self._batch_dirty = True
            return
        self.persist_requested.emit()

    def describe(self) -> str:
        """Multi-line dump of the registry, used by debug mode."""
        lines = ["--- OVERLAY LAYOUT STATE ---"]
        if not self._windows:
            lines.append("  (No windows)")
        for i, window in enumerate(self._windows.values()):
            lines.append(
                f"  [Window {i + 1}: '{window.type}' id={window.id}] "
                f"pos=({window.position.x()}, {window.position.y()}) "
                f"size={window.size.width()}x{window.size.height()} mode={window.display_mode.value}"
            )
        for pane in self._panes:
            lines.append(f"  [Pane {pane.index + 1}: {pane.direction}]")
        lines.append("----------------------------")
        return "\n".join(lines)
