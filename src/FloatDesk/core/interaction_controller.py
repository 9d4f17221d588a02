import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, QPoint, QSize, Signal

from ..config import DEFAULT_CONFIG, OverlayConfig
from ..model.overlay_model import DisplayMode
from ..utils.frame_throttle import FrameThrottle
from .interaction_state import InteractionState
from .window_registry import WindowRegistry

logger = logging.getLogger(__name__)


@dataclass
class DragSession:
    window_id: str
    # Pointer minus window top-left, captured once at press time.
    offset: QPoint


@dataclass
class ResizeSession:
    window_id: str
    start_pointer: QPoint
    start_size: QSize


class InteractionController(QObject):
    """
    Drives the drag and resize state machines from pointer events.

    Only one interaction runs per overlay. While it runs, every pointer move
    updates the registry's logical geometry immediately, but visible updates
    are coalesced to one `frame_ready` per frame. Releasing the pointer
    commits the final geometry, which issues exactly one persistence request.
    All pointer positions are in overlay-local coordinates.
    """
    # Args: state (InteractionState)
    state_changed = Signal(object)
    # Args: window_ids (list[str]) whose live geometry should be repainted
    frame_ready = Signal(list)

    def __init__(self, registry: WindowRegistry, config: OverlayConfig = DEFAULT_CONFIG, parent=None):
        super().__init__(parent)
        self.registry = registry
        self.config = config
        self._state = InteractionState.IDLE
        self._session: Optional[DragSession | ResizeSession] = None

        self._throttle = FrameThrottle(config.frame_interval_ms, self)
        self._throttle.flushed.connect(self.frame_ready)

        self.registry.window_removed.connect(self._on_window_removed)

    @property
    def state(self) -> InteractionState:
        return self._state

    def is_idle(self) -> bool:
        return self._state is InteractionState.IDLE

    def active_window_id(self) -> Optional[str]:
        return self._session.window_id if self._session else None

    def _set_state(self, new_state: InteractionState, session=None):
        self._session = session
        if new_state is not self._state:
            self._state = new_state
            self.state_changed.emit(new_state)

    # --- Press ---

    def begin_drag(self, window_id: str, pointer: QPoint, on_control: bool = False) -> bool:
        """
        Pointer-down on a window header. Rejected when the press landed on a
        header control button, when the window is unknown or maximized, or
        while any other interaction is active.
        """
        if on_control:
            return False
        if not self.is_idle():
            logger.debug("Drag on %s rejected: %s already active", window_id, self._state.name)
            return False
        window = self.registry.get(window_id)
        if window is None:
            logger.debug("Drag rejected: unknown window %s", window_id)
            return False
        if window.display_mode is DisplayMode.MAXIMIZED:
            logger.debug("Drag rejected: window %s is maximized", window_id)
            return False

        offset = QPoint(pointer) - window.position
        self._set_state(InteractionState.DRAGGING, DragSession(window_id, offset))
        return True

    def begin_resize(self, window_id: str, pointer: QPoint) -> bool:
        """Pointer-down on a window's resize handle."""
        if not self.is_idle():
            logger.debug("Resize on %s rejected: %s already active", window_id, self._state.name)
            return False
        window = self.registry.get(window_id)
        if window is None:
            logger.debug("Resize rejected: unknown window %s", window_id)
            return False
        if window.minimized or window.maximized:
            logger.debug("Resize rejected: window %s is %s", window_id, window.display_mode.value)
            return False

        session = ResizeSession(window_id, QPoint(pointer), QSize(window.size))
        self._set_state(InteractionState.RESIZING, session)
        return True

    # --- Move ---

    def _apply(self, pointer: QPoint, live: bool) -> bool:
        session = self._session
        if isinstance(session, DragSession):
            return self.registry.set_geometry(session.window_id, position=QPoint(pointer) - session.offset, live=live)
        if isinstance(session, ResizeSession):
            delta = QPoint(pointer) - session.start_pointer
            size = QSize(session.start_size.width() + delta.x(), session.start_size.height() + delta.y())
            return self.registry.set_geometry(session.window_id, size=size, live=live)
        return False

    def pointer_moved(self, pointer: QPoint):
        if self._session is None:
            return
        if self._apply(pointer, live=True):
            self._throttle.schedule(self._session.window_id)

    # --- Release ---

    def pointer_released(self, pointer: Optional[QPoint] = None):
        """
        Ends the active interaction. With a pointer the final geometry is
        recomputed from it; without one the last logical geometry is kept.
        """
        session = self._session
        if session is None:
            return

        self._throttle.cancel(session.window_id)
        if pointer is not None:
            committed = self._apply(pointer, live=False)
        else:
            window = self.registry.get(session.window_id)
            committed = window is not None and self.registry.set_geometry(
                session.window_id, position=window.position, size=window.size)

        if committed:
            logger.debug("%s of %s committed", self._state.name.title(), session.window_id)
        self._set_state(InteractionState.IDLE)

    def pointer_cancelled(self):
        """Loss of pointer capture: commit whatever the last move produced."""
        self.pointer_released(None)

    def _on_window_removed(self, window_id: str):
        if self._session is not None and self._session.window_id == window_id:
            self._throttle.cancel(window_id)
            self._set_state(InteractionState.IDLE)
