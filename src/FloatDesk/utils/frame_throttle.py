from PySide6.QtCore import QObject, QTimer, Signal


class FrameThrottle(QObject):
    """
    Coalesces repaint requests so each key is flushed at most once per frame.

    Requests made while a frame is pending are merged into it; the pending
    keys are emitted together, in first-request order, when the frame fires.
    """
    # Args: keys (list)
    flushed = Signal(list)

    def __init__(self, interval_ms: int = 16, parent=None):
        super().__init__(parent)
        self._pending: dict = {}
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.flush)
        self.frames_flushed = 0

    def schedule(self, key):
        self._pending[key] = None
        if not self._timer.isActive():
            self._timer.start()

    def is_pending(self, key=None) -> bool:
        if key is None:
            return bool(self._pending)
        return key in self._pending

    def flush(self):
        self._timer.stop()
        if not self._pending:
            return
        keys = list(self._pending)
        self._pending.clear()
        self.frames_flushed += 1
        self.flushed.emit(keys)

    def cancel(self, key=None):
        """Drops one pending key, or everything when no key is given."""
        if key is None:
            self._pending.clear()
        else:
            self._pending.pop(key, None)
        if not self._pending:
            self._timer.stop()
