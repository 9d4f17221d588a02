from datetime import datetime

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QGridLayout, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

STAT_LABELS = {
    'windows_opened': "Windows",
    'panes_created': "Panes",
    'todos_completed': "Tasks Done",
    'ai_queries': "AI Queries",
}


def format_session_time(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}m"
    return f"{minutes // 60}h {minutes % 60}m"


class StatsWidget(QWidget):
    """
    Session counters for windows, panes, completed tasks and AI queries.

    Standalone, the widget counts only what update_stat() is told. Once
    attached, the manager owns the counters and persists them.
    """

    def __init__(self, container: QWidget, clock=datetime.now):
        super().__init__(container)
        self.setObjectName("StatsWidget")
        self._clock = clock
        self.stats = {key: 0 for key in STAT_LABELS}
        self.session_start = clock()
        self.value_labels: dict[str, QLabel] = {}
        self.session_label = QLabel("Session: 0m")
        self.reset_button = QPushButton("Reset")
        self._timer = QTimer(self)
        self._timer.setInterval(60000)
        self._timer.timeout.connect(self.update_session_time)
        self._manager = None

    def render(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        header = QHBoxLayout()
        header.addWidget(QLabel("Session Stats"), 1)
        header.addWidget(self.reset_button)
        layout.addLayout(header)

        grid = QGridLayout()
        for i, (key, text) in enumerate(STAT_LABELS.items()):
            value = QLabel(str(self.stats[key]))
            value.setAlignment(Qt.AlignCenter)
            value.setStyleSheet("background: transparent; font-size: 20px; font-weight: 600;")
            caption = QLabel(text)
            caption.setAlignment(Qt.AlignCenter)
            grid.addWidget(value, (i // 2) * 2, i % 2)
            grid.addWidget(caption, (i // 2) * 2 + 1, i % 2)
            self.value_labels[key] = value
        layout.addLayout(grid)
        layout.addWidget(self.session_label)

        self.reset_button.clicked.connect(self.reset_stats)

        container_layout = self.parentWidget().layout()
        if container_layout is not None:
            container_layout.addWidget(self)
        self._timer.start()

    def attach(self, manager):
        """Seeds the counters from an OverlayManager and follows its stat_changed signal."""
        self._manager = manager
        for key, value in manager.stats.items():
            if key in self.stats:
                self.stats[key] = value
        manager.signals.stat_changed.connect(self._on_stat_changed)
        self.update_display()

    def _on_stat_changed(self, key: str, value: int):
        if key in self.stats:
            self.stats[key] = value
            self.update_display()

    def update_stat(self, key: str, increment: int = 1):
        if key in self.stats:
            self.stats[key] += increment
            self.update_display()

    def update_display(self):
        for key, label in self.value_labels.items():
            label.setText(str(self.stats[key]))

    def update_session_time(self):
        minutes = int((self._clock() - self.session_start).total_seconds() // 60)
        self.session_label.setText(f"Session: {format_session_time(minutes)}")

    def reset_stats(self):
        self.stats = {key: 0 for key in STAT_LABELS}
        if self._manager is not None:
            self._manager.reset_stats()
        self.session_start = self._clock()
        self.update_display()
        self.update_session_time()

    def teardown(self):
        self._timer.stop()
        if self._manager is not None:
            self._manager.signals.stat_changed.disconnect(self._on_stat_changed)
            self._manager = None
