from datetime import datetime

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget


class ClockWidget(QWidget):
    """Live clock showing time, long-form date and the local timezone name."""

    def __init__(self, container: QWidget, clock=datetime.now):
        super().__init__(container)
        self.setObjectName("ClockWidget")
        self._clock = clock
        self._timer = QTimer(self)
        self._timer.setInterval(1000)
        self._timer.timeout.connect(self.update_clock)

        self.time_label = QLabel("00:00:00")
        self.date_label = QLabel("Loading...")
        self.timezone_label = QLabel("UTC")

    def render(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        for label in (self.time_label, self.date_label, self.timezone_label):
            label.setAlignment(Qt.AlignCenter)
            label.setStyleSheet("background: transparent;")
            layout.addWidget(label)
        self.time_label.setStyleSheet("background: transparent; font-size: 32px; font-weight: 600;")

        container_layout = self.parentWidget().layout()
        if container_layout is not None:
            container_layout.addWidget(self)

        self.update_clock()
        self._timer.start()

    def update_clock(self):
        now = self._clock().astimezone()
        self.time_label.setText(now.strftime("%H:%M:%S"))
        self.date_label.setText(now.strftime("%A, %B %d, %Y").replace(" 0", " "))
        self.timezone_label.setText(now.tzname() or "UTC")

    def teardown(self):
        self._timer.stop()
