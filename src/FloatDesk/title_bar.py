# title_bar.py

from PySide6.QtCore import Qt, QPoint, QRectF
from PySide6.QtGui import QBrush, QColor, QPainter, QPainterPath
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QWidget


class TitleBar(QWidget):
    def __init__(self, title, frame):
        super().__init__(frame)
        self._frame = frame
        self.setObjectName(f"TitleBar_{frame.window_id}")
        self.setAutoFillBackground(False)
        self.setFixedHeight(32)
        self.setMouseTracking(True)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 0, 4, 0)
        layout.setSpacing(4)

        self.title_label = QLabel(title)
        self.title_label.setStyleSheet("background: transparent; color: #e2e8f0;")
        self.title_label.setAttribute(Qt.WA_TransparentForMouseEvents)
        layout.addWidget(self.title_label, 1)

        button_style = """
            QPushButton { background-color: transparent; border: none; color: #e2e8f0; }
            QPushButton:hover { background-color: #334155; border-radius: 4px; }
            QPushButton:pressed { background-color: #475569; }
        """

        self.minimize_button = self._make_button("−", "Minimize", button_style)
        self.minimize_button.clicked.connect(self._frame.request_minimize)
        layout.addWidget(self.minimize_button)

        self.maximize_button = self._make_button("□", "Maximize", button_style)
        self.maximize_button.clicked.connect(self._frame.request_maximize)
        layout.addWidget(self.maximize_button)

        self.close_button = self._make_button("×", "Close", button_style)
        self.close_button.clicked.connect(self._frame.request_close)
        layout.addWidget(self.close_button)

        self.moving = False

    def _make_button(self, glyph, tooltip, style):
        button = QPushButton(glyph)
        button.setToolTip(tooltip)
        button.setFixedSize(24, 24)
        button.setStyleSheet(style)
        return button

    def is_on_control(self, pos: QPoint) -> bool:
        return any(button.geometry().contains(pos)
                   for button in (self.minimize_button, self.maximize_button, self.close_button))

    def paintEvent(self, event):
        """Paint the header with rounded top corners to match the frame."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        rect = QRectF(self.rect())
        radius = 0.0 if self._frame.is_maximized() else 8.0
        path = QPainterPath()
        path.moveTo(rect.left(), rect.bottom())
        path.lineTo(rect.left(), rect.top() + radius)
        path.arcTo(rect.left(), rect.top(), radius * 2, radius * 2, 180, -90)
        path.lineTo(rect.right() - radius, rect.top())
        path.arcTo(rect.right() - radius * 2, rect.top(), radius * 2, radius * 2, 90, -90)
        path.lineTo(rect.right(), rect.bottom())
        path.closeSubpath()

        painter.fillPath(path, QBrush(QColor("#1e293b")))
        super().paintEvent(event)

    def mousePressEvent(self, event):
        # Presses on the control buttons never start a drag.
        if self.is_on_control(event.position().toPoint()):
            super().mousePressEvent(event)
            return

        if event.button() == Qt.LeftButton:
            self._frame.raise_()
            pointer = self._frame.overlay_point(event.globalPosition().toPoint())
            if self._frame.controller.begin_drag(self._frame.window_id, pointer):
                self.moving = True
                self.grabMouse()

    def mouseMoveEvent(self, event):
        if self.moving:
            pointer = self._frame.overlay_point(event.globalPosition().toPoint())
            self._frame.controller.pointer_moved(pointer)
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton and self.moving:
            self.moving = False
            self.releaseMouse()
            pointer = self._frame.overlay_point(event.globalPosition().toPoint())
            self._frame.controller.pointer_released(pointer)
            return
        super().mouseReleaseEvent(event)

    def set_title(self, title: str):
        self.title_label.setText(title)

    def set_maximized_glyph(self, maximized: bool):
        self.maximize_button.setText("❐" if maximized else "□")
        self.maximize_button.setToolTip("Restore" if maximized else "Maximize")
