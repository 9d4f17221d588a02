from PySide6.QtCore import Qt, QPoint, QRect, QRectF
from PySide6.QtGui import QColor, QPainter, QPainterPath
from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

from .core.widget_registry import WidgetType, window_title
from .model.overlay_model import DisplayMode, WindowEntity
from .title_bar import TitleBar


class ResizeGrip(QWidget):
    """Bottom-right handle that feeds the resize state machine."""

    def __init__(self, frame):
        super().__init__(frame)
        self._frame = frame
        self.setFixedSize(14, 14)
        self.setCursor(Qt.SizeFDiagCursor)
        self.resizing = False

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setPen(QColor("#64748b"))
        for offset in (4, 8, 12):
            painter.drawLine(self.width() - offset, self.height() - 2, self.width() - 2, self.height() - offset)

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            pointer = self._frame.overlay_point(event.globalPosition().toPoint())
            if self._frame.controller.begin_resize(self._frame.window_id, pointer):
                self.resizing = True
                self.grabMouse()
            event.accept()

    def mouseMoveEvent(self, event):
        if self.resizing:
            self._frame.controller.pointer_moved(self._frame.overlay_point(event.globalPosition().toPoint()))

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton and self.resizing:
            self.resizing = False
            self.releaseMouse()
            self._frame.controller.pointer_released(self._frame.overlay_point(event.globalPosition().toPoint()))


class WindowFrame(QWidget):
    """
    Paints one registry window. Holds only the window id; geometry and flags
    are read from the registry every time the frame is synced.
    """

    def __init__(self, window: WindowEntity, manager, surface, parent=None):
        super().__init__(parent)
        self.window_id = window.id
        self.manager = manager
        self.controller = manager.controller
        self._surface = surface
        self._mode = DisplayMode.NORMAL

        self.setObjectName(f"WindowFrame_{window.id}")
        self.setAttribute(Qt.WA_StyledBackground, False)

        self.main_layout = QVBoxLayout(self)
        self.main_layout.setContentsMargins(0, 0, 0, 0)
        self.main_layout.setSpacing(0)

        self.title_bar = TitleBar(window_title(window.type), self)
        self.main_layout.addWidget(self.title_bar)

        self.content_container = QWidget()
        self.content_container.setObjectName("ContentContainer")
        self.content_container.setStyleSheet("background: transparent; color: #e2e8f0;")
        self.content_layout = QVBoxLayout(self.content_container)
        self.content_layout.setContentsMargins(8, 8, 8, 8)
        self.main_layout.addWidget(self.content_container, 1)
        self._render_initial_content(window)

        self.grip = ResizeGrip(self)
        self.sync(window)

    def _render_initial_content(self, window: WindowEntity):
        """Text content, the empty-window prompt, or a placeholder until the widget loads."""
        if window.content:
            label = QLabel(window.content)
            label.setObjectName("WindowContent")
            label.setWordWrap(True)
            label.setAlignment(Qt.AlignLeft | Qt.AlignTop)
            self.content_layout.addWidget(label)
        elif window.type == WidgetType.EMPTY.value:
            prompt = QLabel("Drag a widget here or add content")
            prompt.setObjectName("EmptyPrompt")
            prompt.setAlignment(Qt.AlignCenter)
            prompt.setWordWrap(True)
            self.add_content_button = QPushButton("Add Content")
            self.add_content_button.setObjectName("AddContentButton")
            self.add_content_button.clicked.connect(self.request_add_content)
            self.content_layout.addStretch(1)
            self.content_layout.addWidget(prompt)
            self.content_layout.addWidget(self.add_content_button, 0, Qt.AlignHCenter)
            self.content_layout.addStretch(1)
        else:
            placeholder = QLabel("Loading...")
            placeholder.setObjectName("LoadingPlaceholder")
            placeholder.setAlignment(Qt.AlignCenter)
            self.content_layout.addWidget(placeholder)

    def overlay_point(self, global_pos: QPoint) -> QPoint:
        return self._surface.windows_layer.mapFromGlobal(global_pos)

    def is_maximized(self) -> bool:
        return self._mode is DisplayMode.MAXIMIZED

    def sync(self, window: WindowEntity):
        self._mode = window.display_mode
        self.content_container.setVisible(self._mode is not DisplayMode.MINIMIZED)
        self.grip.setVisible(self._mode is DisplayMode.NORMAL)

        if self._mode is DisplayMode.MAXIMIZED:
            parent = self.parentWidget()
            self.setGeometry(parent.rect() if parent else QRect(window.position, window.size))
        elif self._mode is DisplayMode.MINIMIZED:
            self.setGeometry(QRect(window.position.x(), window.position.y(),
                                   window.size.width(), self.title_bar.height()))
        else:
            self.setGeometry(QRect(window.position, window.size))

        self.title_bar.set_maximized_glyph(window.maximized)
        self._place_grip()
        self.update()

    def _place_grip(self):
        self.grip.move(self.width() - self.grip.width(), self.height() - self.grip.height())
        self.grip.raise_()

    def resizeEvent(self, event):
        self._place_grip()
        super().resizeEvent(event)

    def request_minimize(self):
        self.manager.toggle_minimized(self.window_id)

    def request_maximize(self):
        self.manager.toggle_maximized(self.window_id)

    def request_close(self):
        self.manager.close_window(self.window_id)

    def request_add_content(self):
        if not self.manager.panels["widgets_menu"]:
            self.manager.toggle_feature_panel("widgets_menu")

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        radius = 0 if self.is_maximized() else 8.0

        path = QPainterPath()
        path.addRoundedRect(QRectF(self.rect()).adjusted(0.5, 0.5, -0.5, -0.5), radius, radius)
        painter.fillPath(path, QColor(15, 23, 42, 235))
        painter.setPen(QColor("#334155"))
        painter.drawPath(path)
