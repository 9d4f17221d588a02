import logging
from typing import Dict, Optional

from PySide6.QtCore import Qt, QEvent
from PySide6.QtGui import QColor, QKeySequence, QPainter, QShortcut
from PySide6.QtWidgets import (QFrame, QHBoxLayout, QLabel, QLineEdit, QPushButton, QTextEdit,
                               QVBoxLayout, QWidget)

from .core.license_gate import Admission
from .core.overlay_manager import OverlayManager
from .core.widget_registry import WidgetHost, WidgetType, window_title
from .model.overlay_model import WindowEntity
from .window_frame import WindowFrame

logger = logging.getLogger(__name__)

PANEL_STYLE = """
    QFrame#ControlPanel, QFrame#AISidebar, QFrame#WidgetsMenu, QFrame#UpgradeBanner {
        background-color: rgba(15, 23, 42, 230);
        border: 1px solid #334155;
        border-radius: 8px;
    }
    QLabel { color: #e2e8f0; background: transparent; }
    QPushButton {
        background-color: #1e293b; color: #e2e8f0;
        border: 1px solid #334155; border-radius: 4px; padding: 4px 8px;
    }
    QPushButton:hover { background-color: #334155; }
    QPushButton:checked { background-color: #2563eb; }
"""

WIDGET_MENU_ITEMS = (WidgetType.CLOCK, WidgetType.TODO, WidgetType.STATS, WidgetType.WEBVIEW)


class OverlaySurface(QWidget):
    """
    The visible overlay: a control panel, a layer holding one WindowFrame per
    registry window, the widgets menu, the AI sidebar and the upgrade banner.

    The surface owns no state of its own. It renders whatever the manager and
    its registry say and routes every user action back through the manager.
    """

    def __init__(self, manager: OverlayManager, widget_host: Optional[WidgetHost] = None, parent=None):
        super().__init__(parent)
        self.manager = manager
        self.widget_host = widget_host or WidgetHost()
        self.frames: Dict[str, WindowFrame] = {}
        self.page_text = ""
        self._shortcuts = []

        if parent is None:
            self.setWindowFlags(Qt.FramelessWindowHint | Qt.WindowStaysOnTopHint | Qt.Tool)
            self.setAttribute(Qt.WA_TranslucentBackground)
        self.setObjectName("OverlaySurface")
        self.setStyleSheet(PANEL_STYLE)

        self._build_ui()
        self._connect_signals()

        for window in manager.registry.windows():
            self._on_window_added(window)
        self.setVisible(manager.is_visible)
        self._apply_auto_hide(manager.auto_hide)

    # --- Construction ---

    def _build_ui(self):
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(6)

        self.hover_strip = QWidget()
        self.hover_strip.setFixedHeight(6)
        self.hover_strip.installEventFilter(self)
        root.addWidget(self.hover_strip)

        self.control_panel = self._build_control_panel()
        self.control_panel.installEventFilter(self)
        root.addWidget(self.control_panel, 0, Qt.AlignHCenter)

        self.upgrade_banner = self._build_upgrade_banner()
        root.addWidget(self.upgrade_banner, 0, Qt.AlignHCenter)

        body = QHBoxLayout()
        body.setSpacing(6)

        self.widgets_menu = self._build_widgets_menu()
        body.addWidget(self.widgets_menu, 0, Qt.AlignTop)

        self.windows_layer = QWidget()
        self.windows_layer.setObjectName("WindowsLayer")
        self.windows_layer.installEventFilter(self)
        body.addWidget(self.windows_layer, 1)

        self.ai_sidebar = self._build_ai_sidebar()
        body.addWidget(self.ai_sidebar)

        root.addLayout(body, 1)

    def _build_control_panel(self) -> QFrame:
        panel = QFrame()
        panel.setObjectName("ControlPanel")
        layout = QHBoxLayout(panel)
        layout.setContentsMargins(8, 4, 8, 4)

        self.tier_label = QLabel()
        layout.addWidget(self.tier_label)

        self.add_window_button = QPushButton("+ Window")
        self.add_window_button.clicked.connect(lambda: self.manager.add_window())
        layout.addWidget(self.add_window_button)

        self.split_h_button = QPushButton("Split ↔")
        self.split_h_button.clicked.connect(lambda: self.manager.split_pane("horizontal"))
        layout.addWidget(self.split_h_button)

        self.split_v_button = QPushButton("Split ↕")
        self.split_v_button.clicked.connect(lambda: self.manager.split_pane("vertical"))
        layout.addWidget(self.split_v_button)

        self.widgets_button = QPushButton("Widgets")
        self.widgets_button.setCheckable(True)
        self.widgets_button.clicked.connect(lambda: self.manager.toggle_feature_panel("widgets_menu"))
        layout.addWidget(self.widgets_button)

        self.ai_button = QPushButton("AI")
        self.ai_button.setCheckable(True)
        self.ai_button.clicked.connect(lambda: self.manager.toggle_feature_panel("ai"))
        layout.addWidget(self.ai_button)

        self.blur_button = QPushButton()
        self.blur_button.clicked.connect(self.manager.toggle_blur_mode)
        layout.addWidget(self.blur_button)

        self.auto_hide_button = QPushButton("Auto-hide")
        self.auto_hide_button.setCheckable(True)
        self.auto_hide_button.clicked.connect(self.manager.toggle_auto_hide)
        layout.addWidget(self.auto_hide_button)

        self.close_button = QPushButton("Close")
        self.close_button.clicked.connect(self.manager.close)
        layout.addWidget(self.close_button)

        self._update_tier_label(self.manager.license.current_tier())
        self._update_blur_button(self.manager.blur_mode)
        return panel

    def _build_upgrade_banner(self) -> QFrame:
        banner = QFrame()
        banner.setObjectName("UpgradeBanner")
        layout = QHBoxLayout(banner)
        layout.setContentsMargins(8, 4, 8, 4)
        self.upgrade_label = QLabel()
        layout.addWidget(self.upgrade_label, 1)
        dismiss = QPushButton("Dismiss")
        dismiss.clicked.connect(banner.hide)
        layout.addWidget(dismiss)
        banner.hide()
        return banner

    def _build_widgets_menu(self) -> QFrame:
        menu = QFrame()
        menu.setObjectName("WidgetsMenu")
        layout = QVBoxLayout(menu)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.addWidget(QLabel("Widgets"))
        self.widget_buttons = {}
        for widget_type in WIDGET_MENU_ITEMS:
            button = QPushButton(window_title(widget_type.value))
            button.clicked.connect(lambda _checked=False, t=widget_type.value: self._on_widget_chosen(t))
            layout.addWidget(button)
            self.widget_buttons[widget_type.value] = button
        menu.hide()
        return menu

    def _build_ai_sidebar(self) -> QFrame:
        sidebar = QFrame()
        sidebar.setObjectName("AISidebar")
        sidebar.setFixedWidth(280)
        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.addWidget(QLabel("AI Assistant"))

        self.ai_log = QTextEdit()
        self.ai_log.setReadOnly(True)
        layout.addWidget(self.ai_log, 1)

        input_row = QHBoxLayout()
        self.ai_input = QLineEdit()
        self.ai_input.setPlaceholderText("Ask about this page...")
        self.ai_input.returnPressed.connect(self._on_ai_send)
        input_row.addWidget(self.ai_input, 1)
        send = QPushButton("Send")
        send.clicked.connect(self._on_ai_send)
        input_row.addWidget(send)
        layout.addLayout(input_row)

        sidebar.hide()
        return sidebar

    def _connect_signals(self):
        registry = self.manager.registry
        registry.window_added.connect(self._on_window_added)
        registry.window_removed.connect(self._on_window_removed)
        registry.window_changed.connect(self._sync_frame)
        self.manager.controller.frame_ready.connect(self._on_frame_ready)

        signals = self.manager.signals
        signals.visibility_changed.connect(self.setVisible)
        signals.feature_panel_toggled.connect(self._on_feature_panel_toggled)
        signals.upgrade_prompt_requested.connect(self.show_upgrade_prompt)
        signals.widget_load_requested.connect(self._on_widget_load_requested)
        signals.blur_mode_changed.connect(self._on_blur_mode_changed)
        signals.auto_hide_changed.connect(self._apply_auto_hide)
        signals.tier_changed.connect(self._update_tier_label)
        signals.ai_response.connect(self._on_ai_response)

    def install_shortcuts(self, host: QWidget):
        """Binds Alt+T and Alt+A on `host`, which stays reachable while the overlay is hidden."""
        for sequence, action in (("Alt+T", "toggle-overlay"), ("Alt+A", "toggle-ai-assistant")):
            shortcut = QShortcut(QKeySequence(sequence), host)
            shortcut.activated.connect(lambda a=action: self.manager.handle_command(a))
            self._shortcuts.append(shortcut)

    def set_page_text(self, text: str):
        self.page_text = text or ""

    # --- Windows ---

    def _on_window_added(self, window: WindowEntity):
        if window.id in self.frames:
            return
        frame = WindowFrame(window, self.manager, self, self.windows_layer)
        self.frames[window.id] = frame
        frame.show()
        frame.raise_()

    def _on_window_removed(self, window_id: str):
        frame = self.frames.pop(window_id, None)
        self.widget_host.unload(window_id)
        if frame is not None:
            frame.hide()
            frame.deleteLater()

    def _sync_frame(self, window_id: str):
        frame = self.frames.get(window_id)
        window = self.manager.registry.get(window_id)
        if frame is not None and window is not None:
            frame.sync(window)

    def _on_frame_ready(self, window_ids: list):
        for window_id in window_ids:
            self._sync_frame(window_id)

    def _on_widget_load_requested(self, window_id: str, widget_type: str):
        frame = self.frames.get(window_id)
        if frame is None:
            logger.debug("Widget load for %s skipped: no frame", window_id)
            return
        if self.widget_host.load_into(window_id, widget_type, frame.content_container):
            widget = self.widget_host.loaded[window_id]
            if hasattr(widget, "attach"):
                widget.attach(self.manager)

    def _on_widget_chosen(self, widget_type: str):
        self.manager.add_widget_window(widget_type)
        if self.manager.panels["widgets_menu"]:
            self.manager.toggle_feature_panel("widgets_menu")

    # --- Panels and prompts ---

    def _on_feature_panel_toggled(self, name: str, visible: bool):
        if name == "ai":
            self.ai_sidebar.setVisible(visible)
            self.ai_button.setChecked(visible)
            if visible:
                self.ai_input.setFocus()
        elif name == "widgets_menu":
            self.widgets_menu.setVisible(visible)
            self.widgets_button.setChecked(visible)

    def show_upgrade_prompt(self, admission: Admission):
        noun = "windows" if admission.resource == "window" else "panes"
        self.upgrade_label.setText(
            f"The {admission.tier} plan allows {admission.limit} {noun}. Upgrade to Premium for unlimited {noun}.")
        self.upgrade_banner.show()

    def _update_tier_label(self, tier: str):
        self.tier_label.setText(tier.title())

    def _on_ai_send(self):
        message = self.ai_input.text().strip()
        if not message:
            return
        self.ai_log.append(f"You: {message}")
        self.ai_input.clear()
        self.manager.ask_ai(message, self.page_text)

    def _on_ai_response(self, text: str):
        self.ai_log.append(f"AI: {text}")

    # --- Appearance ---

    def _update_blur_button(self, mode: str):
        self.blur_button.setText("Blur: on" if mode == "blur" else "Blur: off")

    def _on_blur_mode_changed(self, mode: str):
        self._update_blur_button(mode)
        self.update()

    def _apply_auto_hide(self, enabled: bool):
        self.auto_hide_button.setChecked(enabled)
        self.control_panel.setVisible(not enabled)

    def eventFilter(self, watched, event):
        if self.manager.auto_hide:
            if watched is self.hover_strip and event.type() == QEvent.Enter:
                self.control_panel.show()
            elif watched is self.control_panel and event.type() == QEvent.Leave:
                self.control_panel.hide()
        if watched is self.windows_layer and event.type() == QEvent.Resize:
            # Maximized frames track the layer size.
            for window_id in self.frames:
                self._sync_frame(window_id)
        return super().eventFilter(watched, event)

    def paintEvent(self, event):
        # Only the blur mode dims the page behind the overlay.
        if self.manager.blur_mode == "blur":
            painter = QPainter(self)
            painter.fillRect(self.rect(), QColor(15, 23, 42, 110))
        super().paintEvent(event)
