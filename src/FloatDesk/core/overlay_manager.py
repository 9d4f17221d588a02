import logging
import random
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from ..config import BLUR_MODES, DEFAULT_CONFIG, OverlayConfig
from ..model.layout_serializer import LayoutSerializer
from ..model.overlay_model import PaneEntity, WindowEntity
from ..utils.log import set_debug
from .assistant import AssistantSettings, LocalAssistant
from .errors import StoreUnavailableError
from .interaction_controller import InteractionController
from .key_value_store import KeyValueStore
from .layout_store import LayoutStore
from .license_gate import Admission, LicenseGate
from .widget_registry import WidgetType
from .window_registry import WindowRegistry

logger = logging.getLogger(__name__)

AIHandler = Callable[[str, str], str]

FEATURE_PANELS = ("ai", "widgets_menu")

STAT_KEYS = ("windows_opened", "panes_created", "todos_completed", "ai_queries")


class OverlaySignals(QObject):
    """
    A collection of signals to allow views to react to overlay changes.
    """
    # Emitted whenever an add/split request is denied by the license tier.
    # Args: admission (Admission)
    upgrade_prompt_requested = Signal(object)

    # Args: visible (bool)
    visibility_changed = Signal(bool)

    # Args: panel name (str), visible (bool)
    feature_panel_toggled = Signal(str, bool)

    # Args: mode (str)
    blur_mode_changed = Signal(str)

    # Args: enabled (bool)
    auto_hide_changed = Signal(bool)

    # A window needs its widget rendered.
    # Args: window_id (str), widget type (str)
    widget_load_requested = Signal(str, str)

    # Args: tier (str)
    tier_changed = Signal(str)

    # Args: response text (str)
    ai_response = Signal(str)

    # Args: stat name (str), new value (int)
    stat_changed = Signal(str, int)

    # A general signal emitted whenever a committed change was sent for persistence.
    layout_changed = Signal()


class OverlayManager(QObject):
    """
    Single entry point of the overlay: builds the components, guards
    creations with the license tier and dispatches external commands.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, site: str = "default",
                 config: OverlayConfig = DEFAULT_CONFIG, ai_handler: Optional[AIHandler] = None,
                 rng: Optional[random.Random] = None, parent=None):
        super().__init__(parent)
        self.config = config
        self.site = site
        self.store = store
        self.signals = OverlaySignals()
        self.debug_mode = False

        self.license = LicenseGate(store, config, self)
        self.layout_store = LayoutStore(store, site, config)
        self.registry = WindowRegistry(self.license, config, rng, self)
        self.controller = InteractionController(self.registry, config, self)
        self.serializer = LayoutSerializer(self.registry, self.layout_store, self.load_widget)
        self.ai_handler: AIHandler = ai_handler or LocalAssistant()

        self.is_visible = False
        self.blur_mode = config.default_blur_mode
        self.auto_hide = config.default_auto_hide
        self.panels = {name: False for name in FEATURE_PANELS}
        self.last_admission: Optional[Admission] = None
        self.stats = {key: 0 for key in STAT_KEYS}
        self.domain_rules: dict = {}

        self.license.tier_changed.connect(self.signals.tier_changed)
        self.registry.persist_requested.connect(self._on_persist_requested)

    # --- Startup ---

    def start(self, callback: Optional[Callable[[list], None]] = None):
        """
        Resolves the tier, preferences, session stats and domain rules, then
        restores the saved layout for this site. A domain rule with autoOpen
        shows the overlay.
        """
        self.license.refresh()
        self.layout_store.load_preferences(self._apply_preferences)
        self._load_ai_settings()
        self.layout_store.load_values([self.config.stats_key, self.config.domain_rules_key], self._apply_stored_values)
        self.serializer.restore(callback)

    def _apply_stored_values(self, result: dict):
        stored_stats = result.get(self.config.stats_key)
        if isinstance(stored_stats, dict):
            for key in STAT_KEYS:
                value = stored_stats.get(key)
                if isinstance(value, int) and value >= 0:
                    self.stats[key] = value

        rules = result.get(self.config.domain_rules_key)
        self.domain_rules = dict(rules) if isinstance(rules, dict) else {}
        rule = self.domain_rules.get(self.site)
        if isinstance(rule, dict) and rule.get("autoOpen"):
            logger.debug("Domain rule for %s opens the overlay", self.site)
            self.handle_command("auto-open-overlay")

    def _apply_preferences(self, prefs: dict):
        blur_mode = prefs.get('blur_mode', self.config.default_blur_mode)
        if blur_mode not in BLUR_MODES:
            blur_mode = self.config.default_blur_mode
        if blur_mode != self.blur_mode:
            self.blur_mode = blur_mode
            self.signals.blur_mode_changed.emit(blur_mode)
        auto_hide = bool(prefs.get('auto_hide', self.config.default_auto_hide))
        if auto_hide != self.auto_hide:
            self.auto_hide = auto_hide
            self.signals.auto_hide_changed.emit(auto_hide)

    def _load_ai_settings(self):
        if self.store is None or not isinstance(self.ai_handler, LocalAssistant):
            return

        def on_result(result: dict):
            self.ai_handler.settings = AssistantSettings.from_dict(result.get(self.config.ai_settings_key))

        try:
            self.store.get([self.config.ai_settings_key], on_result)
        except StoreUnavailableError as e:
            logger.warning("Could not read AI settings: %s", e)

    # --- Windows and panes ---

    def _deny(self, admission: Admission):
        logger.info("%s creation denied on tier '%s' (%d/%s)",
                    admission.resource.title(), admission.tier, admission.current, admission.limit)
        self.signals.upgrade_prompt_requested.emit(admission)

    def add_window(self, window_type: str = WidgetType.EMPTY.value, content: Optional[str] = None) -> Optional[WindowEntity]:
        """
        Creates a window when the tier allows one more.

        Returns:
            WindowEntity | None: The new window, or None when denied. The
            admission outcome is kept in `last_admission` either way.
        """
        admission = self.registry.check_window_admission()
        self.last_admission = admission
        if not admission:
            self._deny(admission)
            return None

        window = self.registry.create_window(window_type, content)
        self.record_stat("windows_opened")
        return window

    def add_widget_window(self, widget_type: str) -> Optional[WindowEntity]:
        window = self.add_window(widget_type)
        if window is not None:
            self.load_widget(window)
        return window

    def load_widget(self, window: WindowEntity):
        self.signals.widget_load_requested.emit(window.id, window.type)

    def split_pane(self, direction: str) -> Optional[PaneEntity]:
        admission = self.registry.check_pane_admission()
        self.last_admission = admission
        if not admission:
            self._deny(admission)
            return None

        pane = self.registry.create_pane(direction)
        self.record_stat("panes_created")
        return pane

    def close_window(self, window_id: str) -> bool:
        return self.registry.remove_window(window_id)

    def toggle_minimized(self, window_id: str) -> bool:
        return self.registry.toggle_minimized(window_id)

    def toggle_maximized(self, window_id: str) -> bool:
        return self.registry.toggle_maximized(window_id)

    # --- Visibility and panels ---

    def set_visible(self, visible: bool):
        if visible == self.is_visible:
            return
        self.is_visible = visible
        self.signals.visibility_changed.emit(visible)

    def toggle_visible(self) -> bool:
        self.set_visible(not self.is_visible)
        return self.is_visible

    def close(self):
        """Hides the overlay. Windows, panes and preferences are kept."""
        self.set_visible(False)

    def toggle_feature_panel(self, name: str) -> bool:
        if name not in self.panels:
            raise ValueError(f"Unknown feature panel '{name}'")
        self.panels[name] = not self.panels[name]
        self.signals.feature_panel_toggled.emit(name, self.panels[name])
        return self.panels[name]

    # --- Preferences ---

    def set_blur_mode(self, mode: str):
        if mode not in BLUR_MODES:
            raise ValueError(f"Unknown blur mode '{mode}'")
        self.blur_mode = mode
        self.layout_store.save_preference(self.config.blur_mode_key, mode)
        self.signals.blur_mode_changed.emit(mode)

    def toggle_blur_mode(self) -> str:
        self.set_blur_mode("accessible" if self.blur_mode == "blur" else "blur")
        return self.blur_mode

    def set_auto_hide(self, enabled: bool):
        self.auto_hide = bool(enabled)
        self.layout_store.save_preference(self.config.auto_hide_key, self.auto_hide)
        self.signals.auto_hide_changed.emit(self.auto_hide)

    def toggle_auto_hide(self) -> bool:
        self.set_auto_hide(not self.auto_hide)
        return self.auto_hide

    # --- Domain rules ---

    def add_domain_rule(self, domain: str, auto_open: bool = True) -> dict:
        domain = (domain or "").strip()
        if not domain:
            raise ValueError("Domain must not be empty")
        rule = {'autoOpen': bool(auto_open), 'widgets': []}
        self.domain_rules[domain] = rule
        self.layout_store.set_entry(self.config.domain_rules_key, domain, rule)
        return rule

    def remove_domain_rule(self, domain: str) -> bool:
        if domain not in self.domain_rules:
            return False
        del self.domain_rules[domain]
        self.layout_store.set_entry(self.config.domain_rules_key, domain, None)
        return True

    # --- Session stats ---

    def record_stat(self, key: str, increment: int = 1):
        if key not in self.stats:
            raise ValueError(f"Unknown stat '{key}'")
        self.stats[key] += increment
        self.layout_store.save_preference(self.config.stats_key, dict(self.stats))
        self.signals.stat_changed.emit(key, self.stats[key])

    def reset_stats(self):
        self.stats = {key: 0 for key in STAT_KEYS}
        self.layout_store.save_preference(self.config.stats_key, dict(self.stats))
        for key in STAT_KEYS:
            self.signals.stat_changed.emit(key, 0)

    # --- AI ---

    def ask_ai(self, message: str, page_text: str, callback: Optional[Callable[[str], None]] = None):
        """
        Forwards a question to the AI handler. The answer is always a string:
        handler errors become a user-facing message.
        """
        message = (message or "").strip()
        if not message:
            return

        try:
            response = self.ai_handler(message, page_text or "")
        except Exception as e:
            logger.warning("AI handler failed: %s", e)
            response = "The assistant could not process that request."
        if not isinstance(response, str):
            response = str(response)

        self.record_stat("ai_queries")
        self.signals.ai_response.emit(response)
        if callback:
            callback(response)

    # --- External commands ---

    def handle_command(self, action: str) -> dict:
        """Dispatches a command from keyboard shortcuts or a companion control surface."""
        if action == "toggle-overlay":
            self.toggle_visible()
        elif action == "toggle-ai-assistant":
            self.toggle_feature_panel("ai")
        elif action == "auto-open-overlay":
            self.set_visible(True)
        else:
            logger.debug("Unknown command '%s'", action)
            return {'error': 'Unknown action'}
        return {'success': True}

    # --- Debugging ---

    def set_debug_mode(self, enabled: bool):
        self.debug_mode = enabled
        set_debug(enabled)

    def _on_persist_requested(self):
        if self.debug_mode:
            logger.debug("\n%s", self.registry.describe())
        self.signals.layout_changed.emit()
