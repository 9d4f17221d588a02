from .config import DEFAULT_CONFIG, OverlayConfig
from .core.errors import FloatDeskError, StoreUnavailableError, UnknownWidgetError, WidgetLoadError
from .core.key_value_store import MemoryKeyValueStore, SettingsKeyValueStore
from .core.license_gate import Admission, LicenseGate
from .core.overlay_manager import OverlayManager, OverlaySignals
from .core.widget_registry import WidgetHost, WidgetRegistry, WidgetType, get_registry
from .model.overlay_model import LayoutSnapshot, PaneEntity, WindowEntity
from .utils.log import setup_logging

__all__ = [
    "Admission",
    "DEFAULT_CONFIG",
    "FloatDeskError",
    "LayoutSnapshot",
    "LicenseGate",
    "MemoryKeyValueStore",
    "OverlayConfig",
    "OverlayManager",
    "OverlaySignals",
    "PaneEntity",
    "SettingsKeyValueStore",
    "StoreUnavailableError",
    "UnknownWidgetError",
    "WidgetHost",
    "WidgetLoadError",
    "WidgetRegistry",
    "WidgetType",
    "WindowEntity",
    "get_registry",
    "setup_logging",
]
