from ..core.widget_registry import WidgetRegistry, WidgetType, get_registry
from .clock_widget import ClockWidget
from .stats_widget import StatsWidget
from .todo_widget import TodoWidget

BUILTIN_WIDGETS = {
    WidgetType.CLOCK: ClockWidget,
    WidgetType.TODO: TodoWidget,
    WidgetType.STATS: StatsWidget,
}


def register_builtin_widgets(registry: WidgetRegistry = None) -> WidgetRegistry:
    """
    Registers clock, todo and stats. `webview` has no built-in
    implementation; windows of that type show the load-error placeholder.
    """
    registry = registry or get_registry()
    for widget_type, widget_class in BUILTIN_WIDGETS.items():
        if not registry.is_registered(widget_type.value):
            registry.register(widget_type, widget_class)
    return registry


__all__ = ["ClockWidget", "StatsWidget", "TodoWidget", "BUILTIN_WIDGETS", "register_builtin_widgets"]
