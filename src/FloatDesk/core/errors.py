"""Exception types raised inside the overlay window manager."""


class FloatDeskError(Exception):
    """Base class for all FloatDesk errors."""


class StoreUnavailableError(FloatDeskError):
    """The key-value store's host environment is gone (e.g. the extension context was invalidated)."""


class WidgetLoadError(FloatDeskError):
    """A widget module could not be resolved or constructed."""

    def __init__(self, widget_type: str, message: str = ""):
        self.widget_type = widget_type
        super().__init__(message or f"Failed to load {widget_type} widget")


class UnknownWidgetError(WidgetLoadError):
    """No widget factory is registered for the requested tag."""

    def __init__(self, widget_type: str):
        super().__init__(widget_type, f"No widget registered for type '{widget_type}'")
