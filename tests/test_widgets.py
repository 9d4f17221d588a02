"""Tests for the widget registry, the widget host and the built-in widgets."""
from datetime import datetime, timedelta

import pytest
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

from FloatDesk.core.errors import UnknownWidgetError, WidgetLoadError
from FloatDesk.core.overlay_manager import OverlayManager
from FloatDesk.core.widget_registry import WidgetHost, WidgetRegistry, WidgetType, window_title
from FloatDesk.widgets import ClockWidget, StatsWidget, TodoWidget, register_builtin_widgets
from FloatDesk.widgets.stats_widget import format_session_time


@pytest.fixture
def container(qtbot):
    widget = QWidget()
    QVBoxLayout(widget)
    qtbot.addWidget(widget)
    return widget


class BrokenWidget(QWidget):
    def render(self):
        raise RuntimeError("render exploded")


def test_builtin_registration(widget_registry):
    assert sorted(widget_registry.get_all_keys()) == ["clock", "stats", "todo"]
    assert not widget_registry.is_registered(WidgetType.WEBVIEW.value)
    assert widget_registry.get_registration("todo").default_title == "To-Do List"


def test_register_builtin_twice_is_harmless(widget_registry):
    register_builtin_widgets(widget_registry)
    assert len(widget_registry.get_all_keys()) == 3


def test_duplicate_registration_is_rejected():
    registry = WidgetRegistry()
    registry.register(WidgetType.CLOCK, ClockWidget)
    with pytest.raises(ValueError):
        registry.register("clock", ClockWidget)


def test_unknown_tag_raises(widget_registry, container):
    with pytest.raises(UnknownWidgetError) as exc_info:
        widget_registry.create("webview", container)
    assert exc_info.value.widget_type == "webview"


def test_render_failure_is_wrapped(container):
    registry = WidgetRegistry()
    registry.register("broken", BrokenWidget)
    with pytest.raises(WidgetLoadError, match="render exploded"):
        registry.create("broken", container)


def test_window_titles():
    assert window_title("clock") == "Clock"
    assert window_title("mystery") == "Window"


def test_host_shows_placeholder_for_webview(widget_registry, container):
    """Test an unresolved tag renders an inline error instead of raising."""
    host = WidgetHost(widget_registry)

    assert host.load_into("window-1", "webview", container) is False

    label = container.findChild(QLabel, "WidgetError")
    assert label is not None
    assert label.text() == "Failed to load webview widget"
    assert "window-1" not in host.loaded


def test_host_isolates_render_failure(container):
    registry = WidgetRegistry()
    registry.register("broken", BrokenWidget)
    host = WidgetHost(registry)

    assert host.load_into("window-1", "broken", container) is False
    assert container.findChild(QLabel, "WidgetError").text() == "Failed to load broken widget"


def test_host_loads_and_unloads(widget_registry, container):
    host = WidgetHost(widget_registry)

    assert host.load_into("window-1", "clock", container) is True
    clock = host.loaded["window-1"]
    assert isinstance(clock, ClockWidget)
    assert clock._timer.isActive()

    host.unload("window-1")
    assert not clock._timer.isActive()
    assert "window-1" not in host.loaded


def test_host_creates_missing_layout(widget_registry, qtbot):
    bare = QWidget()
    qtbot.addWidget(bare)
    assert WidgetHost(widget_registry).load_into("window-1", "todo", bare) is True
    assert bare.layout() is not None


def test_clock_renders_fixed_time(container):
    clock = ClockWidget(container, clock=lambda: datetime(2024, 3, 5, 9, 7, 3))
    clock.render()

    assert clock.time_label.text() == "09:07:03"
    assert clock.date_label.text() == "Tuesday, March 5, 2024"
    clock.teardown()


def test_todo_add_toggle_delete(container, qtbot):
    todo = TodoWidget(container)
    todo.render()
    assert todo.count_label.text() == "No tasks yet. Add one above!"

    assert todo.add_todo("   ") is None
    first = todo.add_todo("write tests")
    second = todo.add_todo("ship it")
    assert [item.text for item in todo.todos] == ["ship it", "write tests"]
    assert todo.count_label.text() == "0 of 2 completed"

    todo.toggle_todo(first.id)
    assert todo.count_label.text() == "1 of 2 completed"

    todo.delete_todo(second.id)
    assert todo.count_label.text() == "1 of 1 completed"
    qtbot.waitUntil(lambda: todo.list_widget.count() == 1, timeout=1000)


def test_todo_add_from_input(container):
    todo = TodoWidget(container)
    todo.render()
    todo.input.setText("from the keyboard")
    todo.add_button.click()

    assert todo.todos[0].text == "from the keyboard"
    assert todo.input.text() == ""


def test_stats_follow_manager(manager, container):
    """Test the stats widget seeds from the manager and counts new events."""
    manager.add_window()
    stats = StatsWidget(container)
    stats.render()
    stats.attach(manager)
    assert stats.value_labels['windows_opened'].text() == "1"

    manager.add_window()
    manager.split_pane("vertical")
    manager.ask_ai("word count", "a b")

    assert stats.stats['windows_opened'] == 2
    assert stats.stats['panes_created'] == 1
    assert stats.stats['ai_queries'] == 1
    assert stats.value_labels['ai_queries'].text() == "1"
    stats.teardown()


def test_stats_reset_and_session_time(container):
    now = [datetime(2024, 1, 1, 12, 0)]
    stats = StatsWidget(container, clock=lambda: now[0])
    stats.render()
    stats.update_stat('todos_completed', 3)

    now[0] += timedelta(minutes=75)
    stats.update_session_time()
    assert stats.session_label.text() == "Session: 1h 15m"

    stats.reset_stats()
    assert stats.stats['todos_completed'] == 0
    assert stats.session_label.text() == "Session: 0m"
    stats.teardown()


def test_format_session_time():
    assert format_session_time(0) == "0m"
    assert format_session_time(59) == "59m"
    assert format_session_time(120) == "2h 0m"


def test_todos_are_saved_and_restored(manager, store, qtbot):
    first = QWidget()
    QVBoxLayout(first)
    qtbot.addWidget(first)
    todo = TodoWidget(first)
    todo.render()
    todo.attach(manager)

    item = todo.add_todo("water the plants")
    todo.add_todo("call home")
    todo.toggle_todo(item.id)
    assert [entry['text'] for entry in store.peek('todos')] == ["call home", "water the plants"]

    second = QWidget()
    QVBoxLayout(second)
    qtbot.addWidget(second)
    restored = TodoWidget(second)
    restored.render()
    restored.attach(manager)

    assert [(t.text, t.completed, t.id) for t in restored.todos] == [
        ("call home", False, todo.todos[0].id),
        ("water the plants", True, item.id),
    ]
    assert restored.count_label.text() == "1 of 2 completed"
    assert restored.list_widget.count() == 2


def test_malformed_stored_todos_are_skipped(store, container):
    store.set({'todos': ["junk", {'text': "kept", 'id': "abc"}, {'completed': True}]})
    manager = OverlayManager(store, site="example.com")
    todo = TodoWidget(container)
    todo.render()
    todo.attach(manager)

    assert [(t.text, t.completed, t.id) for t in todo.todos] == [("kept", False, "abc")]


def test_completing_a_todo_counts_in_stats(manager, container):
    todo = TodoWidget(container)
    todo.render()
    todo.attach(manager)
    stats = StatsWidget(container)
    stats.render()
    stats.attach(manager)

    item = todo.add_todo("review")
    todo.toggle_todo(item.id)
    todo.toggle_todo(item.id)
    todo.toggle_todo(item.id)

    assert manager.stats['todos_completed'] == 2
    assert stats.value_labels['todos_completed'].text() == "2"

    stats.reset_button.click()
    assert manager.stats['todos_completed'] == 0
    assert stats.value_labels['todos_completed'].text() == "0"
    stats.teardown()


def test_detached_todo_stops_saving(manager, store, container):
    todo = TodoWidget(container)
    todo.render()
    todo.attach(manager)
    todo.add_todo("saved")
    todo.teardown()
    todo.add_todo("not saved")

    assert [entry['text'] for entry in store.peek('todos')] == ["saved"]
