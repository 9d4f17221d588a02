"""Tests for snapshot conversion, restore and save-on-mutation."""
import random

import pytest
from PySide6.QtCore import QPoint, QSize

from FloatDesk.core.layout_store import LayoutStore
from FloatDesk.core.window_registry import WindowRegistry
from FloatDesk.model.layout_serializer import LayoutSerializer
from FloatDesk.model.overlay_model import LayoutSnapshot, WindowRecord


def window_state(window):
    return (window.type, window.position, window.size, window.minimized, window.maximized)


@pytest.fixture
def populated(registry):
    clock = registry.create_window("clock")
    registry.set_geometry(clock.id, position=QPoint(15, 25), size=QSize(320, 240))
    todo = registry.create_window("todo")
    registry.set_flags(todo.id, minimized=True, maximized=True)
    empty = registry.create_window()
    registry.set_geometry(empty.id, position=QPoint(-40, 500))
    registry.create_pane("vertical")
    return registry


def test_round_trip_into_fresh_registry(populated):
    """Test windows match in type, geometry, flags and order after a restore."""
    snapshot = LayoutSerializer(populated).to_snapshot()
    fresh = WindowRegistry(rng=random.Random(1))

    restored = LayoutSerializer(fresh).apply_snapshot(snapshot)

    assert [window_state(w) for w in restored] == [window_state(w) for w in populated.windows()]
    assert [window_state(w) for w in fresh.windows()] == [window_state(w) for w in populated.windows()]


def test_snapshot_survives_storage_format(populated):
    snapshot = LayoutSerializer(populated).to_snapshot()
    assert LayoutSnapshot.from_dict(snapshot.to_dict()) == snapshot
    assert [pane.direction for pane in snapshot.panes] == ["vertical"]


def test_restore_order_and_widget_requests(registry):
    """Test a todo and a clock record restore in order, each requesting its widget."""
    requested = []
    serializer = LayoutSerializer(registry, widget_loader=lambda w: requested.append(w.type))
    snapshot = LayoutSnapshot(windows=(
        WindowRecord("window-000000000001", "todo", 0, 0, 400, 300),
        WindowRecord("window-000000000002", "clock", 50, 50, 400, 300),
    ))

    restored = serializer.apply_snapshot(snapshot)

    assert [w.type for w in registry.windows()] == ["todo", "clock"]
    assert restored == registry.windows()
    assert requested == ["todo", "clock"]


def test_empty_windows_request_no_widget(registry):
    requested = []
    serializer = LayoutSerializer(registry, widget_loader=requested.append)
    serializer.apply_snapshot(LayoutSnapshot(windows=(WindowRecord("w", "empty", 0, 0, 400, 300),)))

    assert registry.window_count() == 1
    assert requested == []


def test_failed_widget_does_not_stop_restore(registry):
    """Test a loader failure on one window leaves its siblings restoring."""
    requested = []

    def loader(window):
        requested.append(window.type)
        if window.type == "webview":
            raise RuntimeError("module missing")

    serializer = LayoutSerializer(registry, widget_loader=loader)
    serializer.apply_snapshot(LayoutSnapshot(windows=(
        WindowRecord("a", "webview", 0, 0, 400, 300),
        WindowRecord("b", "stats", 0, 0, 400, 300),
    )))

    assert [w.type for w in registry.windows()] == ["webview", "stats"]
    assert requested == ["webview", "stats"]


def test_apply_replaces_windows_and_keeps_panes(populated):
    LayoutSerializer(populated).apply_snapshot(LayoutSnapshot(windows=(WindowRecord("x", "stats", 1, 2, 300, 200),)))

    assert [w.type for w in populated.windows()] == ["stats"]
    assert populated.pane_count() == 1


def test_restored_geometry_is_clamped(registry):
    LayoutSerializer(registry).apply_snapshot(LayoutSnapshot(windows=(WindowRecord("x", "clock", 0, 0, 10, 10),)))
    assert registry.windows()[0].size == QSize(200, 150)


def test_mutations_are_saved(registry, store):
    """Test every committed registry change lands in the store."""
    serializer = LayoutSerializer(registry, LayoutStore(store, "example.com"))

    window = registry.create_window("clock")
    registry.set_geometry(window.id, position=QPoint(12, 34))

    stored = store.peek('layouts')['example.com']['windows']
    assert stored[0]['position'] == {'x': 12, 'y': 34}
    assert serializer.save_count == 2


def test_apply_writes_nothing(registry, store):
    serializer = LayoutSerializer(registry, LayoutStore(store, "example.com"))
    writes = store.set_count

    serializer.apply_snapshot(LayoutSnapshot(windows=(WindowRecord("x", "todo", 0, 0, 400, 300),)))

    assert store.set_count == writes
    assert serializer.save_count == 0


def test_restore_from_store(registry, store):
    store.set({'layouts': {'example.com': {'windows': [
        {'id': 'w1', 'type': 'todo', 'position': {'x': 10, 'y': 20}, 'size': {'width': 300, 'height': 200}},
    ]}}})
    serializer = LayoutSerializer(registry, LayoutStore(store, "example.com"))
    results = []

    serializer.restore(results.append)

    assert len(results) == 1
    assert [w.type for w in results[0]] == ["todo"]
    assert registry.windows()[0].position == QPoint(10, 20)


def test_restore_with_nothing_stored_keeps_windows(registry, store):
    existing = registry.create_window("clock")
    serializer = LayoutSerializer(registry, LayoutStore(store, "example.com"))
    results = []

    serializer.restore(results.append)

    assert results == [[]]
    assert registry.windows() == [existing]


def test_restore_without_store(registry):
    results = []
    LayoutSerializer(registry).restore(results.append)
    assert results == [[]]
