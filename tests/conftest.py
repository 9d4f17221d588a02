"""
Shared pytest fixtures for FloatDesk tests.
"""
import os
import random
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from FloatDesk.core.key_value_store import MemoryKeyValueStore
from FloatDesk.core.overlay_manager import OverlayManager
from FloatDesk.core.widget_registry import WidgetRegistry
from FloatDesk.core.window_registry import WindowRegistry
from FloatDesk.widgets import register_builtin_widgets

SITE = "example.com"


@pytest.fixture(scope='session', autouse=True)
def qt_app():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


@pytest.fixture
def store():
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def premium_store():
    return MemoryKeyValueStore({'license': 'premium'})


@pytest.fixture
def registry():
    """Registry without a license gate (no capacity limits)."""
    return WindowRegistry(rng=random.Random(0))


@pytest.fixture
def manager(store):
    """Started overlay manager on the free tier."""
    manager = OverlayManager(store, site=SITE, rng=random.Random(0))
    manager.start()
    return manager


@pytest.fixture
def widget_registry():
    """Private widget registry with the built-in widgets."""
    return register_builtin_widgets(WidgetRegistry())


class Spy:
    """Records every emission of a signal."""

    def __init__(self, signal):
        self.calls = []
        signal.connect(self._record)

    def _record(self, *args):
        self.calls.append(args)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def spy():
    return Spy
