import logging
import uuid
from dataclasses import asdict, dataclass, field

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (QCheckBox, QHBoxLayout, QLabel, QLineEdit, QListWidget, QListWidgetItem,
                               QPushButton, QVBoxLayout, QWidget)

logger = logging.getLogger(__name__)


@dataclass
class TodoItem:
    text: str
    completed: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])


class TodoWidget(QWidget):
    """
    A to-do list: newest first, completable and deletable, with a completed/total counter.

    Once attached to an OverlayManager the list is loaded from and saved to
    its store, and each completion counts toward the todos_completed stat.
    """

    def __init__(self, container: QWidget):
        super().__init__(container)
        self.setObjectName("TodoWidget")
        self.todos: list[TodoItem] = []

        self.input = QLineEdit()
        self.input.setPlaceholderText("Add a task...")
        self.add_button = QPushButton("Add")
        self.list_widget = QListWidget()
        self.count_label = QLabel()
        self._manager = None

    def render(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        input_row = QHBoxLayout()
        input_row.addWidget(self.input, 1)
        input_row.addWidget(self.add_button)
        layout.addLayout(input_row)
        layout.addWidget(self.list_widget, 1)
        layout.addWidget(self.count_label)

        self.add_button.clicked.connect(self._on_add)
        self.input.returnPressed.connect(self._on_add)

        container_layout = self.parentWidget().layout()
        if container_layout is not None:
            container_layout.addWidget(self)
        self.render_todos()

    def attach(self, manager):
        self._manager = manager
        manager.layout_store.load_values([manager.config.todos_key], self._apply_stored_todos)

    def _apply_stored_todos(self, result: dict):
        stored = result.get(self._manager.config.todos_key) if self._manager else None
        if not isinstance(stored, list):
            return
        todos = []
        for entry in stored:
            try:
                todos.append(TodoItem(str(entry["text"]), bool(entry.get("completed", False)), str(entry["id"])))
            except (KeyError, TypeError, AttributeError):
                logger.warning("Skipping malformed to-do entry: %r", entry)
        self.todos = todos
        self.render_todos()

    def save_todos(self):
        if self._manager is not None:
            self._manager.layout_store.save_preference(
                self._manager.config.todos_key, [asdict(item) for item in self.todos])

    def teardown(self):
        self._manager = None

    def _on_add(self):
        self.add_todo(self.input.text())
        self.input.clear()

    def add_todo(self, text: str):
        text = text.strip()
        if not text:
            return None
        item = TodoItem(text)
        self.todos.insert(0, item)
        self.render_todos()
        self.save_todos()
        return item

    def toggle_todo(self, todo_id: str):
        for item in self.todos:
            if item.id == todo_id:
                item.completed = not item.completed
                if item.completed and self._manager is not None:
                    self._manager.record_stat("todos_completed")
                break
        self._update_count()
        self.save_todos()

    def delete_todo(self, todo_id: str):
        self.todos = [item for item in self.todos if item.id != todo_id]
        self._update_count()
        self.save_todos()
        # The clicked row owns the sending button; rebuild once the slot has returned.
        QTimer.singleShot(0, self.render_todos)

    def completed_count(self) -> int:
        return sum(1 for item in self.todos if item.completed)

    def render_todos(self):
        self.list_widget.clear()
        for todo in self.todos:
            row = QWidget()
            row_layout = QHBoxLayout(row)
            row_layout.setContentsMargins(2, 0, 2, 0)

            check = QCheckBox(todo.text)
            check.setChecked(todo.completed)
            check.toggled.connect(lambda _checked, tid=todo.id: self.toggle_todo(tid))
            delete = QPushButton("×")
            delete.setFixedSize(20, 20)
            delete.clicked.connect(lambda _checked=False, tid=todo.id: self.delete_todo(tid))
            row_layout.addWidget(check, 1)
            row_layout.addWidget(delete)

            item = QListWidgetItem(self.list_widget)
            item.setSizeHint(row.sizeHint())
            self.list_widget.setItemWidget(item, row)

        self._update_count()

    def _update_count(self):
        if not self.todos:
            self.count_label.setText("No tasks yet. Add one above!")
        else:
            self.count_label.setText(f"{self.completed_count()} of {len(self.todos)} completed")
        self.count_label.setAlignment(Qt.AlignRight)
