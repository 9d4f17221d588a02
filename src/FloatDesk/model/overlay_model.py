from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from PySide6.QtCore import QPoint, QSize

# --- Entity Definitions ---

PANE_DIRECTIONS = ("horizontal", "vertical")


class DisplayMode(Enum):
    NORMAL = "normal"
    MINIMIZED = "minimized"
    MAXIMIZED = "maximized"


def new_window_id() -> str:
    return f"window-{uuid.uuid4().hex[:12]}"


@dataclass
class WindowEntity:
    """
    A single floating window. Owned by the WindowRegistry; views hold only its id.
    """
    type: str
    position: QPoint = field(default_factory=QPoint)
    size: QSize = field(default_factory=lambda: QSize(400, 300))
    minimized: bool = False
    maximized: bool = False
    content: str | None = None
    id: str = field(default_factory=new_window_id)

    @property
    def display_mode(self) -> DisplayMode:
        """
        Collapses the two independent flags into one mode.
        Minimized wins: a minimized maximized window shows only its header and
        returns to maximized once restored.
        """
        if self.minimized:
            return DisplayMode.MINIMIZED
        if self.maximized:
            return DisplayMode.MAXIMIZED
        return DisplayMode.NORMAL


@dataclass
class PaneEntity:
    """A split-layout slot. Panes have no geometry, only a direction and their creation order."""
    direction: str
    index: int = 0


# --- Snapshot Definitions ---

def _as_list(value) -> list:
    return value if isinstance(value, list) else []


@dataclass(frozen=True)
class WindowRecord:
    id: str
    type: str
    x: int
    y: int
    width: int
    height: int
    minimized: bool = False
    maximized: bool = False

    @classmethod
    def from_window(cls, window: WindowEntity) -> WindowRecord:
        return cls(
            id=window.id,
            type=window.type,
            x=int(round(window.position.x())),
            y=int(round(window.position.y())),
            width=int(round(window.size.width())),
            height=int(round(window.size.height())),
            minimized=bool(window.minimized),
            maximized=bool(window.maximized),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'type': self.type,
            'position': {'x': self.x, 'y': self.y},
            'size': {'width': self.width, 'height': self.height},
            'minimized': self.minimized,
            'maximized': self.maximized,
        }

    @classmethod
    def from_dict(cls, data: dict) -> WindowRecord:
        """Raises ValueError for geometry that is not a mapping of numbers."""
        position = data.get('position') or {}
        size = data.get('size') or {}
        if not isinstance(position, dict) or not isinstance(size, dict):
            raise ValueError("position and size must be mappings")
        return cls(
            id=str(data.get('id', '')),
            type=str(data.get('type') or 'empty'),
            x=int(position.get('x', 0)),
            y=int(position.get('y', 0)),
            width=int(size.get('width', 0)),
            height=int(size.get('height', 0)),
            minimized=bool(data.get('minimized', False)),
            maximized=bool(data.get('maximized', False)),
        )


@dataclass(frozen=True)
class PaneRecord:
    direction: str

    def to_dict(self) -> dict:
        return {'direction': self.direction}

    @classmethod
    def from_dict(cls, data: dict) -> PaneRecord:
        return cls(direction=str(data.get('direction', 'horizontal')))


@dataclass(frozen=True)
class LayoutSnapshot:
    """The persisted form of one site's overlay: windows in stacking order plus pane directions."""
    windows: tuple[WindowRecord, ...] = ()
    panes: tuple[PaneRecord, ...] = ()

    def to_dict(self) -> dict:
        return {
            'windows': [record.to_dict() for record in self.windows],
            'panes': [record.to_dict() for record in self.panes],
        }

    @classmethod
    def from_dict(cls, data: Any) -> LayoutSnapshot:
        """Builds a snapshot from an untyped stored value, skipping malformed records."""
        if not isinstance(data, dict):
            return cls()
        windows = []
        for item in _as_list(data.get('windows')):
            if not isinstance(item, dict):
                continue
            try:
                windows.append(WindowRecord.from_dict(item))
            except (TypeError, ValueError, OverflowError):
                continue
        panes = [PaneRecord.from_dict(item) for item in _as_list(data.get('panes')) if isinstance(item, dict)]
        return cls(windows=tuple(windows), panes=tuple(panes))
