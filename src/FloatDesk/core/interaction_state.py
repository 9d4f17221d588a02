from enum import Enum, auto


class InteractionState(Enum):
    IDLE = auto()
    DRAGGING = auto()
    RESIZING = auto()
