from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING

from PySide6.QtCore import QObject, Signal

if TYPE_CHECKING:
    from bubblemap.model.records import BubbleRecord

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    """Which representation of the network the host shows."""
    MAP = "map"
    LIST = "list"


@dataclass(frozen=True)
class ViewState:
    view_mode: ViewMode = ViewMode.MAP
    current_bubble: Optional[BubbleRecord] = None


Listener = Callable[[ViewState], None]


class ViewStateStore(QObject):
    """
    Shared view state owned by the main window. Listeners are called with
    the new state after every change; the Qt `changed` signal carries the
    same object for widgets that prefer signal/slot wiring.
    """
    changed = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._state = ViewState()
        self._listeners: list[Listener] = []
        self._disposed = False

    @classmethod
    def create(cls, parent: QObject | None = None) -> ViewStateStore:
        return cls(parent)

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`, call it once with the current state, and return an unsubscribe callable."""
        if self._disposed:
            logger.warning("subscribe() on a disposed store ignored.")
            return lambda: None
        if listener not in self._listeners:
            self._listeners.append(listener)
        listener(self._state)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def dispose(self) -> None:
        self._listeners.clear()
        self._disposed = True

    def set_view_mode(self, view_mode: ViewMode) -> None:
        self._update(view_mode=ViewMode(view_mode))

    def set_current_bubble(self, bubble: Optional[BubbleRecord]) -> None:
        self._update(current_bubble=bubble)

    def _update(self, **changes) -> None:
        if self._disposed:
            logger.warning(f"Update {sorted(changes)} on a disposed store ignored.")
            return
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(self._state)
        self.changed.emit(self._state)
