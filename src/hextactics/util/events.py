"""Typed event bus — decoupled state-change notifications.

The engine emits an event after every successful mutation so that the
render adapter can push a fresh snapshot without polling.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar, Type

T = TypeVar("T")


# -- Board events --------------------------------------------------------

@dataclass(frozen=True)
class CellToggled:
    """A cell's ``is_active`` flag was flipped."""
    row: int
    col: int
    is_active: bool


@dataclass(frozen=True)
class BoardInitialized:
    """The board was (re)built from a mask."""
    rows: int
    cols: int


# -- Unit events ---------------------------------------------------------

@dataclass(frozen=True)
class UnitPlaced:
    """A unit was put on a cell (first placement or reposition)."""
    uid: int
    row: int
    col: int


@dataclass(frozen=True)
class UnitMoved:
    """A unit moved during its turn."""
    uid: int
    from_row: int
    from_col: int
    to_row: int
    to_col: int
    cost: int


@dataclass(frozen=True)
class UnitRemoved:
    """A unit left the roster."""
    uid: int


@dataclass(frozen=True)
class UnitSelected:
    """The selection changed (uid is None when cleared)."""
    uid: Optional[int]


@dataclass(frozen=True)
class UnitDefeated:
    """A unit's health dropped to zero.  Removal is up to the listener."""
    uid: int


# -- Turn events ---------------------------------------------------------

@dataclass(frozen=True)
class TurnChanged:
    """The turn passed to the other side."""
    current_turn: str


@dataclass(frozen=True)
class AITurnScheduled:
    """The AI callback was scheduled."""
    delay_ms: float


# -- Event Bus -----------------------------------------------------------

class EventBus:
    """Simple synchronous event bus with typed events.

    Usage:
        bus = EventBus()
        bus.on(UnitRemoved, lambda e: print(e.uid))
        bus.emit(UnitRemoved(uid=42))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)
        self._any_handlers: list[Callable[[Any], None]] = []

    def on(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Register a handler for an event type."""
        self._handlers[event_type].append(handler)

    def on_any(self, handler: Callable[[Any], None]) -> None:
        """Register a handler that receives every event."""
        self._any_handlers.append(handler)

    def off(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Unregister a handler."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def off_any(self, handler: Callable[[Any], None]) -> None:
        if handler in self._any_handlers:
            self._any_handlers.remove(handler)

    def emit(self, event: object) -> None:
        """Emit an event to all registered handlers."""
        for handler in list(self._handlers.get(type(event), [])):
            handler(event)
        for handler in list(self._any_handlers):
            handler(event)

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
        self._any_handlers.clear()
