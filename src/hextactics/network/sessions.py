"""Session hub — pushes state snapshots to connected WebSocket clients.

Subscribes to every engine event.  Events arriving in one burst (a move
emits several) are coalesced into a single snapshot push on the next
event-loop iteration.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from hextactics.engine.turn_controller import TurnController
    from hextactics.util.events import EventBus

from hextactics.network.serialization import build_snapshot, encode

log = logging.getLogger(__name__)


class Connection(Protocol):
    """What the hub needs from a WebSocket (FastAPI's WebSocket fits)."""

    async def send_text(self, data: str) -> None: ...


class SessionHub:
    """Tracks connected clients and broadcasts snapshots.

    Args:
        controller: Turn controller whose state is broadcast.
        event_bus: Event bus to listen on.
    """

    def __init__(self, controller: TurnController, event_bus: EventBus) -> None:
        self._controller = controller
        self._connections: list[Connection] = []
        self._flush_pending = False
        self._tasks: set[asyncio.Task] = set()
        event_bus.on_any(self._on_event)

    # -- Session management ----------------------------------------------

    def register(self, ws: Connection) -> None:
        self._connections.append(ws)
        log.info("Session registered (%d connected)", len(self._connections))

    def unregister(self, ws: Connection) -> None:
        if ws in self._connections:
            self._connections.remove(ws)
            log.info("Session unregistered (%d connected)", len(self._connections))

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # -- Sending ---------------------------------------------------------

    async def broadcast(self, data: dict[str, Any]) -> int:
        """Send a message to every client.  Returns the number reached.

        Clients whose send fails are dropped from the session table.
        """
        text = encode(data)
        sent = 0
        for ws in list(self._connections):
            try:
                await ws.send_text(text)
                sent += 1
            except Exception as exc:
                log.info("Dropping session after failed send: %s", exc)
                self.unregister(ws)
        return sent

    async def broadcast_state(self) -> int:
        self._flush_pending = False
        return await self.broadcast(build_snapshot(self._controller))

    def _on_event(self, event: object) -> None:
        if self._flush_pending or not self._connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Clients only exist while the server loop runs
            return
        self._flush_pending = True
        task = loop.create_task(self.broadcast_state())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
