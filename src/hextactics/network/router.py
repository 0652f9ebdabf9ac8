"""Message router — dispatches incoming messages to handlers.

Routes messages by type to the registered handler.  Handlers are async
callables that receive the parsed message and may return a response dict
to send back to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Awaitable, Optional

from hextactics.network.messages import GameMessage, parse_message

log = logging.getLogger(__name__)

# Handler signature: async (message) -> optional response dict
Handler = Callable[[GameMessage], Awaitable[Optional[dict[str, Any]]]]


class Router:
    """Message dispatcher.

    Register handlers for message types, then call route() with raw dicts.
    Handlers may return a response dict to be sent back to the caller.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, msg_type: str, handler: Handler) -> None:
        """Register a handler for a message type.

        Args:
            msg_type: The message type string (e.g. ``"request_move"``).
            handler: Async callable ``(message) -> dict | None``.
        """
        self._handlers[msg_type] = handler
        log.debug("Handler registered: %s", msg_type)

    @property
    def registered_types(self) -> list[str]:
        """List of all message types that have a handler."""
        return list(self._handlers.keys())

    async def route(self, raw: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Parse and dispatch a raw message dict.

        Args:
            raw: Raw JSON-decoded message dictionary.

        Returns:
            Response dict from the handler (with the caller's
            ``request_id`` echoed), or None if there is no handler.

        Raises:
            pydantic.ValidationError: If the message does not match its model.
        """
        message = parse_message(raw)
        handler = self._handlers.get(message.type)
        if handler is None:
            log.debug("No handler for message type: %s", message.type)
            return None
        response = await handler(message)
        if response is not None and message.request_id is not None:
            response["request_id"] = message.request_id
        return response
