"""
Event dispatcher with an explicit registration table.

Subscribers hand the dispatcher a mapping of event name to handler at
startup. The host then dispatches events by name, passing the current
session along so handlers never reach for request globals.

Usage:
    dispatcher = EventDispatcher()
    dispatcher.subscribe_all(label_dispatcher.subscribed_events())

    # In a request
    dispatcher.dispatch(EVENT_STATUS_SHIPPED, event, session)
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Tuple, Union

from logging_config import get_logger


logger = get_logger(__name__)

Handler = Callable[[Any, MutableMapping[str, Any]], Any]
# A table entry is either a handler or a (handler, priority) pair
Subscription = Union[Handler, Tuple[Handler, int]]


class EventDispatcher:
    """
    Calls registered handlers for a named event.

    Handlers with a higher priority run first; handlers with equal priority
    run in registration order. Exceptions raised by a handler propagate to
    the caller of dispatch() and stop the remaining handlers.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Tuple[int, int, Handler]]] = {}
        self._sequence = 0

    def subscribe(self, event_name: str, handler: Handler, priority: int = 0) -> None:
        """Register a handler for an event."""
        self._sequence += 1
        self._listeners.setdefault(event_name, []).append((priority, self._sequence, handler))
        logger.debug(f"Subscribed {_handler_name(handler)} to {event_name} (priority {priority})")

    def subscribe_all(self, table: Mapping[str, Subscription]) -> None:
        """Register every entry of a subscriber's registration table."""
        for event_name, entry in table.items():
            if isinstance(entry, tuple):
                handler, priority = entry
                self.subscribe(event_name, handler, priority)
            else:
                self.subscribe(event_name, entry)

    def listeners(self, event_name: str) -> List[Handler]:
        """Handlers for an event in the order they will be called."""
        entries = sorted(
            self._listeners.get(event_name, []),
            key=lambda entry: (-entry[0], entry[1]),
        )
        return [handler for _, _, handler in entries]

    def has_listeners(self, event_name: str) -> bool:
        return bool(self._listeners.get(event_name))

    def dispatch(self, event_name: str, event: Any, session: MutableMapping[str, Any]) -> Any:
        """
        Call every handler registered for event_name.

        Args:
            event_name: Name the handlers were registered under
            event: Event payload, passed to each handler
            session: Session of the current request

        Returns:
            The event, so callers can read what handlers added to it
        """
        handlers = self.listeners(event_name)
        if not handlers:
            logger.debug(f"No listeners for {event_name}")
            return event

        for handler in handlers:
            logger.debug(f"Dispatching {event_name} to {_handler_name(handler)}")
            handler(event, session)
        return event


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", repr(handler))
