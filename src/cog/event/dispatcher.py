"""
Event dispatcher.

Listeners are registered per event name with an integer priority (higher
runs first; equal priorities run in registration order). A listener can
stop propagation so that lower-priority listeners are skipped::

    dispatcher.add_listener("modules.load.success", warm_cache, priority=10)
    dispatcher.dispatch("modules.load.success")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Event:
    """Base event passed to every listener."""

    def __init__(self) -> None:
        self.name: str | None = None
        self.dispatcher: EventDispatcher | None = None
        self._propagation_stopped = False

    def stop_propagation(self) -> None:
        """Prevent any further listener from receiving this event."""
        self._propagation_stopped = True

    def is_propagation_stopped(self) -> bool:
        return self._propagation_stopped


Listener = Callable[[Event], Any]


class EventSubscriber(Protocol):
    """An object that knows which events it listens to.

    ``get_subscribed_events()`` maps event names to a method name, a
    ``(method name, priority)`` tuple, or a list of such tuples.
    """

    def get_subscribed_events(self) -> dict[str, Any]: ...


@dataclass
class _Registration:
    listener: Listener
    priority: int
    order: int


class EventDispatcher:
    """Dispatches named events to prioritised listeners."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Registration]] = {}
        self._counter = 0

    def add_listener(self, event_name: str, listener: Listener, priority: int = 0) -> None:
        """Attach a listener to an event."""
        self._counter += 1
        self._listeners.setdefault(event_name, []).append(
            _Registration(listener=listener, priority=priority, order=self._counter)
        )

    def remove_listener(self, event_name: str, listener: Listener) -> None:
        """Detach a listener; unknown listeners are ignored."""
        registrations = self._listeners.get(event_name, [])
        self._listeners[event_name] = [r for r in registrations if r.listener != listener]
        if not self._listeners[event_name]:
            del self._listeners[event_name]

    def add_subscriber(self, subscriber: EventSubscriber) -> None:
        """Attach every listener a subscriber declares."""
        for event_name, params in subscriber.get_subscribed_events().items():
            if isinstance(params, str):
                self.add_listener(event_name, getattr(subscriber, params))
            elif isinstance(params, tuple):
                method, priority = params
                self.add_listener(event_name, getattr(subscriber, method), priority)
            else:
                for method, priority in params:
                    self.add_listener(event_name, getattr(subscriber, method), priority)

    def get_listeners(self, event_name: str | None = None) -> list[Listener]:
        """Listeners for one event in call order, or for every event."""
        if event_name is None:
            return [
                listener for name in sorted(self._listeners) for listener in self.get_listeners(name)
            ]
        registrations = sorted(
            self._listeners.get(event_name, []), key=lambda r: (-r.priority, r.order)
        )
        return [r.listener for r in registrations]

    def has_listeners(self, event_name: str | None = None) -> bool:
        if event_name is None:
            return bool(self._listeners)
        return bool(self._listeners.get(event_name))

    def dispatch(self, event_name: str, event: Event | None = None) -> Event:
        """
        Dispatch an event to its listeners.

        Returns:
            The event, after every listener has seen it (or one stopped it)
        """
        if event is None:
            event = Event()
        event.name = event_name
        event.dispatcher = self

        for listener in self.get_listeners(event_name):
            listener(event)
            if event.is_propagation_stopped():
                logger.debug("Propagation of %s stopped by %r", event_name, listener)
                break

        return event
