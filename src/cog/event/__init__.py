"""Events and the event dispatcher."""

from cog.event.dispatcher import Event, EventDispatcher, EventSubscriber

__all__ = ["Event", "EventDispatcher", "EventSubscriber"]
