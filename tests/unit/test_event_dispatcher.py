"""Tests for the event dispatcher."""

from __future__ import annotations

from typing import Any


class TestDispatch:
    """Listeners run by priority, then registration order."""

    def test_dispatch_without_listeners_returns_event(self) -> None:
        from cog.event import Event, EventDispatcher

        dispatcher = EventDispatcher()
        event = dispatcher.dispatch("nothing")
        assert isinstance(event, Event)
        assert event.name == "nothing"
        assert event.dispatcher is dispatcher

    def test_priority_order(self) -> None:
        from cog.event import EventDispatcher

        calls: list[str] = []
        dispatcher = EventDispatcher()
        dispatcher.add_listener("saved", lambda e: calls.append("low"), priority=-5)
        dispatcher.add_listener("saved", lambda e: calls.append("first"))
        dispatcher.add_listener("saved", lambda e: calls.append("high"), priority=10)
        dispatcher.add_listener("saved", lambda e: calls.append("second"))

        dispatcher.dispatch("saved")
        assert calls == ["high", "first", "second", "low"]

    def test_custom_event_passed_through(self) -> None:
        from cog.event import Event, EventDispatcher

        class PostSaved(Event):
            def __init__(self, post_id: int) -> None:
                super().__init__()
                self.post_id = post_id

        seen: list[int] = []
        dispatcher = EventDispatcher()
        dispatcher.add_listener("post.saved", lambda e: seen.append(e.post_id))

        event = PostSaved(3)
        assert dispatcher.dispatch("post.saved", event) is event
        assert seen == [3]

    def test_stop_propagation(self) -> None:
        from cog.event import EventDispatcher

        calls: list[str] = []

        def stopper(event: Any) -> None:
            calls.append("stopper")
            event.stop_propagation()

        dispatcher = EventDispatcher()
        dispatcher.add_listener("saved", stopper, priority=5)
        dispatcher.add_listener("saved", lambda e: calls.append("never"))

        event = dispatcher.dispatch("saved")
        assert calls == ["stopper"]
        assert event.is_propagation_stopped()


class TestListeners:
    """Registration bookkeeping."""

    def test_remove_listener(self) -> None:
        from cog.event import EventDispatcher

        def listener(event: Any) -> None:
            pass

        dispatcher = EventDispatcher()
        dispatcher.add_listener("saved", listener)
        assert dispatcher.has_listeners("saved")

        dispatcher.remove_listener("saved", listener)
        assert not dispatcher.has_listeners("saved")
        assert not dispatcher.has_listeners()

    def test_remove_unknown_listener_ignored(self) -> None:
        from cog.event import EventDispatcher

        dispatcher = EventDispatcher()
        dispatcher.remove_listener("saved", lambda e: None)
        assert dispatcher.get_listeners("saved") == []

    def test_get_all_listeners(self) -> None:
        from cog.event import EventDispatcher

        def a(event: Any) -> None:
            pass

        def b(event: Any) -> None:
            pass

        dispatcher = EventDispatcher()
        dispatcher.add_listener("z.event", a)
        dispatcher.add_listener("a.event", b)
        assert dispatcher.get_listeners() == [b, a]

    def test_add_subscriber(self) -> None:
        from cog.event import EventDispatcher

        calls: list[str] = []

        class Subscriber:
            def get_subscribed_events(self) -> dict[str, Any]:
                return {
                    "one": "on_one",
                    "two": ("on_two", 5),
                    "three": [("on_three", 0), ("on_one", 10)],
                }

            def on_one(self, event: Any) -> None:
                calls.append(f"one:{event.name}")

            def on_two(self, event: Any) -> None:
                calls.append(f"two:{event.name}")

            def on_three(self, event: Any) -> None:
                calls.append(f"three:{event.name}")

        dispatcher = EventDispatcher()
        dispatcher.add_subscriber(Subscriber())
        for name in ("one", "two", "three"):
            dispatcher.dispatch(name)

        assert calls == ["one:one", "two:two", "one:three", "three:three"]
