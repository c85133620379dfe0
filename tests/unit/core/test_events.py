"""Unit tests for the synchronous event emitter."""

from __future__ import annotations

from core.events import Emitter


def test_fire_delivers_in_subscription_order() -> None:
    """Listeners should be called in the order they subscribed."""
    emitter: Emitter[int] = Emitter("numbers")
    received: list[tuple[str, int]] = []
    emitter.subscribe(lambda value: received.append(("first", value)))
    emitter.subscribe(lambda value: received.append(("second", value)))

    emitter.fire(7)

    assert received == [("first", 7), ("second", 7)]


def test_disposed_subscription_stops_delivery() -> None:
    emitter: Emitter[int] = Emitter("numbers")
    received: list[int] = []
    subscription = emitter.subscribe(received.append)
    emitter.fire(1)

    subscription.dispose()
    subscription.dispose()
    emitter.fire(2)

    assert (received, subscription.is_disposed, emitter.listener_count) == ([1], True, 0)


def test_late_subscriber_gets_no_replay() -> None:
    """Events fired before subscribing must not be buffered."""
    emitter: Emitter[str] = Emitter("words")
    emitter.fire("early")
    received: list[str] = []

    emitter.subscribe(received.append)
    emitter.fire("late")

    assert received == ["late"]


def test_failing_listener_does_not_block_others() -> None:
    """One broken listener should not stop delivery to the next."""
    emitter: Emitter[int] = Emitter("numbers")
    received: list[int] = []

    def _broken(value: int) -> None:
        raise RuntimeError(f"boom {value}")

    emitter.subscribe(_broken)
    emitter.subscribe(received.append)

    emitter.fire(3)

    assert received == [3]
