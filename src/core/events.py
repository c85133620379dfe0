"""Synchronous event emitter with disposable subscriptions.

Listeners receive payloads in subscription order at fire time.
There is no buffering: late subscribers never see earlier events.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

PayloadT = TypeVar("PayloadT")
Listener = Callable[[PayloadT], None]


class Disposable:
    """Handle that runs a release callback at most once."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def is_disposed(self) -> bool:
        return self._release is None

    def dispose(self) -> None:
        """Release the underlying subscription."""
        release, self._release = self._release, None
        if release is not None:
            release()


class Emitter(Generic[PayloadT]):
    """Observer list for one event type."""

    def __init__(self, event_name: str) -> None:
        self._event_name = event_name
        self._listeners: list[Listener[PayloadT]] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener[PayloadT]) -> Disposable:
        """Register a listener and return its subscription handle.

        Args:
            listener: Callable invoked with each fired payload.

        Returns:
            Disposable that stops delivery when released.
        """
        self._listeners.append(listener)
        return Disposable(lambda: self._remove(listener))

    def fire(self, payload: PayloadT) -> None:
        """Deliver a payload to every current listener.

        A failing listener is logged and does not stop delivery to the
        listeners registered after it.

        Args:
            payload: Event payload.
        """
        for listener in tuple(self._listeners):
            try:
                listener(payload)
            except Exception as error:
                _LOGGER.error(
                    "history_listener_failed",
                    event_name=self._event_name,
                    error=str(error),
                )

    def dispose(self) -> None:
        """Drop all listeners."""
        self._listeners.clear()

    def _remove(self, listener: Listener[PayloadT]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
